import json
from datetime import datetime, timezone

import pytest

from todolist.todo.errors import (
    TaskNotFoundError,
    TaskParseError,
    TaskStorageError,
    TaskValidationError,
)
from todolist.todo.schemas import Priority
from todolist.todo.store import TodoList


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def ids(tasks):
    return [t.id for t in tasks]


class TestAddTask:
    def test_first_task_gets_id_one(self, todo_list):
        task = todo_list.add_task("Buy milk", utc(2024, 1, 15), Priority.LOW)

        assert task.id == 1
        assert task.completed is False
        assert todo_list.tasks == [task]

    def test_ids_are_monotonic(self, todo_list):
        seen = []
        for i in range(5):
            seen.append(todo_list.add_task(f"task {i}", utc(2024, 1, 1), Priority.LOW).id)

        assert seen == [1, 2, 3, 4, 5]

    def test_next_id_follows_max_not_last(self, populated):
        populated.delete_task(2)
        task = populated.add_task("Late", utc(2024, 5, 1), Priority.LOW)

        assert task.id == 5

    def test_deleting_max_id_allows_reuse(self, populated):
        populated.delete_task(4)
        task = populated.add_task("Again", utc(2024, 5, 1), Priority.LOW)

        assert task.id == 4

    def test_empty_description_is_accepted(self, todo_list):
        task = todo_list.add_task("", utc(2024, 1, 1), Priority.MEDIUM)

        assert task.description == ""

    def test_priority_string_is_parsed(self, todo_list):
        task = todo_list.add_task("x", utc(2024, 1, 1), "HIGH")

        assert task.priority is Priority.HIGH

    def test_invalid_priority_raises(self, todo_list):
        with pytest.raises(TaskValidationError):
            todo_list.add_task("x", utc(2024, 1, 1), "urgent")

        assert len(todo_list) == 0


class TestListTasks:
    def test_default_is_insertion_order(self, populated):
        assert ids(populated.list_tasks()) == [1, 2, 3, 4]

    def test_unknown_sort_key_is_insertion_order(self, populated):
        assert ids(populated.list_tasks("title")) == [1, 2, 3, 4]

    def test_sort_by_date_ascending(self, populated):
        assert ids(populated.list_tasks("date")) == [2, 4, 3, 1]

    def test_sort_by_priority_descending_is_stable(self, populated):
        assert ids(populated.list_tasks("priority")) == [3, 4, 1, 2]

    def test_returns_copy(self, populated):
        tasks = populated.list_tasks("date")
        tasks[0].completed = True
        tasks.clear()

        assert len(populated) == 4
        assert not any(t.completed for t in populated.tasks)


class TestMarkComplete:
    def test_sets_completed_flag(self, populated):
        task = populated.mark_complete(3)

        assert task.completed is True
        assert populated.get_task(3).completed is True

    def test_is_idempotent(self, populated):
        populated.mark_complete(3)
        populated.mark_complete(3)

        assert populated.get_task(3).completed is True

    def test_absent_id_raises_and_leaves_list_unchanged(self, populated):
        before = [t.model_dump() for t in populated.tasks]

        with pytest.raises(TaskNotFoundError) as exc_info:
            populated.mark_complete(99)

        assert exc_info.value.task_id == 99
        assert [t.model_dump() for t in populated.tasks] == before


class TestDeleteTask:
    def test_removes_exactly_one_and_keeps_order(self, populated):
        removed = populated.delete_task(2)

        assert removed.description == "Buy milk"
        assert ids(populated.tasks) == [1, 3, 4]

    def test_removes_first_match_only(self, todo_list, tasks_file):
        tasks_file.write_text(json.dumps([
            {"id": 7, "description": "a", "due_date": "2024-01-01T00:00:00Z",
             "priority": "low", "completed": False},
            {"id": 7, "description": "b", "due_date": "2024-01-02T00:00:00Z",
             "priority": "low", "completed": False},
        ]))
        todo_list.load_tasks()

        todo_list.delete_task(7)

        assert [t.description for t in todo_list.tasks] == ["b"]

    def test_absent_id_raises(self, populated):
        with pytest.raises(TaskNotFoundError):
            populated.delete_task(42)

        assert len(populated) == 4


class TestFilterTasks:
    def test_no_filters_returns_everything_in_order(self, populated):
        assert ids(populated.filter_tasks(None, None)) == [1, 2, 3, 4]

    def test_empty_priority_matches_all(self, populated):
        assert ids(populated.filter_tasks("", None)) == [1, 2, 3, 4]

    def test_high_and_completed(self, populated):
        populated.mark_complete(4)
        populated.mark_complete(2)

        assert ids(populated.filter_tasks(Priority.HIGH, True)) == [4]

    def test_completed_false(self, populated):
        populated.mark_complete(1)

        assert ids(populated.filter_tasks(None, False)) == [2, 3, 4]

    def test_priority_only_preserves_order(self, populated):
        assert ids(populated.filter_tasks("high")) == [3, 4]


class TestPersistence:
    def test_load_missing_file_is_empty(self, todo_list):
        todo_list.load_tasks()

        assert todo_list.tasks == []

    def test_save_then_load_round_trip(self, populated, tasks_file):
        populated.mark_complete(3)
        populated.save_tasks()

        reloaded = TodoList(tasks_file)
        reloaded.load_tasks()

        assert [t.model_dump() for t in reloaded.tasks] == [t.model_dump() for t in populated.tasks]

    def test_file_format(self, todo_list, tasks_file):
        todo_list.add_task("Buy milk", utc(2024, 1, 15), Priority.LOW)
        todo_list.save_tasks()

        raw = tasks_file.read_text(encoding="utf-8")
        assert json.loads(raw) == [{
            "id": 1,
            "description": "Buy milk",
            "due_date": "2024-01-15T00:00:00Z",
            "priority": "low",
            "completed": False,
        }]
        assert '\n  {\n    "id": 1,' in raw

    def test_save_leaves_no_temp_files(self, populated, tmp_path):
        populated.save_tasks()

        assert sorted(p.name for p in tmp_path.iterdir()) == ["tasks.json"]

    def test_load_offset_timestamp(self, todo_list, tasks_file):
        tasks_file.write_text(json.dumps([
            {"id": 1, "description": "a", "due_date": "2024-01-15T00:00:00+00:00",
             "priority": "medium", "completed": True},
        ]))

        todo_list.load_tasks()

        assert todo_list.tasks[0].due_date == utc(2024, 1, 15)
        assert todo_list.tasks[0].completed is True

    def test_malformed_json_raises_parse_error(self, populated, tasks_file):
        tasks_file.write_text("[{not json")

        with pytest.raises(TaskParseError):
            populated.load_tasks()

        assert len(populated) == 4

    def test_invalid_record_raises_parse_error(self, todo_list, tasks_file):
        tasks_file.write_text(json.dumps([{"id": "one", "description": "x"}]))

        with pytest.raises(TaskParseError):
            todo_list.load_tasks()

    def test_unreadable_path_raises_storage_error(self, tmp_path):
        todo_list = TodoList(tmp_path)

        with pytest.raises(TaskStorageError):
            todo_list.load_tasks()

    def test_write_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        todo_list = TodoList(blocker / "tasks.json")
        todo_list.add_task("x", utc(2024, 1, 1), Priority.LOW)

        with pytest.raises(TaskStorageError):
            todo_list.save_tasks()

        assert len(todo_list) == 1
