from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from todolist.config import Settings
from todolist.main import create_app
from todolist.todo.schemas import Priority
from todolist.todo.store import TodoList


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


@pytest.fixture
def tasks_file(tmp_path):
    return tmp_path / "tasks.json"


@pytest.fixture
def todo_list(tasks_file):
    return TodoList(tasks_file)


@pytest.fixture
def populated(todo_list):
    todo_list.add_task("Write report", utc(2024, 3, 1), Priority.MEDIUM)
    todo_list.add_task("Buy milk", utc(2024, 1, 15), Priority.LOW)
    todo_list.add_task("Pay rent", utc(2024, 2, 1), Priority.HIGH)
    todo_list.add_task("Call bank", utc(2024, 1, 20), Priority.HIGH)
    return todo_list


@pytest.fixture
def settings(tmp_path, tasks_file):
    return Settings(TASKS_FILE=str(tasks_file), INDEX_FILE=str(tmp_path / "index.html"))


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c
