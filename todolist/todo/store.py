"""
TodoList：内存任务列表 + JSON 文件持久化

- 列表顺序即插入顺序；ID = 现有最大 ID + 1（空列表为 1）
- 增删改只动内存，落盘由调用方在同一把锁内调用 save_tasks()
- 写文件先写同目录临时文件再 os.replace，避免写到一半留下残缺 JSON

并发：同一进程内所有读写共用一把 RLock；
调用方需要把「修改 + 落盘」做成一个临界区时，显式持有 todo_list.lock。
"""

import json
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path

import structlog
from fastapi import Request
from pydantic import TypeAdapter, ValidationError

from todolist.todo.errors import TaskNotFoundError, TaskParseError, TaskStorageError
from todolist.todo.schemas import Priority, Task

log = structlog.get_logger()

_TASK_LIST = TypeAdapter(list[Task])

SORT_BY_DATE = "date"
SORT_BY_PRIORITY = "priority"


class TodoList:
    """单用户任务列表"""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.tasks: list[Task] = []
        self.lock = threading.RLock()

    def __len__(self) -> int:
        return len(self.tasks)

    # ── 变更 ──

    def add_task(self, description: str, due_date: datetime, priority: Priority) -> Task:
        """追加任务并返回；不校验描述是否为空、日期范围"""
        with self.lock:
            next_id = max((t.id for t in self.tasks), default=0) + 1
            task = Task(
                id=next_id,
                description=description,
                due_date=due_date,
                priority=Priority.parse(priority),
                completed=False,
            )
            self.tasks.append(task)
            return task

    def mark_complete(self, task_id: int) -> Task:
        with self.lock:
            task = self.get_task(task_id)
            task.completed = True
            return task

    def delete_task(self, task_id: int) -> Task:
        """删除第一个匹配 ID 的任务，其余任务相对顺序不变"""
        with self.lock:
            for i, task in enumerate(self.tasks):
                if task.id == task_id:
                    return self.tasks.pop(i)
        raise TaskNotFoundError(task_id)

    # ── 查询 ──

    def get_task(self, task_id: int) -> Task:
        with self.lock:
            for task in self.tasks:
                if task.id == task_id:
                    return task
        raise TaskNotFoundError(task_id)

    def list_tasks(self, sort_by: str = "none") -> list[Task]:
        """
        返回排序后的副本：
        - date     — 按截止日期升序
        - priority — 按优先级降序（high → medium → low）
        - 其他     — 插入顺序
        排序稳定，相同键保持插入顺序。
        """
        with self.lock:
            tasks = [t.model_copy() for t in self.tasks]

        if sort_by == SORT_BY_DATE:
            tasks.sort(key=lambda t: t.due_date)
        elif sort_by == SORT_BY_PRIORITY:
            tasks.sort(key=lambda t: t.priority.rank, reverse=True)
        return tasks

    def filter_tasks(
        self,
        priority: Priority | str | None = None,
        completed: bool | None = None,
    ) -> list[Task]:
        """priority 为空 / completed 为 None 时该条件匹配全部"""
        wanted = Priority.parse(priority) if priority else None
        with self.lock:
            return [
                t.model_copy() for t in self.tasks
                if (wanted is None or t.priority == wanted)
                and (completed is None or t.completed == completed)
            ]

    # ── 持久化 ──

    def save_tasks(self) -> None:
        """全量写入 JSON 数组（2 空格缩进）"""
        with self.lock:
            payload = json.dumps(
                _TASK_LIST.dump_python(self.tasks, mode="json"),
                ensure_ascii=False,
                indent=2,
            )
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(
                    dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        f.write(payload)
                    os.replace(tmp_path, self.path)
                except BaseException:
                    Path(tmp_path).unlink(missing_ok=True)
                    raise
            except OSError as e:
                raise TaskStorageError(f"failed to write {self.path}: {e}", cause=e) from e

    def load_tasks(self) -> None:
        """
        从文件加载，替换内存列表：
        - 文件不存在 → 空列表，不报错
        - 内容非法   → TaskParseError，内存保持不变
        - 其他读失败 → TaskStorageError
        """
        with self.lock:
            try:
                raw = self.path.read_text(encoding="utf-8")
            except FileNotFoundError:
                self.tasks = []
                return
            except UnicodeDecodeError as e:
                raise TaskParseError(f"corrupt task file {self.path}: {e}", cause=e) from e
            except OSError as e:
                raise TaskStorageError(f"failed to read {self.path}: {e}", cause=e) from e

            try:
                self.tasks = _TASK_LIST.validate_json(raw)
            except ValidationError as e:
                raise TaskParseError(f"corrupt task file {self.path}: {e}", cause=e) from e

        log.info("任务文件加载完成", path=str(self.path), count=len(self.tasks))


# ── FastAPI 依赖注入 ──

def get_todo_list(request: Request) -> TodoList:
    """从 app.state 取出进程内唯一的 TodoList"""
    return request.app.state.todo_list
