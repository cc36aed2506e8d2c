"""
Todo 模块：单用户任务列表管理

提供文件持久化的 TodoList、Task / Priority schema 以及模块级异常，
供 HTTP 接口层（todolist.api.tasks）和菜单控制台（todolist.console）共用。
"""

from todolist.todo.errors import (
    TaskNotFoundError,
    TaskParseError,
    TaskStorageError,
    TaskValidationError,
    TodoError,
)
from todolist.todo.schemas import Priority, Task, TaskCreate
from todolist.todo.store import TodoList

__all__ = [
    "Priority",
    "Task",
    "TaskCreate",
    "TaskNotFoundError",
    "TaskParseError",
    "TaskStorageError",
    "TaskValidationError",
    "TodoError",
    "TodoList",
]
