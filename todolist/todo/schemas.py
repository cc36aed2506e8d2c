"""
Todo 数据模型

Task 为落盘与接口共用的值对象，字段名与 tasks.json 保持一致；
TaskCreate 为 POST /api/tasks 的请求体（dueDate 为 YYYY-MM-DD 字符串）。
"""

import re
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from todolist.todo.errors import TaskValidationError

DATE_FORMAT = "%Y-%m-%d"
_DATE_SHAPE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class Priority(str, Enum):
    """任务优先级：low < medium < high"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, value: "str | Priority") -> "Priority":
        """大小写不敏感解析，非法值抛 TaskValidationError"""
        if isinstance(value, Priority):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise TaskValidationError(
                f"invalid priority {value!r}, expected low/medium/high", cause=e
            ) from e


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


def parse_due_date(value: str) -> datetime:
    """解析 YYYY-MM-DD 为 UTC 零点；月、日必须两位，不容忍首尾空白"""
    if not _DATE_SHAPE.fullmatch(value):
        raise TaskValidationError("Invalid date format")
    try:
        parsed = datetime.strptime(value, DATE_FORMAT)
    except ValueError as e:
        raise TaskValidationError("Invalid date format", cause=e) from e
    return parsed.replace(tzinfo=timezone.utc)


class Task(BaseModel):
    """单个任务条目"""

    id: int
    description: str
    due_date: datetime
    priority: Priority
    completed: bool = False

    @field_validator("due_date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """文件里若出现不带时区的时间，按 UTC 处理"""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class TaskCreate(BaseModel):
    """新增任务请求体"""

    description: str = ""
    due_date: str = Field(alias="dueDate")
    priority: Priority = Priority.MEDIUM

    @field_validator("due_date")
    @classmethod
    def check_date_format(cls, v: str) -> str:
        parse_due_date(v)
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: object) -> object:
        """客户端可能传 "High"，统一转小写"""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def due(self) -> datetime:
        return parse_due_date(self.due_date)
