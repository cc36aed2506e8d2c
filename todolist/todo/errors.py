"""
Todo 模块的应用级异常

- TaskNotFoundError  — 任务 ID 不存在（HTTP 404 / 控制台提示）
- TaskValidationError — 日期格式、优先级非法（HTTP 400）
- TaskStorageError   — 文件读写失败
- TaskParseError     — 落盘文件内容损坏（非法 JSON 或字段不合法）
"""


class TodoError(Exception):
    """Todo 模块异常基类"""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class TaskNotFoundError(TodoError):
    """按 ID 查找任务失败"""

    def __init__(self, task_id: int):
        super().__init__(f"task with ID {task_id} not found")
        self.task_id = task_id


class TaskValidationError(TodoError, ValueError):
    """输入值不合法（日期、优先级）"""


class TaskStorageError(TodoError):
    """任务文件读写失败"""


class TaskParseError(TodoError):
    """任务文件无法解析"""
