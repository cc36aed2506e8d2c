"""
终端展示：把 Task 格式化为控制台文本（数据层不直接打印）
"""

from collections.abc import Iterable

from todolist.todo.schemas import DATE_FORMAT, Task

SEPARATOR = "-" * 40


def format_task(task: Task) -> str:
    status = "✓" if task.completed else " "
    return (
        f"[{status}] {task.id}. {task.description}\n"
        f"   Due: {task.due_date.strftime(DATE_FORMAT)}, Priority: {task.priority.value}"
    )


def format_task_table(tasks: Iterable[Task], title: str) -> str:
    lines = [f"\n{title}", SEPARATOR]
    for task in tasks:
        lines.append(format_task(task))
        lines.append(SEPARATOR)
    return "\n".join(lines)
