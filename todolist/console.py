"""
菜单控制台：终端逐行输入 → TodoList 调用

运行方式：
    todolist-console                 （独立运行，只读写任务文件）
    CONSOLE_ENABLED=true todolist    （与 HTTP 服务同进程，共享同一个 TodoList）

菜单：1 新增 | 2 列表 | 3 完成 | 4 删除 | 5 筛选 | 6 退出
菜单循环执行，直到选择 6、EOF 或 Ctrl-C。
"""

from collections.abc import Callable

import structlog
from prompt_toolkit import PromptSession

from todolist.config import get_settings
from todolist.observability.logging_config import setup_logging
from todolist.todo.errors import (
    TaskNotFoundError,
    TaskParseError,
    TaskStorageError,
    TaskValidationError,
)
from todolist.todo.render import format_task_table
from todolist.todo.schemas import Priority, parse_due_date
from todolist.todo.store import TodoList

log = structlog.get_logger()

MENU = """
Todo List Application
1. Add Task
2. List Tasks
3. Mark Task as Complete
4. Delete Task
5. Filter Tasks
6. Exit"""

EXIT_CHOICE = "6"


class TodoConsole:
    """菜单驱动的交互控制台"""

    def __init__(self, todo_list: TodoList, prompt: Callable[[str], str] | None = None):
        self.todo_list = todo_list
        self._prompt = prompt
        self._actions: dict[str, Callable[[], None]] = {
            "1": self.add_task,
            "2": self.list_tasks,
            "3": self.complete_task,
            "4": self.delete_task,
            "5": self.filter_tasks,
        }

    def ask(self, message: str) -> str:
        if self._prompt is None:
            self._prompt = PromptSession().prompt
        return self._prompt(message).strip()

    def run(self) -> None:
        """主循环"""
        while True:
            print(MENU)
            try:
                choice = self.ask("Choose an option: ")
                if choice == EXIT_CHOICE:
                    print("Goodbye!")
                    return
                action = self._actions.get(choice)
                if action is None:
                    print("Invalid option. Please try again.")
                    continue
                action()
            except (EOFError, KeyboardInterrupt):
                print("\nGoodbye!")
                return

    # ── 菜单项 ──

    def add_task(self) -> None:
        description = self.ask("Enter task description: ")
        try:
            due_date = parse_due_date(self.ask("Enter due date (YYYY-MM-DD): "))
            priority = Priority.parse(self.ask("Enter priority (low/medium/high): "))
        except TaskValidationError as e:
            print(f"Error: {e}")
            return

        with self.todo_list.lock:
            task = self.todo_list.add_task(description, due_date, priority)
            if not self._save():
                return
        log.info("控制台新增任务", task_id=task.id)
        print("Task added successfully!")

    def list_tasks(self) -> None:
        sort_by = self.ask("Sort by (date/priority/none): ").lower()
        tasks = self.todo_list.list_tasks(sort_by)
        if not tasks:
            print("No tasks found.")
            return
        print(format_task_table(tasks, "Tasks:"))

    def complete_task(self) -> None:
        task_id = self._ask_task_id("Enter task ID to mark as complete: ")
        if task_id is None:
            return
        with self.todo_list.lock:
            try:
                self.todo_list.mark_complete(task_id)
            except TaskNotFoundError as e:
                print(f"Error: {e}")
                return
            if not self._save():
                return
        print("Task marked as complete!")

    def delete_task(self) -> None:
        task_id = self._ask_task_id("Enter task ID to delete: ")
        if task_id is None:
            return
        with self.todo_list.lock:
            try:
                self.todo_list.delete_task(task_id)
            except TaskNotFoundError as e:
                print(f"Error: {e}")
                return
            if not self._save():
                return
        print("Task deleted successfully!")

    def filter_tasks(self) -> None:
        raw_priority = self.ask("Filter by priority (low/medium/high/all): ").lower()
        priority = None
        if raw_priority != "all":
            try:
                priority = Priority.parse(raw_priority)
            except TaskValidationError as e:
                print(f"Error: {e}")
                return

        raw_status = self.ask("Filter by status (completed/incomplete/all): ").lower()
        completed = None if raw_status == "all" else raw_status == "completed"

        filtered = self.todo_list.filter_tasks(priority, completed)
        if not filtered:
            print("No tasks found matching the filters.")
            return
        print(format_task_table(filtered, "Filtered Tasks:"))

    # ── 内部工具 ──

    def _ask_task_id(self, message: str) -> int | None:
        raw = self.ask(message)
        try:
            return int(raw)
        except ValueError:
            print(f"Error: invalid task ID {raw!r}")
            return None

    def _save(self) -> bool:
        """落盘失败直接提示，不重试；内存中的变更保留"""
        try:
            self.todo_list.save_tasks()
        except TaskStorageError as e:
            log.error("控制台落盘失败", error=str(e))
            print(f"Error saving tasks: {e}")
            return False
        return True


def main() -> None:
    """命令行入口：todolist-console"""
    settings = get_settings()
    setup_logging(env=settings.ENV, level=settings.LOG_LEVEL)

    todo_list = TodoList(settings.TASKS_FILE)
    try:
        todo_list.load_tasks()
    except (TaskParseError, TaskStorageError) as e:
        log.error("任务文件加载失败，以空列表启动", path=str(todo_list.path), error=str(e))
        print(f"Error loading tasks: {e}")

    TodoConsole(todo_list).run()


if __name__ == "__main__":
    main()
