"""
/api/tasks 任务接口：HTTP 请求 → TodoList 调用 → JSON 响应

端点：
- GET    /api/tasks               — 全部任务（插入顺序）
- POST   /api/tasks               — 新增任务，201 + 新任务
- POST   /api/tasks/{id}/complete — 标记完成，204 / 404
- DELETE /api/tasks/{id}          — 删除任务，204 / 404

ID 先于方法校验：非数字 ID 一律 400，方法不支持再 405；请求体 / 路径参数校验失败统一 400（见 main.py）。
变更成功后同一把锁内落盘；落盘失败只记日志和指标，请求照常成功。
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status

from todolist.observability.metrics import PERSIST_ERROR_TOTAL, TASK_OPERATION_TOTAL
from todolist.todo.errors import TaskNotFoundError, TaskStorageError
from todolist.todo.schemas import Task, TaskCreate
from todolist.todo.store import TodoList, get_todo_list

router = APIRouter(prefix="/api/tasks", tags=["任务"])
log = structlog.get_logger()


def _persist(todo_list: TodoList, operation: str) -> None:
    """落盘；失败时内存已变更，只记录不回滚"""
    try:
        todo_list.save_tasks()
    except TaskStorageError as e:
        PERSIST_ERROR_TOTAL.inc()
        log.error("任务落盘失败，内存与文件可能不一致", operation=operation, error=str(e))


def _not_found(operation: str, e: TaskNotFoundError) -> HTTPException:
    TASK_OPERATION_TOTAL.labels(operation=operation, status="not_found").inc()
    log.info("任务不存在", operation=operation, task_id=e.task_id)
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=list[Task])
def list_tasks(todo_list: TodoList = Depends(get_todo_list)):
    """全部任务，插入顺序"""
    return todo_list.list_tasks()


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
def create_task(body: TaskCreate, todo_list: TodoList = Depends(get_todo_list)):
    """新增任务：dueDate 必须为 YYYY-MM-DD"""
    with todo_list.lock:
        task = todo_list.add_task(body.description, body.due, body.priority)
        _persist(todo_list, "add")

    TASK_OPERATION_TOTAL.labels(operation="add", status="success").inc()
    log.info("任务已新增", task_id=task.id, priority=task.priority.value)
    return task


@router.post("/{task_id}/complete", status_code=status.HTTP_204_NO_CONTENT)
def complete_task(task_id: int, todo_list: TodoList = Depends(get_todo_list)):
    with todo_list.lock:
        try:
            todo_list.mark_complete(task_id)
        except TaskNotFoundError as e:
            raise _not_found("complete", e) from e
        _persist(todo_list, "complete")

    TASK_OPERATION_TOTAL.labels(operation="complete", status="success").inc()
    log.info("任务已完成", task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int, todo_list: TodoList = Depends(get_todo_list)):
    with todo_list.lock:
        try:
            todo_list.delete_task(task_id)
        except TaskNotFoundError as e:
            raise _not_found("delete", e) from e
        _persist(todo_list, "delete")

    TASK_OPERATION_TOTAL.labels(operation="delete", status="success").inc()
    log.info("任务已删除", task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# 先解析 ID 再判断方法：非数字 ID 在任何方法下都是 400，合法 ID 才回 405
@router.api_route("/{task_id}", methods=["GET", "POST", "PUT", "PATCH"], include_in_schema=False)
@router.api_route(
    "/{task_id}/complete", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False
)
def task_method_not_allowed(task_id: int):
    raise HTTPException(status_code=status.HTTP_405_METHOD_NOT_ALLOWED, detail="Method not allowed")
