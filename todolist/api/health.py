"""
健康检查接口：探活 + 任务文件状态
"""

import structlog
from fastapi import APIRouter, Depends

from todolist.todo.store import TodoList, get_todo_list

router = APIRouter(tags=["健康检查"])
log = structlog.get_logger()


@router.get("/health")
async def health_check(todo_list: TodoList = Depends(get_todo_list)):
    """健康检查：任务文件可达性 + 内存任务数"""
    status = {"status": "ok", "storage": "ok", "task_count": len(todo_list)}

    # 首次写入前文件不存在属正常状态
    try:
        if not todo_list.path.exists():
            status["storage"] = "not_created"
        elif not todo_list.path.is_file():
            status["storage"] = "error: not a regular file"
            status["status"] = "degraded"
    except OSError as e:
        status["storage"] = f"error: {e}"
        status["status"] = "degraded"
        log.error("任务文件健康检查失败", path=str(todo_list.path), error=str(e))

    return status
