"""
FastAPI 应用主入口

create_app() 组装路由 / 中间件 / 异常处理，TodoList 挂在 app.state 上由依赖注入分发；
run() 启动 uvicorn，CONSOLE_ENABLED 时服务放后台线程，前台进入菜单控制台。
"""

import sys
import threading
import time
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from todolist.api.health import router as health_router
from todolist.api.pages import router as pages_router
from todolist.api.tasks import router as tasks_router
from todolist.config import Settings, get_settings
from todolist.observability.context import get_trace_id
from todolist.observability.logging_config import setup_logging
from todolist.observability.metrics_middleware import MetricsMiddleware
from todolist.observability.request_logger import RequestLoggerMiddleware
from todolist.todo.errors import TaskParseError, TaskStorageError
from todolist.todo.store import TodoList

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(application: FastAPI):
    """应用生命周期：启动时加载任务文件，失败不阻止启动"""
    settings: Settings = application.state.settings
    todo_list: TodoList = application.state.todo_list
    log.info("应用启动", env=settings.ENV, app=settings.APP_NAME, tasks_file=str(todo_list.path))

    try:
        todo_list.load_tasks()
    except (TaskParseError, TaskStorageError) as e:
        # 文件损坏或不可读：记录后以空列表继续服务
        log.error("任务文件加载失败，以空列表启动", path=str(todo_list.path), error=str(e))

    yield

    log.info("应用关闭", task_count=len(todo_list))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求体 / 路径参数校验失败统一返回 400"""
    log.info("请求参数校验失败", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors()), "trace_id": get_trace_id()},
    )


def create_app(settings: Settings | None = None, todo_list: TodoList | None = None) -> FastAPI:
    """组装应用；测试时可注入独立的 Settings / TodoList"""
    settings = settings or get_settings()

    application = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.settings = settings
    # TodoList 定义了 __len__，空列表为假值，不能用 or
    application.state.todo_list = todo_list if todo_list is not None else TodoList(settings.TASKS_FILE)

    application.add_exception_handler(RequestValidationError, validation_exception_handler)

    # ── 中间件（执行顺序：从下往上注册，从上往下执行） ──
    application.add_middleware(RequestLoggerMiddleware)
    application.add_middleware(MetricsMiddleware)

    # ── Prometheus 指标端点 ──
    application.mount("/metrics", make_asgi_app())

    # ── 路由注册 ──
    application.include_router(health_router)
    application.include_router(pages_router)
    application.include_router(tasks_router)

    return application


def _serve_with_console(server: uvicorn.Server, todo_list: TodoList) -> None:
    """服务跑在后台线程，前台菜单控制台与其共享同一个 TodoList"""
    from todolist.console import TodoConsole

    thread = threading.Thread(target=server.run, name="uvicorn", daemon=True)
    thread.start()

    # 等 lifespan 加载完任务文件再进入控制台；线程提前退出说明端口绑定失败
    while not server.started:
        if not thread.is_alive():
            log.error("服务启动失败")
            sys.exit(1)
        time.sleep(0.05)

    try:
        TodoConsole(todo_list).run()
    finally:
        server.should_exit = True
        thread.join()


def run() -> None:
    """命令行入口：todolist"""
    settings = get_settings()
    setup_logging(env=settings.ENV, level=settings.LOG_LEVEL)

    application = create_app(settings)
    config = uvicorn.Config(
        application,
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        log_config=None,
    )
    server = uvicorn.Server(config)

    log.info("服务启动", url=f"http://localhost:{settings.APP_PORT}")
    if settings.CONSOLE_ENABLED:
        _serve_with_console(server, application.state.todo_list)
    else:
        server.run()
        # uvicorn 绑定失败时 started 始终为 False
        if not server.started:
            sys.exit(1)


if __name__ == "__main__":
    run()
