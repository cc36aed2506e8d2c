"""
请求日志中间件：trace_id 注入 + 每个请求一条结束日志

- 日志按路由模板记录（/api/tasks/{task_id}），并带上具体 task_id
- 2xx/3xx 记 info，4xx 记 warning，5xx 记 error
- /metrics、/health 属于探活和抓取流量，只注入 trace_id 不记日志
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from todolist.observability.context import new_trace_id, trace_id_var

log = structlog.get_logger()

_QUIET_PREFIXES = ("/metrics", "/health")


def _log_method_for(status_code: int):
    if status_code >= 500:
        return log.error
    if status_code >= 400:
        return log.warning
    return log.info


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """HTTP 请求日志 + trace_id 上下文注入"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get("X-Trace-ID") or new_trace_id()
        trace_id_var.set(trace_id)

        # 绑定到 structlog 上下文，接口层的业务日志自动带 trace_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(trace_id=trace_id)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = int((time.monotonic() - start) * 1000)

        response.headers["X-Trace-ID"] = trace_id
        response.headers["X-Duration-Ms"] = str(duration_ms)

        path = request.url.path
        if path.startswith(_QUIET_PREFIXES):
            return response

        # 路由匹配后 scope 里才有 route / path_params；未匹配（404）时退回原始路径
        route = request.scope.get("route")
        fields = {
            "method": request.method,
            "route": getattr(route, "path", path),
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
        task_id = request.scope.get("path_params", {}).get("task_id")
        if task_id is not None:
            fields["task_id"] = task_id

        _log_method_for(response.status_code)("请求结束", **fields)
        return response
