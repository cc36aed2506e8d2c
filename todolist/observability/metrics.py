"""
Prometheus 指标定义

所有指标统一在此文件定义，中间件和业务代码按需引用。
"""

from prometheus_client import Counter, Histogram

# ── 请求级指标 ──

REQUEST_TOTAL = Counter(
    "todolist_request_total",
    "HTTP 请求总数",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "todolist_request_duration_ms",
    "HTTP 请求耗时（毫秒）",
    ["method", "endpoint"],
    buckets=[5, 10, 25, 50, 100, 250, 500, 1000],
)

# ── 任务操作指标 ──

TASK_OPERATION_TOTAL = Counter(
    "todolist_task_operation_total",
    "任务操作总数",
    ["operation", "status"],  # operation: add/complete/delete；status: success/not_found/invalid
)

# ── 错误指标 ──

PERSIST_ERROR_TOTAL = Counter(
    "todolist_persist_error_total",
    "变更后落盘失败次数（内存与文件可能不一致）",
)
