"""
Prometheus 指标定义

所有指标统一在此文件定义，中间件和业务代码按需引用。
"""

from prometheus_client import Counter, Gauge, Histogram

# ── 请求级指标 ──

REQUEST_TOTAL = Counter(
    "todo_sync_request_total",
    "HTTP 请求总数",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "todo_sync_request_duration_ms",
    "HTTP 请求耗时（毫秒）",
    ["method", "endpoint"],
    buckets=[5, 10, 25, 50, 100, 250, 500, 1000, 5000],
)

# ── 任务变更 ──

TASK_MUTATION_TOTAL = Counter(
    "todo_sync_task_mutation_total",
    "TaskStore 变更总数",
    ["op"],  # op: create/toggle/merge
)

# ── 推送通道 ──

CHANNELS_OPEN = Gauge(
    "todo_sync_channels_open",
    "当前在线的推送订阅者数",
)

BROADCAST_TOTAL = Counter(
    "todo_sync_broadcast_total",
    "下发事件总数（按订阅者计）",
    ["event_type"],  # tasks_overview/task_added/task_toggled/ack
)

BROADCAST_DROPPED_TOTAL = Counter(
    "todo_sync_broadcast_dropped_total",
    "下发失败被丢弃的帧数",
    ["reason"],  # queue_full/closed
)

INBOUND_DROPPED_TOTAL = Counter(
    "todo_sync_inbound_dropped_total",
    "被丢弃的入站帧数",
    ["reason"],  # malformed/unknown_action/empty_text/not_found/binary
)

# ── Peer 同步 ──

PEER_CALL_TOTAL = Counter(
    "todo_sync_peer_call_total",
    "Peer share/merge 调用总数",
    ["op", "direction", "status"],  # direction: inbound/outbound, status: success/error
)
