"""
HTTP 请求日志中间件

每个请求一条开始、一条结束日志。trace_id 优先沿用对端 Peer 传来的 X-Trace-ID，
这样一次 pull / push 在两端的日志可以串起来；调用方自报 X-Peer-Address 时一并绑定。
/health 与 /metrics 被频繁探测，只记 debug。
WebSocket 不经过 BaseHTTPMiddleware，推送通道的上下文由 bind_channel 绑定。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from todo_sync.observability.context import new_trace_id, trace_id_var

log = structlog.get_logger()

_QUIET_PREFIXES = ("/health", "/metrics")


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get("X-Trace-ID") or new_trace_id()
        trace_id_var.set(trace_id)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(trace_id=trace_id)
        peer = request.headers.get("X-Peer-Address")
        if peer:
            structlog.contextvars.bind_contextvars(peer=peer)

        path = request.url.path
        emit = log.debug if path.startswith(_QUIET_PREFIXES) else log.info

        start = time.monotonic()
        emit(
            "请求开始",
            method=request.method,
            path=path,
            client_ip=request.client.host if request.client else "unknown",
        )

        response = await call_next(request)

        duration_ms = int((time.monotonic() - start) * 1000)
        emit(
            "请求结束",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

        response.headers["X-Trace-ID"] = trace_id
        response.headers["X-Duration-Ms"] = str(duration_ms)
        return response
