"""
请求级指标采集中间件

按路由模板（而非原始 path）打标签，避免未知路径把 label 基数撑爆。
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from todo_sync.observability.metrics import REQUEST_DURATION, REQUEST_TOTAL

_SKIP_PATHS = frozenset({"/metrics", "/health"})


def _endpoint_label(request: Request) -> str:
    """路由匹配成功时取模板路径，404 统一归为 unmatched"""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """HTTP 请求指标采集"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000

        endpoint = _endpoint_label(request)
        REQUEST_TOTAL.labels(
            method=request.method, endpoint=endpoint, status_code=str(response.status_code)
        ).inc()
        REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(duration_ms)

        return response
