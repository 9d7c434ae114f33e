import logging
import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware

from eventmarketers.utils.metrics import http_request_duration_seconds

logger = logging.getLogger("eventmarketers.http")


def _route_path(request) -> str:
    """Route template (/content/{content_id}/approval) rather than the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request_id to each request, log completion and observe latency."""

    def __init__(self, app, header_name: str = "X-Request-Id"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next):
        rid = request.headers.get(self.header_name) or str(uuid4())
        request.state.request_id = rid

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        response.headers[self.header_name] = rid
        path = _route_path(request)
        http_request_duration_seconds.labels(method=request.method, path=path).observe(elapsed)
        logger.info(
            "http_request",
            extra={
                "request_id": rid,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "latency_ms": round(elapsed * 1000, 2),
            },
        )
        return response
