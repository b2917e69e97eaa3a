"""Request tracing middleware for correlation IDs and access logging."""

import time
import uuid
from collections.abc import Callable
from typing import Any

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

CORRELATION_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 2000.0
QUIET_PATHS = frozenset({"/health", "/health/db"})


def client_ip(request: Request) -> str:
    """Client address, preferring the first hop recorded by a proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID to the structlog context for each request.

    The caller's ``X-Correlation-ID`` is reused when present so dashboard
    requests can be traced end to end; both IDs are echoed back as headers.
    Requests slower than ``SLOW_REQUEST_MS`` are logged as warnings.
    """

    async def dispatch(self, request: Request, call_next: Callable[..., Any]) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
        request_id = uuid.uuid4().hex[:8]
        quiet = request.url.path in QUIET_PATHS

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=client_ip(request),
        )

        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        if duration_ms > SLOW_REQUEST_MS:
            logger.warning("request_slow", status_code=response.status_code, duration_ms=duration_ms)
        elif not quiet:
            logger.info("request_completed", status_code=response.status_code, duration_ms=duration_ms)

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
