"""Request middleware: request IDs, trace propagation and access logging."""

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.core.context import (
    clear_context,
    set_correlation_id,
    set_request_id,
    set_trace_id,
)


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_ID_HEADER = "X-Correlation-ID"
# Checked in order; the W3C header needs parsing
TRACE_ID_HEADERS = ("X-Trace-ID", "X-B3-TraceId")
TRACEPARENT_HEADER = "traceparent"


def extract_traceparent(traceparent: str | None) -> str | None:
    """Trace ID part of a W3C ``traceparent`` (``version-trace-parent-flags``)."""
    if not traceparent:
        return None
    parts = traceparent.split("-")
    return parts[1] if len(parts) >= 2 else None


def find_trace_id(headers: Headers) -> str | None:
    """First trace ID found in the supported tracing headers."""
    for name in TRACE_ID_HEADERS:
        if value := headers.get(name):
            return value
    return extract_traceparent(headers.get(TRACEPARENT_HEADER))


def get_client_ip(request: Request) -> str | None:
    """Client address, preferring proxy headers."""
    if forwarded_for := request.headers.get("x-forwarded-for"):
        return forwarded_for.split(",")[0].strip()
    if real_ip := request.headers.get("x-real-ip"):
        return real_ip
    return request.client.host if request.client else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request/trace IDs to the logging context for each request.

    Logs ``request_started`` and ``request_completed`` (with timing) for
    every path not excluded, returns the request ID in ``X-Request-ID``,
    and clears the context afterwards.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.log_requests = log_requests
        self.exclude_paths = tuple(exclude_paths or ["/health"])

    def should_log(self, path: str) -> bool:
        return self.log_requests and not path.startswith(self.exclude_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        set_trace_id(find_trace_id(request.headers))
        set_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        request.state.request_id = request_id

        path = request.url.path
        log = self.should_log(path)
        if log:
            logger.info(
                "request_started",
                method=request.method,
                path=path,
                client_ip=get_client_ip(request),
                user_agent=request.headers.get("user-agent"),
            )

        def elapsed_ms() -> float:
            return round((time.perf_counter() - started) * 1000, 2)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "request_failed",
                method=request.method,
                path=path,
                error_type=type(e).__name__,
                duration_ms=elapsed_ms(),
            )
            raise
        else:
            if log:
                emit = logger.warning if response.status_code >= 400 else logger.info
                emit(
                    "request_completed",
                    method=request.method,
                    path=path,
                    status_code=response.status_code,
                    duration_ms=elapsed_ms(),
                )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()


__all__ = [
    "RequestContextMiddleware",
    "extract_traceparent",
    "find_trace_id",
    "get_client_ip",
]
