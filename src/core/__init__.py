# Core infrastructure
from src.core.context import (
    clear_context,
    get_context,
    get_correlation_id,
    get_page_path,
    get_request_id,
    get_trace_id,
    set_correlation_id,
    set_page_path,
    set_request_id,
    set_trace_id,
)
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware


__all__ = [
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_correlation_id",
    "get_logger",
    "get_page_path",
    "get_request_id",
    "get_trace_id",
    "set_correlation_id",
    "set_page_path",
    "set_request_id",
    "set_trace_id",
]
