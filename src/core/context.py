"""Per-request values picked up by every log line.

Stored in contextvars so that concurrent requests, and background page
regenerations, each see their own values.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4


request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
# Set while a page is rendered or regenerated, e.g. "/post/hello-world"
page_path_var: ContextVar[str | None] = ContextVar("page_path", default=None)

_CONTEXT_VARS = (request_id_var, trace_id_var, correlation_id_var, page_path_var)


def set_request_id(request_id: str | None = None) -> str:
    """Use the given request ID, or a fresh UUID4 when there is none.

    Returns:
        The request ID now in effect.
    """
    request_id = request_id or str(uuid4())
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> str | None:
    return request_id_var.get()


def set_trace_id(trace_id: str | None) -> None:
    trace_id_var.set(trace_id)


def get_trace_id() -> str | None:
    return trace_id_var.get()


def set_correlation_id(correlation_id: str | None) -> None:
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


def set_page_path(path: str | None) -> None:
    page_path_var.set(path)


def get_page_path() -> str | None:
    return page_path_var.get()


def get_context() -> dict[str, Any]:
    """Non-empty context values, keyed by variable name."""
    return {var.name: value for var in _CONTEXT_VARS if (value := var.get())}


def clear_context() -> None:
    """Reset every value; the middleware calls this when a request ends."""
    for var in _CONTEXT_VARS:
        var.set(None)
