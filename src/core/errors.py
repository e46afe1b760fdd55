"""JSON error responses for everything outside the comment endpoint.

Every error body has the same envelope::

    {"error": true, "message": ..., "status_code": ..., "request_id": ...}

Server errors never expose their detail; it only goes to the logs.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.context import get_request_id
from src.core.logging import get_logger


logger = get_logger(__name__)

GENERIC_SERVER_ERROR = "An unexpected error occurred. Please try again later."


def request_id_for(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or get_request_id()


def error_response(
    request: Request,
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> ORJSONResponse:
    """Build the standard error envelope."""
    return ORJSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "message": message,
            "status_code": status_code,
            "request_id": request_id_for(request),
            **extra,
        },
        headers=headers,
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> ORJSONResponse:
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=str(exc.detail),
        path=request.url.path,
        method=request.method,
    )
    message = (
        str(exc.detail)
        if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
        else "Internal server error"
    )
    return error_response(
        request, exc.status_code, message, headers=getattr(exc, "headers", None)
    )


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> ORJSONResponse:
    errors = exc.errors()
    logger.warning(
        "validation_error",
        errors=errors,
        path=request.url.path,
        method=request.method,
    )
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Invalid value"),
        }
        for err in errors
    ]
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        details=details,
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> ORJSONResponse:
    logger.exception(
        "unhandled_exception",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_SERVER_ERROR
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on an application."""
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
