"""Structured logging for the blog.

structlog events and stdlib records (uvicorn, httpx) go through one
processor chain and end up in:
- stdout, colored for development or JSON for log shipping
- ``<app>.log`` and ``<app>.error.log``, rotated, always JSON

Every event carries the request context and has credentials and
commenter emails masked.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor

from src.core.context import get_context


if TYPE_CHECKING:
    from src.config.settings import Settings


SENSITIVE_KEYS = frozenset(
    {
        "authorization",
        "api_key",
        "apikey",
        "credentials",
        "email",
        "password",
        "secret",
        "token",
    }
)

# Values longer than this keep their first and last two characters
_PARTIAL_MASK_MIN = 4

_QUIET_LOGGERS = ("uvicorn.access", "uvicorn.error", "httpx", "httpcore")


def add_context_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Copy request_id, trace_id, correlation_id and page_path into the event."""
    event_dict.update(get_context())
    return event_dict


def add_app_info_processor(app_name: str, app_version: str, environment: str) -> Processor:
    """Processor stamping every event with the app name, version and environment."""
    app_info = {"app": app_name, "version": app_version, "environment": environment}

    def processor(
        logger: logging.Logger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.update(app_info)
        return event_dict

    return processor


def is_sensitive(key: str) -> bool:
    key = key.lower()
    return any(sensitive in key for sensitive in SENSITIVE_KEYS)


def mask_value(key: str, value: Any) -> Any:
    """Mask ``value`` when ``key`` names something sensitive; recurses into dicts."""
    if isinstance(value, dict):
        return {k: mask_value(k, v) for k, v in value.items()}
    if not isinstance(value, str) or not is_sensitive(key):
        return value
    if len(value) <= _PARTIAL_MASK_MIN:
        return "***"
    hidden = len(value) - _PARTIAL_MASK_MIN
    return f"{value[:2]}{'*' * hidden}{value[-2:]}"


def filter_sensitive_data(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask API tokens, secrets and commenter emails."""
    return {key: mask_value(key, value) for key, value in event_dict.items()}


def build_shared_processors(settings: "Settings") -> list[Processor]:
    """Processors run for structlog events and for foreign stdlib records."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_context_processor,
        add_app_info_processor(settings.app_name, settings.app_version, settings.environment),
        filter_sensitive_data,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.log_include_caller_info:
        callsite = structlog.processors.CallsiteParameter
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[callsite.FILENAME, callsite.LINENO, callsite.FUNC_NAME]
            )
        )
    return processors


def build_handlers(settings: "Settings", log_dir: Path) -> list[tuple[logging.Handler, Processor]]:
    """Handlers paired with the renderer that formats their records."""
    if settings.log_format == "json":
        console_renderer: Processor = structlog.processors.JSONRenderer()
    else:
        console_renderer = structlog.dev.ConsoleRenderer(
            colors=True, exception_formatter=structlog.dev.plain_traceback
        )

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(settings.log_level)
    handlers: list[tuple[logging.Handler, Processor]] = [(console, console_renderer)]

    log_dir.mkdir(parents=True, exist_ok=True)
    for filename, level in (
        (f"{settings.app_name}.log", settings.log_level),
        (f"{settings.app_name}.error.log", "ERROR"),
    ):
        file_handler = RotatingFileHandler(
            log_dir / filename,
            maxBytes=settings.log_file_max_bytes,
            backupCount=settings.log_file_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        handlers.append((file_handler, structlog.processors.JSONRenderer()))

    return handlers


def configure_structlog(settings: "Settings", log_dir: Path | str | None = None) -> None:
    """Route structlog and stdlib logging through the shared processors.

    Args:
        settings: Application settings.
        log_dir: Directory for the rotated log files. Defaults to ./logs.
    """
    shared_processors = build_shared_processors(settings)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(settings.log_level)
    for handler, renderer in build_handlers(settings, Path(log_dir or "logs")):
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=renderer, foreign_pre_chain=shared_processors
            )
        )
        root_logger.addHandler(handler)

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
