"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict

from ..config.settings import settings

# Event keys whose values are Vault credentials or secret material
REDACTED_KEYS = frozenset({
    "token",
    "client_token",
    "role_id",
    "secret_id",
    "value",
    "bundle",
    "x_vault_token",
})
REDACTED = "***"


def redact_credentials(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential and secret values that end up in a log event."""
    for key in event_dict.keys() & REDACTED_KEYS:
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def add_service_info(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every record with the service environment."""
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def setup_logging() -> None:
    """Configure structured logging for the application."""

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        add_service_info,
        redact_credentials,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]

    if settings.structured_logging:
        processors.extend([
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer()
        ])
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # aiohttp logs full request URLs at debug level
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_error(error: Exception, **context: Any) -> None:
    """Log an unexpected error with its traceback."""
    get_logger("error").error(
        "Unexpected error",
        error_type=type(error).__name__,
        error_message=str(error),
        exc_info=error,
        **context
    )


def log_performance(operation: str, duration: float, **kwargs: Any) -> None:
    """Log how long an operation took."""
    get_logger("performance").info(
        "Performance metric",
        operation=operation,
        duration_seconds=round(duration, 4),
        **kwargs
    )


def log_business_event(event: str, **kwargs: Any) -> None:
    """Log a wizard milestone such as a login or a finished upload."""
    get_logger("business").info(
        "Business event",
        business_event=event,
        **kwargs
    )
