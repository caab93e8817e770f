"""
Structured logging configuration using structlog.
Provides request-scoped logging with automatic context injection.

Events are snake_case names (``cache_hit``, ``provider_fetch_failed``) with
context as keyword fields. The request id bound by the tracing middleware
is merged into every event logged while that request is in flight.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from metrics_api import __version__
from metrics_api.config import get_settings

SERVICE_NAME = "metrics-api"

# Per-request transport logs from the upstream HTTP clients
_NOISY_LOGGERS = ("httpx", "httpcore", "google.auth.transport.requests", "urllib3")


def add_severity(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add severity level for structured logging."""
    event_dict["severity"] = method_name.upper()
    return event_dict


def add_service(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def configure_logging() -> None:
    """
    Configure structured logging for the application.
    Uses JSON format in production, console format in development.
    """
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if settings.log_format == "json" and not settings.dev_mode:
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=not settings.testing)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            add_severity,
            add_service,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """Structured logger for ``name`` (typically ``__name__``)."""
    return structlog.get_logger(name)
