"""
Logging configuration for AuraGold Clinic.

structlog renders JSON in production and a coloured console in debug
mode. Every event passes through ``redact_secrets`` so a passcode handed
to a log call by mistake never reaches the output.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from auragold.config import settings

SECRET_KEYS = frozenset({"passcode", "password", "pin", "token", "authorization"})
REDACTED = "[REDACTED]"


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """structlog processor masking values of secret-looking keys."""
    for key in event_dict:
        if key.lower() in SECRET_KEYS:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(
    log_level: Optional[str] = None,
    json_format: bool = True
) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (defaults to settings.log_level)
        json_format: JSON lines (True) or console output (False)
    """
    level = log_level or settings.log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # Request id and session phase arrive through contextvars
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        redact_secrets,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_format:
        renderer: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=shared_processors + renderer,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )


def get_logger(name: str = "auragold") -> structlog.BoundLogger:
    """Get a structlog logger for one module."""
    return structlog.get_logger(name)


configure_logging(
    log_level=settings.log_level,
    json_format=not settings.debug
)
