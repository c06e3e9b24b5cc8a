"""
Structured logging configuration.

Provides:
- JSON logs in production (log aggregation)
- Human-readable console logs in development
- Request correlation (request id, trace id, user, agency)
- Redaction of credentials, tokens and cookies
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from app.config import settings

REDACTED = "***REDACTED***"

SENSITIVE_KEYS = (
    "password",
    "motdepasse",
    "token",
    "secret",
    "cookie",
    "authorization",
    "signature",
)


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["environment"] = settings.environment
    event_dict["service"] = settings.app_name
    event_dict["version"] = settings.app_version
    return event_dict


def add_request_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Copy the non-empty request context variables into the entry."""
    from app.core.context import get_request_context

    for key, value in get_request_context().items():
        if value is not None:
            event_dict.setdefault(key, value)

    return event_dict


def _is_sensitive(key: str) -> bool:
    lowered = key.lower().replace("_", "")
    return any(marker in lowered for marker in SENSITIVE_KEYS)


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if isinstance(k, str) and _is_sensitive(k) else _redact(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(v) for v in value)
    return value


def censor_sensitive_data(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Redact credentials from log entries.

    Keys are matched case-insensitively, ignoring underscores, so
    ``hashed_password``, ``motDePasse`` and ``auth_token`` are all caught.
    Nested dicts and lists are walked.
    """
    for key in list(event_dict.keys()):
        if key == "event":
            continue
        if _is_sensitive(key):
            event_dict[key] = REDACTED
        else:
            event_dict[key] = _redact(event_dict[key])

    return event_dict


def setup_logging() -> None:
    """
    Configure application-wide structured logging.

    ``log_format=json`` renders JSON lines, anything else a colourised
    console output. Standard library loggers share the same level.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        add_app_context,
        add_request_context,
        censor_sensitive_data,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=settings.is_development)

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
    logging.getLogger("stripe").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "logging_configured",
        log_level=settings.log_level,
        log_format=settings.log_format,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Usage:
        logger = get_logger(__name__)
        logger.info("session_revoked", user_id=user.id)
    """
    return structlog.get_logger(name)
