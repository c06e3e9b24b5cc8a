"""
Error tracking and reporting (Sentry).

When Sentry is disabled the tracker only logs locally.
"""

from typing import Any

import sentry_sdk
import structlog
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from app.config import settings

logger = structlog.get_logger(__name__)

# Replaced before events leave the process.
SCRUBBED_HEADERS = ("cookie", "set-cookie", "authorization", "stripe-signature")


def _scrub_event(event: dict, hint: dict) -> dict:
    request = event.get("request") or {}
    headers = request.get("headers") or {}
    for name in list(headers):
        if name.lower() in SCRUBBED_HEADERS:
            headers[name] = "[Filtered]"
    request.pop("cookies", None)
    request.pop("data", None)
    return event


class ErrorTracker:
    """
    Error tracking interface.

    Usage:
        error_tracker.capture_exception(exc, context={"request": {...}})
    """

    def __init__(self, enabled: bool = False, dsn: str | None = None):
        self.enabled = bool(enabled and dsn)
        self.dsn = dsn

        if self.enabled:
            self._init_sentry(dsn)

    def _init_sentry(self, dsn: str) -> None:
        sentry_sdk.init(
            dsn=dsn,
            environment=settings.environment,
            release=settings.app_version,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            send_default_pii=False,
            before_send=_scrub_event,
            integrations=[
                FastApiIntegration(),
                SqlalchemyIntegration(),
                AsyncioIntegration(),
            ],
        )
        logger.info("sentry_initialized", environment=settings.environment)

    def capture_exception(
        self,
        exception: Exception,
        context: dict[str, Any] | None = None,
    ) -> str | None:
        """
        Report an exception.

        Returns:
            Sentry event id, or None when tracking is disabled
        """
        if not self.enabled:
            logger.error(
                "exception_captured",
                exception=str(exception),
                exception_type=type(exception).__name__,
                context=context,
            )
            return None

        with sentry_sdk.new_scope() as scope:
            for key, value in (context or {}).items():
                scope.set_context(key, value)
            return sentry_sdk.capture_exception(exception)

    def capture_message(
        self,
        message: str,
        level: str = "info",
        context: dict[str, Any] | None = None,
    ) -> str | None:
        """Report a non-exception event (security or configuration warnings)."""
        if not self.enabled:
            logger.info("message_captured", message=message, context=context)
            return None

        with sentry_sdk.new_scope() as scope:
            for key, value in (context or {}).items():
                scope.set_context(key, value)
            return sentry_sdk.capture_message(message, level=level)


# Global error tracker instance
error_tracker = ErrorTracker(
    enabled=settings.sentry_enabled,
    dsn=settings.sentry_dsn,
)
