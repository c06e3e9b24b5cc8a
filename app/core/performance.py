"""
Performance monitoring utilities.
"""

import time
from typing import Any, Callable

import structlog
from fastapi import Request

from app.config import settings
from app.core.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

logger = structlog.get_logger(__name__)


class PerformanceMonitor:
    """
    Time an awaited operation and log the outcome.

    Usage:
        async with PerformanceMonitor("stripe_checkout", agency_id=agency.id):
            url = await gateway.create_checkout_session(...)
    """

    def __init__(self, operation_name: str, **tags: Any):
        self.operation_name = operation_name
        self.tags = tags
        self.start_time: float | None = None
        self.end_time: float | None = None

    async def __aenter__(self) -> "PerformanceMonitor":
        self.start_time = time.time()
        logger.debug("operation_started", operation=self.operation_name, **self.tags)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.time()
        duration_ms = (self.end_time - self.start_time) * 1000

        if exc_type is None:
            logger.info(
                "operation_completed",
                operation=self.operation_name,
                duration_ms=round(duration_ms, 2),
                **self.tags,
            )
        else:
            logger.error(
                "operation_failed",
                operation=self.operation_name,
                duration_ms=round(duration_ms, 2),
                error=str(exc_val),
                **self.tags,
            )

    @property
    def duration_ms(self) -> float | None:
        """Get duration in milliseconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time) * 1000
        return None


def _endpoint_label(request: Request) -> str:
    # Route templates keep label cardinality bounded (/team/{user_id}, not ids)
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


async def track_http_metrics(request: Request, call_next: Callable):
    """
    Middleware to track HTTP metrics.

    Records:
    - Request count by endpoint and status
    - Request duration histogram
    - Requests in progress gauge
    - A warning for requests slower than the configured threshold
    """
    method = request.method
    in_progress_endpoint = request.url.path

    http_requests_in_progress.labels(method=method, endpoint=in_progress_endpoint).inc()

    start_time = time.time()

    try:
        response = await call_next(request)

        duration = time.time() - start_time
        endpoint = _endpoint_label(request)

        http_request_duration_seconds.labels(
            method=method,
            endpoint=endpoint,
        ).observe(duration)

        http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        duration_ms = duration * 1000
        if duration_ms > settings.slow_request_threshold_ms:
            logger.warning(
                "slow_request_detected",
                method=method,
                endpoint=endpoint,
                duration_ms=round(duration_ms, 2),
                threshold_ms=settings.slow_request_threshold_ms,
            )

        return response

    finally:
        http_requests_in_progress.labels(method=method, endpoint=in_progress_endpoint).dec()
