"""
Custom middleware for the application.
"""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.context import clear_request_context, set_request_context

logger = structlog.get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Correlate every log line of a request.

    Sets the request id and trace id (taken from ``X-Trace-ID`` when the
    caller sends one), logs start and completion, and echoes both ids in
    the response headers. The principal resolved by the auth dependencies
    is read back from ``request.state`` for the completion log.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        trace_id = request.headers.get("X-Trace-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        request.state.trace_id = trace_id
        request.state.user_id = None
        request.state.tenant_id = None
        request.state.plane = None

        set_request_context(request_id=request_id, trace_id=trace_id)
        start_time = time.time()

        logger.debug(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round((time.time() - start_time) * 1000, 2),
                error=str(e),
                exc_info=True,
            )
            raise
        else:
            duration_ms = round((time.time() - start_time) * 1000, 2)

            set_request_context(
                user_id=request.state.user_id,
                tenant_id=request.state.tenant_id,
                plane=request.state.plane,
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Trace-ID"] = trace_id
            response.headers["X-Process-Time"] = str(duration_ms)

            logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            return response
        finally:
            clear_request_context()

