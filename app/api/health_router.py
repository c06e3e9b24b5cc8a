"""
Health check endpoints for monitoring and orchestration.

- ``/health/live``: the process answers
- ``/health/ready``: database and Redis reachable (503 otherwise)
- ``/health``: per-dependency detail including Celery workers
"""

import time
from typing import Any

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.config import settings
from app.core.cache import cache_manager
from app.core.database import db_manager

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Health"])


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


async def _check_database() -> dict[str, Any]:
    start = time.perf_counter()
    try:
        async for db in db_manager.get_session():
            await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("health_check_failed", dependency="database", error=str(e))
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "response_time_ms": _elapsed_ms(start)}


async def _check_redis(detailed: bool = False) -> dict[str, Any]:
    start = time.perf_counter()
    try:
        await cache_manager.client.ping()
        check: dict[str, Any] = {"status": "healthy", "response_time_ms": _elapsed_ms(start)}
        if detailed:
            info = await cache_manager.client.info()
            check["version"] = info.get("redis_version", "unknown")
            check["used_memory_mb"] = round(info.get("used_memory", 0) / 1024 / 1024, 2)
    except Exception as e:
        logger.warning("health_check_failed", dependency="redis", error=str(e))
        return {"status": "unhealthy", "error": str(e)}
    return check


async def _check_celery() -> dict[str, Any]:
    """Workers only run the maintenance jobs, so none is a degraded state."""
    try:
        from app.core.celery_app import celery_app

        stats = celery_app.control.inspect(timeout=1.0).stats()
    except Exception as e:
        return {"status": "unknown", "error": str(e)}

    if not stats:
        return {"status": "degraded", "worker_count": 0, "message": "No workers available"}
    return {"status": "healthy", "worker_count": len(stats)}


@router.get("/health/live")
async def liveness() -> dict:
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness() -> JSONResponse:
    """
    Readiness probe.

    Returns:
        200: database and Redis reachable
        503: at least one of them is not
    """
    checks = {
        "database": await _check_database(),
        "redis": await _check_redis(),
    }
    is_ready = all(check["status"] == "healthy" for check in checks.values())

    return JSONResponse(
        status_code=status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if is_ready else "not_ready",
            "checks": checks,
        },
    )


@router.get("/health")
async def health() -> dict:
    checks = {
        "database": await _check_database(),
        "redis": await _check_redis(detailed=True),
        "celery": await _check_celery(),
    }
    healthy = checks["database"]["status"] == "healthy" and checks["redis"]["status"] == "healthy"

    return {
        "status": "healthy" if healthy else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks,
    }
