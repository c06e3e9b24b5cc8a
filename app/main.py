"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.core.cache import cache_manager
from app.core.database import db_manager
from app.core.error_tracking import error_tracker
from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BillingError,
    OnlyTrackException,
    ResourceNotFoundError,
    ValidationError,
)
from app.core.logging_config import get_logger, setup_logging
from app.core.middleware import RequestContextMiddleware
from app.core.performance import track_http_metrics
from app.schemas.common import ErrorDetail, ErrorResponse

# Setup logging first
setup_logging()
logger = get_logger(__name__)

EXCEPTION_STATUS_CODES: dict[type[OnlyTrackException], int] = {
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    ResourceNotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    BillingError: status.HTTP_502_BAD_GATEWAY,
}


def check_security_settings() -> None:
    """Warn about production deployments running on default or shared secrets."""
    if not settings.is_production:
        return

    if settings.effective_admin_secret == settings.secret_key:
        logger.warning(
            "admin_secret_shared",
            message="ADMIN_SECRET_KEY is not set; admin tokens are signed with SECRET_KEY",
        )
        error_tracker.capture_message("Admin plane shares the tenant signing secret", level="warning")

    if settings.secret_key == "secret-de-developpement-a-changer":
        logger.error("default_secret_key_in_production")


def _validation_errors(exc: RequestValidationError) -> list[ErrorDetail]:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = error.get("msg", "Invalid value")
        errors.append(ErrorDetail(
            field=".".join(location) or None,
            message=message.removeprefix("Value error, "),
            type=error.get("type"),
        ))
    return errors


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    check_security_settings()
    db_manager.init()

    # Redis backs rate limiting and caching only; both degrade without it.
    try:
        await cache_manager.init()
    except Exception as e:
        logger.warning("redis_unavailable", error=str(e))
        await cache_manager.close()

    logger.info("application_ready")

    yield

    logger.info("application_shutting_down")
    await db_manager.close()
    await cache_manager.close()
    logger.info("application_shutdown_complete")


def create_application() -> FastAPI:
    """Application factory."""

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Multi-tenant agency workspace: authentication, sessions and authorization",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Middleware (first added = innermost)

    @app.middleware("http")
    async def performance_middleware(request: Request, call_next):
        return await track_http_metrics(request, call_next)

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = _validation_errors(exc)
        logger.info(
            "validation_error",
            path=request.url.path,
            fields=[e.field for e in errors],
        )

        # Fail-fast: the first message is the headline
        body = ErrorResponse(detail=errors[0].message if errors else "Invalid data", errors=errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=body.model_dump(),
        )

    @app.exception_handler(OnlyTrackException)
    async def domain_exception_handler(
        request: Request,
        exc: OnlyTrackException,
    ) -> JSONResponse:
        status_code = next(
            (code for cls, code in EXCEPTION_STATUS_CODES.items() if isinstance(exc, cls)),
            status.HTTP_400_BAD_REQUEST,
        )
        logger.warning(
            "domain_error",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=exc.message,
        )
        return JSONResponse(status_code=status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")

        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )

        error_tracker.capture_exception(
            exc,
            context={
                "request": {
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                },
            },
        )

        if settings.is_production:
            detail = "Internal server error"
        else:
            detail = str(exc)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": detail,
                "request_id": request_id,
            },
        )

    # Register routers
    from app.api.health_router import router as health_router
    from app.api.metrics_router import router as metrics_router
    from app.api.v1.router import v1_router

    app.include_router(health_router)

    if settings.metrics_enabled:
        app.include_router(metrics_router)

    app.include_router(v1_router, prefix="/api")

    @app.get("/", tags=["Root"])
    async def root() -> dict:
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.environment,
            "docs": "/docs" if settings.is_development else "Disabled in production",
            "health": "/health",
        }

    logger.info("application_configured")
    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload and settings.is_development,
        log_level=settings.log_level.lower(),
        access_log=False,
    )
