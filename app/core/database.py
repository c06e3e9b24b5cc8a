"""
Database session management with async SQLAlchemy 2.0.

Provides:
- Async engine with connection pooling
- Session factory with proper lifecycle
- Dependency injection for route handlers
"""

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.config import settings

logger = logging.getLogger(__name__)


# Base class for all ORM models
class Base(DeclarativeBase):
    """
    Base class for all database models.

    Provides:
    - Common metadata for all tables
    - Type hints for SQLAlchemy
    """
    pass


class DatabaseManager:
    """
    Manages database engine and session lifecycle.

    Singleton pattern ensures one engine per application.
    """

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def init(self) -> None:
        """
        Initialize database engine and session factory.

        Called during application startup (lifespan event) and by
        Celery tasks before they touch the database.
        """
        if self._engine is not None:
            return

        logger.info("Initializing database connection...")

        engine_options: dict = {"pool_pre_ping": True}

        if settings.is_development:
            # Development: NullPool for simplicity
            engine_options["poolclass"] = NullPool
            engine_options["echo"] = settings.db_echo
        else:
            engine_options["pool_size"] = settings.db_pool_size
            engine_options["max_overflow"] = settings.db_max_overflow

        self._engine = create_async_engine(settings.database_url, **engine_options)

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Don't expire objects after commit
            autoflush=False,  # Manual control over flushes
        )

        logger.info("Database connection initialized successfully")

    async def close(self) -> None:
        """
        Close database connections.

        Called during application shutdown (lifespan event).
        """
        if self._engine:
            logger.info("Closing database connections...")
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connections closed")

    @property
    def engine(self) -> AsyncEngine:
        """Get the database engine."""
        if not self._engine:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Dependency injection for database sessions.

        Yields:
            AsyncSession: Database session with automatic cleanup
        """
        if not self._session_factory:
            raise RuntimeError("Database not initialized. Call init() first.")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()  # Auto-commit on success
            except Exception:
                await session.rollback()  # Auto-rollback on error
                raise
            finally:
                await session.close()


# Global instance
db_manager = DatabaseManager()


# Convenience function for dependency injection
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        from app.core.database import get_db

        @router.get("/models")
        async def list_models(db: AsyncSession = Depends(get_db)):
            ...
    """
    async for session in db_manager.get_session():
        yield session
