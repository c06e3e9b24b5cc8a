"""
Base model and mixins shared by all entities.

Provides:
- Primary key (UUID string)
- Timestamps (created_at, updated_at)
- The agency foreign key of tenant-scoped tables
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.security import utcnow


class BaseModel(Base):
    """
    Abstract base model for all database tables.

    Timestamps get a Python-side default as well as a server default, so
    freshly added rows carry an aware ``created_at`` before any refresh.
    """

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


class AgencyScopedMixin:
    """
    Rows owned by exactly one agency.

    Deleting the agency deletes the rows. Queries over these tables go
    through ``app.core.tenant`` so the agency filter is never forgotten.
    """

    agency_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("agencies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
