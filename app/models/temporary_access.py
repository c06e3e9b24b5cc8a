"""
Temporary access grants (shareable read-mostly links).
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.security import ensure_aware, utcnow
from app.models.base import AgencyScopedMixin, BaseModel


class TemporaryAccess(AgencyScopedMixin, BaseModel):
    """
    Revocable, optionally time-boxed access link for an agency.

    Used for:
    - Sharing a dashboard with a client or influencer
    - Demonstrations without creating a real account

    The token is opaque and looked up directly; exchanging it mints
    a short-lived demo token scoped to the agency.
    """

    __tablename__ = "temporary_accesses"

    label: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Descriptive name for the grant"
    )

    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    token: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # Status
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="False once revoked"
    )

    # Expiration
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Absolute expiration (None = never)"
    )

    created_by: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        comment="User or admin id that created the grant"
    )

    agency: Mapped["Agency"] = relationship(
        "Agency",
        back_populates="temporary_accesses",
        lazy="selectin",
    )

    def is_expired(self) -> bool:
        """Check if the grant has expired."""
        if not self.expires_at:
            return False
        return utcnow() >= ensure_aware(self.expires_at)

    def is_usable(self) -> bool:
        """Active and not expired."""
        return self.is_active and not self.is_expired()

    def __repr__(self) -> str:
        return f"<TemporaryAccess(id={self.id}, label={self.label})>"
