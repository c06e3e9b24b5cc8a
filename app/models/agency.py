"""
Agency model for multi-tenancy.

Each agency is an isolated workspace; every tenant-scoped table
references it through an agency_id column.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class SubscriptionPlan(str, Enum):
    """Commercial plan of an agency."""
    FREE = "free"
    PREMIUM = "premium"


class SubscriptionStatus(str, Enum):
    """Billing state of an agency's subscription."""
    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class Agency(BaseModel):
    """
    Agency (tenant) model.

    Provides:
    - Data isolation between agencies
    - Subscription/plan state driven by billing events
    """

    __tablename__ = "agencies"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Agency display name"
    )

    plan: Mapped[SubscriptionPlan] = mapped_column(
        String(20),
        default=SubscriptionPlan.FREE,
        nullable=False,
        comment="free or premium"
    )

    subscription_status: Mapped[SubscriptionStatus] = mapped_column(
        String(20),
        default=SubscriptionStatus.ACTIVE,
        nullable=False,
        comment="active, canceled, expired or suspended"
    )

    subscription_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="End of the current subscription period"
    )

    is_demo: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Demonstration agency (excluded from admin stats)"
    )

    billing_customer_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        comment="Stripe customer reference"
    )

    # Relationships
    users: Mapped[list["User"]] = relationship(
        "User",
        back_populates="agency",
        cascade="all, delete-orphan"
    )

    temporary_accesses: Mapped[list["TemporaryAccess"]] = relationship(
        "TemporaryAccess",
        back_populates="agency",
        cascade="all, delete-orphan"
    )

    @property
    def is_premium(self) -> bool:
        """Premium plan that is not suspended or canceled."""
        return self.plan == SubscriptionPlan.PREMIUM and self.subscription_status not in (
            SubscriptionStatus.SUSPENDED,
            SubscriptionStatus.CANCELED,
        )

    def __repr__(self) -> str:
        return f"<Agency(id={self.id}, name={self.name})>"
