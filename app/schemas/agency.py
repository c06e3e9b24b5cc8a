"""
Pydantic schemas for Agency.
"""

from datetime import datetime

from pydantic import Field

from app.models.agency import SubscriptionPlan, SubscriptionStatus
from app.schemas.common import BaseSchema


class AgencyRead(BaseSchema):
    """Schema for reading agency data."""

    id: str
    name: str = Field(..., alias="nom")
    plan: SubscriptionPlan
    subscription_status: SubscriptionStatus = Field(..., alias="statutAbonnement")
    subscription_expires_at: datetime | None = Field(None, alias="dateExpirationAbonnement")
    is_demo: bool = Field(False, alias="isDemo")
    is_premium: bool = Field(False, alias="isPremium")
    created_at: datetime = Field(..., alias="dateCreation")


class AgencySummary(BaseSchema):
    """Compact agency block embedded in account responses."""

    id: str
    name: str = Field(..., alias="nom")
    plan: SubscriptionPlan
    subscription_status: SubscriptionStatus = Field(..., alias="statutAbonnement")
    created_at: datetime = Field(..., alias="dateCreation")
