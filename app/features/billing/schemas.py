"""
Billing schemas.
"""

from pydantic import Field

from app.models.agency import SubscriptionPlan, SubscriptionStatus
from app.schemas.common import BaseSchema


class BillingConfig(BaseSchema):
    publishable_key: str | None = Field(None, alias="publishableKey")


class RedirectUrl(BaseSchema):
    """Hosted Stripe page to send the browser to."""

    url: str


class BillingStatus(BaseSchema):
    plan: SubscriptionPlan
    status: SubscriptionStatus
    is_premium: bool = Field(..., alias="isPremium")


class PaymentVerification(BaseSchema):
    success: bool
    message: str
    plan: SubscriptionPlan
    status: SubscriptionStatus


class WebhookAck(BaseSchema):
    received: bool = True
