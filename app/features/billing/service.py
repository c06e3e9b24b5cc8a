"""
Billing business logic.

Stripe calls go through ``StripeGateway``. Agency state changes driven by
Stripe events live in ``BillingService.apply_event``, which only touches
the database.
"""

import json
import logging
from typing import Any

import stripe
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import BillingError, ValidationError, bad_request
from app.core.metrics import billing_webhook_events_total
from app.core.performance import PerformanceMonitor
from app.models.agency import Agency, SubscriptionPlan, SubscriptionStatus
from app.models.user import User

logger = logging.getLogger(__name__)

METADATA_AGENCY_KEY = "agenceId"
LIVE_SUBSCRIPTION_STATUSES = ("active", "trialing")


class StripeGateway:
    """Thin async wrapper over the Stripe SDK."""

    async def _call(self, operation: str, fn, **kwargs) -> Any:
        if not settings.stripe_secret_key:
            raise BillingError("Billing is not configured")
        stripe.api_key = settings.stripe_secret_key

        async with PerformanceMonitor(f"stripe_{operation}"):
            try:
                return fn(**kwargs)
            except stripe.StripeError as e:
                logger.error(f"Stripe {operation} failed: {e}")
                raise BillingError(e.user_message or str(e)) from e

    async def create_customer(self, email: str, name: str, metadata: dict) -> str:
        customer = await self._call(
            "create_customer",
            stripe.Customer.create,
            email=email,
            name=name,
            metadata=metadata,
        )
        return customer.id

    async def create_checkout_session(
        self,
        customer_id: str,
        agency_id: str,
        user_id: str,
        origin: str,
    ) -> str:
        session = await self._call(
            "create_checkout",
            stripe.checkout.Session.create,
            customer=customer_id,
            payment_method_types=["card"],
            line_items=[{
                "price_data": {
                    "currency": settings.stripe_currency,
                    "product_data": {
                        "name": "OnlyTrack",
                        "description": "Monthly subscription",
                    },
                    "unit_amount": settings.stripe_unit_amount,
                    "recurring": {"interval": "month"},
                },
                "quantity": 1,
            }],
            mode="subscription",
            subscription_data={
                "trial_period_days": settings.stripe_trial_days,
                "metadata": {METADATA_AGENCY_KEY: agency_id},
            },
            success_url=f"{origin}/?success=true",
            cancel_url=f"{origin}/pricing?canceled=true",
            metadata={METADATA_AGENCY_KEY: agency_id, "userId": user_id},
        )
        return session.url

    async def create_portal_session(self, customer_id: str, return_url: str) -> str:
        session = await self._call(
            "create_portal",
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=return_url,
        )
        return session.url

    async def list_subscriptions(self, customer_id: str) -> list:
        result = await self._call(
            "list_subscriptions",
            stripe.Subscription.list,
            customer=customer_id,
            limit=5,
        )
        return list(result.data)

    async def list_checkout_sessions(self) -> list:
        result = await self._call("list_checkout_sessions", stripe.checkout.Session.list, limit=20)
        return list(result.data)


def parse_webhook_event(payload: bytes, signature: str | None) -> dict:
    """
    Decode a webhook body.

    The signature is verified when a webhook secret is configured.

    Raises:
        ValidationError: malformed payload or bad signature
    """
    if settings.stripe_webhook_secret:
        try:
            stripe.Webhook.construct_event(payload, signature or "", settings.stripe_webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise ValidationError("Invalid webhook signature") from e
        except ValueError as e:
            raise ValidationError("Invalid webhook payload") from e
    else:
        logger.warning("Stripe webhook secret not set, accepting unsigned event")

    try:
        event = json.loads(payload)
    except ValueError as e:
        raise ValidationError("Invalid webhook payload") from e

    if not isinstance(event, dict) or "type" not in event:
        raise ValidationError("Invalid webhook payload")
    return event


class BillingService:
    """Subscription state of agencies."""

    def __init__(self, gateway: StripeGateway | None = None):
        self.gateway = gateway or StripeGateway()

    @staticmethod
    def _activate(agency: Agency, customer_id: str | None = None) -> None:
        agency.plan = SubscriptionPlan.PREMIUM
        agency.subscription_status = SubscriptionStatus.ACTIVE
        if customer_id:
            agency.billing_customer_id = customer_id

    @staticmethod
    async def _agency_by_customer(db: AsyncSession, customer_id: str | None) -> Agency | None:
        if not customer_id:
            return None
        result = await db.execute(
            select(Agency).where(Agency.billing_customer_id == customer_id)
        )
        return result.scalars().first()

    async def start_checkout(
        self,
        db: AsyncSession,
        agency: Agency,
        user: User,
        origin: str,
    ) -> str:
        """Create (or reuse) the Stripe customer and return a checkout URL."""
        customer_id = agency.billing_customer_id
        if not customer_id:
            customer_id = await self.gateway.create_customer(
                email=user.email,
                name=user.full_name,
                metadata={METADATA_AGENCY_KEY: agency.id, "userId": user.id},
            )
            agency.billing_customer_id = customer_id
            await db.commit()

        url = await self.gateway.create_checkout_session(customer_id, agency.id, user.id, origin)
        logger.info(f"Checkout started for agency {agency.id}")
        return url

    async def portal_url(self, agency: Agency, return_url: str) -> str:
        if not agency.billing_customer_id:
            raise bad_request("No active subscription")
        return await self.gateway.create_portal_session(agency.billing_customer_id, return_url)

    async def verify_payment(self, db: AsyncSession, agency: Agency) -> tuple[bool, str]:
        """
        Pull the subscription state from Stripe.

        Used when webhooks cannot reach the deployment. Looks for a live
        subscription of the agency's customer first, then for a completed
        checkout session tagged with the agency id.
        """
        if agency.plan == SubscriptionPlan.PREMIUM and agency.subscription_status == SubscriptionStatus.ACTIVE:
            return True, "Subscription already active"

        if agency.billing_customer_id:
            for sub in await self.gateway.list_subscriptions(agency.billing_customer_id):
                if sub.status in LIVE_SUBSCRIPTION_STATUSES:
                    self._activate(agency)
                    await db.commit()
                    logger.info(f"Agency {agency.id} synchronised from subscription {sub.id}")
                    return True, "Subscription activated"

        for session in await self.gateway.list_checkout_sessions():
            metadata = session.metadata or {}
            if metadata.get(METADATA_AGENCY_KEY) == agency.id and session.status == "complete":
                self._activate(agency, session.customer)
                await db.commit()
                logger.info(f"Agency {agency.id} synchronised from checkout {session.id}")
                return True, "Subscription activated"

        logger.info(f"No payment found for agency {agency.id}")
        return False, "No payment found"

    @classmethod
    async def apply_event(cls, db: AsyncSession, event: dict) -> bool:
        """
        Reconcile one webhook event with the agency it concerns.

        Returns whether an agency was updated. Unknown event types and
        events for unknown customers are acknowledged without changes.
        """
        event_type = event.get("type", "")
        obj = (event.get("data") or {}).get("object") or {}
        agency: Agency | None = None

        if event_type == "checkout.session.completed":
            agency_id = (obj.get("metadata") or {}).get(METADATA_AGENCY_KEY)
            if agency_id:
                result = await db.execute(select(Agency).where(Agency.id == agency_id))
                agency = result.scalar_one_or_none()
            if agency:
                cls._activate(agency, obj.get("customer"))

        elif event_type == "customer.subscription.deleted":
            agency = await cls._agency_by_customer(db, obj.get("customer"))
            if agency:
                agency.plan = SubscriptionPlan.FREE
                agency.subscription_status = SubscriptionStatus.CANCELED

        elif event_type == "invoice.payment_failed":
            agency = await cls._agency_by_customer(db, obj.get("customer"))
            if agency:
                agency.subscription_status = SubscriptionStatus.SUSPENDED

        elif event_type == "invoice.payment_succeeded":
            agency = await cls._agency_by_customer(db, obj.get("customer"))
            if agency:
                cls._activate(agency)

        handled = agency is not None
        billing_webhook_events_total.labels(
            event_type=event_type or "unknown",
            handled=str(handled).lower(),
        ).inc()

        if not handled:
            logger.debug(f"Billing event ignored: {event_type}")
            return False

        await db.commit()
        logger.info(f"Billing event {event_type} applied to agency {agency.id}")
        return True


# Singleton instance
billing_service = BillingService()
