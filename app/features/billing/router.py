"""
Billing endpoints (Stripe subscriptions).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.features.auth.dependencies import CurrentIdentity, CurrentPrincipal
from app.features.auth.service import auth_service
from app.features.billing.schemas import (
    BillingConfig,
    BillingStatus,
    PaymentVerification,
    RedirectUrl,
    WebhookAck,
)
from app.features.billing.service import billing_service, parse_webhook_event

router = APIRouter(prefix="/billing", tags=["Billing"])

DB = Annotated[AsyncSession, Depends(get_db)]


def _origin(request: Request) -> str:
    return request.headers.get("origin") or settings.frontend_url


@router.get("/config", response_model=BillingConfig)
async def billing_config() -> BillingConfig:
    return BillingConfig(publishable_key=settings.stripe_publishable_key)


@router.post("/checkout", response_model=RedirectUrl)
async def create_checkout(
    request: Request,
    principal: CurrentPrincipal,
    db: DB,
) -> RedirectUrl:
    """Start a premium subscription (monthly, with a trial period)."""
    agency = await auth_service.get_agency(db, principal.tenant_id)
    url = await billing_service.start_checkout(db, agency, principal.user, _origin(request))
    return RedirectUrl(url=url)


@router.post("/portal", response_model=RedirectUrl)
async def customer_portal(
    request: Request,
    principal: CurrentPrincipal,
    db: DB,
) -> RedirectUrl:
    agency = await auth_service.get_agency(db, principal.tenant_id)
    url = await billing_service.portal_url(agency, f"{_origin(request)}/")
    return RedirectUrl(url=url)


@router.get("/status", response_model=BillingStatus)
async def subscription_status(identity: CurrentIdentity, db: DB) -> BillingStatus:
    agency = await auth_service.get_agency(db, identity.tenant_id)
    return BillingStatus(
        plan=agency.plan,
        status=agency.subscription_status,
        is_premium=agency.is_premium,
    )


@router.post("/verify-payment", response_model=PaymentVerification)
async def verify_payment(principal: CurrentPrincipal, db: DB) -> PaymentVerification:
    """Synchronise the subscription from Stripe when webhooks are not delivered."""
    agency = await auth_service.get_agency(db, principal.tenant_id)
    success, message = await billing_service.verify_payment(db, agency)
    return PaymentVerification(
        success=success,
        message=message,
        plan=agency.plan,
        status=agency.subscription_status,
    )


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    db: DB,
    stripe_signature: Annotated[str | None, Header()] = None,
) -> WebhookAck:
    event = parse_webhook_event(await request.body(), stripe_signature)
    await billing_service.apply_event(db, event)
    return WebhookAck()
