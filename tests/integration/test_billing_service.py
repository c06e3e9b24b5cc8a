"""
Integration tests for billing reconciliation.

Stripe is replaced by an in-memory gateway; webhook events are plain
dicts shaped like Stripe's payloads.
"""

import json
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from app.core.exceptions import ValidationError
from app.features.billing.service import BillingService, parse_webhook_event
from app.models.agency import SubscriptionPlan, SubscriptionStatus
from tests.factories import AgencyFactory, UserFactory


def event(event_type: str, **obj) -> dict:
    return {"id": "evt_test", "type": event_type, "data": {"object": obj}}


class FakeGateway:
    def __init__(self, subscriptions=(), sessions=()):
        self.subscriptions = list(subscriptions)
        self.sessions = list(sessions)
        self.customers_created = []
        self.checkouts = []

    async def create_customer(self, email, name, metadata):
        self.customers_created.append(email)
        return "cus_new"

    async def create_checkout_session(self, customer_id, agency_id, user_id, origin):
        self.checkouts.append(customer_id)
        return f"https://checkout.test/{customer_id}"

    async def create_portal_session(self, customer_id, return_url):
        return f"https://portal.test/{customer_id}"

    async def list_subscriptions(self, customer_id):
        return self.subscriptions

    async def list_checkout_sessions(self):
        return self.sessions


@pytest.mark.integration
class TestWebhookReconciliation:
    async def test_checkout_completed_activates_premium(self, db_session):
        agency = await AgencyFactory.create(db_session)

        handled = await BillingService.apply_event(
            db_session,
            event("checkout.session.completed", customer="cus_123", metadata={"agenceId": agency.id}),
        )

        assert handled is True
        assert agency.plan == SubscriptionPlan.PREMIUM
        assert agency.subscription_status == SubscriptionStatus.ACTIVE
        assert agency.billing_customer_id == "cus_123"

    async def test_subscription_deleted_downgrades(self, db_session):
        agency = await AgencyFactory.create(
            db_session,
            plan=SubscriptionPlan.PREMIUM,
            billing_customer_id="cus_123",
        )

        await BillingService.apply_event(
            db_session, event("customer.subscription.deleted", customer="cus_123")
        )

        assert agency.plan == SubscriptionPlan.FREE
        assert agency.subscription_status == SubscriptionStatus.CANCELED

    async def test_payment_failed_suspends(self, db_session):
        agency = await AgencyFactory.create(
            db_session,
            plan=SubscriptionPlan.PREMIUM,
            billing_customer_id="cus_123",
        )

        await BillingService.apply_event(db_session, event("invoice.payment_failed", customer="cus_123"))

        assert agency.plan == SubscriptionPlan.PREMIUM
        assert agency.subscription_status == SubscriptionStatus.SUSPENDED
        assert agency.is_premium is False

    async def test_payment_succeeded_reactivates(self, db_session):
        agency = await AgencyFactory.create(
            db_session,
            plan=SubscriptionPlan.PREMIUM,
            subscription_status=SubscriptionStatus.SUSPENDED,
            billing_customer_id="cus_123",
        )

        await BillingService.apply_event(db_session, event("invoice.payment_succeeded", customer="cus_123"))

        assert agency.subscription_status == SubscriptionStatus.ACTIVE
        assert agency.is_premium is True

    async def test_unknown_event_acknowledged_without_changes(self, db_session):
        agency = await AgencyFactory.create(db_session, billing_customer_id="cus_123")

        handled = await BillingService.apply_event(
            db_session, event("customer.created", customer="cus_123")
        )

        assert handled is False
        assert agency.plan == SubscriptionPlan.FREE

    async def test_unknown_customer_ignored(self, db_session):
        handled = await BillingService.apply_event(
            db_session, event("invoice.payment_failed", customer="cus_missing")
        )

        assert handled is False


@pytest.mark.integration
class TestCheckoutAndVerification:
    async def test_checkout_creates_and_stores_customer_once(self, db_session):
        agency = await AgencyFactory.create(db_session)
        user = await UserFactory.create(db_session, agency)
        gateway = FakeGateway()
        service = BillingService(gateway)

        url = await service.start_checkout(db_session, agency, user, "http://localhost:5000")
        await service.start_checkout(db_session, agency, user, "http://localhost:5000")

        assert url == "https://checkout.test/cus_new"
        assert agency.billing_customer_id == "cus_new"
        assert gateway.customers_created == [user.email]
        assert gateway.checkouts == ["cus_new", "cus_new"]

    async def test_portal_requires_customer(self, db_session):
        agency = await AgencyFactory.create(db_session)

        with pytest.raises(HTTPException) as exc_info:
            await BillingService(FakeGateway()).portal_url(agency, "http://localhost:5000/")

        assert exc_info.value.status_code == 400

    async def test_verify_payment_from_trialing_subscription(self, db_session):
        agency = await AgencyFactory.create(db_session, billing_customer_id="cus_123")
        gateway = FakeGateway(subscriptions=[SimpleNamespace(id="sub_1", status="trialing")])

        success, _ = await BillingService(gateway).verify_payment(db_session, agency)

        assert success is True
        assert agency.plan == SubscriptionPlan.PREMIUM

    async def test_verify_payment_from_completed_checkout(self, db_session):
        agency = await AgencyFactory.create(db_session)
        sessions = [
            SimpleNamespace(id="cs_other", metadata={"agenceId": "someone-else"}, status="complete", customer="cus_x"),
            SimpleNamespace(id="cs_mine", metadata={"agenceId": agency.id}, status="complete", customer="cus_mine"),
        ]

        success, _ = await BillingService(FakeGateway(sessions=sessions)).verify_payment(db_session, agency)

        assert success is True
        assert agency.billing_customer_id == "cus_mine"

    async def test_verify_payment_nothing_found(self, db_session):
        agency = await AgencyFactory.create(db_session)

        success, message = await BillingService(FakeGateway()).verify_payment(db_session, agency)

        assert success is False
        assert agency.plan == SubscriptionPlan.FREE


@pytest.mark.unit
class TestParseWebhookEvent:
    def test_unsigned_event_accepted_without_secret(self):
        payload = json.dumps(event("invoice.payment_failed", customer="cus_1")).encode()

        assert parse_webhook_event(payload, None)["type"] == "invoice.payment_failed"

    def test_malformed_payload_rejected(self):
        with pytest.raises(ValidationError):
            parse_webhook_event(b"not json", None)

    def test_signature_checked_when_secret_configured(self, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "stripe_webhook_secret", "whsec_test")
        payload = json.dumps(event("invoice.payment_failed")).encode()

        with pytest.raises(ValidationError):
            parse_webhook_event(payload, "t=1,v1=bad")
