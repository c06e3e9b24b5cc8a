"""
Integration tests for the authentication service.
"""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import hash_token, utcnow, verify_jwt
from app.features.auth.schemas import SignupRequest
from app.features.auth.service import auth_service
from app.models import Agency, User, UserSession
from app.models.agency import SubscriptionPlan, SubscriptionStatus
from app.models.user import UserRole
from tests.factories import AgencyFactory, UserFactory


def signup_payload(**overrides) -> SignupRequest:
    data = {
        "prenom": "Ana",
        "nom": "Silva",
        "email": "Ana@Example.com",
        "password": "Secret1!",
        "confirmPassword": "Secret1!",
        "nomAgence": "Ana Talent",
    }
    data.update(overrides)
    return SignupRequest(**data)


@pytest.mark.integration
class TestSignup:
    async def test_creates_agency_and_unverified_owner(self, db_session: AsyncSession):
        user = await auth_service.signup(db_session, signup_payload())

        assert user.email == "ana@example.com"
        assert UserRole(user.role) is UserRole.OWNER
        assert user.email_verified is False
        assert user.is_active is True
        assert user.verification_token

        agency = await db_session.get(Agency, user.agency_id)
        assert agency.name == "Ana Talent"
        assert SubscriptionPlan(agency.plan) is SubscriptionPlan.FREE
        assert SubscriptionStatus(agency.subscription_status) is SubscriptionStatus.ACTIVE

    async def test_duplicate_email_rejected_without_orphan_agency(self, db_session: AsyncSession):
        await auth_service.signup(db_session, signup_payload())

        with pytest.raises(HTTPException) as exc_info:
            await auth_service.signup(db_session, signup_payload(email="ana@example.com"))

        assert exc_info.value.status_code == 400
        assert await db_session.scalar(select(func.count(Agency.id))) == 1

    def test_password_mismatch_rejected_by_schema(self):
        with pytest.raises(ValueError, match="Passwords do not match"):
            signup_payload(confirmPassword="Other1!x")

    def test_weak_password_rejected_by_schema(self):
        with pytest.raises(ValueError, match="uppercase"):
            signup_payload(password="secret1!", confirmPassword="secret1!")


@pytest.mark.integration
class TestAuthenticate:
    async def test_unknown_email_and_wrong_password_fail_identically(self, db_session: AsyncSession):
        agency = await AgencyFactory.create(db_session)
        await UserFactory.create(db_session, agency, email="user@test.com")

        with pytest.raises(HTTPException) as unknown:
            await auth_service.authenticate(db_session, "nobody@test.com", "Test123!")
        with pytest.raises(HTTPException) as wrong:
            await auth_service.authenticate(db_session, "user@test.com", "Wrong123!")

        assert unknown.value.status_code == wrong.value.status_code == 401
        assert unknown.value.detail == wrong.value.detail

    async def test_unverified_user_gets_403_flag(self, db_session: AsyncSession):
        agency = await AgencyFactory.create(db_session)
        await UserFactory.create(db_session, agency, email="new@test.com", email_verified=False)

        with pytest.raises(HTTPException) as exc_info:
            await auth_service.authenticate(db_session, "new@test.com", "Test123!")

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail["needsEmailVerification"] is True

    async def test_inactive_user_gets_403(self, db_session: AsyncSession):
        agency = await AgencyFactory.create(db_session)
        await UserFactory.create(db_session, agency, email="gone@test.com", is_active=False)

        with pytest.raises(HTTPException) as exc_info:
            await auth_service.authenticate(db_session, "gone@test.com", "Test123!")

        assert exc_info.value.status_code == 403

    async def test_email_lookup_is_case_insensitive(self, db_session: AsyncSession):
        agency = await AgencyFactory.create(db_session)
        user = await UserFactory.create(db_session, agency, email="mixed@test.com")

        found = await auth_service.authenticate(db_session, "MIXED@test.com", "Test123!")

        assert found.id == user.id


@pytest.mark.integration
class TestLogin:
    async def test_login_records_session_digest(self, db_session: AsyncSession):
        agency = await AgencyFactory.create(db_session)
        user = await UserFactory.create(db_session, agency, email="user@test.com")

        logged_in, token = await auth_service.login(
            db_session, "user@test.com", "Test123!", ip_address="10.0.0.1"
        )

        claims = verify_jwt(token)
        assert claims["userId"] == user.id
        assert claims["agenceId"] == agency.id

        result = await db_session.execute(
            select(UserSession).where(UserSession.user_id == user.id)
        )
        session = result.scalar_one()
        assert session.token_hash == hash_token(token)
        assert session.token_hash != token
        assert session.ip_address == "10.0.0.1"
        assert logged_in.last_login_at is not None


@pytest.mark.integration
class TestVerifyEmail:
    async def test_verifies_and_clears_token(self, db_session: AsyncSession):
        user = await auth_service.signup(db_session, signup_payload())
        token = user.verification_token

        verified = await auth_service.verify_email(db_session, token)

        assert verified.email_verified is True
        assert verified.verification_token is None

        with pytest.raises(HTTPException) as exc_info:
            await auth_service.verify_email(db_session, token)
        assert exc_info.value.status_code == 400

    async def test_link_expires_after_24_hours(self, db_session: AsyncSession):
        agency = await AgencyFactory.create(db_session)
        await UserFactory.create(
            db_session,
            agency,
            email_verified=False,
            verification_token="old-token",
            created_at=utcnow() - timedelta(hours=25),
        )

        with pytest.raises(HTTPException) as exc_info:
            await auth_service.verify_email(db_session, "old-token")

        assert exc_info.value.status_code == 400
        assert "expired" in exc_info.value.detail

        result = await db_session.execute(select(User).where(User.verification_token == "old-token"))
        assert result.scalar_one().email_verified is False
