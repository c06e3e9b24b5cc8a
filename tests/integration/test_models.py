"""
Integration tests for database models.

Tests ORM behavior, relationships, and database constraints.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.security import utcnow
from app.models import User
from app.models.agency import SubscriptionPlan, SubscriptionStatus
from tests.factories import (
    AgencyFactory,
    CreatorModelFactory,
    TemporaryAccessFactory,
    UserFactory,
)


@pytest.mark.integration
class TestAgencyModel:
    async def test_create_agency(self, db_session):
        agency = await AgencyFactory.create(db_session, name="Test Company")

        assert agency.id is not None
        assert len(agency.id) == 36
        assert agency.name == "Test Company"
        assert agency.is_demo is False
        assert agency.created_at is not None

    @pytest.mark.parametrize(
        "plan,status,expected",
        [
            (SubscriptionPlan.PREMIUM, SubscriptionStatus.ACTIVE, True),
            (SubscriptionPlan.PREMIUM, SubscriptionStatus.EXPIRED, True),
            (SubscriptionPlan.PREMIUM, SubscriptionStatus.SUSPENDED, False),
            (SubscriptionPlan.PREMIUM, SubscriptionStatus.CANCELED, False),
            (SubscriptionPlan.FREE, SubscriptionStatus.ACTIVE, False),
        ],
    )
    async def test_is_premium(self, db_session, plan, status, expected):
        agency = await AgencyFactory.create(db_session, plan=plan, subscription_status=status)

        assert agency.is_premium is expected

    async def test_agency_cascade_delete(self, db_session):
        """Deleting an agency removes its users."""
        agency = await AgencyFactory.create(db_session)
        user = await UserFactory.create(db_session, agency)

        await db_session.delete(agency)
        await db_session.commit()

        result = await db_session.execute(select(User).where(User.id == user.id))
        assert result.scalar_one_or_none() is None


@pytest.mark.integration
class TestUserModel:
    async def test_create_user(self, db_session):
        agency = await AgencyFactory.create(db_session)
        user = await UserFactory.create(
            db_session,
            agency,
            email="test@example.com",
            first_name="Test",
            last_name="User",
        )

        assert user.email == "test@example.com"
        assert user.full_name == "Test User"
        assert user.agency_id == agency.id
        assert user.is_active is True

    async def test_user_email_unique_across_agencies(self, db_session):
        first = await AgencyFactory.create(db_session)
        second = await AgencyFactory.create(db_session)
        await UserFactory.create(db_session, first, email="duplicate@example.com")

        with pytest.raises(IntegrityError):
            await UserFactory.create(db_session, second, email="duplicate@example.com")

        await db_session.rollback()


@pytest.mark.integration
class TestTemporaryAccessModel:
    async def test_open_ended_grant_never_expires(self, db_session):
        agency = await AgencyFactory.create(db_session)
        grant = await TemporaryAccessFactory.create(db_session, agency, "owner-id", expires_at=None)

        assert grant.is_expired() is False
        assert grant.is_usable() is True

    async def test_expired_grant(self, db_session):
        agency = await AgencyFactory.create(db_session)
        grant = await TemporaryAccessFactory.create(
            db_session,
            agency,
            "owner-id",
            expires_at=utcnow() - timedelta(minutes=1),
        )

        assert grant.is_expired() is True
        assert grant.is_usable() is False

    async def test_revoked_grant_is_not_usable(self, db_session):
        agency = await AgencyFactory.create(db_session)
        grant = await TemporaryAccessFactory.create(db_session, agency, "owner-id", is_active=False)

        assert grant.is_expired() is False
        assert grant.is_usable() is False


@pytest.mark.integration
class TestCreatorModel:
    async def test_defaults(self, db_session):
        agency = await AgencyFactory.create(db_session)
        creator = await CreatorModelFactory.create(
            db_session,
            agency,
            name="Luna",
            followers=0,
            engagement=0,
        )

        assert creator.name == "Luna"
        assert creator.average_reach == 0
        assert creator.revenue == 0
        assert creator.agency_id == agency.id
