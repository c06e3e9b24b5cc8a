"""
Factory pattern for creating test data.

Each factory commits and refreshes, so the returned object is usable
after the request under test has run.
"""

from datetime import timedelta
from typing import Any

from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import generate_token, hash_password, hash_token, utcnow
from app.models import (
    Agency,
    CreatorModel,
    SuperAdmin,
    TemporaryAccess,
    User,
    UserSession,
)
from app.models.agency import SubscriptionPlan, SubscriptionStatus
from app.models.user import UserRole

fake = Faker()


async def _save(db: AsyncSession, obj):
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


class AgencyFactory:
    """Factory for creating test agencies."""

    @staticmethod
    async def create(db: AsyncSession, **kwargs: Any) -> Agency:
        """
        Create a test agency.

        Usage:
            agency = await AgencyFactory.create(db, plan=SubscriptionPlan.PREMIUM)
        """
        defaults = {
            "name": fake.company(),
            "plan": SubscriptionPlan.FREE,
            "subscription_status": SubscriptionStatus.ACTIVE,
            "is_demo": False,
        }
        defaults.update(kwargs)
        return await _save(db, Agency(**defaults))


class UserFactory:
    """Factory for creating test users (verified and active by default)."""

    @staticmethod
    async def create(db: AsyncSession, agency: Agency, **kwargs: Any) -> User:
        """
        Create a test user.

        Usage:
            user = await UserFactory.create(db, agency, role=UserRole.OWNER)
        """
        password = kwargs.pop("password", "Test123!")

        defaults = {
            "email": fake.unique.email(),
            "hashed_password": hash_password(password),
            "first_name": fake.first_name(),
            "last_name": fake.last_name(),
            "role": UserRole.MEMBER,
            "is_active": True,
            "email_verified": True,
            "agency_id": agency.id,
        }
        defaults.update(kwargs)
        return await _save(db, User(**defaults))

    @staticmethod
    async def create_batch(
        db: AsyncSession,
        agency: Agency,
        count: int = 3,
        **kwargs: Any,
    ) -> list[User]:
        return [await UserFactory.create(db, agency, **kwargs) for _ in range(count)]


class SessionFactory:
    """Session rows for a raw token, optionally already expired."""

    @staticmethod
    async def create(
        db: AsyncSession,
        user: User,
        token: str | None = None,
        expires_in: timedelta = timedelta(days=7),
    ) -> UserSession:
        session = UserSession(
            user_id=user.id,
            token_hash=hash_token(token or generate_token()),
            expires_at=utcnow() + expires_in,
        )
        return await _save(db, session)


class TemporaryAccessFactory:
    @staticmethod
    async def create(
        db: AsyncSession,
        agency: Agency,
        created_by: str,
        **kwargs: Any,
    ) -> TemporaryAccess:
        defaults = {
            "label": fake.name(),
            "email": None,
            "token": generate_token(),
            "is_active": True,
            "expires_at": utcnow() + timedelta(days=7),
            "agency_id": agency.id,
            "created_by": created_by,
        }
        defaults.update(kwargs)
        return await _save(db, TemporaryAccess(**defaults))


class AdminFactory:
    @staticmethod
    async def create(db: AsyncSession, **kwargs: Any) -> SuperAdmin:
        password = kwargs.pop("password", "Admin123!")

        defaults = {
            "email": fake.unique.email(),
            "hashed_password": hash_password(password),
            "first_name": fake.first_name(),
            "last_name": fake.last_name(),
            "is_active": True,
        }
        defaults.update(kwargs)
        return await _save(db, SuperAdmin(**defaults))


class CreatorModelFactory:
    @staticmethod
    async def create(db: AsyncSession, agency: Agency, **kwargs: Any) -> CreatorModel:
        defaults = {
            "name": fake.first_name(),
            "platform": fake.random_element(["instagram", "tiktok"]),
            "username": fake.user_name(),
            "followers": fake.random_int(min=1_000, max=500_000),
            "engagement": 3.5,
            "agency_id": agency.id,
        }
        defaults.update(kwargs)
        return await _save(db, CreatorModel(**defaults))
