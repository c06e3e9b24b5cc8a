"""
Platform administration business logic.

Admins act across all agencies, so nothing here is tenant-scoped.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.cache import cache_manager, cached
from app.core.exceptions import bad_request, not_found, unauthorized
from app.core.metrics import login_attempts_total
from app.core.security import create_admin_token, hash_password, utcnow, verify_password
from app.features.admin.schemas import (
    AdminCreate,
    AdminUpdate,
    AgencyCreate,
    AgencyUpdate,
    UserAdminUpdate,
)
from app.models.admin import SuperAdmin
from app.models.agency import Agency, SubscriptionPlan, SubscriptionStatus
from app.models.user import User

logger = logging.getLogger(__name__)

STATS_NAMESPACE = "admin_stats"


def _changes(data) -> dict:
    """Fields explicitly provided with a value; empty means a 400."""
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if not changes:
        raise bad_request("No changes provided")
    return changes


async def _invalidate_stats() -> None:
    if cache_manager.is_initialized:
        await cache_manager.delete(STATS_NAMESPACE, "global")


class AdminAuthService:
    """Credential checks for super admins."""

    @staticmethod
    async def login(db: AsyncSession, email: str, password: str) -> tuple[SuperAdmin, str]:
        """
        Authenticate a super admin and issue an admin-plane token.

        Raises:
            HTTPException: 401 for unknown email, wrong password or inactive account
        """
        result = await db.execute(
            select(SuperAdmin).where(SuperAdmin.email == email.lower())
        )
        admin = result.scalar_one_or_none()

        if not admin or not verify_password(password, admin.hashed_password):
            logger.warning(f"Failed admin login attempt for: {email}")
            login_attempts_total.labels(plane="admin", outcome="invalid_credentials").inc()
            raise unauthorized("Incorrect email or password")

        if not admin.is_active:
            login_attempts_total.labels(plane="admin", outcome="inactive").inc()
            raise unauthorized("Account disabled")

        admin.last_login_at = utcnow()
        await db.commit()

        login_attempts_total.labels(plane="admin", outcome="success").inc()
        logger.info(f"Admin logged in: {admin.email}")
        return admin, create_admin_token(admin.id, admin.email)


class AdminService:
    """Cross-tenant management operations."""

    # Agencies

    @staticmethod
    async def list_agencies(db: AsyncSession) -> list[Agency]:
        result = await db.execute(select(Agency).order_by(Agency.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_agency(db: AsyncSession, agency_id: str) -> Agency:
        result = await db.execute(select(Agency).where(Agency.id == agency_id))
        agency = result.scalar_one_or_none()
        if agency is None:
            raise not_found("Agency not found")
        return agency

    @staticmethod
    async def create_agency(db: AsyncSession, data: AgencyCreate) -> Agency:
        agency = Agency(
            name=data.name,
            plan=data.plan,
            subscription_status=SubscriptionStatus.ACTIVE,
            is_demo=data.is_demo,
        )
        db.add(agency)
        await db.commit()
        await _invalidate_stats()

        logger.info(f"Agency created by admin: {agency.name} (ID: {agency.id})")
        return agency

    @staticmethod
    async def update_agency(db: AsyncSession, agency_id: str, data: AgencyUpdate) -> Agency:
        changes = _changes(data)
        agency = await AdminService.get_agency(db, agency_id)

        for field, value in changes.items():
            setattr(agency, field, value)
        await db.commit()
        await _invalidate_stats()

        logger.info(f"Agency updated by admin: {agency.id} {list(changes)}")
        return agency

    # Users

    @staticmethod
    async def list_users(db: AsyncSession) -> list[User]:
        result = await db.execute(select(User).order_by(User.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def update_user(db: AsyncSession, user_id: str, data: UserAdminUpdate) -> User:
        changes = _changes(data)

        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise not_found("User not found")

        for field, value in changes.items():
            setattr(user, field, value)
        await db.commit()
        await _invalidate_stats()

        logger.info(f"User updated by admin: {user.id} {list(changes)}")
        return user

    # Admins

    @staticmethod
    async def list_admins(db: AsyncSession) -> list[SuperAdmin]:
        result = await db.execute(select(SuperAdmin).order_by(SuperAdmin.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def create_admin(db: AsyncSession, data: AdminCreate) -> SuperAdmin:
        email = data.email.lower()

        result = await db.execute(select(SuperAdmin).where(SuperAdmin.email == email))
        if result.scalar_one_or_none():
            raise bad_request("Email already in use")

        admin = SuperAdmin(
            email=email,
            hashed_password=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            is_active=True,
        )
        db.add(admin)
        await db.commit()
        await _invalidate_stats()

        logger.info(f"Admin created: {admin.email}")
        return admin

    @staticmethod
    async def update_admin(db: AsyncSession, admin_id: str, data: AdminUpdate) -> SuperAdmin:
        changes = _changes(data)

        result = await db.execute(select(SuperAdmin).where(SuperAdmin.id == admin_id))
        admin = result.scalar_one_or_none()
        if admin is None:
            raise not_found("Admin not found")

        if "is_active" in changes:
            admin.is_active = changes["is_active"]
        if "password" in changes:
            admin.hashed_password = hash_password(changes["password"])
        await db.commit()

        logger.info(f"Admin updated: {admin.id} {list(changes)}")
        return admin

    # Stats

    @staticmethod
    @cached(namespace=STATS_NAMESPACE, ttl=60, key_builder=lambda db: "global")
    async def stats(db: AsyncSession) -> dict:
        """
        Platform headline numbers.

        Demo agencies are excluded from the agency and revenue figures.
        Monthly revenue is the premium agency count times the list price.
        """
        real = Agency.is_demo.is_(False)

        total_agencies = await db.scalar(select(func.count(Agency.id)).where(real))
        premium = await db.scalar(
            select(func.count(Agency.id)).where(real, Agency.plan == SubscriptionPlan.PREMIUM)
        )
        free = await db.scalar(
            select(func.count(Agency.id)).where(real, Agency.plan == SubscriptionPlan.FREE)
        )
        demo = await db.scalar(
            select(func.count(Agency.id)).where(Agency.is_demo.is_(True))
        )
        total_users = await db.scalar(select(func.count(User.id)))
        active_users = await db.scalar(
            select(func.count(User.id)).where(User.is_active.is_(True))
        )
        total_admins = await db.scalar(select(func.count(SuperAdmin.id)))

        return {
            "total_agencies": total_agencies,
            "premium_agencies": premium,
            "free_agencies": free,
            "total_users": total_users,
            "active_users": active_users,
            "total_admins": total_admins,
            "monthly_revenue": premium * settings.premium_monthly_price,
            "demo_agencies": demo,
        }


# Singleton instances
admin_auth_service = AdminAuthService()
admin_service = AdminService()
