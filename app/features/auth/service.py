"""
Authentication business logic.
"""

import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import bad_request, forbidden, not_found, unauthorized
from app.core.metrics import login_attempts_total
from app.core.security import (
    ensure_aware,
    generate_jwt,
    generate_token,
    hash_password,
    utcnow,
    verify_password,
)
from app.features.auth.schemas import ProfileUpdate, SignupRequest
from app.features.auth.sessions import session_store
from app.models.agency import Agency, SubscriptionPlan, SubscriptionStatus
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Incorrect email or password"


class AuthService:
    """Authentication service with business logic."""

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
        result = await db.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def signup(
        db: AsyncSession,
        data: SignupRequest,
    ) -> User:
        """
        Create an agency and its owner account.

        Both rows are written in one transaction: a failure while
        creating the owner leaves no orphaned agency behind.

        Raises:
            HTTPException: 400 if the email is already registered
        """
        email = data.email.lower()

        if await AuthService.get_user_by_email(db, email):
            raise bad_request("Email already registered")

        agency = Agency(
            name=data.agency_name,
            plan=SubscriptionPlan.FREE,
            subscription_status=SubscriptionStatus.ACTIVE,
        )
        db.add(agency)
        await db.flush()

        user = User(
            email=email,
            hashed_password=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=UserRole.OWNER,
            agency_id=agency.id,
            is_active=True,
            email_verified=False,
            verification_token=generate_token(),
        )
        db.add(user)

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            logger.error(f"Sign-up rolled back for {email}")
            raise

        logger.info(f"Agency created: {agency.name} (ID: {agency.id}), owner {user.email}")
        return user

    @staticmethod
    async def authenticate(
        db: AsyncSession,
        email: str,
        password: str,
    ) -> User:
        """
        Check credentials for an agency user.

        Unknown email and wrong password fail identically.

        Raises:
            HTTPException: 401 bad credentials, 403 unverified or inactive
        """
        user = await AuthService.get_user_by_email(db, email)

        if not user or not verify_password(password, user.hashed_password):
            logger.warning(f"Failed login attempt for: {email}")
            login_attempts_total.labels(plane="tenant", outcome="invalid_credentials").inc()
            raise unauthorized(INVALID_CREDENTIALS)

        if not user.email_verified:
            login_attempts_total.labels(plane="tenant", outcome="unverified").inc()
            raise forbidden({
                "message": "Please verify your email before logging in",
                "needsEmailVerification": True,
            })

        if not user.is_active:
            logger.warning(f"Login attempt for inactive user: {email}")
            login_attempts_total.labels(plane="tenant", outcome="inactive").inc()
            raise forbidden("Account disabled")

        return user

    @staticmethod
    async def login(
        db: AsyncSession,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[User, str]:
        """
        Authenticate, issue a token and record its session.

        Returns:
            (user, token)
        """
        user = await AuthService.authenticate(db, email, password)

        token = generate_jwt(user.id, user.agency_id, UserRole(user.role).value)
        await session_store.create(
            db,
            user_id=user.id,
            token=token,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        user.last_login_at = utcnow()
        await db.commit()

        login_attempts_total.labels(plane="tenant", outcome="success").inc()
        logger.info(f"User logged in: {user.email}")
        return user, token

    @staticmethod
    async def verify_email(db: AsyncSession, token: str) -> User:
        """
        Confirm an email address.

        The link is valid for a limited time after account creation.

        Raises:
            HTTPException: 400 if the token is unknown, used or expired
        """
        result = await db.execute(
            select(User).where(
                User.verification_token == token,
                User.email_verified.is_(False),
            )
        )
        user = result.scalar_one_or_none()

        if not user:
            raise bad_request("Invalid or already used verification link")

        deadline = ensure_aware(user.created_at) + timedelta(
            hours=settings.email_verification_expire_hours
        )
        if utcnow() > deadline:
            raise bad_request("Verification link has expired")

        user.email_verified = True
        user.verification_token = None
        await db.commit()

        logger.info(f"Email verified: {user.email}")
        return user

    @staticmethod
    async def update_profile(
        db: AsyncSession,
        user: User,
        data: ProfileUpdate,
    ) -> User:
        user.first_name = data.first_name
        user.last_name = data.last_name
        await db.commit()
        return user

    @staticmethod
    async def get_agency(db: AsyncSession, agency_id: str) -> Agency:
        result = await db.execute(select(Agency).where(Agency.id == agency_id))
        agency = result.scalar_one_or_none()
        if agency is None:
            raise not_found("Agency not found")
        return agency


def verification_url(token: str) -> str:
    return f"{settings.frontend_url}/verify-email/{token}"


# Singleton instance
auth_service = AuthService()
