"""
Cookie-token authenticators.

Every authentication plane follows the same pipeline:

1. read the bearer token from a named cookie
2. verify signature, expiry and the token type discriminator
3. resolve the claims against the database (session, grant or admin row)

Concrete authenticators only differ in the cookie they read, the
verifier they apply and how claims are resolved into an identity.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, TypeVar

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import AuthenticationError
from app.core.security import (
    verify_admin_token,
    verify_demo_token,
    verify_jwt,
)
from app.features.auth.identity import EphemeralGrantPrincipal, RegisteredPrincipal
from app.features.auth.sessions import session_store
from app.models.admin import SuperAdmin
from app.models.temporary_access import TemporaryAccess
from app.models.user import User

logger = logging.getLogger(__name__)

TOKEN_MISSING = "Token missing"
TOKEN_INVALID = "Invalid token"
SESSION_EXPIRED = "Session expired"
USER_UNAVAILABLE = "Inactive or nonexistent user"
GRANT_UNAVAILABLE = "Access revoked or expired"
ADMIN_UNAVAILABLE = "Inactive or nonexistent administrator"

P = TypeVar("P")


class CookieTokenAuthenticator(ABC, Generic[P]):
    """Generic cookie -> claims -> identity pipeline."""

    plane: str = "tenant"

    def __init__(
        self,
        cookie_name: str,
        verifier: Callable[[str], dict[str, Any] | None],
    ) -> None:
        self.cookie_name = cookie_name
        self.verifier = verifier

    def read_token(self, request: Request) -> str | None:
        return request.cookies.get(self.cookie_name) or None

    async def authenticate(self, request: Request, db: AsyncSession) -> P:
        """
        Run the full pipeline.

        Raises:
            AuthenticationError: on the first failing step
        """
        token = self.read_token(request)
        if not token:
            raise AuthenticationError(TOKEN_MISSING, {"plane": self.plane})

        claims = self.verifier(token)
        if claims is None:
            raise AuthenticationError(TOKEN_INVALID, {"plane": self.plane})

        return await self.resolve(db, token, claims)

    @abstractmethod
    async def resolve(self, db: AsyncSession, token: str, claims: dict[str, Any]) -> P:
        """Turn verified claims into an identity or raise AuthenticationError."""


class TenantAuthenticator(CookieTokenAuthenticator[RegisteredPrincipal]):
    """
    Agency users: auth_token cookie backed by a server-side session.

    JWT expiry and session expiry are independent conditions; deleting
    the session row revokes the token immediately.
    """

    plane = "tenant"

    def __init__(self) -> None:
        super().__init__(settings.auth_cookie_name, verify_jwt)

    async def resolve(
        self,
        db: AsyncSession,
        token: str,
        claims: dict[str, Any],
    ) -> RegisteredPrincipal:
        user_id = claims["userId"]

        if not await session_store.is_valid(db, token, user_id):
            raise AuthenticationError(SESSION_EXPIRED, {"user_id": user_id})

        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()

        if user is None or not user.is_active:
            raise AuthenticationError(USER_UNAVAILABLE, {"user_id": user_id})

        return RegisteredPrincipal.from_user(user)


class DemoAuthenticator(CookieTokenAuthenticator[EphemeralGrantPrincipal]):
    """Visitors holding a demo token minted from a temporary access grant."""

    plane = "demo"

    def __init__(self) -> None:
        super().__init__(settings.demo_cookie_name, verify_demo_token)

    async def resolve(
        self,
        db: AsyncSession,
        token: str,
        claims: dict[str, Any],
    ) -> EphemeralGrantPrincipal:
        grant_id = claims.get("accesId")
        if not grant_id:
            raise AuthenticationError(TOKEN_INVALID, {"plane": self.plane})

        result = await db.execute(
            select(TemporaryAccess).where(TemporaryAccess.id == grant_id)
        )
        grant = result.scalar_one_or_none()

        if grant is None or not grant.is_usable() or grant.agency_id != claims.get("agenceId"):
            raise AuthenticationError(GRANT_UNAVAILABLE, {"grant_id": grant_id})

        return EphemeralGrantPrincipal.from_grant(grant)


class AdminAuthenticator(CookieTokenAuthenticator[SuperAdmin]):
    """Platform operators: admin_token cookie, admin discriminator, admin table."""

    plane = "admin"

    def __init__(self) -> None:
        super().__init__(settings.admin_cookie_name, verify_admin_token)

    async def resolve(
        self,
        db: AsyncSession,
        token: str,
        claims: dict[str, Any],
    ) -> SuperAdmin:
        admin_id = claims.get("id")
        if not admin_id:
            raise AuthenticationError(TOKEN_INVALID, {"plane": self.plane})

        result = await db.execute(select(SuperAdmin).where(SuperAdmin.id == admin_id))
        admin = result.scalar_one_or_none()

        if admin is None or not admin.is_active:
            raise AuthenticationError(ADMIN_UNAVAILABLE, {"admin_id": admin_id})

        return admin


tenant_authenticator = TenantAuthenticator()
demo_authenticator = DemoAuthenticator()
admin_authenticator = AdminAuthenticator()
