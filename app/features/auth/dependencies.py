"""
Authentication and authorization dependencies for dependency injection.

The identity resolved here is the single per-request source of truth:
FastAPI caches dependency results, so every dependant of
``get_current_identity`` within one request sees the same value.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.context import set_request_context
from app.core.database import get_db
from app.core.exceptions import AuthenticationError, forbidden, unauthorized
from app.core.metrics import auth_failures_total
from app.features.auth.authenticators import demo_authenticator, tenant_authenticator
from app.features.auth.identity import Identity, RegisteredPrincipal
from app.models.user import UserRole

logger = logging.getLogger(__name__)


def _attach(request: Request, identity: Identity) -> None:
    request.state.identity = identity
    request.state.user_id = identity.id
    request.state.tenant_id = identity.tenant_id
    request.state.plane = "demo" if identity.is_ephemeral else "tenant"
    set_request_context(
        user_id=identity.id,
        tenant_id=identity.tenant_id,
        plane=request.state.plane,
    )


async def get_current_identity(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Identity:
    """
    Resolve the caller's identity or fail with 401.

    A demo cookie is tried first. Any problem with it is ignored and
    resolution falls through to the regular auth_token session check.
    """
    if request.cookies.get(settings.demo_cookie_name):
        try:
            identity = await demo_authenticator.authenticate(request, db)
        except AuthenticationError as e:
            logger.debug(f"Demo token ignored: {e.message}")
        else:
            _attach(request, identity)
            return identity

    try:
        identity = await tenant_authenticator.authenticate(request, db)
    except AuthenticationError as e:
        auth_failures_total.labels(plane="tenant", reason=e.message).inc()
        raise unauthorized(e.message)

    _attach(request, identity)
    return identity


async def get_optional_identity(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RegisteredPrincipal | None:
    """Same session check as get_current_identity, but never fails."""
    try:
        identity = await tenant_authenticator.authenticate(request, db)
    except AuthenticationError:
        return None

    _attach(request, identity)
    return identity


def require_role(*roles: UserRole, allow_ephemeral: bool = True):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/invite")
        async def invite(
            identity: Identity = Depends(require_role(UserRole.OWNER))
        ):
            ...

    No identity yields 401 (raised by get_current_identity). A role
    outside ``roles`` yields 403 with the required roles and the
    caller's role. ``allow_ephemeral=False`` also refuses demo visitors.
    """
    allowed = set(roles)

    async def role_checker(
        identity: Annotated[Identity, Depends(get_current_identity)],
    ) -> Identity:
        if not allow_ephemeral and identity.is_ephemeral:
            raise forbidden("Not available in demo mode")

        if allowed and identity.role not in allowed:
            raise forbidden({
                "message": "Insufficient permissions",
                "requiredRoles": sorted(role.value for role in allowed),
                "userRole": identity.role.value,
            })
        return identity

    return role_checker


async def get_registered_principal(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> RegisteredPrincipal:
    """Require a real account (demo visitors are refused)."""
    if identity.is_ephemeral:
        raise forbidden("Not available in demo mode")
    return identity


# Type aliases for cleaner code
CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
OptionalIdentity = Annotated[RegisteredPrincipal | None, Depends(get_optional_identity)]
CurrentPrincipal = Annotated[RegisteredPrincipal, Depends(get_registered_principal)]
OwnerPrincipal = Annotated[
    Identity,
    Depends(require_role(UserRole.OWNER, allow_ephemeral=False)),
]
EditorPrincipal = Annotated[
    Identity,
    Depends(require_role(UserRole.OWNER, UserRole.MEMBER, allow_ephemeral=False)),
]
