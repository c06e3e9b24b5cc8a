"""
Request identities.

An identity is either a registered principal backed by a user row and a
live session, or an ephemeral principal minted from a temporary access
grant. Downstream code branches on ``is_ephemeral`` only where the two
kinds really behave differently.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Union

from app.models.user import User, UserRole

DEMO_FALLBACK_EMAIL = "demo@onlytrack.io"


@dataclass(frozen=True)
class RegisteredPrincipal:
    """Authenticated agency user."""

    id: str
    email: str
    role: UserRole
    tenant_id: str
    user: User = field(repr=False, compare=False)

    is_ephemeral: ClassVar[bool] = False

    @classmethod
    def from_user(cls, user: User) -> "RegisteredPrincipal":
        return cls(
            id=user.id,
            email=user.email,
            role=UserRole(user.role),
            tenant_id=user.agency_id,
            user=user,
        )


@dataclass(frozen=True)
class EphemeralGrantPrincipal:
    """Read-mostly identity derived from a temporary access grant."""

    id: str
    email: str
    tenant_id: str
    grant_id: str
    label: str
    role: UserRole = UserRole.MEMBER

    is_ephemeral: ClassVar[bool] = True

    @classmethod
    def from_grant(cls, grant) -> "EphemeralGrantPrincipal":
        return cls(
            id=f"demo-{grant.id}",
            email=grant.email or DEMO_FALLBACK_EMAIL,
            tenant_id=grant.agency_id,
            grant_id=grant.id,
            label=grant.label,
        )


Identity = Union[RegisteredPrincipal, EphemeralGrantPrincipal]
