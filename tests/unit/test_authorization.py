"""
Unit tests for identities and the role gate.
"""

from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from app.features.auth.dependencies import require_role
from app.features.auth.identity import (
    DEMO_FALLBACK_EMAIL,
    EphemeralGrantPrincipal,
    RegisteredPrincipal,
)
from app.models.user import User, UserRole


def make_principal(role: UserRole) -> RegisteredPrincipal:
    user = User(
        id="user-1",
        email="someone@test.com",
        first_name="Some",
        last_name="One",
        role=role,
        agency_id="agency-1",
    )
    return RegisteredPrincipal.from_user(user)


def make_demo(email: str | None = None) -> EphemeralGrantPrincipal:
    grant = SimpleNamespace(id="grant-1", email=email, agency_id="agency-1", label="Prospect")
    return EphemeralGrantPrincipal.from_grant(grant)


@pytest.mark.unit
class TestIdentities:
    def test_registered_principal_from_user(self):
        principal = make_principal(UserRole.OWNER)

        assert principal.id == "user-1"
        assert principal.tenant_id == "agency-1"
        assert principal.role is UserRole.OWNER
        assert principal.is_ephemeral is False

    def test_role_coerced_from_stored_string(self):
        user = User(id="u", email="e@test.com", role="member", agency_id="a")

        assert RegisteredPrincipal.from_user(user).role is UserRole.MEMBER

    def test_ephemeral_principal_from_grant(self):
        demo = make_demo()

        assert demo.id == "demo-grant-1"
        assert demo.grant_id == "grant-1"
        assert demo.tenant_id == "agency-1"
        assert demo.role is UserRole.MEMBER
        assert demo.email == DEMO_FALLBACK_EMAIL
        assert demo.is_ephemeral is True

    def test_ephemeral_principal_keeps_grant_email(self):
        assert make_demo("prospect@test.com").email == "prospect@test.com"


@pytest.mark.unit
class TestRequireRole:
    async def test_allowed_role_passes(self):
        checker = require_role(UserRole.OWNER)
        principal = make_principal(UserRole.OWNER)

        assert await checker(identity=principal) is principal

    async def test_other_role_gets_403_with_details(self):
        checker = require_role(UserRole.OWNER)

        with pytest.raises(HTTPException) as exc_info:
            await checker(identity=make_principal(UserRole.MODEL))

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == {
            "message": "Insufficient permissions",
            "requiredRoles": ["owner"],
            "userRole": "model",
        }

    async def test_required_roles_are_sorted(self):
        checker = require_role(UserRole.OWNER, UserRole.MEMBER)

        with pytest.raises(HTTPException) as exc_info:
            await checker(identity=make_principal(UserRole.MODEL))

        assert exc_info.value.detail["requiredRoles"] == ["member", "owner"]

    async def test_demo_visitor_passes_member_gate(self):
        checker = require_role(UserRole.MEMBER)
        demo = make_demo()

        assert await checker(identity=demo) is demo

    async def test_demo_visitor_refused_when_ephemeral_not_allowed(self):
        checker = require_role(UserRole.MEMBER, allow_ephemeral=False)

        with pytest.raises(HTTPException) as exc_info:
            await checker(identity=make_demo())

        assert exc_info.value.status_code == 403
