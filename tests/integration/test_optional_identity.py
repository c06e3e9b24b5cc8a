"""
Integration tests for the optional identity dependency.

It runs the same session checks as the required variant against the
test database, but a failure only means "anonymous".
"""

import pytest
import pytest_asyncio
from starlette.requests import Request

from app.config import settings
from app.core.security import generate_jwt
from app.features.auth.dependencies import get_optional_identity
from app.features.auth.identity import RegisteredPrincipal
from app.features.auth.sessions import session_store
from app.models.user import UserRole


def make_request(cookies: dict[str, str] | None = None) -> Request:
    cookie_header = "; ".join(f"{name}={value}" for name, value in (cookies or {}).items())
    headers = [(b"cookie", cookie_header.encode())] if cookie_header else []
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


@pytest_asyncio.fixture
async def owner_token(db_session, owner) -> str:
    token = generate_jwt(owner.id, owner.agency_id, UserRole.OWNER.value)
    await session_store.create(db_session, owner.id, token)
    return token


@pytest.mark.integration
class TestOptionalIdentity:
    async def test_no_cookie_is_anonymous(self, db_session):
        request = make_request()

        assert await get_optional_identity(request, db_session) is None
        assert not hasattr(request.state, "identity")

    async def test_revoked_session_is_anonymous(self, db_session, owner_token):
        await session_store.revoke(db_session, owner_token)
        request = make_request({settings.auth_cookie_name: owner_token})

        assert await get_optional_identity(request, db_session) is None
        assert not hasattr(request.state, "identity")

    async def test_garbage_token_is_anonymous(self, db_session):
        request = make_request({settings.auth_cookie_name: "not-a-jwt"})

        assert await get_optional_identity(request, db_session) is None

    async def test_valid_session_gives_principal(self, db_session, owner, owner_token):
        request = make_request({settings.auth_cookie_name: owner_token})

        identity = await get_optional_identity(request, db_session)

        assert isinstance(identity, RegisteredPrincipal)
        assert identity.id == owner.id
        assert identity.tenant_id == owner.agency_id
        assert request.state.identity is identity
