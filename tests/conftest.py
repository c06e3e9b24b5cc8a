"""
Pytest fixtures for all tests.

Provides:
- Test database with automatic cleanup (async SQLite by default)
- HTTP client over the ASGI app
- Agencies, users, admins and logged-in clients
"""

import os

# Settings are read once at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_SECRET_KEY", "test-admin-secret-key")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.core.database import Base, get_db
from app.core.security import create_admin_token, generate_jwt
from app.features.auth.sessions import session_store
from app.main import create_application
from app.models import Agency, SuperAdmin, User
from app.models.user import UserRole
from tests.factories import AdminFactory, AgencyFactory, UserFactory

# PostgreSQL can be used instead: TEST_DATABASE_URL=postgresql+asyncpg://...
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

DEFAULT_PASSWORD = "Test123!"


@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """Fresh schema per test."""
    options = {}
    if TEST_DATABASE_URL.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}

    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **options)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session shared by the test and the app.

    Same options as the application session factory.
    """
    factory = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def app(db_session: AsyncSession):
    """FastAPI application bound to the test database."""
    application = create_application()

    async def override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for testing API endpoints.

    Cookies set by the API persist across requests of one test.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture
async def other_client(app) -> AsyncGenerator[AsyncClient, None]:
    """A second browser, with its own cookie jar."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


# Test data

@pytest_asyncio.fixture
async def agency(db_session: AsyncSession) -> Agency:
    return await AgencyFactory.create(db_session, name="Test Agency")


@pytest_asyncio.fixture
async def other_agency(db_session: AsyncSession) -> Agency:
    return await AgencyFactory.create(db_session, name="Rival Agency")


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession, agency: Agency) -> User:
    return await UserFactory.create(
        db_session,
        agency,
        email="owner@test.com",
        password=DEFAULT_PASSWORD,
        role=UserRole.OWNER,
    )


@pytest_asyncio.fixture
async def member(db_session: AsyncSession, agency: Agency) -> User:
    return await UserFactory.create(
        db_session,
        agency,
        email="member@test.com",
        password=DEFAULT_PASSWORD,
        role=UserRole.MEMBER,
    )


@pytest_asyncio.fixture
async def super_admin(db_session: AsyncSession) -> SuperAdmin:
    return await AdminFactory.create(
        db_session,
        email="root@onlytrack.io",
        password="Admin123!",
    )


async def login_as(db: AsyncSession, client: AsyncClient, user: User) -> str:
    """Open a real session for ``user`` and put its token in the client's jar."""
    token = generate_jwt(user.id, user.agency_id, UserRole(user.role).value)
    await session_store.create(db, user.id, token)
    client.cookies.set(settings.auth_cookie_name, token)
    return token


@pytest_asyncio.fixture
async def owner_client(client: AsyncClient, db_session: AsyncSession, owner: User) -> AsyncClient:
    """HTTP client logged in as the agency owner."""
    await login_as(db_session, client, owner)
    return client


@pytest_asyncio.fixture
async def member_client(client: AsyncClient, db_session: AsyncSession, member: User) -> AsyncClient:
    await login_as(db_session, client, member)
    return client


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, super_admin: SuperAdmin) -> AsyncClient:
    """HTTP client holding an admin-plane cookie."""
    client.cookies.set(
        settings.admin_cookie_name,
        create_admin_token(super_admin.id, super_admin.email),
    )
    return client
