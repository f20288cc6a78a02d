"""
Pytest configuration and fixtures.

WHY: Fixtures provide reusable test setup/teardown logic, reducing
duplication and ensuring consistent test environments.
"""

import os

# Settings are read at import time; JWT_SECRET has no default
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-helpdesk-tests-only")

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from helpdesk.main import app
from helpdesk.models import Base
from helpdesk.db.session import Database, get_db
from tests.factories import UserFactory, auth_headers


# Test database URL
# WHY: Using SQLite for tests eliminates external database dependencies
# and makes tests faster.
TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """
    Create a test database engine.

    WHY: Function scope ensures each test gets a fresh database state.
    StaticPool keeps the single in-memory connection alive for the test.
    """
    engine = create_async_engine(
        TEST_ASYNC_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a test database session.

    WHY: Same session options as the application (no expire on commit,
    no autoflush), rolled back after the test.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db_engine, db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test HTTP client.

    WHY: AsyncClient allows testing FastAPI endpoints without running
    a real server. Requests share the test session, so data created by
    factories is visible to the API and vice versa.
    """

    async def override_get_db():
        """Override database dependency with test session."""
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.state.database = Database(db_engine)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.database = None


@pytest_asyncio.fixture
async def client_user(db_session: AsyncSession):
    """A user with the client role."""
    return await UserFactory.create(
        db_session,
        email="client@example.com",
        full_name="Clara Client",
    )


@pytest_asyncio.fixture
async def other_client(db_session: AsyncSession):
    """A second client, used to check tickets do not leak across owners."""
    return await UserFactory.create(
        db_session,
        email="other.client@example.com",
        full_name="Oscar Other",
    )


@pytest_asyncio.fixture
async def consultant(db_session: AsyncSession):
    """A user with the consultant role."""
    return await UserFactory.create_consultant(
        db_session,
        email="consultant@example.com",
        full_name="Cora Consultant",
    )


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession):
    """A user with the admin role."""
    return await UserFactory.create_admin(
        db_session,
        email="admin@example.com",
        full_name="Ada Admin",
    )


@pytest.fixture
def client_headers(client_user) -> dict:
    return auth_headers(client_user)


@pytest.fixture
def other_client_headers(other_client) -> dict:
    return auth_headers(other_client)


@pytest.fixture
def consultant_headers(consultant) -> dict:
    return auth_headers(consultant)


@pytest.fixture
def admin_headers(admin) -> dict:
    return auth_headers(admin)
