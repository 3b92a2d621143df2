"""Test fixtures for reportdesk-api."""

import asyncio
import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from reportdesk_api.auth import create_access_token
from reportdesk_api.db import get_db
from reportdesk_api.main import app
from reportdesk_api.models import Base, Organization, User, UserRole
from reportdesk_api.services.passwords import hash_password
from reportdesk_api.services.storage import LocalFileStorage, get_file_storage

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_PASSWORD = "password123"


def get_alembic_config(connection_url: str | None = None) -> Config:
    """Get alembic config for running migrations."""
    base_path = Path(__file__).parent.parent
    alembic_cfg = Config(str(base_path / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(base_path / "migrations"))
    if connection_url:
        alembic_cfg.set_main_option("sqlalchemy.url", connection_url)
    return alembic_cfg


def auth_headers(user: User) -> dict[str, str]:
    """Bearer headers for a user."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


async def create_user(
    session: AsyncSession,
    *,
    email: str,
    role: UserRole = UserRole.USER,
    organization: Organization | None = None,
    password: str = DEFAULT_PASSWORD,
    is_active: bool = True,
) -> User:
    user = User(
        username=email.replace("@", "."),
        email=email,
        password_hash=hash_password(password),
        name=email.split("@")[0].title(),
        role=role,
        organization_id=organization.id if organization else None,
        is_active=is_active,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def async_engine():
    """Create a test database engine with schema initialized.

    For SQLite tests, we use Base.metadata.create_all() since the migrations
    use PostgreSQL enum types. Against PostgreSQL, use the pg_engine fixture.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        # One shared connection, so every session sees the same database
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def async_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(async_engine, expire_on_commit=False)
    async with async_session_maker() as session:
        yield session


@pytest.fixture
def file_storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "uploads", max_bytes=1024 * 1024)


@pytest.fixture
async def client(async_engine, file_storage) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with isolated database and upload directory."""
    async_session_maker = async_sessionmaker(async_engine, expire_on_commit=False)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with async_session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage] = lambda: file_storage

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def org_a(async_session: AsyncSession) -> Organization:
    org = Organization(name="Acme", domain="acme.com", settings={})
    async_session.add(org)
    await async_session.commit()
    await async_session.refresh(org)
    return org


@pytest.fixture
async def org_b(async_session: AsyncSession) -> Organization:
    org = Organization(name="Beta", domain="beta.com", settings={})
    async_session.add(org)
    await async_session.commit()
    await async_session.refresh(org)
    return org


@pytest.fixture
async def superadmin(async_session: AsyncSession) -> User:
    return await create_user(
        async_session, email="root@reportdesk.io", role=UserRole.SUPERADMIN
    )


@pytest.fixture
async def admin_a(async_session: AsyncSession, org_a: Organization) -> User:
    return await create_user(
        async_session, email="admin@acme.com", role=UserRole.ADMIN, organization=org_a
    )


@pytest.fixture
async def user_a(async_session: AsyncSession, org_a: Organization) -> User:
    return await create_user(async_session, email="alice@acme.com", organization=org_a)


@pytest.fixture
async def user_a2(async_session: AsyncSession, org_a: Organization) -> User:
    return await create_user(async_session, email="adam@acme.com", organization=org_a)


@pytest.fixture
async def admin_b(async_session: AsyncSession, org_b: Organization) -> User:
    return await create_user(
        async_session, email="admin@beta.com", role=UserRole.ADMIN, organization=org_b
    )


@pytest.fixture
async def user_b(async_session: AsyncSession, org_b: Organization) -> User:
    return await create_user(async_session, email="bob@beta.com", organization=org_b)


# PostgreSQL test fixtures for integration testing with real migrations


@pytest.fixture
async def pg_engine(request):
    """Create a PostgreSQL test database engine with migrations applied.

    This fixture requires a PostgreSQL database URL to be set via the
    REPORTDESK_API_TEST_DATABASE_URL environment variable.

    Usage:
        REPORTDESK_API_TEST_DATABASE_URL=postgresql+asyncpg://... pytest -m integration
    """
    pg_url = os.environ.get("REPORTDESK_API_TEST_DATABASE_URL")
    if not pg_url:
        pytest.skip("PostgreSQL test database URL not configured")

    engine = create_async_engine(pg_url, echo=False)

    # env.py drives its own event loop, so run alembic off this one
    alembic_cfg = get_alembic_config(pg_url)
    await asyncio.to_thread(command.upgrade, alembic_cfg, "head")

    yield engine

    # Cleanup - downgrade to base
    await asyncio.to_thread(command.downgrade, alembic_cfg, "base")
    await engine.dispose()
