"""Pytest configuration and fixtures for backend tests."""

from typing import AsyncGenerator
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import JSON, StaticPool, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fittrack.core.database import Base, get_db
from fittrack.core.security import get_password_hash
from fittrack.main import app as main_app
from fittrack.models import ApiKey, User
from fittrack.services.api_keys import ApiKeyService


# -------------------------------------------------------------------------
# SQLite JSONB Compatibility - Convert JSONB to JSON for SQLite
# -------------------------------------------------------------------------

@event.listens_for(Base.metadata, "before_create")
def _convert_jsonb_to_json(target, connection, **kw):
    """Convert JSONB columns to JSON for SQLite compatibility."""
    if connection.dialect.name == "sqlite":
        for table in target.tables.values():
            for column in table.columns:
                if isinstance(column.type, JSONB):
                    column.type = JSON()


# -------------------------------------------------------------------------
# Database Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
async def async_engine():
    """Create an async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def app(db_session: AsyncSession) -> FastAPI:
    """FastAPI app wired to the test database."""

    async def override_get_db():
        yield db_session

    main_app.dependency_overrides[get_db] = override_get_db
    yield main_app
    main_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# -------------------------------------------------------------------------
# User Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        email="test@example.com",
        password_hash=get_password_hash("testpassword123"),
        display_name="Test User",
        timezone="America/New_York",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second account, for ownership checks."""
    user = User(
        email="other@example.com",
        password_hash=get_password_hash("otherpassword123"),
        display_name="Other User",
        timezone="America/Los_Angeles",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def session_store() -> dict:
    """In-memory stand-in for the Redis session store."""
    return {}


@pytest.fixture
async def auth_client(
    app: FastAPI,
    test_user: User,
    session_store: dict,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client logged in as ``test_user``."""

    async def mock_create_session(user_id: int, user_data: dict) -> str:
        session_id = f"test_session_{user_id}"
        session_store[session_id] = {"user_id": user_id, **user_data}
        return session_id

    async def mock_get_session(session_id: str) -> dict | None:
        return session_store.get(session_id)

    async def mock_delete_session(session_id: str) -> bool:
        return session_store.pop(session_id, None) is not None

    # Patch at the location where it's imported, not where it's defined
    with patch("fittrack.api.v1.endpoints.auth.get_session", mock_get_session), \
            patch("fittrack.api.v1.endpoints.auth.create_session", mock_create_session), \
            patch("fittrack.api.v1.endpoints.auth.delete_session", mock_delete_session):
        session_id = await mock_create_session(
            test_user.id,
            {"email": test_user.email, "display_name": test_user.display_name},
        )

        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies={"session_id": session_id},
        ) as ac:
            yield ac


# -------------------------------------------------------------------------
# API Key Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
async def api_key(db_session: AsyncSession, test_user: User) -> tuple[ApiKey, str]:
    """An active key for ``test_user``: (record, plaintext)."""
    return await ApiKeyService(db_session).issue_key(test_user.id, "Test Key")


@pytest.fixture
def bearer(api_key: tuple[ApiKey, str]) -> dict[str, str]:
    """Authorization header carrying the test key."""
    return {"Authorization": f"Bearer {api_key[1]}"}
