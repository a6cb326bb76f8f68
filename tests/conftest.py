"""Pytest configuration and fixtures for the BoothBoss API test suite.

Provides:
- Test database (SQLite via aiosqlite unless TEST_DATABASE_URL is set) with
  per-test table cleanup
- Mock authentication (JWT bypass) for a customer and an administrator
- Mock Redis (fakeredis)
- Disabled rate limiting
- Uploads redirected to a temporary directory, email previews cleared
- Model factory fixtures for User, EventUrl, Settings, BoothSession
"""

import os
import tempfile
import uuid
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any
from uuid import UUID

import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from boothboss.constants import DEFAULT_SETTINGS
from boothboss.core.auth import get_current_user, get_optional_user
from boothboss.core.config import settings
from boothboss.core.database import get_async_session
from boothboss.core.deps import get_db, get_redis
from boothboss.core.rate_limit import limiter
from boothboss.core.security import hash_password
from boothboss.main import app
from boothboss.models.base import Base
from boothboss.models.booth_session import BoothSession
from boothboss.models.event_url import EventUrl, EventUrlSettings
from boothboss.models.settings import Settings
from boothboss.models.user import User, UserRole
from boothboss.services.email_service import email_preview_store

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
TEST_USER_EMAIL = "owner@example.com"
TEST_USER_PASSWORD = "booth-password-1"
ADMIN_EMAIL = "admin@example.com"

# ---------------------------------------------------------------------------
# Disable rate limiting globally for tests
# ---------------------------------------------------------------------------
limiter.enabled = False

# ---------------------------------------------------------------------------
# Session-scoped engine & table setup
# ---------------------------------------------------------------------------

_test_engine: Any = None
_test_session_factory: Any = None
_TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(tempfile.gettempdir()) / 'boothboss_test.db'}",
)

# Tables to clear after each test (reverse dependency order)
_TABLES_TO_CLEAR = [
    "booth_event_logs",
    "booth_analytics",
    "booth_sessions",
    "journeys",
    "event_url_settings",
    "event_urls",
    "settings",
    "users",
]


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def _create_tables() -> AsyncGenerator[None, None]:
    """Create all tables once per test session.

    The engine is created here (not at module level) so that the connection
    pool is bound to the session-scoped event loop. NullPool avoids
    connection-loop affinity issues with starlette's BaseHTTPMiddleware.
    """
    global _test_engine, _test_session_factory  # noqa: PLW0603
    _test_engine = create_async_engine(
        _TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=NullPool,
    )
    if _test_engine.dialect.name == "sqlite":
        event.listen(_test_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    _test_session_factory = async_sessionmaker(
        _test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await _test_engine.dispose()


# ---------------------------------------------------------------------------
# Per-test database session + cleanup
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(loop_scope="session")
async def db_session(_create_tables: None) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for test setup (factory fixtures).

    Cleanup is handled by the ``_cleanup_tables`` autouse fixture.
    """
    async with _test_session_factory() as session:
        yield session


@pytest_asyncio.fixture(autouse=True, loop_scope="session")
async def _cleanup_tables() -> AsyncGenerator[None, None]:
    """Delete every row after each test to restore a clean state."""
    yield
    if _test_engine is not None:
        async with _test_engine.begin() as conn:
            for table in _TABLES_TO_CLEAR:
                await conn.execute(text(f"DELETE FROM {table}"))


@pytest.fixture(autouse=True)
def _isolate_side_effects(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep uploads in a temp dir and start every test with no email previews."""
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "admin_email", ADMIN_EMAIL)
    email_preview_store.clear_all_emails()


# ---------------------------------------------------------------------------
# Fake Redis
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Provide a fresh fakeredis instance per test."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


# ---------------------------------------------------------------------------
# Accounts & auth mock
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(loop_scope="session")
async def test_user(db_session: AsyncSession) -> User:
    """The booth owner every authenticated request runs as."""
    user = User(
        email=TEST_USER_EMAIL,
        name="Booth Owner",
        username="boothowner",
        password_hash=hash_password(TEST_USER_PASSWORD),
        role=UserRole.CUSTOMER,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture(loop_scope="session")
async def admin_user(db_session: AsyncSession) -> User:
    user = User(
        email=ADMIN_EMAIL,
        name="Admin",
        username="admin",
        password_hash=hash_password(TEST_USER_PASSWORD),
        role=UserRole.ADMIN,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def auth_user(test_user: User) -> dict[str, Any]:
    """Return the default authenticated test user payload (mimics decoded JWT)."""
    return {
        "sub": str(test_user.id),
        "email": test_user.email,
        "role": UserRole.CUSTOMER.value,
        "type": "access",
    }


@pytest.fixture
def admin_auth_user(admin_user: User) -> dict[str, Any]:
    return {
        "sub": str(admin_user.id),
        "email": admin_user.email,
        "role": UserRole.ADMIN.value,
        "type": "access",
    }


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


def _override_dependencies(
    fake_redis: fakeredis.aioredis.FakeRedis,
    user: dict[str, Any] | None,
) -> None:
    async def _override_session() -> AsyncGenerator[AsyncSession, None]:
        async with _test_session_factory() as s:
            yield s

    async def _override_redis() -> AsyncGenerator[fakeredis.aioredis.FakeRedis, None]:
        yield fake_redis

    app.dependency_overrides[get_async_session] = _override_session
    app.dependency_overrides[get_db] = _override_session
    app.dependency_overrides[get_redis] = _override_redis

    if user is not None:

        async def _override_user() -> dict[str, Any]:
            return user

        async def _override_optional_user() -> dict[str, Any] | None:
            return user

        app.dependency_overrides[get_current_user] = _override_user
        app.dependency_overrides[get_optional_user] = _override_optional_user


@pytest_asyncio.fixture(loop_scope="session")
async def client(
    db_session: AsyncSession,  # noqa: ARG001  # Ensures _create_tables runs
    fake_redis: fakeredis.aioredis.FakeRedis,
    auth_user: dict[str, Any],
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client authenticated as the booth owner."""
    _override_dependencies(fake_redis, auth_user)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(loop_scope="session")
async def admin_client(
    db_session: AsyncSession,  # noqa: ARG001  # Ensures _create_tables runs
    fake_redis: fakeredis.aioredis.FakeRedis,
    admin_auth_user: dict[str, Any],
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client authenticated as an administrator."""
    _override_dependencies(fake_redis, admin_auth_user)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(loop_scope="session")
async def unauthed_client(
    db_session: AsyncSession,  # noqa: ARG001  # Ensures _create_tables runs
    fake_redis: fakeredis.aioredis.FakeRedis,
) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated async test client. Auth is NOT overridden."""
    _override_dependencies(fake_redis, None)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(loop_scope="session")
async def plain_client() -> AsyncGenerator[AsyncClient, None]:
    """Minimal async test client with NO dependency overrides."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Model Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def user_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates User instances in the test database."""

    async def _create(
        *,
        email: str | None = None,
        name: str | None = "Another Owner",
        username: str | None = None,
        password: str = TEST_USER_PASSWORD,
        role: UserRole = UserRole.CUSTOMER,
        is_active: bool = True,
    ) -> User:
        suffix = uuid.uuid4().hex[:8]
        user = User(
            email=email or f"owner-{suffix}@example.com",
            name=name,
            username=username,
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create


@pytest.fixture
def event_url_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates EventUrl instances."""

    async def _create(
        *,
        user_id: UUID,
        url_path: str | None = None,
        event_name: str = "Summer Party",
        is_active: bool = True,
    ) -> EventUrl:
        event_url = EventUrl(
            user_id=user_id,
            url_path=url_path or f"party-{uuid.uuid4().hex[:8]}",
            event_name=event_name,
            is_active=is_active,
        )
        db_session.add(event_url)
        await db_session.commit()
        await db_session.refresh(event_url)
        return event_url

    return _create


@pytest.fixture
def settings_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates Settings rows, optionally linked to an event URL."""

    async def _create(
        *,
        user_id: UUID,
        event_url_id: UUID | None = None,
        active: bool = True,
        **overrides: Any,
    ) -> Settings:
        values = {k: v for k, v in DEFAULT_SETTINGS.items() if k != "smtp_password"}
        values.update(overrides)
        row = Settings(user_id=user_id, **values)
        db_session.add(row)
        await db_session.commit()
        await db_session.refresh(row)

        if event_url_id is not None:
            db_session.add(
                EventUrlSettings(event_url_id=event_url_id, settings_id=row.id, active=active)
            )
            await db_session.commit()
        return row

    return _create


@pytest.fixture
def booth_session_factory(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory that creates BoothSession instances."""

    async def _create(
        *,
        user_id: UUID | None,
        event_url_id: UUID | None = None,
        user_name: str = "Guest",
        user_email: str = "guest@example.com",
        photo_path: str = "/uploads/booth/party/photo.jpg",
        media_type: str = "photo",
        event_name: str | None = "Summer Party",
    ) -> BoothSession:
        session = BoothSession(
            user_id=user_id,
            event_url_id=event_url_id,
            user_name=user_name,
            user_email=user_email,
            photo_path=photo_path,
            media_type=media_type,
            event_name=event_name,
        )
        db_session.add(session)
        await db_session.commit()
        await db_session.refresh(session)
        return session

    return _create
