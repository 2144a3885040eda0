"""Shared fixtures for holiday calendar tests.

Uses SQLite (aiosqlite) by default - no PostgreSQL required.
Set TEST_DATABASE_URL to override (e.g. for CI with real PostgreSQL).
"""

import os

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")

# Ensure settings can be loaded without .env
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-unit-tests")

from holiday_calendar.database import Base  # noqa: E402

# ---------------------------------------------------------------------------
# Engine - SQLite in-memory with StaticPool (shared across connections)
# ---------------------------------------------------------------------------

_engine_kwargs = {}
if TEST_DATABASE_URL.startswith("sqlite"):
    _engine_kwargs = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }

_engine = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_kwargs)

if TEST_DATABASE_URL.startswith("sqlite"):
    # pysqlite defers BEGIN until the first DML statement, which turns a
    # SAVEPOINT issued before it into the outer transaction.  Emit BEGIN
    # ourselves so begin_nested() nests inside the per-test transaction.
    @event.listens_for(_engine.sync_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(_engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

_TestSession = async_sessionmaker(
    bind=_engine, class_=AsyncSession, expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Session-scoped: create / drop tables
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(scope="session", autouse=True)
async def _setup_tables():
    import holiday_calendar.models  # noqa: F401 - populate Base.metadata

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await _engine.dispose()


# ---------------------------------------------------------------------------
# Reset rate-limiter counters before every test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_rate_limits():
    """Clear in-memory rate-limit counters so tests never block each other."""
    from holiday_calendar.core.rate_limit import limiter

    storage = getattr(limiter, "_storage", None)
    if storage is not None and hasattr(storage, "reset"):
        storage.reset()


# ---------------------------------------------------------------------------
# No throttling between day-by-day provider requests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _no_request_delay(monkeypatch):
    from holiday_calendar.config import settings

    monkeypatch.setattr(settings, "PROVIDER_DAY_REQUEST_DELAY", 0)


# ---------------------------------------------------------------------------
# Per-test session with rollback
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def db_session():
    async with _TestSession() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# HTTP test client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def client(db_session: AsyncSession):
    from holiday_calendar.database import get_db
    from holiday_calendar.main import app

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Auth headers
# ---------------------------------------------------------------------------

@pytest.fixture()
def admin_headers() -> dict:
    from holiday_calendar.core.security import create_access_token

    token = create_access_token({"sub": "admin", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def employee_headers() -> dict:
    from holiday_calendar.core.security import create_access_token

    token = create_access_token({"sub": "employee", "role": "employee"})
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Provider HTTP fakes
# ---------------------------------------------------------------------------

class ProviderStub:
    """Routes provider requests by host to handler functions and records them."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.host)
        if handler is None:
            return httpx.Response(404, json={"error": "unknown host"})
        return handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture()
def provider_stub():
    """Factory: ``provider_stub({"host": handler})`` -> ProviderStub."""
    return ProviderStub
