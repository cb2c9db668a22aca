"""Test fixtures — a fresh in-memory database and app per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own in-memory SQLite engine with foreign keys on
   (so ON DELETE CASCADE behaves as on Postgres). StaticPool keeps the
   single connection alive so every session sees the same database.
2. A fresh app is built with create_app() so a test can pick its own
   Settings (e.g. the "soft" user deletion strategy).
3. get_db is overridden to hand out sessions bound to the test engine.

Authentication is NOT mocked: tests register, log in and send real
bearer tokens, because the auth layer is exactly what's under test.
"""

import os

os.environ.setdefault("TASKHUB_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TASKHUB_JWT_SECRET", "test-secret")


import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from helpers import register_and_login  # noqa: E402
from taskhub.config import Settings  # noqa: E402
from taskhub.db.engine import enable_sqlite_foreign_keys, get_db  # noqa: E402
from taskhub.db.models import Base  # noqa: E402
from taskhub.main import create_app  # noqa: E402


@pytest_asyncio.fixture()
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for tests that talk to services directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def app_settings():
    """Settings for the app under test. Override in a module to change them."""
    return Settings()


@pytest_asyncio.fixture()
async def app(app_settings, session_factory):
    app = create_app(app_settings)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def ann(client):
    return await register_and_login(client, "Ann")


@pytest_asyncio.fixture()
async def bob(client):
    return await register_and_login(client, "Bob")
