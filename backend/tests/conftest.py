"""
RICHIEAT Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets its own SQLite database file (aiosqlite) with the
       schema created from the ORM metadata; the app's session factory and
       engine are pointed at it, so requests go through the real
       get_db_session dependency.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── db_engine / session_factory: per-test SQLite database
    ├── db_session: an AsyncSession for calling services directly
    ├── app: a freshly built FastAPI app (fresh middleware state)
    ├── test_client: HTTPX AsyncClient bound to `app`
    ├── advisor_token: a registered advisor's bearer token
    └── auth_headers: Authorization header carrying that token
"""

import os
import tempfile

# Settings are read at import time, so the environment goes first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="richieat_test_"), "import.db"
)
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-secret-for-the-suite-only"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CORS_ORIGINS"] = "http://localhost:5173,http://localhost:3000"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from richieat import database  # noqa: E402
from richieat.database import Base, build_engine  # noqa: E402
from richieat.models import Advisor, Client  # noqa: E402,F401


REGISTRATION = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "password": "s3cret-pass",
    "firmName": "Analytical Advisors",
}


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = advisor
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine(tmp_path, monkeypatch):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'richieat.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(database, "async_session_factory", factory)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return database.async_session_factory


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def app(db_engine):
    from richieat.main import create_app
    return create_app()


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    raise_app_exceptions=False: unhandled errors come back as the 500
    envelope instead of being re-raised into the test.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def registration():
    return dict(REGISTRATION)


@pytest_asyncio.fixture
async def advisor_token(test_client, registration) -> str:
    response = await test_client.post("/api/auth/register", json=registration)
    assert response.status_code == 201, response.text
    return response.json()["token"]


@pytest.fixture
def auth_headers(advisor_token) -> dict:
    return {"Authorization": f"Bearer {advisor_token}"}
