"""
CodeQ Backend - Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite database file (aiosqlite) with the
       full schema, so vote/accept/cascade bookkeeping runs against real
       SQL instead of mocks.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine / session_factory: per-test SQLite database
    ├── db_session: AsyncSession for service-level tests
    ├── make_user: inserts a user, returns AuthedUser(user, headers)
    ├── test_client: HTTPX AsyncClient over a fresh app wired to the test DB
    ├── lenient_client: same, but unhandled errors come back as 500 responses
    └── mock_db_session: AsyncMock session for pure unit tests
"""

import os
import tempfile

# Must run before anything imports codeq.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="codeq_test_"), "settings.db"
)
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from dataclasses import dataclass
from typing import AsyncGenerator, Callable, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import codeq.models  # noqa: F401
from codeq.database import Base, get_db_session
from codeq.models.user import ROLE_USER, User
from codeq.security import create_access_token, hash_password

TEST_PASSWORD = "secret123"


@dataclass
class AuthedUser:
    user: User
    headers: Dict[str, str]

    @property
    def id(self) -> str:
        return str(self.user.id)


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'codeq.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    A session for calling services directly.

    Services only flush, so tests see their writes inside this session
    without committing.
    """
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_user(session_factory) -> Callable:
    """
    Factory inserting a committed user and returning it with auth headers.

    Usage:
        alice = await make_user("alice")
        admin = await make_user("root", role="admin")
        await test_client.post("/api/questions", json=..., headers=alice.headers)
    """

    async def _make(username: str, role: str = ROLE_USER, reputation: int = 0) -> AuthedUser:
        async with session_factory() as session:
            user = User(
                username=username,
                email=f"{username}@example.com",
                password_hash=hash_password(TEST_PASSWORD),
                role=role,
                reputation=reputation,
            )
            session.add(user)
            await session.commit()
        token = create_access_token(user.id, user.role)
        return AuthedUser(user=user, headers={"Authorization": f"Bearer {token}"})

    return _make


@pytest_asyncio.fixture
async def reload_user(session_factory) -> Callable:
    """Fresh copy of a user row, for asserting on reputation/role after requests."""

    async def _reload(user_id) -> User:
        async with session_factory() as session:
            return await session.get(User, user_id)

    return _reload


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

def _app_for(session_factory):
    """
    A fresh app instance whose get_db_session uses the per-test database
    with the same commit/rollback semantics as production.
    """
    from codeq.main import create_app

    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    return app


@pytest_asyncio.fixture
async def test_client(session_factory):
    """HTTPX AsyncClient talking to a fresh app instance over ASGITransport."""
    transport = ASGITransport(app=_app_for(session_factory))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def lenient_client(session_factory):
    """
    Like test_client, but exceptions that reach ServerErrorMiddleware are
    returned as the 500 response instead of being re-raised into the test.
    """
    transport = ASGITransport(app=_app_for(session_factory), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Unit-test helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        mock_db_session.get.return_value = None
        with pytest.raises(NotFoundError):
            await get_or_404(mock_db_session, Question, uuid4(), "question")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session
