"""
Shared test fixtures for the RestoPOS test suite.

Each test gets a fresh in-memory SQLite store (aiosqlite) injected through
the ``get_session_factory`` dependency.
"""

import os
import sys
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = ""
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CORS_ORIGINS"] = '["*"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from restopos.api.deps import get_session_factory
from restopos.core.security import create_session_token, get_password_hash
from restopos.db.base import Base
from restopos.main import app
from restopos.models.account import Account


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh store with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app and the test store."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ── Helpers ─────────────────────────────────────────────────────────
async def _add_account(
    db: AsyncSession,
    userid: str,
    password: str,
    role: str = "staff",
    name: str | None = None,
    hashed: bool = True,
    created_at: datetime | None = None,
) -> Account:
    """Insert an account row directly; ``hashed=False`` stores a legacy plain-text password."""
    account = Account(
        userid=userid,
        password=get_password_hash(password) if hashed else password,
        role=role,
        name=name,
        created_at=created_at or datetime.now(timezone.utc),
    )
    db.add(account)
    await db.commit()
    await db.refresh(account)
    return account


def _session_headers(account_id: int, userid: str, role: str, name: str | None = None) -> dict[str, str]:
    """Cookie header carrying a valid session for the given identity."""
    token = create_session_token({"sub": str(account_id), "userid": userid, "role": role, "Name": name})
    return {"Cookie": f"pos_user={token}"}


@pytest.fixture
def add_account(db_session):
    async def _add(userid: str, password: str, **kwargs) -> Account:
        return await _add_account(db_session, userid, password, **kwargs)

    return _add


@pytest.fixture
def session_headers():
    return _session_headers


@pytest.fixture
def fetch_account(session_factory):
    """Read an account through a fresh session (sees writes made by the app)."""

    async def _fetch(userid: str) -> Account | None:
        async with session_factory() as session:
            result = await session.execute(select(Account).where(Account.userid == userid))
            return result.scalar_one_or_none()

    return _fetch
