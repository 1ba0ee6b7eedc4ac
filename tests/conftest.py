"""Test infrastructure: temporary SQLite DB, session, and httpx client fixtures.

Each test gets a fresh file-backed aiosqlite database with the schema
created from the ORM metadata (partial unique indexes included). Every
API request runs in its own session, as in production, so a failed
request rolls back without touching the setup data. Setup fixtures commit.
"""

from collections.abc import AsyncGenerator
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from shopshift.database import Base, get_db
from shopshift.main import app
from shopshift.models import *  # noqa: F401,F403 (register all models with metadata)
from shopshift.models.shift_template import ShiftTemplate
from shopshift.models.user import User
from shopshift.utils.jwt import create_access_token

ADMIN = "/api/v1/admin"
APP = "/api/v1/app"


# ---------------------------------------------------------------------------
# Engine, sessions, client
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Async engine on a throwaway SQLite file with the schema created."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'shopshift.db'}", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """Session for creating test data directly in the DB."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI test client; each request gets its own session."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helper fixtures: users and templates
# ---------------------------------------------------------------------------
async def _create_user(db: AsyncSession, external_id: str, name: str, **flags) -> User:
    user = User(external_id=external_id, name=name, email=f"{external_id}@shop.test", **flags)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def manager_user(db: AsyncSession) -> User:
    """Staff with worker and manager tags."""
    return await _create_user(db, "manager", "Test Manager", is_staff=True, worker_tag=True, manager_tag=True)


@pytest_asyncio.fixture
async def worker_user(db: AsyncSession) -> User:
    """Staff with the worker tag."""
    return await _create_user(db, "worker", "Test Worker", is_staff=True, worker_tag=True)


@pytest_asyncio.fixture
async def other_worker(db: AsyncSession) -> User:
    return await _create_user(db, "worker2", "Second Worker", is_staff=True, worker_tag=True)


@pytest_asyncio.fixture
async def staff_user(db: AsyncSession) -> User:
    """Staff without any capability tag."""
    return await _create_user(db, "staff", "Plain Staff", is_staff=True)


@pytest_asyncio.fixture
async def template(db: AsyncSession, manager_user: User) -> ShiftTemplate:
    """Active template open 06:00-22:00 every day."""
    t = ShiftTemplate(
        name="Floor",
        type="operational",
        open_time=time(6, 0),
        close_time=time(22, 0),
        hourly_requirements=[
            {"start_time": "06:00", "end_time": "14:00", "min_workers": 1, "optimal_workers": 2},
            {"start_time": "14:00", "end_time": "22:00", "min_workers": 1, "optimal_workers": 2},
        ],
        recurring_days=["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"],
        is_active=True,
        created_by=manager_user.id,
    )
    db.add(t)
    await db.commit()
    await db.refresh(t)
    return t


def make_token(user: User) -> str:
    """Create an identity-provider style access token for a test user."""
    return create_access_token({"sub": user.external_id, "name": user.name, "email": user.email})


@pytest.fixture
def manager_token(manager_user: User) -> str:
    return make_token(manager_user)


@pytest.fixture
def worker_token(worker_user: User) -> str:
    return make_token(worker_user)


@pytest.fixture
def other_worker_token(other_worker: User) -> str:
    return make_token(other_worker)


@pytest.fixture
def staff_token(staff_user: User) -> str:
    return make_token(staff_user)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def days_ahead(days: int) -> str:
    """ISO date `days` after today (UTC, the default shop timezone)."""
    return (datetime.now(timezone.utc).date() + timedelta(days=days)).isoformat()


def utc_today() -> date:
    return datetime.now(timezone.utc).date()
