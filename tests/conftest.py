"""
Shared test fixtures for the employee management test suite.

Async throughout (aiosqlite + AsyncSession). Each test gets a fresh
in-memory database; the app's DB session, background session factory and
current-user lookup are overridden so requests run against it.
"""

import os
import sys
from typing import AsyncGenerator, Optional

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"

from fastapi import Cookie, Depends, Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import (get_current_user, get_db, get_session_factory,
                             oauth2_scheme)
from app.db.base import Base
from app.db.session import create_tables
from app.main import app
from app.models.employee import Employee
from app.models.user import ROLE_ADMIN, ROLE_EMPLOYEE, User

test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest.fixture
async def setup_db():
    """Create all tables before usage and drop after."""
    await create_tables(test_engine)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # The aiosqlite connection belongs to this test's event loop
    await test_engine.dispose()


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


def _override_get_session_factory() -> async_sessionmaker[AsyncSession]:
    return TestingSessionLocal


# ── Auth override ───────────────────────────────────────────────────
class _Caller:
    """Who the app believes is calling. ``None`` means: read the real token."""

    user: Optional[User] = None


caller = _Caller()


async def _override_get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    if caller.user is not None:
        return caller.user
    return await get_current_user(request, token, access_token, db)


app.dependency_overrides[get_db] = _override_get_db
app.dependency_overrides[get_session_factory] = _override_get_session_factory
app.dependency_overrides[get_current_user] = _override_get_current_user


# ── Fixtures ────────────────────────────────────────────────────────
@pytest.fixture
async def async_client(setup_db) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session(setup_db) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def login_as():
    """Make subsequent requests run as the given user."""

    def _login(user: Optional[User]) -> None:
        caller.user = user

    yield _login
    caller.user = None


@pytest.fixture
async def admin(db_session: AsyncSession) -> User:
    user = User(
        email="admin@example.com",
        hashed_password="not-a-real-hash",
        full_name="Admin",
        role=ROLE_ADMIN,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def employee(db_session: AsyncSession) -> Employee:
    emp = Employee(
        name="Jane Doe",
        email="jane@example.com",
        department="Engineering",
        position="Developer",
        is_active=True,
    )
    db_session.add(emp)
    await db_session.commit()
    await db_session.refresh(emp)
    return emp


@pytest.fixture
async def employee_user(db_session: AsyncSession, employee: Employee) -> User:
    user = User(
        email=employee.email,
        hashed_password="not-a-real-hash",
        full_name=employee.name,
        role=ROLE_EMPLOYEE,
        employee_id=employee.id,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user
