"""Shared test fixtures: async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from holiday_tracker.common.constants import AbsenceType, RequestStatus, UserRole
from holiday_tracker.config import settings
from holiday_tracker.database import Base, get_db
from holiday_tracker.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import holiday_tracker.absences.models  # noqa: F401
import holiday_tracker.auth.models  # noqa: F401
import holiday_tracker.common.audit  # noqa: F401
import holiday_tracker.requests.models  # noqa: F401
import holiday_tracker.staff.models  # noqa: F401

from holiday_tracker.absences.models import AbsenceRecord
from holiday_tracker.auth.models import RoleAssignment
from holiday_tracker.requests.models import HolidayRequest
from holiday_tracker.staff.models import Employee, Store

# ── SQLite compat: compile PG-specific types to TEXT/CHAR ───────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() as a SQLite custom function."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )


TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from holiday_tracker.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

async def _seed_store(db: AsyncSession, name: str = "Downtown") -> Store:
    store = Store(name=name)
    db.add(store)
    await db.flush()
    return store


async def _seed_employee(
    db: AsyncSession,
    *,
    name: str = "Alice",
    store: str = "Downtown",
    entitlement_days: int = 28,
    user_id: Optional[str] = None,
) -> Employee:
    emp = Employee(
        id=uuid.uuid4(),
        name=name,
        store=store,
        entitlement_days=entitlement_days,
        user_id=user_id,
    )
    db.add(emp)
    await db.flush()
    return emp


async def _seed_absence(
    db: AsyncSession,
    employee_id: uuid.UUID,
    day: date,
    absence_type: AbsenceType = AbsenceType.holiday,
) -> AbsenceRecord:
    rec = AbsenceRecord(employee_id=employee_id, date=day, type=absence_type)
    db.add(rec)
    await db.flush()
    return rec


async def _seed_request(
    db: AsyncSession,
    employee_id: uuid.UUID,
    start_date: date,
    end_date: date,
    *,
    status: RequestStatus = RequestStatus.pending,
    absence_type: AbsenceType = AbsenceType.holiday,
) -> HolidayRequest:
    req = HolidayRequest(
        id=uuid.uuid4(),
        employee_id=employee_id,
        type=absence_type,
        start_date=start_date,
        end_date=end_date,
        status=status,
        created_at=datetime.now(timezone.utc),
    )
    db.add(req)
    await db.flush()
    return req


async def _seed_role(db: AsyncSession, user_id: str, role: UserRole) -> RoleAssignment:
    assignment = RoleAssignment(user_id=user_id, role=role)
    db.add(assignment)
    await db.flush()
    return assignment


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(user_id: str, expired: bool = False) -> str:
    """Generate an identity-provider style JWT for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {"sub": user_id, "exp": exp}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def bearer(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
async def admin_headers(db) -> dict[str, str]:
    """Headers for an admin identity with no linked employee."""
    await _seed_role(db, "admin-user", UserRole.admin)
    await db.commit()
    return bearer("admin-user")


@pytest.fixture
async def staff_member(db) -> Employee:
    """Employee 'Alice' in Downtown, linked to the 'alice-user' identity."""
    await _seed_store(db, "Downtown")
    emp = await _seed_employee(db, name="Alice", store="Downtown", user_id="alice-user")
    await db.commit()
    return emp


@pytest.fixture
def staff_headers(staff_member) -> dict[str, str]:
    return bearer("alice-user")
