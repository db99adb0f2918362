"""Shared test fixtures — async DB, client, fixed clock, in-memory stores, factories.

Rule-engine tests run against the in-memory stores below; persistence and API
tests use SQLite + aiosqlite for fast isolated runs without PostgreSQL.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import AsyncGenerator, Iterable, Optional

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leave_backend.common.constants import (
    CountryCode,
    GenderType,
    LeaveStatus,
    MaritalStatus,
)
from leave_backend.common.exceptions import StoreError
from leave_backend.database import Base, get_db
from leave_backend.dependencies import get_special_leave_service
from leave_backend.main import create_app
from leave_backend.special_leave.schemas import (
    EmployeeProfile,
    LeaveBalanceRecord,
    LeaveRequestRecord,
)
from leave_backend.special_leave.service import SpecialLeaveService
from leave_backend.special_leave.stores import (
    BalanceUpdate,
    SqlAuditSink,
    SqlBalanceStore,
    SqlProfileStore,
    SqlRequestStore,
)

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import leave_backend.common.audit  # noqa: F401
import leave_backend.core_hr.models  # noqa: F401
import leave_backend.special_leave.models  # noqa: F401

# ── SQLite compat: compile PG-specific types to TEXT/CHAR ───────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Fixed clock ─────────────────────────────────────────────────────

TODAY = date(2024, 11, 1)
CURRENT_YEAR = TODAY.year


def fixed_today() -> date:
    return TODAY


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
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


async def _override_special_leave_service(
    db: AsyncSession = Depends(get_db),
) -> SpecialLeaveService:
    return SpecialLeaveService.from_session(db, clock=fixed_today)


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB and clock dependencies overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_special_leave_service] = (
        _override_special_leave_service
    )
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

def _make_employee(
    *,
    email: Optional[str] = None,
    first_name: str = "Test",
    last_name: str = "User",
    gender: Optional[GenderType] = GenderType.female,
    marital_status: Optional[MaritalStatus] = MaritalStatus.married,
    country: Optional[CountryCode] = CountryCode.india,
    date_of_joining: Optional[date] = date(2021, 6, 15),
) -> dict:
    code = uuid.uuid4().hex[:6].upper()
    return dict(
        id=uuid.uuid4(),
        employee_code=f"GLF-{code}",
        first_name=first_name,
        last_name=last_name,
        email=email or f"user.{code.lower()}@glf.test",
        gender=gender,
        marital_status=marital_status,
        country=country,
        date_of_joining=date_of_joining,
        is_active=True,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


def _make_profile(
    *,
    gender: Optional[GenderType] = GenderType.female,
    marital_status: Optional[MaritalStatus] = MaritalStatus.married,
    country: Optional[CountryCode] = CountryCode.india,
    hire_date: Optional[date] = date(2021, 6, 15),
) -> EmployeeProfile:
    return EmployeeProfile(
        id=uuid.uuid4(),
        gender=gender,
        marital_status=marital_status,
        country=country,
        hire_date=hire_date,
    )


def _make_request(
    employee_id: uuid.UUID,
    leave_type: str,
    start_date: date,
    end_date: date,
    *,
    status: LeaveStatus = LeaveStatus.approved,
) -> LeaveRequestRecord:
    return LeaveRequestRecord(
        id=uuid.uuid4(),
        employee_id=employee_id,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        total_days=(end_date - start_date).days + 1,
        status=status,
    )


# ── In-memory record stores ─────────────────────────────────────────

class InMemoryProfileStore:
    def __init__(self, *profiles: EmployeeProfile) -> None:
        self.profiles: dict[uuid.UUID, EmployeeProfile] = {p.id: p for p in profiles}
        self.fail_reads = False
        self.writes: list[tuple[uuid.UUID, dict]] = []

    async def get_profile(self, employee_id: uuid.UUID) -> Optional[EmployeeProfile]:
        if self.fail_reads:
            raise StoreError("get_profile")
        return self.profiles.get(employee_id)

    async def set_profile_attributes(self, employee_id: uuid.UUID, attributes: dict) -> bool:
        current = self.profiles.get(employee_id)
        if current is None:
            return False
        self.profiles[employee_id] = current.model_copy(update=attributes)
        self.writes.append((employee_id, dict(attributes)))
        return True


class InMemoryBalanceStore:
    def __init__(self) -> None:
        self.balances: dict[tuple[uuid.UUID, str, int], LeaveBalanceRecord] = {}
        self.fail_on: set[str] = set()
        self.writes: list[str] = []

    def seed(self, balance: LeaveBalanceRecord) -> LeaveBalanceRecord:
        self.balances[(balance.employee_id, balance.leave_type, balance.year)] = balance
        return balance

    async def get_balance(
        self, employee_id: uuid.UUID, leave_type_id: str, year: int,
    ) -> Optional[LeaveBalanceRecord]:
        return self.balances.get((employee_id, leave_type_id, year))

    async def modify_balance(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
        year: int,
        update: BalanceUpdate,
    ) -> LeaveBalanceRecord:
        self.writes.append(leave_type_id)
        if leave_type_id in self.fail_on:
            raise StoreError("modify_balance")
        return self.seed(update(self.balances.get((employee_id, leave_type_id, year))))


class InMemoryRequestStore:
    def __init__(self, *requests: LeaveRequestRecord) -> None:
        self.requests: list[LeaveRequestRecord] = list(requests)

    async def count_requests(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
        statuses: Iterable[LeaveStatus],
        year: int,
    ) -> int:
        wanted = set(statuses)
        return sum(
            1
            for r in self.requests
            if r.employee_id == employee_id
            and r.leave_type == leave_type_id
            and r.status in wanted
            and r.start_date.year == year
        )

    async def find_overlapping(
        self,
        employee_id: uuid.UUID,
        leave_type_ids: Iterable[str],
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> list[LeaveRequestRecord]:
        types, wanted = set(leave_type_ids), set(statuses)
        return [
            r
            for r in self.requests
            if r.employee_id == employee_id
            and r.leave_type in types
            and r.status in wanted
            and r.start_date <= end_date
            and r.end_date >= start_date
        ]


class InMemoryAuditSink:
    def __init__(self) -> None:
        self.events: list[dict] = []

    async def record_event(
        self, kind: str, subject_id: uuid.UUID, payload: dict, *, entity_type: str,
    ) -> None:
        self.events.append(
            {"kind": kind, "subject_id": subject_id, "payload": payload, "entity_type": entity_type}
        )


class Stores:
    """Bundle of in-memory stores plus a service wired to them."""

    def __init__(self, *profiles: EmployeeProfile) -> None:
        self.profiles = InMemoryProfileStore(*profiles)
        self.balances = InMemoryBalanceStore()
        self.requests = InMemoryRequestStore()
        self.audit = InMemoryAuditSink()

    def add(self, profile: EmployeeProfile) -> EmployeeProfile:
        self.profiles.profiles[profile.id] = profile
        return profile

    def service(self, **kwargs) -> SpecialLeaveService:
        kwargs.setdefault("clock", fixed_today)
        return SpecialLeaveService(
            profiles=self.profiles,
            balances=self.balances,
            requests=self.requests,
            audit=self.audit,
            **kwargs,
        )

    def seed_balance(
        self,
        employee_id: uuid.UUID,
        leave_type: str,
        total: int,
        *,
        used: int = 0,
        year: int = CURRENT_YEAR,
    ) -> LeaveBalanceRecord:
        return self.balances.seed(
            LeaveBalanceRecord(
                employee_id=employee_id,
                leave_type=leave_type,
                year=year,
                total_entitlement=total,
                used=used,
                available=total - used,
            )
        )


@pytest.fixture
def stores() -> Stores:
    return Stores()


# ── SQL stores with injected driver failures ────────────────────────

class FailingSqlBalanceStore(SqlBalanceStore):
    """SQL balance store whose lookups hit a real driver error for chosen types."""

    def __init__(self, db: AsyncSession, *fail_on: str) -> None:
        super().__init__(db)
        self.fail_on = set(fail_on)

    async def _find(self, employee_id, leave_type_id, year):
        if leave_type_id in self.fail_on:
            await self._db.execute(text("SELECT * FROM missing_balance_table"))
        return await super()._find(employee_id, leave_type_id, year)


def _sql_service(db: AsyncSession, *failing_balance_types: str) -> SpecialLeaveService:
    return SpecialLeaveService(
        profiles=SqlProfileStore(db),
        balances=FailingSqlBalanceStore(db, *failing_balance_types),
        requests=SqlRequestStore(db),
        audit=SqlAuditSink(db),
        clock=fixed_today,
    )
