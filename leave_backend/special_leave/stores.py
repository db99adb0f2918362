"""Record-store contracts used by the special leave engine, plus SQLAlchemy
implementations of them.

The rule engine only talks to the ``Protocol`` types below, so tests (and any
other backend) can substitute their own stores. The SQL implementations
translate driver failures into ``StoreError``; absence is ``None`` / ``False``,
never an exception.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Optional, Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leave_backend.common.audit import create_audit_entry
from leave_backend.common.constants import LeaveStatus
from leave_backend.common.exceptions import StoreError
from leave_backend.core_hr.models import Employee
from leave_backend.special_leave.models import LeaveBalance, LeaveRequest
from leave_backend.special_leave.schemas import (
    EmployeeProfile,
    LeaveBalanceRecord,
    LeaveRequestRecord,
)

# Employee columns the profile-change path is allowed to write
PROFILE_ATTRIBUTES: frozenset[str] = frozenset({"gender", "marital_status", "country"})

# Builds the balance to persist from the current one (None if absent)
BalanceUpdate = Callable[[Optional[LeaveBalanceRecord]], LeaveBalanceRecord]


# ═════════════════════════════════════════════════════════════════════
# Contracts
# ═════════════════════════════════════════════════════════════════════


class ProfileStore(Protocol):
    """Employee profile lookup and attribute writes."""

    async def get_profile(self, employee_id: uuid.UUID) -> Optional[EmployeeProfile]:
        ...

    async def set_profile_attributes(
        self, employee_id: uuid.UUID, attributes: dict[str, Any],
    ) -> bool:
        """Persist the attributes; ``False`` if the employee does not exist."""
        ...


class BalanceStore(Protocol):
    """One balance per employee × leave type × year."""

    async def get_balance(
        self, employee_id: uuid.UUID, leave_type_id: str, year: int,
    ) -> Optional[LeaveBalanceRecord]:
        ...

    async def modify_balance(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
        year: int,
        update: BalanceUpdate,
    ) -> LeaveBalanceRecord:
        """Read the current balance, pass it to ``update`` and persist the result.

        The read and the write form one unit that is durable once this
        returns; a failure leaves balances of other leave types untouched.
        Exceptions raised by ``update`` propagate unchanged.
        """
        ...


class RequestStore(Protocol):
    """Read access to submitted leave requests."""

    async def count_requests(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
        statuses: Iterable[LeaveStatus],
        year: int,
    ) -> int:
        """Requests of the type whose start date falls in ``year``."""
        ...

    async def find_overlapping(
        self,
        employee_id: uuid.UUID,
        leave_type_ids: Iterable[str],
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> list[LeaveRequestRecord]:
        """Requests of the given types intersecting ``[start_date, end_date]``."""
        ...


class AuditSink(Protocol):
    """Append-only event log."""

    async def record_event(
        self, kind: str, subject_id: uuid.UUID, payload: dict[str, Any],
        *, entity_type: str,
    ) -> None:
        ...


# ═════════════════════════════════════════════════════════════════════
# SQLAlchemy implementations
# ═════════════════════════════════════════════════════════════════════


class SqlProfileStore:
    """Profiles backed by the ``employees`` table."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_profile(self, employee_id: uuid.UUID) -> Optional[EmployeeProfile]:
        try:
            result = await self._db.execute(
                select(Employee).where(
                    Employee.id == employee_id,
                    Employee.is_active.is_(True),
                )
            )
        except SQLAlchemyError as exc:
            raise StoreError("get_profile") from exc

        employee = result.scalars().first()
        if employee is None:
            return None
        return EmployeeProfile(
            id=employee.id,
            gender=employee.gender,
            marital_status=employee.marital_status,
            country=employee.country,
            hire_date=employee.date_of_joining,
        )

    async def set_profile_attributes(
        self, employee_id: uuid.UUID, attributes: dict[str, Any],
    ) -> bool:
        """Write and commit the profile change on its own.

        Allocation refreshes run after this in separate savepoints; a failure
        there must not take the profile write down with it.
        """
        unknown = set(attributes) - PROFILE_ATTRIBUTES
        if unknown:
            raise ValueError(f"Unsupported profile attributes: {sorted(unknown)}")

        try:
            employee = await self._db.get(Employee, employee_id)
            if employee is None or not employee.is_active:
                return False
            for name, value in attributes.items():
                setattr(employee, name, value)
            employee.updated_at = datetime.now(timezone.utc)
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise StoreError("set_profile_attributes") from exc
        return True


class SqlBalanceStore:
    """Balances backed by ``special_leave_balances``."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def _find(
        self, employee_id: uuid.UUID, leave_type_id: str, year: int,
    ) -> Optional[LeaveBalance]:
        result = await self._db.execute(
            select(LeaveBalance).where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.leave_type == leave_type_id,
                LeaveBalance.year == year,
            )
        )
        return result.scalars().first()

    async def get_balance(
        self, employee_id: uuid.UUID, leave_type_id: str, year: int,
    ) -> Optional[LeaveBalanceRecord]:
        try:
            row = await self._find(employee_id, leave_type_id, year)
        except SQLAlchemyError as exc:
            raise StoreError("get_balance") from exc
        return LeaveBalanceRecord.model_validate(row) if row is not None else None

    async def modify_balance(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
        year: int,
        update: BalanceUpdate,
    ) -> LeaveBalanceRecord:
        """Read, update and write one balance inside a SAVEPOINT, then commit.

        A failed statement only rolls back its own savepoint, so the session
        stays usable for the next leave type. The commit persists the row
        before a later failure can roll the request transaction back.
        """
        try:
            async with self._db.begin_nested():
                row = await self._find(employee_id, leave_type_id, year)
                current = LeaveBalanceRecord.model_validate(row) if row is not None else None
                balance = update(current)
                if row is None:
                    row = LeaveBalance(
                        id=uuid.uuid4(),
                        employee_id=balance.employee_id,
                        leave_type=balance.leave_type,
                        year=balance.year,
                    )
                    self._db.add(row)
                row.total_entitlement = balance.total_entitlement
                row.used = balance.used
                row.available = balance.available
                row.carry_forward = balance.carry_forward
                row.updated_at = datetime.now(timezone.utc)
        except SQLAlchemyError as exc:
            raise StoreError("modify_balance") from exc

        try:
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            raise StoreError("modify_balance") from exc
        return LeaveBalanceRecord.model_validate(row)


class SqlRequestStore:
    """Leave requests backed by ``special_leave_requests``."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def count_requests(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
        statuses: Iterable[LeaveStatus],
        year: int,
    ) -> int:
        try:
            result = await self._db.execute(
                select(func.count(LeaveRequest.id)).where(
                    LeaveRequest.employee_id == employee_id,
                    LeaveRequest.leave_type == leave_type_id,
                    LeaveRequest.status.in_(list(statuses)),
                    LeaveRequest.start_date >= date(year, 1, 1),
                    LeaveRequest.start_date < date(year + 1, 1, 1),
                )
            )
        except SQLAlchemyError as exc:
            raise StoreError("count_requests") from exc
        return int(result.scalar_one())

    async def find_overlapping(
        self,
        employee_id: uuid.UUID,
        leave_type_ids: Iterable[str],
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> list[LeaveRequestRecord]:
        try:
            result = await self._db.execute(
                select(LeaveRequest)
                .where(
                    LeaveRequest.employee_id == employee_id,
                    LeaveRequest.leave_type.in_(list(leave_type_ids)),
                    LeaveRequest.status.in_(list(statuses)),
                    LeaveRequest.start_date <= end_date,
                    LeaveRequest.end_date >= start_date,
                )
                .order_by(LeaveRequest.start_date)
            )
        except SQLAlchemyError as exc:
            raise StoreError("find_overlapping") from exc
        return [LeaveRequestRecord.model_validate(r) for r in result.scalars().all()]


class SqlAuditSink:
    """Audit events written to ``audit_trail``."""

    def __init__(self, db: AsyncSession, *, source: str = "special-leave-service") -> None:
        self._db = db
        self._source = source

    async def record_event(
        self, kind: str, subject_id: uuid.UUID, payload: dict[str, Any],
        *, entity_type: str,
    ) -> None:
        try:
            await create_audit_entry(
                self._db,
                action=kind,
                entity_type=entity_type,
                entity_id=subject_id,
                actor_id=subject_id,
                new_values=payload,
                source=self._source,
            )
        except SQLAlchemyError as exc:
            raise StoreError("record_event") from exc
