"""Special leave service layer — one object wiring catalog, stores and rules.

Built per request from injected stores (``from_session`` for the SQL ones);
it holds no state of its own beyond those references.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from leave_backend.common.constants import (
    AUDIT_ACTION_BLOCK_ACCRUALS,
    AUDIT_ENTITY_MATERNITY_RESTRICTION,
)
from leave_backend.common.exceptions import NotFoundException
from leave_backend.special_leave.allocation import AllocationManager
from leave_backend.special_leave.cascade import ProfileChangeCascade
from leave_backend.special_leave.catalog import (
    MATERNITY_LEAVE,
    LeaveCatalog,
    default_catalog,
)
from leave_backend.special_leave.eligibility import Clock, EligibilityEvaluator, utc_today
from leave_backend.special_leave.schemas import (
    AllocationSummary,
    EligibilityResult,
    LeaveBalanceRecord,
    LeaveTypeDefinition,
    ProfileUpdate,
    SpecialLeaveAllocation,
    ValidationResult,
)
from leave_backend.special_leave.stores import (
    AuditSink,
    BalanceStore,
    ProfileStore,
    RequestStore,
    SqlAuditSink,
    SqlBalanceStore,
    SqlProfileStore,
    SqlRequestStore,
)
from leave_backend.special_leave.validation import RequestValidator

logger = logging.getLogger(__name__)


class SpecialLeaveService:
    """Async special leave operations: catalog, eligibility, allocations,
    request validation, profile cascade and maternity accrual blocks."""

    def __init__(
        self,
        *,
        profiles: ProfileStore,
        balances: BalanceStore,
        requests: RequestStore,
        audit: Optional[AuditSink] = None,
        catalog: LeaveCatalog = default_catalog,
        clock: Clock = utc_today,
    ) -> None:
        self.catalog = catalog
        self.evaluator = EligibilityEvaluator(catalog, clock)
        self.allocations = AllocationManager(profiles, balances, self.evaluator)
        self.validator = RequestValidator(profiles, balances, requests, self.evaluator)
        self.cascade = ProfileChangeCascade(profiles, self.allocations, self.evaluator)
        self._profiles = profiles
        self._audit = audit

    @classmethod
    def from_session(
        cls,
        db: AsyncSession,
        *,
        catalog: LeaveCatalog = default_catalog,
        clock: Clock = utc_today,
    ) -> "SpecialLeaveService":
        return cls(
            profiles=SqlProfileStore(db),
            balances=SqlBalanceStore(db),
            requests=SqlRequestStore(db),
            audit=SqlAuditSink(db),
            catalog=catalog,
            clock=clock,
        )

    def _resolve_year(self, year: Optional[int]) -> int:
        return year if year is not None else self.evaluator.today().year

    # ─────────────────────────────────────────────────────────────────
    # Catalog
    # ─────────────────────────────────────────────────────────────────

    def list_leave_types(self) -> list[LeaveTypeDefinition]:
        return self.catalog.definitions()

    def get_leave_type(self, leave_type_id: str) -> LeaveTypeDefinition:
        definition = self.catalog.get_leave_type(leave_type_id)
        if definition is None:
            raise NotFoundException("SpecialLeaveType", leave_type_id)
        return definition

    # ─────────────────────────────────────────────────────────────────
    # Eligibility / allocations
    # ─────────────────────────────────────────────────────────────────

    async def check_eligibility(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
    ) -> EligibilityResult:
        """Look the profile up and evaluate it; store errors propagate."""
        profile = await self._profiles.get_profile(employee_id)
        return self.evaluator.evaluate(profile, leave_type_id)

    async def initialize_allocations(
        self,
        employee_id: uuid.UUID,
        year: Optional[int] = None,
    ) -> AllocationSummary:
        return await self.allocations.ensure_allocations(
            employee_id, self._resolve_year(year),
        )

    async def get_allocations(
        self,
        employee_id: uuid.UUID,
        year: Optional[int] = None,
    ) -> list[SpecialLeaveAllocation]:
        return await self.allocations.get_allocations(
            employee_id, self._resolve_year(year),
        )

    async def record_usage(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
        days: int,
        year: Optional[int] = None,
    ) -> LeaveBalanceRecord:
        return await self.allocations.record_usage(
            employee_id, leave_type_id, self._resolve_year(year), days,
        )

    # ─────────────────────────────────────────────────────────────────
    # Requests / profile
    # ─────────────────────────────────────────────────────────────────

    async def validate_request(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
        start_date: date,
        end_date: date,
        total_days: int,
    ) -> ValidationResult:
        return await self.validator.validate(
            employee_id, leave_type_id, start_date, end_date, total_days,
        )

    async def update_profile(
        self,
        employee_id: uuid.UUID,
        changes: ProfileUpdate,
    ) -> AllocationSummary:
        return await self.cascade.update_profile(employee_id, changes)

    # ─────────────────────────────────────────────────────────────────
    # Maternity accrual block
    # ─────────────────────────────────────────────────────────────────

    async def process_maternity_leave_restrictions(
        self,
        employee_id: uuid.UUID,
        start_date: date,
        end_date: date,
    ) -> None:
        """Record that regular-leave accruals are blocked over a maternity period.

        Only an audit event is written; balances are left untouched.
        """
        if await self._profiles.get_profile(employee_id) is None:
            raise NotFoundException("Employee", str(employee_id))

        blocked = list(
            self.get_leave_type(MATERNITY_LEAVE).restrictions.blocks_concurrent_leave_types
        )
        logger.info(
            "Blocking %s accruals for employee %s during maternity leave (%s to %s)",
            "/".join(blocked), employee_id, start_date, end_date,
        )
        if self._audit is None:
            return

        await self._audit.record_event(
            AUDIT_ACTION_BLOCK_ACCRUALS,
            employee_id,
            {
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "blocked_leave_types": blocked,
            },
            entity_type=AUDIT_ENTITY_MATERNITY_RESTRICTION,
        )
