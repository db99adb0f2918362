"""Special leave request validation.

Runs every applicable check and collects all violations, so a caller sees the
full list in one pass. Read-only: nothing here creates requests or touches
balances, and the result is only a point-in-time precondition. A concurrent
approval can still consume the balance after a request validated clean.

Checks, in order:
  1. Eligibility (unknown leave type short-circuits everything else)
  2. Current-year balance covers the requested days
  3. Consecutive-day leave spans exactly ``total_days`` calendar days
  4. Yearly occurrence cap over pending/approved requests
  5. Advance notice, in calendar days
  6. No pending/approved request of a blocked leave type overlaps the range
"""

from __future__ import annotations

import uuid
from datetime import date

from leave_backend.common.constants import ACTIVE_LEAVE_STATUSES
from leave_backend.special_leave.eligibility import (
    INVALID_LEAVE_TYPE,
    EligibilityEvaluator,
)
from leave_backend.special_leave.schemas import LeaveTypeDefinition, ValidationResult
from leave_backend.special_leave.stores import BalanceStore, ProfileStore, RequestStore


class RequestValidator:
    """Validates a prospective special leave request."""

    def __init__(
        self,
        profiles: ProfileStore,
        balances: BalanceStore,
        requests: RequestStore,
        evaluator: EligibilityEvaluator,
    ) -> None:
        self._profiles = profiles
        self._balances = balances
        self._requests = requests
        self._evaluator = evaluator

    async def validate(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
        start_date: date,
        end_date: date,
        total_days: int,
    ) -> ValidationResult:
        definition = self._evaluator.catalog.get_leave_type(leave_type_id)
        if definition is None:
            return ValidationResult.from_errors([INVALID_LEAVE_TYPE])

        today = self._evaluator.today()
        errors: list[str] = []

        profile = await self._profiles.get_profile(employee_id)
        eligibility = self._evaluator.evaluate(profile, leave_type_id)
        if not eligibility.eligible:
            errors.append(f"Not eligible: {eligibility.reason}")
            errors.extend(eligibility.missing_requirements)

        errors.extend(
            await self._check_balance(employee_id, definition, today.year, total_days)
        )
        errors.extend(self._check_consecutive(definition, start_date, end_date, total_days))
        errors.extend(await self._check_yearly_cap(employee_id, definition, today.year))
        errors.extend(self._check_advance_notice(definition, start_date, today))
        errors.extend(
            await self._check_blocked_overlap(employee_id, definition, start_date, end_date)
        )

        return ValidationResult.from_errors(errors)

    # ─────────────────────────────────────────────────────────────────
    # Individual checks
    # ─────────────────────────────────────────────────────────────────

    async def _check_balance(
        self,
        employee_id: uuid.UUID,
        definition: LeaveTypeDefinition,
        year: int,
        total_days: int,
    ) -> list[str]:
        balance = await self._balances.get_balance(employee_id, definition.id, year)
        if balance is None or balance.available < total_days:
            available = balance.available if balance is not None else 0
            return [
                f"Insufficient {definition.name} balance. Available: {available} days"
            ]
        return []

    @staticmethod
    def _check_consecutive(
        definition: LeaveTypeDefinition,
        start_date: date,
        end_date: date,
        total_days: int,
    ) -> list[str]:
        if not definition.allocation.must_be_consecutive or total_days <= 1:
            return []
        span = (end_date - start_date).days + 1
        if span != total_days:
            return [f"{definition.name} must be taken consecutively"]
        return []

    async def _check_yearly_cap(
        self,
        employee_id: uuid.UUID,
        definition: LeaveTypeDefinition,
        year: int,
    ) -> list[str]:
        cap = definition.allocation.max_occurrences_per_year
        if not cap:
            return []
        taken = await self._requests.count_requests(
            employee_id, definition.id, ACTIVE_LEAVE_STATUSES, year,
        )
        if taken >= cap:
            return [f"Maximum {cap} times per year limit reached"]
        return []

    @staticmethod
    def _check_advance_notice(
        definition: LeaveTypeDefinition,
        start_date: date,
        today: date,
    ) -> list[str]:
        notice = definition.restrictions.advance_notice_days
        if notice <= 0:
            return []
        if (start_date - today).days < notice:
            return [f"Minimum {notice} days advance notice required"]
        return []

    async def _check_blocked_overlap(
        self,
        employee_id: uuid.UUID,
        definition: LeaveTypeDefinition,
        start_date: date,
        end_date: date,
    ) -> list[str]:
        blocked = definition.restrictions.blocks_concurrent_leave_types
        if not blocked:
            return []
        overlapping = await self._requests.find_overlapping(
            employee_id, blocked, start_date, end_date, ACTIVE_LEAVE_STATUSES,
        )
        if not overlapping:
            return []
        names = " or ".join(self._evaluator.catalog.display_name(t) for t in blocked)
        return [f"Cannot have {names} during {definition.name.lower()} period"]
