"""Allocation manager — special leave balances per employee, leave type and year.

Business logic:
  - Eligible leave type without a balance → balance created at full entitlement
  - Eligible leave type with a balance → entitlement refreshed, usage kept
  - Ineligible leave type → nothing written; an earlier balance is left alone
  - Each leave type is read and written as its own committed unit; failures
    are collected and raised together once every type has been attempted,
    so balances written before the error are kept
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from leave_backend.common.exceptions import (
    AllocationError,
    NotFoundException,
    StoreError,
    ValidationException,
)
from leave_backend.special_leave.catalog import describe_restrictions
from leave_backend.special_leave.eligibility import EligibilityEvaluator
from leave_backend.special_leave.schemas import (
    AllocationSummary,
    LeaveBalanceRecord,
    LeaveTypeDefinition,
    SpecialLeaveAllocation,
)
from leave_backend.special_leave.stores import BalanceStore, ProfileStore

logger = logging.getLogger(__name__)


class AllocationManager:
    """Creates and refreshes special leave balances."""

    def __init__(
        self,
        profiles: ProfileStore,
        balances: BalanceStore,
        evaluator: EligibilityEvaluator,
    ) -> None:
        self._profiles = profiles
        self._balances = balances
        self._evaluator = evaluator

    # ─────────────────────────────────────────────────────────────────
    # Initialization
    # ─────────────────────────────────────────────────────────────────

    async def ensure_allocations(
        self,
        employee_id: uuid.UUID,
        year: int,
    ) -> AllocationSummary:
        """Bring every special leave balance for ``year`` in line with the
        employee's current eligibility.

        Raises:
            StoreError: the profile lookup failed (nothing was attempted).
            AllocationError: at least one balance write failed.
        """
        profile = await self._profiles.get_profile(employee_id)
        summary = AllocationSummary(employee_id=employee_id, year=year)
        failed: list[str] = []

        for definition in self._evaluator.catalog.definitions():
            eligibility = self._evaluator.evaluate(profile, definition.id)
            if not eligibility.eligible:
                summary.skipped[definition.id] = eligibility.reason or ""
                logger.info(
                    "Employee %s not eligible for %s: %s",
                    employee_id, definition.id, eligibility.reason,
                )
                continue

            try:
                await self._write_entitlement(employee_id, definition, year)
            except StoreError:
                logger.exception(
                    "Failed to initialize %s for employee %s (year %s)",
                    definition.id, employee_id, year,
                )
                failed.append(definition.id)
                continue

            summary.initialized.append(definition.id)
            logger.info(
                "Initialized %s for employee %s (year %s)",
                definition.id, employee_id, year,
            )

        if failed:
            raise AllocationError(employee_id, failed)
        return summary

    async def _write_entitlement(
        self,
        employee_id: uuid.UUID,
        definition: LeaveTypeDefinition,
        year: int,
    ) -> LeaveBalanceRecord:
        days = definition.allocation.days

        def refresh(existing: Optional[LeaveBalanceRecord]) -> LeaveBalanceRecord:
            if existing is None:
                return LeaveBalanceRecord(
                    employee_id=employee_id,
                    leave_type=definition.id,
                    year=year,
                    total_entitlement=days,
                    used=0,
                    available=days,
                    carry_forward=0,
                )
            return existing.model_copy(
                update={
                    "total_entitlement": days,
                    "available": days - existing.used,
                    "carry_forward": 0,
                }
            )

        return await self._balances.modify_balance(employee_id, definition.id, year, refresh)

    # ─────────────────────────────────────────────────────────────────
    # Usage reported by the approval workflow
    # ─────────────────────────────────────────────────────────────────

    async def record_usage(
        self,
        employee_id: uuid.UUID,
        leave_type_id: str,
        year: int,
        days: int,
    ) -> LeaveBalanceRecord:
        """Apply a usage delta (negative when days are given back)."""
        if self._evaluator.catalog.get_leave_type(leave_type_id) is None:
            raise NotFoundException("LeaveType", leave_type_id)
        if days == 0:
            raise ValidationException({"days": ["Usage change must be non-zero."]})

        def apply(existing: Optional[LeaveBalanceRecord]) -> LeaveBalanceRecord:
            if existing is None:
                raise NotFoundException(
                    "LeaveBalance", f"{employee_id}/{leave_type_id}/{year}",
                )
            used = existing.used + days
            if used < 0:
                raise ValidationException(
                    {"days": [f"Cannot restore more than the {existing.used} days used."]}
                )
            return existing.model_copy(
                update={"used": used, "available": existing.total_entitlement - used}
            )

        return await self._balances.modify_balance(employee_id, leave_type_id, year, apply)

    # ─────────────────────────────────────────────────────────────────
    # Read view
    # ─────────────────────────────────────────────────────────────────

    async def get_allocations(
        self,
        employee_id: uuid.UUID,
        year: int,
    ) -> list[SpecialLeaveAllocation]:
        """Balances for leave types the employee is eligible for right now."""
        profile = await self._profiles.get_profile(employee_id)
        allocations: list[SpecialLeaveAllocation] = []

        for definition in self._evaluator.catalog.definitions():
            if not self._evaluator.evaluate(profile, definition.id).eligible:
                continue
            balance = await self._balances.get_balance(employee_id, definition.id, year)
            if balance is None:
                continue
            allocations.append(
                SpecialLeaveAllocation(
                    employee_id=employee_id,
                    leave_type=definition.id,
                    year=year,
                    total_days=balance.total_entitlement,
                    used=balance.used,
                    available=balance.available,
                    restrictions=describe_restrictions(definition),
                )
            )

        return allocations
