"""Profile-change cascade: write eligibility attributes, then refresh balances.

The profile write and the allocation refresh are separate persisted
resources. When the refresh fails after the write succeeded the profile is
kept as written, the inconsistency is logged and ``ProfileCascadeError`` is
raised so an operator can re-run initialization.
"""

from __future__ import annotations

import logging
import uuid

from leave_backend.common.exceptions import (
    AllocationError,
    NotFoundException,
    ProfileCascadeError,
    StoreError,
    ValidationException,
)
from leave_backend.special_leave.allocation import AllocationManager
from leave_backend.special_leave.eligibility import EligibilityEvaluator
from leave_backend.special_leave.schemas import AllocationSummary, ProfileUpdate
from leave_backend.special_leave.stores import ProfileStore

logger = logging.getLogger(__name__)


class ProfileChangeCascade:
    """Entry point for profile mutations that affect special leave eligibility."""

    def __init__(
        self,
        profiles: ProfileStore,
        allocations: AllocationManager,
        evaluator: EligibilityEvaluator,
    ) -> None:
        self._profiles = profiles
        self._allocations = allocations
        self._evaluator = evaluator

    async def update_profile(
        self,
        employee_id: uuid.UUID,
        changes: ProfileUpdate,
    ) -> AllocationSummary:
        attributes = changes.changes()
        if not attributes:
            raise ValidationException(
                {"profile": ["At least one field to update is required."]}
            )

        updated = await self._profiles.set_profile_attributes(employee_id, attributes)
        if not updated:
            raise NotFoundException("Employee", str(employee_id))

        year = self._evaluator.today().year
        try:
            summary = await self._allocations.ensure_allocations(employee_id, year)
        except AllocationError as exc:
            logger.error(
                "Profile of employee %s updated (%s) but allocation refresh failed for %s",
                employee_id, ", ".join(sorted(attributes)), ", ".join(exc.failed_leave_types),
            )
            raise ProfileCascadeError(employee_id, exc.failed_leave_types) from exc
        except StoreError as exc:
            failed = list(self._evaluator.catalog)
            logger.error(
                "Profile of employee %s updated (%s) but allocation refresh could not start: %s",
                employee_id, ", ".join(sorted(attributes)), exc.operation,
            )
            raise ProfileCascadeError(employee_id, failed) from exc

        logger.info(
            "Updated profile and special leave allocations for employee %s",
            employee_id,
        )
        return summary
