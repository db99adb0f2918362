"""Eligibility evaluation — profile attributes against a leave type's predicates.

Pure computation: the caller supplies the profile (or ``None`` when the lookup
came back empty) and the evaluator never touches a store. Every input yields
an ``EligibilityResult``; nothing here raises for a missing employee or an
unknown leave type.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Optional

from leave_backend.special_leave.catalog import LeaveCatalog, default_catalog
from leave_backend.special_leave.schemas import (
    EligibilityResult,
    EmployeeProfile,
    LeaveTypeDefinition,
)

INVALID_LEAVE_TYPE = "Invalid special leave type"
EMPLOYEE_NOT_FOUND = "Employee not found"
REQUIREMENTS_NOT_MET = "Eligibility requirements not met"

Clock = Callable[[], date]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def service_months(hire_date: date, today: date) -> int:
    """Whole months of service; a started but unfinished month does not count."""
    months = (today.year - hire_date.year) * 12 + (today.month - hire_date.month)
    if today.day < hire_date.day:
        months -= 1
    return months


class EligibilityEvaluator:
    """Decides whether an employee qualifies for a special leave type."""

    def __init__(
        self,
        catalog: LeaveCatalog = default_catalog,
        clock: Clock = utc_today,
    ) -> None:
        self.catalog = catalog
        self._clock = clock

    def today(self) -> date:
        return self._clock()

    def evaluate(
        self,
        profile: Optional[EmployeeProfile],
        leave_type_id: str,
    ) -> EligibilityResult:
        definition = self.catalog.get_leave_type(leave_type_id)
        if definition is None:
            return EligibilityResult.denied(INVALID_LEAVE_TYPE)
        if profile is None:
            return EligibilityResult.denied(EMPLOYEE_NOT_FOUND)

        missing = self.missing_requirements(profile, definition)
        if missing:
            return EligibilityResult.denied(REQUIREMENTS_NOT_MET, missing)
        return EligibilityResult.granted()

    def missing_requirements(
        self,
        profile: EmployeeProfile,
        definition: LeaveTypeDefinition,
    ) -> list[str]:
        """Unmet predicates in fixed order: gender, marital status, country, service."""
        rules = definition.eligibility
        missing: list[str] = []

        if rules.required_gender and profile.gender != rules.required_gender:
            missing.append(f"Gender must be {rules.required_gender.value}")

        if (
            rules.required_marital_status
            and profile.marital_status != rules.required_marital_status
        ):
            missing.append(
                f"Marital status must be {rules.required_marital_status.value}"
            )

        if rules.required_country and profile.country != rules.required_country:
            missing.append(f"Only available for {rules.required_country.value} employees")

        if rules.minimum_service_months:
            served = (
                service_months(profile.hire_date, self.today())
                if profile.hire_date is not None
                else 0
            )
            if served < rules.minimum_service_months:
                missing.append(
                    f"Minimum {rules.minimum_service_months} months of service required"
                )

        return missing
