"""Special leave type catalog — fixed, read-only configuration.

Definitions are loaded once at import and exposed through an immutable
``id → definition`` mapping that keeps declaration order. Nothing mutates a
catalog after construction, so one instance is shared by every request.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from leave_backend.common.constants import (
    REGULAR_LEAVE_TYPE_NAMES,
    CountryCode,
    GenderType,
    MaritalStatus,
)
from leave_backend.special_leave.schemas import (
    AllocationRule,
    EligibilityRequirements,
    LeaveRestrictions,
    LeaveTypeDefinition,
)

MATERNITY_LEAVE = "MATERNITY_LEAVE"
PATERNITY_LEAVE = "PATERNITY_LEAVE"
BEREAVEMENT_LEAVE = "BEREAVEMENT_LEAVE"


SPECIAL_LEAVE_TYPES: tuple[LeaveTypeDefinition, ...] = (
    LeaveTypeDefinition(
        id=MATERNITY_LEAVE,
        name="Maternity Leave",
        description="Maternity leave for married females - 180 consecutive days",
        eligibility=EligibilityRequirements(
            required_gender=GenderType.female,
            required_marital_status=MaritalStatus.married,
        ),
        allocation=AllocationRule(
            days=180,
            must_be_consecutive=True,
            max_occurrences_per_year=1,
        ),
        restrictions=LeaveRestrictions(
            requires_documentation=True,
            no_other_leaves_during=True,
            advance_notice_days=30,
            blocks_concurrent_leave_types=("CASUAL_LEAVE", "PRIVILEGE_LEAVE"),
        ),
    ),
    LeaveTypeDefinition(
        id=PATERNITY_LEAVE,
        name="Paternity Leave",
        description="Paternity leave for married males - 5 consecutive days",
        eligibility=EligibilityRequirements(
            required_gender=GenderType.male,
            required_marital_status=MaritalStatus.married,
        ),
        allocation=AllocationRule(
            days=5,
            must_be_consecutive=True,
            max_occurrences_per_year=1,
        ),
        restrictions=LeaveRestrictions(
            requires_documentation=True,
            advance_notice_days=7,
        ),
    ),
    LeaveTypeDefinition(
        id=BEREAVEMENT_LEAVE,
        name="Bereavement Leave",
        description="Bereavement leave for immediate family members - USA specific",
        eligibility=EligibilityRequirements(
            required_country=CountryCode.usa,
        ),
        allocation=AllocationRule(
            days=3,
            must_be_consecutive=False,
            max_occurrences_per_year=3,
            allowance_rules="Per immediate family member death",
        ),
        restrictions=LeaveRestrictions(
            requires_documentation=True,
            advance_notice_days=0,
        ),
    ),
)


class LeaveCatalog(Mapping[str, LeaveTypeDefinition]):
    """Immutable, indexed view over a set of leave type definitions."""

    def __init__(self, definitions: Iterable[LeaveTypeDefinition]) -> None:
        index: dict[str, LeaveTypeDefinition] = {}
        for definition in definitions:
            if definition.id in index:
                raise ValueError(f"Duplicate leave type id '{definition.id}' in catalog.")
            index[definition.id] = definition
        self._index = MappingProxyType(index)

    def __getitem__(self, leave_type_id: str) -> LeaveTypeDefinition:
        return self._index[leave_type_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def get_leave_type(self, leave_type_id: str) -> Optional[LeaveTypeDefinition]:
        return self._index.get(leave_type_id)

    def definitions(self) -> list[LeaveTypeDefinition]:
        """All definitions in declaration order."""
        return list(self._index.values())

    def display_name(self, leave_type_id: str) -> str:
        """Name of a special or regular leave type, falling back to the id."""
        definition = self._index.get(leave_type_id)
        if definition is not None:
            return definition.name
        return REGULAR_LEAVE_TYPE_NAMES.get(leave_type_id, leave_type_id)


def describe_restrictions(definition: LeaveTypeDefinition) -> list[str]:
    """Human-readable restriction list shown next to an allocation."""
    restrictions: list[str] = []
    rules = definition.restrictions

    if rules.requires_documentation:
        restrictions.append("Documentation required")
    if rules.no_other_leaves_during:
        restrictions.append("No other leaves allowed during this period")
    if rules.advance_notice_days > 0:
        restrictions.append(f"{rules.advance_notice_days} days advance notice required")
    if definition.allocation.max_occurrences_per_year:
        restrictions.append(
            f"Maximum {definition.allocation.max_occurrences_per_year} times per year"
        )
    if definition.allocation.must_be_consecutive:
        restrictions.append("Must be taken consecutively")

    return restrictions


default_catalog = LeaveCatalog(SPECIAL_LEAVE_TYPES)
