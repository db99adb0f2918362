"""Special leave Pydantic v2 schemas — catalog definitions, rule results, API bodies.

Naming conventions:
  - *Definition / *Rule         → immutable catalog configuration
  - *Result                     → computed rule-engine outputs (never persisted)
  - *Record                     → rows as exchanged with the record stores
  - *Request                    → request bodies (write)
  - *Out                        → response envelopes (read)
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from leave_backend.common.constants import CountryCode, GenderType, LeaveStatus, MaritalStatus


# ═════════════════════════════════════════════════════════════════════
# Catalog definitions
# ═════════════════════════════════════════════════════════════════════


class EligibilityRequirements(BaseModel):
    """Profile predicates; a field that is set must match, unset fields are ignored."""

    model_config = ConfigDict(frozen=True)

    required_gender: Optional[GenderType] = None
    required_marital_status: Optional[MaritalStatus] = None
    required_country: Optional[CountryCode] = None
    minimum_service_months: Optional[int] = Field(None, ge=1)


class AllocationRule(BaseModel):
    """Yearly entitlement and how it may be consumed."""

    model_config = ConfigDict(frozen=True)

    days: int = Field(..., gt=0)
    must_be_consecutive: bool = False
    max_occurrences_per_year: Optional[int] = Field(None, ge=1)
    allowance_rules: Optional[str] = None


class LeaveRestrictions(BaseModel):
    """Request-time restrictions attached to a leave type."""

    model_config = ConfigDict(frozen=True)

    requires_documentation: bool = False
    no_other_leaves_during: bool = False
    blocks_concurrent_leave_types: tuple[str, ...] = ()
    advance_notice_days: int = Field(0, ge=0)


class LeaveTypeDefinition(BaseModel):
    """One catalog entry, e.g. MATERNITY_LEAVE."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, max_length=40)
    name: str
    description: str = ""
    eligibility: EligibilityRequirements = EligibilityRequirements()
    allocation: AllocationRule
    restrictions: LeaveRestrictions = LeaveRestrictions()


# ═════════════════════════════════════════════════════════════════════
# Employee profile
# ═════════════════════════════════════════════════════════════════════


class EmployeeProfile(BaseModel):
    """Snapshot of the attributes the eligibility predicates read."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    gender: Optional[GenderType] = None
    marital_status: Optional[MaritalStatus] = None
    country: Optional[CountryCode] = None
    hire_date: Optional[date] = None


class ProfileUpdate(BaseModel):
    """Partial profile change; ``None`` means "leave unchanged"."""

    gender: Optional[GenderType] = None
    marital_status: Optional[MaritalStatus] = None
    country: Optional[CountryCode] = None

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


# ═════════════════════════════════════════════════════════════════════
# Store records
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceRecord(BaseModel):
    """Balance row as read from / written to the balance store."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: uuid.UUID
    leave_type: str
    year: int
    total_entitlement: int = Field(..., ge=0)
    used: int = Field(0, ge=0)
    available: int
    carry_forward: int = 0

    @model_validator(mode="after")
    def check_available(self) -> "LeaveBalanceRecord":
        if self.available != self.total_entitlement - self.used:
            raise ValueError("available must equal total_entitlement - used.")
        return self


class LeaveRequestRecord(BaseModel):
    """Existing leave request as seen by the validator."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: str
    start_date: date
    end_date: date
    total_days: int
    status: LeaveStatus


# ═════════════════════════════════════════════════════════════════════
# Rule engine results
# ═════════════════════════════════════════════════════════════════════


class EligibilityResult(BaseModel):
    """Outcome of an eligibility check."""

    eligible: bool
    reason: Optional[str] = None
    missing_requirements: list[str] = Field(default_factory=list)

    @classmethod
    def granted(cls) -> "EligibilityResult":
        return cls(eligible=True)

    @classmethod
    def denied(
        cls, reason: str, missing_requirements: Optional[list[str]] = None,
    ) -> "EligibilityResult":
        return cls(
            eligible=False,
            reason=reason,
            missing_requirements=list(missing_requirements or []),
        )


class ValidationResult(BaseModel):
    """Outcome of a leave request validation; ``errors`` is empty iff valid."""

    valid: bool
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> "ValidationResult":
        distinct = list(dict.fromkeys(errors))
        return cls(valid=not distinct, errors=distinct)


class SpecialLeaveAllocation(BaseModel):
    """Balance view for a leave type the employee is currently eligible for."""

    employee_id: uuid.UUID
    leave_type: str
    year: int
    total_days: int
    used: int
    available: int
    restrictions: list[str] = Field(default_factory=list)


class AllocationSummary(BaseModel):
    """What one ``ensure_allocations`` pass did, per leave type."""

    employee_id: uuid.UUID
    year: int
    initialized: list[str] = Field(default_factory=list)
    skipped: dict[str, str] = Field(
        default_factory=dict, description="leave type → ineligibility reason",
    )


# ═════════════════════════════════════════════════════════════════════
# API request bodies
# ═════════════════════════════════════════════════════════════════════


class EligibilityCheckRequest(BaseModel):
    """Payload for checking one employee against one leave type."""

    employee_id: uuid.UUID
    leave_type: str = Field(..., min_length=1, max_length=40)


class InitializeAllocationsRequest(BaseModel):
    """Payload for (re)initializing an employee's special leave balances."""

    employee_id: uuid.UUID
    year: Optional[int] = Field(
        None, ge=2000, le=2100, description="Target year; defaults to current year",
    )


class ValidateLeaveRequest(BaseModel):
    """Payload for validating a prospective special leave request."""

    employee_id: uuid.UUID
    leave_type: str = Field(..., min_length=1, max_length=40)
    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: date = Field(..., description="Leave end date (inclusive)")
    total_days: int = Field(..., ge=1)

    @model_validator(mode="after")
    def validate_dates(self) -> "ValidateLeaveRequest":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date.")
        return self


class ProfileUpdateRequest(ProfileUpdate):
    """Payload for changing eligibility attributes of an employee."""

    employee_id: uuid.UUID

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True, exclude={"employee_id"})


class MaternityRestrictionRequest(BaseModel):
    """Payload for blocking regular-leave accruals over a maternity period."""

    employee_id: uuid.UUID
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def validate_dates(self) -> "MaternityRestrictionRequest":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date.")
        return self


# ═════════════════════════════════════════════════════════════════════
# API response envelopes
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeListOut(BaseModel):
    special_leave_types: list[LeaveTypeDefinition]
    count: int


class AllocationListOut(BaseModel):
    allocations: list[SpecialLeaveAllocation]
    year: int
    count: int
