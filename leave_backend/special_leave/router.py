"""Special leave router — catalog, eligibility, allocations, validation, profile cascade.

Thin handlers: every endpoint forwards to ``SpecialLeaveService``. Eligibility
and validation outcomes are returned as 200 bodies; only missing entities,
malformed input and store failures produce problem+json errors.
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from leave_backend.dependencies import get_special_leave_service
from leave_backend.special_leave.schemas import (
    AllocationListOut,
    AllocationSummary,
    EligibilityCheckRequest,
    EligibilityResult,
    InitializeAllocationsRequest,
    LeaveTypeDefinition,
    LeaveTypeListOut,
    MaternityRestrictionRequest,
    ProfileUpdateRequest,
    ValidateLeaveRequest,
    ValidationResult,
)
from leave_backend.special_leave.service import SpecialLeaveService

router = APIRouter(prefix="", tags=["special-leave-types"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=LeaveTypeListOut)
async def list_special_leave_types(
    service: SpecialLeaveService = Depends(get_special_leave_service),
):
    """List the special leave type catalog."""
    leave_types = service.list_leave_types()
    return LeaveTypeListOut(special_leave_types=leave_types, count=len(leave_types))


# ── POST /check-eligibility ─────────────────────────────────────────

@router.post("/check-eligibility", response_model=EligibilityResult)
async def check_eligibility(
    body: EligibilityCheckRequest,
    service: SpecialLeaveService = Depends(get_special_leave_service),
):
    """Check one employee against one special leave type."""
    return await service.check_eligibility(body.employee_id, body.leave_type)


# ── GET /allocations/{employee_id} ──────────────────────────────────

@router.get("/allocations/{employee_id}", response_model=AllocationListOut)
async def get_allocations(
    employee_id: uuid.UUID,
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Defaults to current year"),
    service: SpecialLeaveService = Depends(get_special_leave_service),
):
    """Special leave balances the employee is currently eligible for."""
    target_year = year or service.evaluator.today().year
    allocations = await service.get_allocations(employee_id, target_year)
    return AllocationListOut(
        allocations=allocations, year=target_year, count=len(allocations),
    )


# ── POST /initialize-allocations ────────────────────────────────────

@router.post("/initialize-allocations", response_model=AllocationSummary)
async def initialize_allocations(
    body: InitializeAllocationsRequest,
    service: SpecialLeaveService = Depends(get_special_leave_service),
):
    """Create or refresh special leave balances for an employee and year."""
    return await service.initialize_allocations(body.employee_id, body.year)


# ── POST /validate-request ──────────────────────────────────────────

@router.post("/validate-request", response_model=ValidationResult)
async def validate_request(
    body: ValidateLeaveRequest,
    service: SpecialLeaveService = Depends(get_special_leave_service),
):
    """Validate a prospective special leave request without submitting it."""
    return await service.validate_request(
        body.employee_id,
        body.leave_type,
        body.start_date,
        body.end_date,
        body.total_days,
    )


# ── PUT /update-profile ─────────────────────────────────────────────

@router.put("/update-profile", response_model=AllocationSummary)
async def update_profile(
    body: ProfileUpdateRequest,
    service: SpecialLeaveService = Depends(get_special_leave_service),
):
    """Update eligibility attributes and refresh balances in the same call."""
    return await service.update_profile(body.employee_id, body)


# ── POST /maternity-restrictions ────────────────────────────────────

@router.post("/maternity-restrictions", status_code=204)
async def block_maternity_accruals(
    body: MaternityRestrictionRequest,
    service: SpecialLeaveService = Depends(get_special_leave_service),
):
    """Record a CL/PL accrual block covering a maternity period."""
    await service.process_maternity_leave_restrictions(
        body.employee_id, body.start_date, body.end_date,
    )
    return Response(status_code=204)


# ── GET /{leave_type} ───────────────────────────────────────────────

@router.get("/{leave_type}", response_model=LeaveTypeDefinition)
async def get_special_leave_type(
    leave_type: str,
    service: SpecialLeaveService = Depends(get_special_leave_service),
):
    """Return one catalog entry; 404 when the id is unknown."""
    return service.get_leave_type(leave_type)
