"""Common module — shared enums, exceptions and audit helpers."""

from leave_backend.common.audit import AuditTrail, create_audit_entry
from leave_backend.common.constants import (
    ACTIVE_LEAVE_STATUSES,
    REGULAR_LEAVE_TYPE_NAMES,
    CountryCode,
    GenderType,
    LeaveStatus,
    MaritalStatus,
)
from leave_backend.common.exceptions import (
    AllocationError,
    AppException,
    NotFoundException,
    ProfileCascadeError,
    StoreError,
    ValidationException,
    register_exception_handlers,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "ACTIVE_LEAVE_STATUSES",
    "REGULAR_LEAVE_TYPE_NAMES",
    "CountryCode",
    "GenderType",
    "LeaveStatus",
    "MaritalStatus",
    # Exceptions
    "AllocationError",
    "AppException",
    "NotFoundException",
    "ProfileCascadeError",
    "StoreError",
    "ValidationException",
    "register_exception_handlers",
]
