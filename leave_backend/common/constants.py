"""Enums and constants for the special leave engine — matching PostgreSQL ENUM types.

Python values are the upper-case wire strings used by the API and in
eligibility messages; the database stores the lower-case member names.
"""

from __future__ import annotations

import enum


# ── Employee profile ────────────────────────────────────────────────

class GenderType(str, enum.Enum):
    male = "MALE"
    female = "FEMALE"
    other = "OTHER"


class MaritalStatus(str, enum.Enum):
    single = "SINGLE"
    married = "MARRIED"
    divorced = "DIVORCED"
    widowed = "WIDOWED"


class CountryCode(str, enum.Enum):
    usa = "USA"
    india = "INDIA"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"
    revoked = "revoked"


# Requests in these states hold days against a balance or a yearly cap
ACTIVE_LEAVE_STATUSES: frozenset[LeaveStatus] = frozenset(
    {LeaveStatus.pending, LeaveStatus.approved}
)

# Regular (non-special) leave types other leave rules may refer to
REGULAR_LEAVE_TYPE_NAMES: dict[str, str] = {
    "CASUAL_LEAVE": "Casual Leave",
    "PRIVILEGE_LEAVE": "Privilege Leave",
    "SICK_LEAVE": "Sick Leave",
    "COMP_OFF": "Compensatory Off",
    "LWP": "Leave Without Pay",
}


# ── Audit ───────────────────────────────────────────────────────────

AUDIT_ACTION_BLOCK_ACCRUALS = "BLOCK_ACCRUALS"
AUDIT_ENTITY_MATERNITY_RESTRICTION = "MATERNITY_LEAVE_RESTRICTION"
