"""001 – Special leave schema: employees, balances, requests, audit trail.

Enum labels are the lower-case member names SQLAlchemy persists for the
Python enums in leave_backend.common.constants.

Revision ID: 001_special_leave_schema
Revises:
Create Date: 2026-10-18 10:00:00.000000+05:30
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_special_leave_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("gender_type", ["male", "female", "other"]),
    ("marital_status", ["single", "married", "divorced", "widowed"]),
    ("country_code", ["usa", "india"]),
    ("leave_status", ["pending", "approved", "rejected", "cancelled", "revoked"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    labels = ", ".join(f"'{v}'" for v in values)
    op.execute(f"""
        DO $$ BEGIN
            CREATE TYPE {name} AS ENUM ({labels});
        EXCEPTION WHEN duplicate_object THEN NULL;
        END $$
    """)


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# Upgrade
# ---------------------------------------------------------------------------

def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE IF NOT EXISTS employees (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_code   VARCHAR(20) UNIQUE NOT NULL,
            first_name      VARCHAR(100) NOT NULL,
            last_name       VARCHAR(100) NOT NULL,
            email           VARCHAR(255) UNIQUE NOT NULL,
            gender          gender_type,
            marital_status  marital_status,
            country         country_code,
            date_of_joining DATE,
            is_active       BOOLEAN DEFAULT TRUE,
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            updated_at      TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 2. special_leave_balances ─────────────────────────────────────────
    op.execute("""
        CREATE TABLE special_leave_balances (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id       UUID NOT NULL REFERENCES employees(id),
            leave_type        VARCHAR(40) NOT NULL,
            year              INTEGER NOT NULL,
            total_entitlement INTEGER NOT NULL DEFAULT 0,
            used              INTEGER NOT NULL DEFAULT 0,
            available         INTEGER NOT NULL DEFAULT 0,
            carry_forward     INTEGER NOT NULL DEFAULT 0,
            created_at        TIMESTAMPTZ DEFAULT NOW(),
            updated_at        TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_special_leave_balance UNIQUE (employee_id, leave_type, year),
            CONSTRAINT ck_special_leave_balance_used CHECK (used >= 0)
        )
    """)

    # ── 3. special_leave_requests ─────────────────────────────────────────
    op.execute("""
        CREATE TABLE special_leave_requests (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id UUID NOT NULL REFERENCES employees(id),
            leave_type  VARCHAR(40) NOT NULL,
            start_date  DATE NOT NULL,
            end_date    DATE NOT NULL,
            total_days  INTEGER NOT NULL,
            reason      TEXT,
            status      leave_status DEFAULT 'pending',
            created_at  TIMESTAMPTZ DEFAULT NOW(),
            updated_at  TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_leave_request_range CHECK (start_date <= end_date)
        )
    """)
    op.create_index(
        "ix_leave_requests_emp_type_start",
        "special_leave_requests",
        ["employee_id", "leave_type", "start_date"],
    )

    # ── 4. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE IF NOT EXISTS audit_trail (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id    UUID REFERENCES employees(id),
            action      VARCHAR(50) NOT NULL,
            entity_type VARCHAR(50) NOT NULL,
            entity_id   UUID NOT NULL,
            old_values  JSONB,
            new_values  JSONB,
            source      VARCHAR(100),
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.create_index("ix_audit_trail_entity", "audit_trail", ["entity_type", "entity_id"])
    op.create_index("ix_audit_trail_action", "audit_trail", ["action"])


# ---------------------------------------------------------------------------
# Downgrade
# ---------------------------------------------------------------------------

def downgrade() -> None:
    tables = [
        "audit_trail",
        "special_leave_requests",
        "special_leave_balances",
        "employees",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)
