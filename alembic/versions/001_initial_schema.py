"""001 – Initial schema: stores, employees, absences, holiday requests, roles, audit.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("user_role", ["admin", "staff"]),
    ("absence_type", ["H", "S", "P"]),
    (
        "request_status",
        ["pending", "approved", "rejected", "cancel_pending", "cancelled"],
    ),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. stores ─────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE stores (
            name        VARCHAR(100) PRIMARY KEY,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ── 2. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name              VARCHAR(150) NOT NULL,
            store             VARCHAR(100) NOT NULL
                              REFERENCES stores(name) ON UPDATE CASCADE,
            entitlement_days  INTEGER NOT NULL DEFAULT 28
                              CHECK (entitlement_days BETWEEN 0 AND 99),
            user_id           VARCHAR(255) UNIQUE,
            created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at        TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_employees_store ON employees (store, name)")

    # ── 3. absences ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE absences (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id  UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            date         DATE NOT NULL,
            type         absence_type NOT NULL,
            updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_absence_employee_date UNIQUE (employee_id, date),
            CONSTRAINT ck_absence_weekday CHECK (EXTRACT(ISODOW FROM date) < 6)
        )
    """)
    op.execute("CREATE INDEX ix_absences_date ON absences (date)")

    # ── 4. holiday_requests ───────────────────────────────────────────────
    op.execute("""
        CREATE TABLE holiday_requests (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id  UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            type         absence_type NOT NULL,
            start_date   DATE NOT NULL,
            end_date     DATE NOT NULL,
            status       request_status NOT NULL DEFAULT 'pending',
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            reviewed_at  TIMESTAMPTZ,
            reviewed_by  VARCHAR(255),
            CONSTRAINT ck_request_date_order CHECK (start_date <= end_date)
        )
    """)
    op.execute("CREATE INDEX ix_holiday_requests_status ON holiday_requests (status)")
    op.execute(
        "CREATE INDEX ix_holiday_requests_employee ON holiday_requests (employee_id)"
    )

    # ── 5. role_assignments ───────────────────────────────────────────────
    op.execute("""
        CREATE TABLE role_assignments (
            user_id      VARCHAR(255) PRIMARY KEY,
            role         user_role NOT NULL DEFAULT 'staff',
            assigned_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # ── 6. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id     VARCHAR(255),
            action       VARCHAR(50) NOT NULL,
            entity_type  VARCHAR(50) NOT NULL,
            entity_id    VARCHAR(255) NOT NULL,
            old_values   JSONB,
            new_values   JSONB,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)
    op.execute(
        "CREATE INDEX ix_audit_trail_entity ON audit_trail (entity_type, entity_id)"
    )
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail (created_at)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "audit_trail",
        "role_assignments",
        "holiday_requests",
        "absences",
        "employees",
        "stores",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)
