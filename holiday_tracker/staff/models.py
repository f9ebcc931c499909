"""Staff directory ORM models: Store, Employee.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations.
Column names match the PostgreSQL schema defined in 001_initial_schema.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from holiday_tracker.common.constants import DEFAULT_ENTITLEMENT_DAYS
from holiday_tracker.database import Base

if TYPE_CHECKING:
    from holiday_tracker.absences.models import AbsenceRecord
    from holiday_tracker.requests.models import HolidayRequest


# ═════════════════════════════════════════════════════════════════════
# Store
# ═════════════════════════════════════════════════════════════════════


class Store(Base):
    """Shop site. Employees of the same store compete for the same cover."""

    __tablename__ = "stores"

    name: Mapped[str] = mapped_column(sa.String(100), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    employees: Mapped[list[Employee]] = relationship(back_populates="store_ref")

    def __repr__(self) -> str:
        return f"<Store {self.name!r}>"


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base):
    """Member of staff with an annual holiday entitlement."""

    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    store: Mapped[str] = mapped_column(
        sa.String(100),
        sa.ForeignKey("stores.name", onupdate="CASCADE"),
        nullable=False,
    )
    entitlement_days: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=DEFAULT_ENTITLEMENT_DAYS,
    )
    # Subject claim of the linked identity-provider account, if any
    user_id: Mapped[Optional[str]] = mapped_column(sa.String(255), unique=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ───────────────────────────────────────────────
    store_ref: Mapped[Store] = relationship(back_populates="employees")
    absences: Mapped[list[AbsenceRecord]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    requests: Mapped[list[HolidayRequest]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Employee {self.name!r} @ {self.store!r}>"
