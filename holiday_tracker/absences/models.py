"""Absence ORM model: one row per employee per absent weekday."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from holiday_tracker.common.constants import AbsenceType
from holiday_tracker.database import Base

if TYPE_CHECKING:
    from holiday_tracker.staff.models import Employee


class AbsenceRecord(Base):
    __tablename__ = "absences"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", name="uq_absence_employee_date"),
        sa.Index("ix_absences_date", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    type: Mapped[AbsenceType] = mapped_column(
        sa.Enum(
            AbsenceType,
            name="absence_type",
            create_type=False,
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        onupdate=lambda: dt.datetime.now(dt.timezone.utc),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="absences")

    def __repr__(self) -> str:
        return f"<AbsenceRecord {self.employee_id} {self.date} {self.type.value}>"
