"""Request ledger ORM model: HolidayRequest."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from holiday_tracker.common.constants import AbsenceType, RequestStatus
from holiday_tracker.database import Base

if TYPE_CHECKING:
    from holiday_tracker.staff.models import Employee


class HolidayRequest(Base):
    __tablename__ = "holiday_requests"
    __table_args__ = (
        sa.CheckConstraint("start_date <= end_date", name="ck_request_date_order"),
        sa.Index("ix_holiday_requests_status", "status"),
        sa.Index("ix_holiday_requests_employee", "employee_id"),
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
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[RequestStatus] = mapped_column(
        sa.Enum(
            RequestStatus,
            name="request_status",
            create_type=False,
            validate_strings=True,
        ),
        nullable=False,
        default=RequestStatus.pending,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False,
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    reviewed_by: Mapped[Optional[str]] = mapped_column(sa.String(255))

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="requests")

    def __repr__(self) -> str:
        return (
            f"<HolidayRequest {self.id} {self.start_date}→{self.end_date} "
            f"{self.status.value}>"
        )
