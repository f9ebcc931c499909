"""Absence Pydantic v2 schemas: calendar, direct booking, entitlement summaries."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from holiday_tracker.common.constants import AbsenceType


# ═════════════════════════════════════════════════════════════════════
# Records
# ═════════════════════════════════════════════════════════════════════


class AbsenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: uuid.UUID
    date: dt.date
    type: AbsenceType


class AbsenceToggle(BaseModel):
    """Flip a single calendar cell: remove if present, otherwise add."""

    employee_id: uuid.UUID
    date: dt.date
    type: AbsenceType = AbsenceType.holiday


class AbsenceToggleOut(BaseModel):
    employee_id: uuid.UUID
    date: dt.date
    type: Optional[AbsenceType] = None
    present: bool


class AbsenceBooking(BaseModel):
    """Admin booking of a date range straight onto the calendar."""

    employee_id: uuid.UUID
    type: AbsenceType = AbsenceType.holiday
    start_date: dt.date = Field(..., description="First day (inclusive)")
    end_date: dt.date = Field(..., description="Last day (inclusive)")


class AbsenceBookingOut(BaseModel):
    employee_id: uuid.UUID
    type: AbsenceType
    dates: list[dt.date]
    days_applied: int


# ═════════════════════════════════════════════════════════════════════
# Calendar
# ═════════════════════════════════════════════════════════════════════


class CalendarRow(BaseModel):
    employee_id: uuid.UUID
    name: str
    store: str
    # ISO date → absence code
    days: dict[str, AbsenceType] = Field(default_factory=dict)


class CalendarOut(BaseModel):
    year: int
    rows: list[CalendarRow]


# ═════════════════════════════════════════════════════════════════════
# Entitlement
# ═════════════════════════════════════════════════════════════════════


class EntitlementSummary(BaseModel):
    employee_id: uuid.UUID
    name: str
    store: str
    holiday: int
    sick: int
    personal: int
    entitlement: int
    remaining: int
