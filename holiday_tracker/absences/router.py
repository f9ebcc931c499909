"""Absence router: calendar data, direct edits, entitlement summaries."""


from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.absences.schemas import (
    AbsenceBooking,
    AbsenceBookingOut,
    AbsenceToggle,
    AbsenceToggleOut,
    CalendarOut,
    EntitlementSummary,
)
from holiday_tracker.absences.service import AbsenceService
from holiday_tracker.auth.dependencies import (
    CurrentUser,
    require_admin,
    require_linked_employee,
)
from holiday_tracker.database import get_db

router = APIRouter(prefix="", tags=["absences"])


# ── GET /calendar ───────────────────────────────────────────────────

@router.get("/calendar", response_model=CalendarOut)
async def get_calendar(
    year: Optional[int] = Query(None, description="Calendar year; defaults to current year"),
    name: Optional[str] = Query(None, description="Case-insensitive name filter"),
    store: Optional[list[str]] = Query(None, description="Repeat to select several stores"),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    target_year = year or datetime.now(timezone.utc).year
    return await AbsenceService.calendar(
        db, target_year, name_filter=name, stores=store,
    )


# ── POST /toggle ────────────────────────────────────────────────────

@router.post("/toggle", response_model=AbsenceToggleOut)
async def toggle_absence(
    body: AbsenceToggle,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Flip one calendar cell for an employee."""
    return await AbsenceService.toggle_absence(
        db, body.employee_id, body.date, body.type, actor_id=admin.user_id,
    )


# ── POST /book ──────────────────────────────────────────────────────

@router.post("/book", response_model=AbsenceBookingOut, status_code=201)
async def book_absences(
    body: AbsenceBooking,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Book a date range straight onto the calendar, bypassing approval."""
    return await AbsenceService.book_absences(
        db,
        body.employee_id,
        body.type,
        body.start_date,
        body.end_date,
        actor_id=admin.user_id,
    )


# ── GET /summary ────────────────────────────────────────────────────

@router.get("/summary", response_model=list[EntitlementSummary])
async def get_summaries(
    year: Optional[int] = Query(None, description="Only count absences in this year"),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AbsenceService.get_summaries(db, year=year)


@router.get("/summary/me", response_model=EntitlementSummary)
async def get_my_summary(
    year: Optional[int] = Query(None),
    user: CurrentUser = Depends(require_linked_employee),
    db: AsyncSession = Depends(get_db),
):
    return await AbsenceService.get_summary(db, user.employee.id, year=year)
