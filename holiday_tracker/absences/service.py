"""Absence service layer: calendar grid, direct admin edits, entitlement summaries.

Direct edits bypass the request workflow (admins recording sickness or booking
on someone's behalf) but obey the same weekday rule.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.absences.schemas import (
    AbsenceBookingOut,
    AbsenceToggleOut,
    CalendarOut,
    CalendarRow,
    EntitlementSummary,
)
from holiday_tracker.absences.summary import summarize
from holiday_tracker.common.audit import create_audit_entry
from holiday_tracker.common.constants import WEEKEND_DAYS, AbsenceType
from holiday_tracker.common.exceptions import EmptyRangeError
from holiday_tracker.repository import TrackerRepository
from holiday_tracker.requests.lifecycle import validate_range, weekday_expansion

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# AbsenceService
# ═════════════════════════════════════════════════════════════════════


class AbsenceService:
    """Async absence operations."""

    # ─────────────────────────────────────────────────────────────────
    # Direct edits
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def toggle_absence(
        db: AsyncSession,
        employee_id: uuid.UUID,
        day: date,
        absence_type: AbsenceType = AbsenceType.holiday,
        *,
        actor_id: Optional[str] = None,
    ) -> AbsenceToggleOut:
        """Remove the record on *day* if there is one, otherwise create it."""
        repo = TrackerRepository(db)
        await repo.get_employee(employee_id)
        if day.weekday() in WEEKEND_DAYS:
            raise EmptyRangeError(day, day)

        existing = await repo.get_absence(employee_id, day)
        if existing is not None:
            old_type = existing.type
            await repo.delete_absence(employee_id, day)
            await create_audit_entry(
                db,
                action="delete",
                entity_type="absence",
                entity_id=f"{employee_id}:{day.isoformat()}",
                actor_id=actor_id,
                old_values={"type": old_type.value},
            )
            return AbsenceToggleOut(employee_id=employee_id, date=day, present=False)

        await repo.upsert_absence(employee_id, day, absence_type)
        await create_audit_entry(
            db,
            action="create",
            entity_type="absence",
            entity_id=f"{employee_id}:{day.isoformat()}",
            actor_id=actor_id,
            new_values={"type": absence_type.value},
        )
        return AbsenceToggleOut(
            employee_id=employee_id, date=day, type=absence_type, present=True,
        )

    @staticmethod
    async def book_absences(
        db: AsyncSession,
        employee_id: uuid.UUID,
        absence_type: AbsenceType,
        start_date: date,
        end_date: date,
        *,
        actor_id: Optional[str] = None,
    ) -> AbsenceBookingOut:
        """Write an absence on every weekday of the range, overwriting existing ones."""
        validate_range(start_date, end_date)
        repo = TrackerRepository(db)
        await repo.get_employee(employee_id)

        dates = weekday_expansion(start_date, end_date)
        if not dates:
            raise EmptyRangeError(start_date, end_date)

        applied = await repo.upsert_absences(employee_id, dates, absence_type)
        await create_audit_entry(
            db,
            action="book",
            entity_type="absence",
            entity_id=employee_id,
            actor_id=actor_id,
            new_values={
                "type": absence_type.value,
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "days": applied,
            },
        )
        logger.info(
            "booked %d %s day(s) for employee %s", applied, absence_type.label, employee_id,
        )
        return AbsenceBookingOut(
            employee_id=employee_id,
            type=absence_type,
            dates=dates,
            days_applied=applied,
        )

    # ─────────────────────────────────────────────────────────────────
    # Calendar
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def calendar(
        db: AsyncSession,
        year: int,
        *,
        name_filter: Optional[str] = None,
        stores: Optional[Iterable[str]] = None,
    ) -> CalendarOut:
        """Employees (by store, then name) with their absences for *year*."""
        repo = TrackerRepository(db)
        employees = await repo.get_employees()

        if name_filter:
            needle = name_filter.lower()
            employees = [e for e in employees if needle in e.name.lower()]
        if stores:
            wanted = set(stores)
            employees = [e for e in employees if e.store in wanted]

        days_by_employee: dict[uuid.UUID, dict[str, AbsenceType]] = {}
        for absence in await repo.get_absences(year=year):
            days_by_employee.setdefault(absence.employee_id, {})[
                absence.date.isoformat()
            ] = absence.type

        rows = [
            CalendarRow(
                employee_id=emp.id,
                name=emp.name,
                store=emp.store,
                days=days_by_employee.get(emp.id, {}),
            )
            for emp in employees
        ]
        return CalendarOut(year=year, rows=rows)

    # ─────────────────────────────────────────────────────────────────
    # Entitlement
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_summaries(
        db: AsyncSession,
        *,
        year: Optional[int] = None,
    ) -> list[EntitlementSummary]:
        repo = TrackerRepository(db)
        employees = await repo.get_employees()
        absences = await repo.get_absences(year=year)
        return [summarize(emp, absences, year=year) for emp in employees]

    @staticmethod
    async def get_summary(
        db: AsyncSession,
        employee_id: uuid.UUID,
        *,
        year: Optional[int] = None,
    ) -> EntitlementSummary:
        repo = TrackerRepository(db)
        employee = await repo.get_employee(employee_id)
        absences = await repo.get_absences(employee_id, year=year)
        return summarize(employee, absences, year=year)
