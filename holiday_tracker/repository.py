"""Persistence adapter used by the absence and request services.

Wraps one ``AsyncSession`` (one unit of work). Every method flushes but never
commits; ``get_db`` commits or rolls back the whole request.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from sqlalchemy import delete, extract, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.absences.models import AbsenceRecord
from holiday_tracker.common.constants import AbsenceType, RequestStatus
from holiday_tracker.common.exceptions import NotFoundException, StaleStateError
from holiday_tracker.requests.models import HolidayRequest
from holiday_tracker.staff.models import Employee

logger = logging.getLogger(__name__)


class TrackerRepository:
    """Reads and writes for employees, absence records and holiday requests."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ── Employees ───────────────────────────────────────────────────

    async def get_employees(self, *, store: Optional[str] = None) -> Sequence[Employee]:
        query = select(Employee).order_by(Employee.store, Employee.name)
        if store is not None:
            query = query.where(Employee.store == store)
        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_employee(self, employee_id: uuid.UUID) -> Employee:
        employee = await self.db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    # ── Absences ────────────────────────────────────────────────────

    async def get_absences(
        self,
        employee_id: Optional[uuid.UUID] = None,
        *,
        year: Optional[int] = None,
    ) -> Sequence[AbsenceRecord]:
        query = select(AbsenceRecord).order_by(AbsenceRecord.employee_id, AbsenceRecord.date)
        if employee_id is not None:
            query = query.where(AbsenceRecord.employee_id == employee_id)
        if year is not None:
            query = query.where(extract("year", AbsenceRecord.date) == year)
        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_absence(self, employee_id: uuid.UUID, day: date) -> Optional[AbsenceRecord]:
        result = await self.db.execute(
            select(AbsenceRecord).where(
                AbsenceRecord.employee_id == employee_id,
                AbsenceRecord.date == day,
            )
        )
        return result.scalars().first()

    async def upsert_absences(
        self,
        employee_id: uuid.UUID,
        dates: Iterable[date],
        absence_type: AbsenceType,
    ) -> int:
        """Write *absence_type* on every date; existing records are overwritten."""
        dates = list(dates)
        if not dates:
            return 0

        result = await self.db.execute(
            select(AbsenceRecord).where(
                AbsenceRecord.employee_id == employee_id,
                AbsenceRecord.date.in_(dates),
            )
        )
        existing = {rec.date: rec for rec in result.scalars().all()}

        for day in dates:
            record = existing.get(day)
            if record is None:
                self.db.add(
                    AbsenceRecord(employee_id=employee_id, date=day, type=absence_type)
                )
            else:
                record.type = absence_type

        await self.db.flush()
        return len(dates)

    async def upsert_absence(
        self,
        employee_id: uuid.UUID,
        day: date,
        absence_type: AbsenceType,
    ) -> None:
        await self.upsert_absences(employee_id, [day], absence_type)

    async def delete_absences(self, employee_id: uuid.UUID, dates: Iterable[date]) -> int:
        """Delete records on *dates*; missing ones are skipped. Returns rows removed."""
        dates = list(dates)
        if not dates:
            return 0
        result = await self.db.execute(
            delete(AbsenceRecord)
            .where(
                AbsenceRecord.employee_id == employee_id,
                AbsenceRecord.date.in_(dates),
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def delete_absence(self, employee_id: uuid.UUID, day: date) -> bool:
        return await self.delete_absences(employee_id, [day]) > 0

    # ── Requests ────────────────────────────────────────────────────

    async def get_requests(
        self,
        status: Optional[Iterable[RequestStatus] | RequestStatus] = None,
        *,
        employee_id: Optional[uuid.UUID] = None,
        newest_first: bool = False,
    ) -> Sequence[HolidayRequest]:
        order = HolidayRequest.created_at.desc() if newest_first else HolidayRequest.created_at.asc()
        query = select(HolidayRequest).order_by(order)
        if isinstance(status, RequestStatus):
            query = query.where(HolidayRequest.status == status)
        elif status is not None:
            query = query.where(HolidayRequest.status.in_(list(status)))
        if employee_id is not None:
            query = query.where(HolidayRequest.employee_id == employee_id)
        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_request(self, request_id: uuid.UUID) -> HolidayRequest:
        request = await self.db.get(HolidayRequest, request_id)
        if request is None:
            raise NotFoundException("HolidayRequest", str(request_id))
        return request

    async def insert_request(self, request: HolidayRequest) -> HolidayRequest:
        self.db.add(request)
        await self.db.flush()
        return request

    async def update_request(
        self,
        request_id: uuid.UUID,
        *,
        expected: RequestStatus,
        **values,
    ) -> None:
        """Write *values* onto the request in one conditional UPDATE.

        The row is only touched while it is still in *expected*; otherwise
        another writer got there first and StaleStateError is raised.
        """
        result = await self.db.execute(
            update(HolidayRequest)
            .where(
                HolidayRequest.id == request_id,
                HolidayRequest.status == expected,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(
                "stale write on request %s (expected %s)",
                request_id, expected.value,
            )
            raise StaleStateError(request_id, expected.value)

        # Bring the identity-map copy in line with the row just written.
        request = await self.db.get(HolidayRequest, request_id)
        if request is not None:
            await self.db.refresh(request)

    async def update_request_status(
        self,
        request_id: uuid.UUID,
        status: RequestStatus,
        *,
        expected: RequestStatus,
        reviewed_at: Optional[datetime] = None,
        reviewed_by: Optional[str] = None,
    ) -> None:
        """Move a request from *expected* to *status*, stamping the review when given."""
        values: dict = {"status": status}
        if reviewed_at is not None:
            values["reviewed_at"] = reviewed_at
            values["reviewed_by"] = reviewed_by
        await self.update_request(request_id, expected=expected, **values)
