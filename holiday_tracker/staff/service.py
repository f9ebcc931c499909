"""Staff directory service layer: stores and employees.

Stores are keyed by name. Deleting an employee removes their absences and
requests with them; deleting a store is refused while anyone works there.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.absences.models import AbsenceRecord
from holiday_tracker.common.audit import create_audit_entry
from holiday_tracker.common.exceptions import (
    ConflictError,
    NotFoundException,
    ValidationException,
)
from holiday_tracker.config import settings
from holiday_tracker.requests.models import HolidayRequest
from holiday_tracker.staff.models import Employee, Store
from holiday_tracker.staff.schemas import EmployeeCreate, EmployeeUpdate, StoreCreate

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# StoreService
# ═════════════════════════════════════════════════════════════════════


class StoreService:
    """Async store operations."""

    @staticmethod
    async def list_stores(db: AsyncSession) -> Sequence[Store]:
        result = await db.execute(select(Store).order_by(Store.name))
        return result.scalars().all()

    @staticmethod
    async def get_store(db: AsyncSession, name: str) -> Store:
        store = await db.get(Store, name)
        if store is None:
            raise NotFoundException("Store", name)
        return store

    @staticmethod
    async def create_store(
        db: AsyncSession,
        data: StoreCreate,
        *,
        actor_id: Optional[str] = None,
    ) -> Store:
        if await db.get(Store, data.name) is not None:
            raise ConflictError("name", data.name)

        store = Store(name=data.name)
        db.add(store)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="store",
            entity_id=store.name,
            actor_id=actor_id,
            new_values={"name": store.name},
        )
        logger.info("store %r created", store.name)
        return store

    @staticmethod
    async def delete_store(
        db: AsyncSession,
        name: str,
        *,
        actor_id: Optional[str] = None,
    ) -> None:
        store = await StoreService.get_store(db, name)

        assigned = (
            await db.execute(
                select(func.count()).select_from(Employee).where(Employee.store == name)
            )
        ).scalar_one()
        if assigned:
            raise ValidationException(
                {"store": [f"Store '{name}' still has {assigned} employee(s) assigned."]}
            )

        await db.delete(store)
        await db.flush()

        await create_audit_entry(
            db,
            action="delete",
            entity_type="store",
            entity_id=name,
            actor_id=actor_id,
            old_values={"name": name},
        )
        logger.info("store %r deleted", name)


# ═════════════════════════════════════════════════════════════════════
# EmployeeService
# ═════════════════════════════════════════════════════════════════════


class EmployeeService:
    """Async employee CRUD."""

    @staticmethod
    def _values(employee: Employee) -> dict:
        return {
            "name": employee.name,
            "store": employee.store,
            "entitlement_days": employee.entitlement_days,
        }

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        *,
        store: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[Employee]:
        query = select(Employee).order_by(Employee.store, Employee.name)
        if store:
            query = query.where(Employee.store == store)
        if search:
            query = query.where(func.lower(Employee.name).contains(search.lower()))
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_employee(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        data: EmployeeCreate,
        *,
        actor_id: Optional[str] = None,
    ) -> Employee:
        """Create an employee in an existing store."""
        await StoreService.get_store(db, data.store)

        values = data.model_dump()
        if "entitlement_days" not in data.model_fields_set:
            values["entitlement_days"] = settings.DEFAULT_ENTITLEMENT_DAYS

        employee = Employee(**values)
        db.add(employee)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("employee %s (%s) created in %r", employee.id, employee.name, employee.store)
        return employee

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: EmployeeUpdate,
        *,
        actor_id: Optional[str] = None,
    ) -> Employee:
        employee = await EmployeeService.get_employee(db, employee_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return employee

        if "store" in changes:
            await StoreService.get_store(db, changes["store"])

        old_values = EmployeeService._values(employee)
        for field, value in changes.items():
            setattr(employee, field, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=EmployeeService._values(employee),
        )
        return employee

    @staticmethod
    async def delete_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        *,
        actor_id: Optional[str] = None,
    ) -> None:
        """Delete the employee along with their absences and requests."""
        employee = await EmployeeService.get_employee(db, employee_id)
        old_values = EmployeeService._values(employee)

        await db.execute(delete(AbsenceRecord).where(AbsenceRecord.employee_id == employee_id))
        await db.execute(delete(HolidayRequest).where(HolidayRequest.employee_id == employee_id))
        await db.delete(employee)
        await db.flush()

        await create_audit_entry(
            db,
            action="delete",
            entity_type="employee",
            entity_id=employee_id,
            actor_id=actor_id,
            old_values=old_values,
        )
        logger.info("employee %s deleted", employee_id)
