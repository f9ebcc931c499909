"""Auth service: role lookup and linking identity-provider accounts to employees."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.auth.models import RoleAssignment
from holiday_tracker.common.audit import create_audit_entry
from holiday_tracker.common.constants import UserRole
from holiday_tracker.common.exceptions import ConflictError, NotFoundException
from holiday_tracker.staff.models import Employee

logger = logging.getLogger(__name__)


async def get_role(db: AsyncSession, user_id: str) -> UserRole:
    """Role assigned to *user_id*; accounts without an assignment are staff."""
    assignment = await db.get(RoleAssignment, user_id)
    return assignment.role if assignment is not None else UserRole.staff


async def get_employee_for_user(db: AsyncSession, user_id: str) -> Optional[Employee]:
    result = await db.execute(select(Employee).where(Employee.user_id == user_id))
    return result.scalars().first()


async def link_account(
    db: AsyncSession,
    employee_id: uuid.UUID,
    user_id: str,
    role: UserRole = UserRole.staff,
    *,
    actor_id: Optional[str] = None,
) -> Employee:
    """Attach *user_id* to an employee and record its role.

    An account can be linked to one employee only; relinking the same pair
    just updates the role.
    """
    employee = await db.get(Employee, employee_id)
    if employee is None:
        raise NotFoundException("Employee", str(employee_id))

    current = await get_employee_for_user(db, user_id)
    if current is not None and current.id != employee.id:
        raise ConflictError("user_id", user_id)

    old_values = {"user_id": employee.user_id}
    employee.user_id = user_id

    assignment = await db.get(RoleAssignment, user_id)
    if assignment is None:
        db.add(RoleAssignment(user_id=user_id, role=role))
    else:
        assignment.role = role
    await db.flush()

    await create_audit_entry(
        db,
        action="link_account",
        entity_type="employee",
        entity_id=employee.id,
        actor_id=actor_id,
        old_values=old_values,
        new_values={"user_id": user_id, "role": role.value},
    )
    logger.info("account %s linked to employee %s as %s", user_id, employee.id, role.value)
    return employee
