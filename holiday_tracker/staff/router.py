"""Staff directory router: store and employee endpoints (admin only).

Routes:
    /stores              List, create stores
    /stores/{name}       Delete store
    /employees           List, create employees
    /employees/{id}      Get, update, delete employee
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.auth.dependencies import CurrentUser, require_admin
from holiday_tracker.database import get_db
from holiday_tracker.staff.schemas import (
    EmployeeCreate,
    EmployeeOut,
    EmployeeUpdate,
    StoreCreate,
    StoreOut,
)
from holiday_tracker.staff.service import EmployeeService, StoreService


# ═════════════════════════════════════════════════════════════════════
# Routers
# ═════════════════════════════════════════════════════════════════════

stores_router = APIRouter(prefix="", tags=["stores"])
employees_router = APIRouter(prefix="", tags=["employees"])


# ═════════════════════════════════════════════════════════════════════
# Store Endpoints
# ═════════════════════════════════════════════════════════════════════


@stores_router.get("", response_model=list[StoreOut])
async def list_stores(
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await StoreService.list_stores(db)


@stores_router.post("", response_model=StoreOut, status_code=201)
async def create_store(
    body: StoreCreate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await StoreService.create_store(db, body, actor_id=admin.user_id)


@stores_router.delete("/{name}", status_code=204)
async def delete_store(
    name: str,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a store. Refused while employees are still assigned to it."""
    await StoreService.delete_store(db, name, actor_id=admin.user_id)
    return Response(status_code=204)


# ═════════════════════════════════════════════════════════════════════
# Employee Endpoints
# ═════════════════════════════════════════════════════════════════════


@employees_router.get("", response_model=list[EmployeeOut])
async def list_employees(
    store: Optional[str] = Query(None, description="Only employees of this store"),
    search: Optional[str] = Query(None, description="Case-insensitive name substring"),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.list_employees(db, store=store, search=search)


@employees_router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.create_employee(db, body, actor_id=admin.user_id)


@employees_router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee(
    employee_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.get_employee(db, employee_id)


@employees_router.patch("/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.update_employee(
        db, employee_id, body, actor_id=admin.user_id,
    )


@employees_router.delete("/{employee_id}", status_code=204)
async def delete_employee(
    employee_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete an employee together with their absences and requests."""
    await EmployeeService.delete_employee(db, employee_id, actor_id=admin.user_id)
    return Response(status_code=204)
