"""Staff directory tests: stores and employees, service and API."""

from __future__ import annotations

import uuid
from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.absences.models import AbsenceRecord
from holiday_tracker.common.exceptions import (
    ConflictError,
    NotFoundException,
    ValidationException,
)
from holiday_tracker.requests.models import HolidayRequest
from holiday_tracker.staff.models import Employee
from holiday_tracker.staff.schemas import EmployeeCreate, EmployeeUpdate, StoreCreate
from holiday_tracker.staff.service import EmployeeService, StoreService
from tests.conftest import _seed_absence, _seed_employee, _seed_request, _seed_store


class TestStores:

    async def test_list_sorted(self, db: AsyncSession):
        for name in ("Uptown", "Airport", "Downtown"):
            await StoreService.create_store(db, StoreCreate(name=name))

        stores = await StoreService.list_stores(db)

        assert [s.name for s in stores] == ["Airport", "Downtown", "Uptown"]

    async def test_duplicate_conflicts(self, db: AsyncSession):
        await StoreService.create_store(db, StoreCreate(name="Downtown"))
        with pytest.raises(ConflictError):
            await StoreService.create_store(db, StoreCreate(name=" Downtown "))

    async def test_delete_blocked_while_staffed(self, db: AsyncSession):
        await _seed_store(db, "Downtown")
        await _seed_employee(db, store="Downtown")

        with pytest.raises(ValidationException):
            await StoreService.delete_store(db, "Downtown")

    async def test_delete_empty_store(self, db: AsyncSession):
        await _seed_store(db, "Downtown")
        await StoreService.delete_store(db, "Downtown")
        assert await StoreService.list_stores(db) == []

    async def test_delete_unknown_store(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await StoreService.delete_store(db, "Nowhere")


class TestEmployees:

    async def test_create_defaults_entitlement(self, db: AsyncSession):
        await _seed_store(db, "Downtown")

        emp = await EmployeeService.create_employee(
            db, EmployeeCreate(name="Alice", store="Downtown"),
        )

        assert emp.entitlement_days == 28
        assert emp.user_id is None

    async def test_create_in_unknown_store(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await EmployeeService.create_employee(
                db, EmployeeCreate(name="Alice", store="Nowhere"),
            )

    def test_entitlement_bounds(self):
        with pytest.raises(ValueError):
            EmployeeCreate(name="Alice", store="Downtown", entitlement_days=100)
        with pytest.raises(ValueError):
            EmployeeCreate(name="Alice", store="Downtown", entitlement_days=-1)

    async def test_partial_update(self, db: AsyncSession):
        await _seed_store(db, "Downtown")
        await _seed_store(db, "Uptown")
        emp = await _seed_employee(db, name="Alice", store="Downtown", entitlement_days=20)

        updated = await EmployeeService.update_employee(
            db, emp.id, EmployeeUpdate(store="Uptown"),
        )

        assert updated.store == "Uptown"
        assert updated.entitlement_days == 20
        assert updated.name == "Alice"

    async def test_list_filters(self, db: AsyncSession):
        await _seed_store(db, "Downtown")
        await _seed_store(db, "Uptown")
        await _seed_employee(db, name="Alice", store="Downtown")
        await _seed_employee(db, name="Albert", store="Uptown")
        await _seed_employee(db, name="Bob", store="Downtown")

        assert [e.name for e in await EmployeeService.list_employees(db, search="al")] == [
            "Alice", "Albert",
        ]
        assert [e.name for e in await EmployeeService.list_employees(db, store="Downtown")] == [
            "Alice", "Bob",
        ]

    async def test_delete_cascades(self, db: AsyncSession):
        await _seed_store(db, "Downtown")
        alice = await _seed_employee(db, name="Alice", store="Downtown")
        bob = await _seed_employee(db, name="Bob", store="Downtown")
        await _seed_absence(db, alice.id, date(2026, 6, 1))
        await _seed_absence(db, bob.id, date(2026, 6, 1))
        await _seed_request(db, alice.id, date(2026, 6, 8), date(2026, 6, 9))

        await EmployeeService.delete_employee(db, alice.id)

        employees = (await db.execute(select(Employee))).scalars().all()
        absences = (await db.execute(select(AbsenceRecord))).scalars().all()
        requests = (await db.execute(select(HolidayRequest))).scalars().all()
        assert [e.name for e in employees] == ["Bob"]
        assert [a.employee_id for a in absences] == [bob.id]
        assert requests == []

    async def test_get_unknown(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await EmployeeService.get_employee(db, uuid.uuid4())


class TestStaffAPI:

    async def test_store_and_employee_crud(self, client, admin_headers):
        resp = await client.post("/api/v1/stores", json={"name": "Downtown"}, headers=admin_headers)
        assert resp.status_code == 201

        resp = await client.post(
            "/api/v1/employees",
            json={"name": "Alice", "store": "Downtown", "entitlement_days": 25},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        emp_id = resp.json()["id"]

        resp = await client.patch(
            f"/api/v1/employees/{emp_id}", json={"name": "Alice B"}, headers=admin_headers,
        )
        assert resp.json()["name"] == "Alice B"
        assert resp.json()["entitlement_days"] == 25

        resp = await client.delete("/api/v1/stores/Downtown", headers=admin_headers)
        assert resp.status_code == 422

        resp = await client.delete(f"/api/v1/employees/{emp_id}", headers=admin_headers)
        assert resp.status_code == 204
        resp = await client.get(f"/api/v1/employees/{emp_id}", headers=admin_headers)
        assert resp.status_code == 404

    async def test_duplicate_store_is_409(self, client, admin_headers):
        await client.post("/api/v1/stores", json={"name": "Downtown"}, headers=admin_headers)
        resp = await client.post("/api/v1/stores", json={"name": "Downtown"}, headers=admin_headers)
        assert resp.status_code == 409

    async def test_staff_cannot_manage_directory(self, client, staff_headers):
        resp = await client.get("/api/v1/employees", headers=staff_headers)
        assert resp.status_code == 403
