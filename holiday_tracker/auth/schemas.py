"""Auth Pydantic schemas for request / response validation."""


import uuid
from typing import Optional

from pydantic import BaseModel, Field

from holiday_tracker.common.constants import UserRole
from holiday_tracker.staff.schemas import EmployeeBrief


# ── Requests ────────────────────────────────────────────────────────

class AccountLink(BaseModel):
    employee_id: uuid.UUID
    user_id: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.staff


# ── Responses ───────────────────────────────────────────────────────

class AccountOut(BaseModel):
    user_id: str
    role: UserRole
    employee_id: uuid.UUID


class MeResponse(BaseModel):
    user_id: str
    role: UserRole
    employee: Optional[EmployeeBrief] = None
