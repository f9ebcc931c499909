"""Staff directory Pydantic v2 schemas: stores and employees."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from holiday_tracker.common.constants import DEFAULT_ENTITLEMENT_DAYS, MAX_ENTITLEMENT_DAYS


# ═════════════════════════════════════════════════════════════════════
# Store
# ═════════════════════════════════════════════════════════════════════


class StoreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Store name must not be blank.")
        return v


class StoreOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class EmployeeBrief(BaseModel):
    """Minimal employee info embedded in other responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    store: str


class EmployeeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    store: str = Field(..., min_length=1, max_length=100)
    entitlement_days: int = Field(
        default=DEFAULT_ENTITLEMENT_DAYS, ge=0, le=MAX_ENTITLEMENT_DAYS,
    )

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Employee name must not be blank.")
        return v


class EmployeeUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    store: Optional[str] = Field(None, min_length=1, max_length=100)
    entitlement_days: Optional[int] = Field(None, ge=0, le=MAX_ENTITLEMENT_DAYS)


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    store: str
    entitlement_days: int
    user_id: Optional[str] = None
