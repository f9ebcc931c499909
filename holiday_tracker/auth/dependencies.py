"""Auth dependencies: JWT validation, role and employee-link enforcement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.auth.service import get_employee_for_user, get_role
from holiday_tracker.common.constants import UserRole
from holiday_tracker.common.exceptions import ForbiddenException
from holiday_tracker.config import settings
from holiday_tracker.database import get_db
from holiday_tracker.staff.models import Employee


@dataclass
class CurrentUser:
    """The verified caller: external identity, role and linked employee (if any)."""

    user_id: str
    role: UserRole
    employee: Optional[Employee] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Validate the identity provider's JWT and resolve role + employee."""
    token = _extract_bearer(request)

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token has no subject.")

    role = await get_role(db, user_id)
    employee = await get_employee_for_user(db, user_id)

    # Attach role to request state for downstream use
    request.state.user_role = role
    return CurrentUser(user_id=user_id, role=role, employee=employee)


# ── Role / link dependencies ────────────────────────────────────────

async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise ForbiddenException(
            detail=f"Role '{user.role.value}' is not permitted. Required: ['admin'].",
        )
    return user


async def require_linked_employee(
    user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Staff endpoints act on the caller's own employee record."""
    if user.employee is None:
        raise ForbiddenException(detail="Your account is not linked to an employee record.")
    return user
