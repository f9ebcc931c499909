"""Auth router: current identity and account linking."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.auth.dependencies import CurrentUser, get_current_user, require_admin
from holiday_tracker.auth.schemas import AccountLink, AccountOut, MeResponse
from holiday_tracker.auth.service import link_account
from holiday_tracker.database import get_db
from holiday_tracker.staff.schemas import EmployeeBrief

router = APIRouter(prefix="", tags=["auth"])


# ── GET /me ─────────────────────────────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def me(user: CurrentUser = Depends(get_current_user)):
    return MeResponse(
        user_id=user.user_id,
        role=user.role,
        employee=EmployeeBrief.model_validate(user.employee) if user.employee else None,
    )


# ── POST /accounts ──────────────────────────────────────────────────

@router.post("/accounts", response_model=AccountOut, status_code=201)
async def create_account_link(
    body: AccountLink,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Link an identity-provider account to an employee and set its role."""
    employee = await link_account(
        db, body.employee_id, body.user_id, body.role, actor_id=admin.user_id,
    )
    return AccountOut(user_id=body.user_id, role=body.role, employee_id=employee.id)
