"""Holiday request router: submit, edit, review, cancellation workflow.

Staff act on their own requests; decisions are admin-only.
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.auth.dependencies import (
    CurrentUser,
    get_current_user,
    require_admin,
    require_linked_employee,
)
from holiday_tracker.common.clock import Clock, get_clock
from holiday_tracker.common.constants import RequestStatus
from holiday_tracker.common.events import EventBus, get_event_bus
from holiday_tracker.common.exceptions import ForbiddenException, ValidationException
from holiday_tracker.common.pagination import PaginatedResponse, PaginationParams
from holiday_tracker.common.rate_limit import limiter
from holiday_tracker.config import settings
from holiday_tracker.database import get_db
from holiday_tracker.requests.schemas import (
    ApprovalOut,
    ClashReport,
    RequestCreate,
    RequestOut,
    RequestUpdate,
    ReviewItem,
)
from holiday_tracker.requests.service import RequestService

router = APIRouter(prefix="", tags=["requests"])


def _resolve_employee_id(user: CurrentUser, requested: Optional[uuid.UUID]) -> uuid.UUID:
    """Admins may book for anyone; staff only for themselves."""
    if user.is_admin and requested is not None:
        return requested
    if user.employee is None:
        if user.is_admin:
            raise ValidationException({"employee_id": ["employee_id is required."]})
        raise ForbiddenException(detail="Your account is not linked to an employee record.")
    if requested is not None and requested != user.employee.id:
        raise ForbiddenException("You can only book time off for yourself.")
    return user.employee.id


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=RequestOut, status_code=201)
@limiter.limit(settings.RATE_LIMIT_SUBMIT)
async def submit_request(
    request: Request,
    body: RequestCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    events: EventBus = Depends(get_event_bus),
):
    """Submit a time-off request for approval."""
    employee_id = _resolve_employee_id(user, body.employee_id)
    return await RequestService.submit(
        db,
        employee_id,
        body.type,
        body.start_date,
        body.end_date,
        actor_id=user.user_id,
        clock=clock,
        events=events,
    )


# ── GET /mine ───────────────────────────────────────────────────────

@router.get("/mine", response_model=list[RequestOut])
async def my_requests(
    user: CurrentUser = Depends(require_linked_employee),
    db: AsyncSession = Depends(get_db),
):
    """The caller's own requests, newest first."""
    return await RequestService.list_mine(db, user.employee.id)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=PaginatedResponse[RequestOut])
async def list_requests(
    status: Optional[RequestStatus] = Query(None),
    employee_id: Optional[uuid.UUID] = Query(None),
    pagination: PaginationParams = Depends(),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await RequestService.list_requests(
        db, pagination, status=status, employee_id=employee_id,
    )


# ── GET /review ─────────────────────────────────────────────────────

@router.get("/review", response_model=list[ReviewItem])
async def review_queue(
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Requests awaiting a decision, with the colleagues each one clashes with."""
    return await RequestService.get_review_queue(db)


# ── GET /clashes ────────────────────────────────────────────────────

@router.get("/clashes", response_model=ClashReport)
async def clash_report(
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await RequestService.get_clash_report(db)


# ── PUT /{id} ───────────────────────────────────────────────────────

@router.put("/{request_id}", response_model=RequestOut)
async def edit_request(
    request_id: uuid.UUID,
    body: RequestUpdate,
    user: CurrentUser = Depends(require_linked_employee),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    events: EventBus = Depends(get_event_bus),
):
    """Change type or dates of your own pending request."""
    return await RequestService.edit_pending(
        db,
        request_id,
        user.employee.id,
        body.type,
        body.start_date,
        body.end_date,
        actor_id=user.user_id,
        clock=clock,
        events=events,
    )


# ── PUT /{id}/approve ───────────────────────────────────────────────

@router.put("/{request_id}/approve", response_model=ApprovalOut)
async def approve_request(
    request_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    events: EventBus = Depends(get_event_bus),
):
    """Approve a pending request. Books one absence per weekday in range."""
    return await RequestService.approve(
        db, request_id, actor_id=admin.user_id, clock=clock, events=events,
    )


# ── PUT /{id}/reject ────────────────────────────────────────────────

@router.put("/{request_id}/reject", response_model=RequestOut)
async def reject_request(
    request_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    events: EventBus = Depends(get_event_bus),
):
    return await RequestService.reject(
        db, request_id, actor_id=admin.user_id, clock=clock, events=events,
    )


# ── PUT /{id}/cancel ────────────────────────────────────────────────

@router.put("/{request_id}/cancel", response_model=RequestOut)
async def request_cancellation(
    request_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    events: EventBus = Depends(get_event_bus),
):
    """Ask to withdraw an approved request (owner or admin)."""
    owner_id = None
    if not user.is_admin:
        if user.employee is None:
            raise ForbiddenException(detail="Your account is not linked to an employee record.")
        owner_id = user.employee.id
    return await RequestService.request_cancellation(
        db,
        request_id,
        owner_id=owner_id,
        actor_id=user.user_id,
        clock=clock,
        events=events,
    )


# ── PUT /{id}/cancellation/approve ──────────────────────────────────

@router.put("/{request_id}/cancellation/approve", response_model=ApprovalOut)
async def approve_cancellation(
    request_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    events: EventBus = Depends(get_event_bus),
):
    """Cancel the request and remove its absences from the calendar."""
    return await RequestService.approve_cancellation(
        db, request_id, actor_id=admin.user_id, clock=clock, events=events,
    )


# ── PUT /{id}/cancellation/decline ──────────────────────────────────

@router.put("/{request_id}/cancellation/decline", response_model=RequestOut)
async def decline_cancellation(
    request_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    events: EventBus = Depends(get_event_bus),
):
    return await RequestService.decline_cancellation(
        db, request_id, actor_id=admin.user_id, clock=clock, events=events,
    )
