"""Holiday request service layer: submission, review and cancellation workflow.

Business logic:
  - Staff submit and edit pending requests (no balance check)
  - Admins approve / reject; approval writes one absence per weekday
  - Approved requests can be withdrawn via a cancellation request that an
    admin approves (absences removed) or declines (request stays approved)
  - Review queue annotated with same-store clashes

Every transition is planned by ``lifecycle.plan_transition`` and applied here.
The status is claimed with a conditional UPDATE before any absence write, so
a lost race leaves the unit of work untouched.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_tracker.common.audit import create_audit_entry
from holiday_tracker.common.clock import Clock, system_clock
from holiday_tracker.common.constants import (
    REVIEWABLE_STATUSES,
    AbsenceType,
    RequestAction,
    RequestStatus,
)
from holiday_tracker.common.events import (
    EventBus,
    RequestEvent,
    RequestEventKind,
    event_bus,
)
from holiday_tracker.common.exceptions import (
    ForbiddenException,
    StatePreconditionError,
)
from holiday_tracker.common.pagination import (
    PaginatedResponse,
    PaginationParams,
    paginate,
)
from holiday_tracker.config import settings
from holiday_tracker.repository import TrackerRepository
from holiday_tracker.requests.clashes import detect_clashes
from holiday_tracker.requests.lifecycle import (
    DeleteAbsences,
    RequestSnapshot,
    Transition,
    UpsertAbsences,
    plan_transition,
    validate_range,
)
from holiday_tracker.requests.models import HolidayRequest
from holiday_tracker.requests.schemas import (
    ApprovalOut,
    ClashEntry,
    ClashReport,
    RequestOut,
    ReviewItem,
)

logger = logging.getLogger(__name__)

_EVENT_FOR_ACTION: dict[RequestAction, RequestEventKind] = {
    RequestAction.approve: RequestEventKind.approved,
    RequestAction.reject: RequestEventKind.rejected,
    RequestAction.request_cancel: RequestEventKind.cancellation_requested,
    RequestAction.approve_cancel: RequestEventKind.cancelled,
    RequestAction.decline_cancel: RequestEventKind.cancellation_declined,
}


def _notice_window() -> timedelta:
    return timedelta(weeks=settings.CANCELLATION_NOTICE_WEEKS)


def _request_values(request: HolidayRequest) -> dict:
    return {
        "type": request.type.value,
        "start_date": request.start_date.isoformat(),
        "end_date": request.end_date.isoformat(),
        "status": request.status.value,
    }


def _publish(
    events: EventBus,
    kind: RequestEventKind,
    request: HolidayRequest,
    clock: Clock,
    *,
    actor_id: Optional[str],
    days_affected: int = 0,
) -> None:
    events.notify(
        RequestEvent(
            kind=kind,
            request_id=request.id,
            employee_id=request.employee_id,
            type=request.type,
            start_date=request.start_date,
            end_date=request.end_date,
            status=request.status,
            occurred_at=clock.now(),
            actor_id=actor_id,
            days_affected=days_affected,
        )
    )


# ═════════════════════════════════════════════════════════════════════
# RequestService
# ═════════════════════════════════════════════════════════════════════


class RequestService:
    """Async holiday request operations."""

    # ─────────────────────────────────────────────────────────────────
    # Transition core
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _apply_effects(repo: TrackerRepository, plan: Transition) -> int:
        """Run the absence writes of *plan*; returns rows written or removed."""
        touched = 0
        for effect in plan.effects:
            if isinstance(effect, UpsertAbsences):
                touched += await repo.upsert_absences(
                    effect.employee_id, effect.dates, effect.type,
                )
            elif isinstance(effect, DeleteAbsences):
                removed = await repo.delete_absences(effect.employee_id, effect.dates)
                if removed < len(effect.dates):
                    logger.warning(
                        "request %s: %d of %d absence dates were already gone on cancellation",
                        plan.request_id, len(effect.dates) - removed, len(effect.dates),
                    )
                touched += removed
        return touched

    @staticmethod
    async def _transition(
        db: AsyncSession,
        request_id: uuid.UUID,
        action: RequestAction,
        *,
        actor_id: Optional[str],
        clock: Clock,
        events: EventBus,
        owner_id: Optional[uuid.UUID] = None,
    ) -> ApprovalOut:
        repo = TrackerRepository(db)
        request = await repo.get_request(request_id)
        if owner_id is not None and request.employee_id != owner_id:
            raise ForbiddenException("You can only change your own requests.")

        now = clock.now()
        plan = plan_transition(
            RequestSnapshot.of(request), action, now, notice_window=_notice_window(),
        )

        # Claim the status first: a concurrent reviewer fails here before
        # any absence has been written.
        await repo.update_request_status(
            request.id,
            plan.to_status,
            expected=plan.from_status,
            reviewed_at=now if plan.stamp_reviewed else None,
            reviewed_by=actor_id if plan.stamp_reviewed else None,
        )
        days = await RequestService._apply_effects(repo, plan)

        await create_audit_entry(
            db,
            action=action.value,
            entity_type="holiday_request",
            entity_id=request.id,
            actor_id=actor_id,
            old_values={"status": plan.from_status.value},
            new_values={"status": plan.to_status.value, "days_affected": days},
        )
        logger.info(
            "request %s %s -> %s by %s (%d days)",
            request.id, plan.from_status.value, plan.to_status.value, actor_id, days,
        )
        _publish(
            events, _EVENT_FOR_ACTION[action], request, clock,
            actor_id=actor_id, days_affected=days,
        )
        return ApprovalOut(request=RequestOut.model_validate(request), days_applied=days)

    # ─────────────────────────────────────────────────────────────────
    # Submit / edit
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def submit(
        db: AsyncSession,
        employee_id: uuid.UUID,
        absence_type: AbsenceType,
        start_date: date,
        end_date: date,
        *,
        actor_id: Optional[str] = None,
        clock: Clock = system_clock,
        events: EventBus = event_bus,
    ) -> RequestOut:
        """Create a pending request. Range is validated; no balance check."""
        validate_range(start_date, end_date)
        repo = TrackerRepository(db)
        await repo.get_employee(employee_id)

        request = await repo.insert_request(
            HolidayRequest(
                employee_id=employee_id,
                type=absence_type,
                start_date=start_date,
                end_date=end_date,
                status=RequestStatus.pending,
                created_at=clock.now(),
            )
        )

        await create_audit_entry(
            db,
            action="submit",
            entity_type="holiday_request",
            entity_id=request.id,
            actor_id=actor_id,
            new_values=_request_values(request),
        )
        _publish(events, RequestEventKind.submitted, request, clock, actor_id=actor_id)
        return RequestOut.model_validate(request)

    @staticmethod
    async def edit_pending(
        db: AsyncSession,
        request_id: uuid.UUID,
        actor_employee_id: uuid.UUID,
        absence_type: AbsenceType,
        start_date: date,
        end_date: date,
        *,
        actor_id: Optional[str] = None,
        clock: Clock = system_clock,
        events: EventBus = event_bus,
    ) -> RequestOut:
        """Overwrite type and dates of the caller's own pending request."""
        repo = TrackerRepository(db)
        request = await repo.get_request(request_id)

        if request.employee_id != actor_employee_id:
            raise ForbiddenException("You can only edit your own requests.")
        if request.status != RequestStatus.pending:
            raise StatePreconditionError(request.id, request.status.value, "edit")
        validate_range(start_date, end_date)

        old_values = _request_values(request)
        await repo.update_request(
            request.id,
            expected=RequestStatus.pending,
            type=absence_type,
            start_date=start_date,
            end_date=end_date,
        )

        await create_audit_entry(
            db,
            action="edit",
            entity_type="holiday_request",
            entity_id=request.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=_request_values(request),
        )
        _publish(events, RequestEventKind.edited, request, clock, actor_id=actor_id)
        return RequestOut.model_validate(request)

    # ─────────────────────────────────────────────────────────────────
    # Decisions
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def approve(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        actor_id: Optional[str] = None,
        clock: Clock = system_clock,
        events: EventBus = event_bus,
    ) -> ApprovalOut:
        """Approve a pending request and book each weekday in its range."""
        return await RequestService._transition(
            db, request_id, RequestAction.approve,
            actor_id=actor_id, clock=clock, events=events,
        )

    @staticmethod
    async def reject(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        actor_id: Optional[str] = None,
        clock: Clock = system_clock,
        events: EventBus = event_bus,
    ) -> RequestOut:
        result = await RequestService._transition(
            db, request_id, RequestAction.reject,
            actor_id=actor_id, clock=clock, events=events,
        )
        return result.request

    # ─────────────────────────────────────────────────────────────────
    # Cancellation
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def request_cancellation(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        owner_id: Optional[uuid.UUID] = None,
        actor_id: Optional[str] = None,
        clock: Clock = system_clock,
        events: EventBus = event_bus,
    ) -> RequestOut:
        """Ask to withdraw an approved request.

        Allowed only while the range has not finished and starts beyond the
        notice window. With *owner_id* set (staff callers) the request must
        belong to that employee; admins pass None.
        """
        result = await RequestService._transition(
            db, request_id, RequestAction.request_cancel,
            actor_id=actor_id, clock=clock, events=events, owner_id=owner_id,
        )
        return result.request

    @staticmethod
    async def approve_cancellation(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        actor_id: Optional[str] = None,
        clock: Clock = system_clock,
        events: EventBus = event_bus,
    ) -> ApprovalOut:
        """Cancel the request and remove its weekday absences."""
        return await RequestService._transition(
            db, request_id, RequestAction.approve_cancel,
            actor_id=actor_id, clock=clock, events=events,
        )

    @staticmethod
    async def decline_cancellation(
        db: AsyncSession,
        request_id: uuid.UUID,
        *,
        actor_id: Optional[str] = None,
        clock: Clock = system_clock,
        events: EventBus = event_bus,
    ) -> RequestOut:
        result = await RequestService._transition(
            db, request_id, RequestAction.decline_cancel,
            actor_id=actor_id, clock=clock, events=events,
        )
        return result.request

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_mine(db: AsyncSession, employee_id: uuid.UUID) -> list[RequestOut]:
        repo = TrackerRepository(db)
        requests = await repo.get_requests(employee_id=employee_id, newest_first=True)
        return [RequestOut.model_validate(r) for r in requests]

    @staticmethod
    async def list_requests(
        db: AsyncSession,
        params: PaginationParams,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[uuid.UUID] = None,
    ) -> PaginatedResponse[RequestOut]:
        query = select(HolidayRequest).order_by(HolidayRequest.created_at.desc())
        if status is not None:
            query = query.where(HolidayRequest.status == status)
        if employee_id is not None:
            query = query.where(HolidayRequest.employee_id == employee_id)

        page = await paginate(db, query, params, model=HolidayRequest)
        return PaginatedResponse[RequestOut](
            data=[RequestOut.model_validate(r) for r in page.data],
            meta=page.meta,
        )

    @staticmethod
    async def get_clash_map(db: AsyncSession) -> dict[uuid.UUID, set[str]]:
        repo = TrackerRepository(db)
        return detect_clashes(
            await repo.get_requests(RequestStatus.pending),
            await repo.get_absences(),
            await repo.get_employees(),
        )

    @staticmethod
    async def get_clash_report(db: AsyncSession) -> ClashReport:
        clashes = await RequestService.get_clash_map(db)
        return ClashReport(
            clashes=[
                ClashEntry(request_id=request_id, names=sorted(names))
                for request_id, names in clashes.items()
            ]
        )

    @staticmethod
    async def get_review_queue(db: AsyncSession) -> list[ReviewItem]:
        """Pending and cancel-pending requests, oldest first, with clash names."""
        repo = TrackerRepository(db)
        employees = {emp.id: emp for emp in await repo.get_employees()}
        requests = await repo.get_requests(REVIEWABLE_STATUSES)
        clashes = await RequestService.get_clash_map(db)

        items: list[ReviewItem] = []
        for req in requests:
            emp = employees.get(req.employee_id)
            if emp is None:
                continue
            items.append(
                ReviewItem(
                    request=RequestOut.model_validate(req),
                    employee_name=emp.name,
                    store=emp.store,
                    clashes=sorted(clashes.get(req.id, ())),
                )
            )
        return items
