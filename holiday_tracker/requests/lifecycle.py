"""Holiday request state machine: pure transition planning.

Nothing here touches the database. ``plan_transition`` takes a snapshot of a
request plus an action and returns the new status together with the absence
writes that must accompany it; ``RequestService`` applies the plan through
the repository.

    pending        --approve-->         approved
    pending        --reject-->          rejected
    approved       --request_cancel-->  cancel_pending
    cancel_pending --approve_cancel-->  cancelled
    cancel_pending --decline_cancel-->  approved
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Union

from holiday_tracker.common.constants import (
    REQUEST_TRANSITIONS,
    WEEKEND_DAYS,
    AbsenceType,
    RequestAction,
    RequestStatus,
)
from holiday_tracker.common.exceptions import (
    CancellationNotAllowedError,
    EmptyRangeError,
    InvalidRangeError,
    StatePreconditionError,
)

DEFAULT_NOTICE_WINDOW = timedelta(weeks=4)


# ── Weekday expansion ───────────────────────────────────────────────

def weekday_expansion(start_date: date, end_date: date) -> list[date]:
    """Every Monday–Friday from *start_date* to *end_date* inclusive, ascending."""
    days: list[date] = []
    current = start_date
    while current <= end_date:
        if current.weekday() not in WEEKEND_DAYS:
            days.append(current)
        current += timedelta(days=1)
    return days


def validate_range(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise InvalidRangeError(start_date, end_date)


# ── Snapshot / effects ──────────────────────────────────────────────

@dataclass(frozen=True)
class RequestSnapshot:
    """The fields of a request that transition rules depend on."""

    id: uuid.UUID
    employee_id: uuid.UUID
    type: AbsenceType
    start_date: date
    end_date: date
    status: RequestStatus

    @classmethod
    def of(cls, request) -> RequestSnapshot:
        return cls(
            id=request.id,
            employee_id=request.employee_id,
            type=request.type,
            start_date=request.start_date,
            end_date=request.end_date,
            status=request.status,
        )


@dataclass(frozen=True)
class UpsertAbsences:
    employee_id: uuid.UUID
    dates: tuple[date, ...]
    type: AbsenceType


@dataclass(frozen=True)
class DeleteAbsences:
    employee_id: uuid.UUID
    dates: tuple[date, ...]


Effect = Union[UpsertAbsences, DeleteAbsences]


@dataclass(frozen=True)
class Transition:
    request_id: uuid.UUID
    action: RequestAction
    from_status: RequestStatus
    to_status: RequestStatus
    stamp_reviewed: bool
    effects: tuple[Effect, ...] = ()

    @property
    def days_affected(self) -> int:
        return sum(len(effect.dates) for effect in self.effects)


# ── Policy ──────────────────────────────────────────────────────────

def check_cancellation_allowed(
    start_date: date,
    end_date: date,
    today: date,
    *,
    notice_window: timedelta = DEFAULT_NOTICE_WINDOW,
) -> None:
    """Raise unless an approved range may still be withdrawn on *today*."""
    if not end_date > today:
        raise CancellationNotAllowedError(CancellationNotAllowedError.ALREADY_PASSED)
    if not start_date > today + notice_window:
        raise CancellationNotAllowedError(CancellationNotAllowedError.INSIDE_NOTICE_WINDOW)


def next_status(request_id: uuid.UUID, status: RequestStatus, action: RequestAction) -> RequestStatus:
    try:
        return REQUEST_TRANSITIONS[(status, action)]
    except KeyError:
        raise StatePreconditionError(request_id, status.value, action.value) from None


# ── Planner ─────────────────────────────────────────────────────────

def plan_transition(
    snapshot: RequestSnapshot,
    action: RequestAction,
    now: datetime,
    *,
    notice_window: timedelta = DEFAULT_NOTICE_WINDOW,
) -> Transition:
    """Decide what *action* does to the request in *snapshot* at *now*.

    Raises StatePreconditionError for transitions missing from the table,
    EmptyRangeError when an approval covers no weekday, and
    CancellationNotAllowedError when the cancellation policy is violated.
    """
    to_status = next_status(snapshot.id, snapshot.status, action)
    effects: tuple[Effect, ...] = ()

    if action is RequestAction.approve:
        dates = weekday_expansion(snapshot.start_date, snapshot.end_date)
        if not dates:
            raise EmptyRangeError(snapshot.start_date, snapshot.end_date)
        effects = (UpsertAbsences(snapshot.employee_id, tuple(dates), snapshot.type),)

    elif action is RequestAction.request_cancel:
        check_cancellation_allowed(
            snapshot.start_date,
            snapshot.end_date,
            now.date(),
            notice_window=notice_window,
        )

    elif action is RequestAction.approve_cancel:
        dates = weekday_expansion(snapshot.start_date, snapshot.end_date)
        effects = (DeleteAbsences(snapshot.employee_id, tuple(dates)),)

    return Transition(
        request_id=snapshot.id,
        action=action,
        from_status=snapshot.status,
        to_status=to_status,
        # Asking for a cancellation is not a review.
        stamp_reviewed=action is not RequestAction.request_cancel,
        effects=effects,
    )
