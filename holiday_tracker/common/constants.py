"""Enums and constants for Holiday Tracker, matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    admin = "admin"
    staff = "staff"


# ── Absences ────────────────────────────────────────────────────────

class AbsenceType(str, enum.Enum):
    holiday = "H"
    sick = "S"
    personal = "P"

    @property
    def label(self) -> str:
        return ABSENCE_LABELS[self]


ABSENCE_LABELS: dict[AbsenceType, str] = {
    AbsenceType.holiday: "Holiday",
    AbsenceType.sick: "Sick",
    AbsenceType.personal: "Personal",
}


# ── Holiday requests ────────────────────────────────────────────────

class RequestStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancel_pending = "cancel_pending"
    cancelled = "cancelled"


class RequestAction(str, enum.Enum):
    approve = "approve"
    reject = "reject"
    request_cancel = "request_cancel"
    approve_cancel = "approve_cancel"
    decline_cancel = "decline_cancel"


# Every legal (status, action) pair. Anything missing is an invalid transition.
REQUEST_TRANSITIONS: dict[tuple[RequestStatus, RequestAction], RequestStatus] = {
    (RequestStatus.pending, RequestAction.approve): RequestStatus.approved,
    (RequestStatus.pending, RequestAction.reject): RequestStatus.rejected,
    (RequestStatus.approved, RequestAction.request_cancel): RequestStatus.cancel_pending,
    (RequestStatus.cancel_pending, RequestAction.approve_cancel): RequestStatus.cancelled,
    (RequestStatus.cancel_pending, RequestAction.decline_cancel): RequestStatus.approved,
}

# Statuses shown on the admin review screen.
REVIEWABLE_STATUSES = (RequestStatus.pending, RequestStatus.cancel_pending)


# ── Misc constants ──────────────────────────────────────────────────

DEFAULT_ENTITLEMENT_DAYS = 28
MAX_ENTITLEMENT_DAYS = 99
WEEKEND_DAYS = frozenset({5, 6})   # date.weekday(): Sat, Sun
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
