"""Common module: shared utilities for Holiday Tracker."""

from holiday_tracker.common.audit import AuditTrail, create_audit_entry
from holiday_tracker.common.clock import Clock, FixedClock, get_clock
from holiday_tracker.common.constants import (
    ABSENCE_LABELS,
    DEFAULT_ENTITLEMENT_DAYS,
    REQUEST_TRANSITIONS,
    AbsenceType,
    RequestAction,
    RequestStatus,
    UserRole,
)
from holiday_tracker.common.events import (
    EventBus,
    RequestEvent,
    RequestEventKind,
    get_event_bus,
)
from holiday_tracker.common.exceptions import (
    AppException,
    CancellationNotAllowedError,
    ConflictError,
    EmptyRangeError,
    ForbiddenException,
    InvalidRangeError,
    NotFoundException,
    StaleStateError,
    StatePreconditionError,
    ValidationException,
    register_exception_handlers,
)
from holiday_tracker.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Clock / events
    "Clock",
    "FixedClock",
    "get_clock",
    "EventBus",
    "RequestEvent",
    "RequestEventKind",
    "get_event_bus",
    # Constants / Enums
    "ABSENCE_LABELS",
    "DEFAULT_ENTITLEMENT_DAYS",
    "REQUEST_TRANSITIONS",
    "AbsenceType",
    "RequestAction",
    "RequestStatus",
    "UserRole",
    # Exceptions
    "AppException",
    "CancellationNotAllowedError",
    "ConflictError",
    "EmptyRangeError",
    "ForbiddenException",
    "InvalidRangeError",
    "NotFoundException",
    "StaleStateError",
    "StatePreconditionError",
    "ValidationException",
    "register_exception_handlers",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
