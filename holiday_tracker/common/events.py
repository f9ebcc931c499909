"""In-process subscribe/notify boundary between the request lifecycle and its callers.

Screens that need to react to request changes subscribe here. Handlers
run synchronously inside the unit of work that produced the event, so a
failing handler rolls the change back with it.
"""

from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional

from holiday_tracker.common.constants import AbsenceType, RequestStatus

logger = logging.getLogger(__name__)


class RequestEventKind(str, enum.Enum):
    submitted = "submitted"
    edited = "edited"
    approved = "approved"
    rejected = "rejected"
    cancellation_requested = "cancellation_requested"
    cancelled = "cancelled"
    cancellation_declined = "cancellation_declined"


@dataclass(frozen=True)
class RequestEvent:
    kind: RequestEventKind
    request_id: uuid.UUID
    employee_id: uuid.UUID
    type: AbsenceType
    start_date: date
    end_date: date
    status: RequestStatus
    occurred_at: datetime
    actor_id: Optional[str] = None
    days_affected: int = 0


Handler = Callable[[RequestEvent], None]


@dataclass
class EventBus:
    """Fan-out of request events to registered handlers."""

    _handlers: dict[Optional[RequestEventKind], list[Handler]] = field(default_factory=dict)

    def subscribe(
        self,
        handler: Handler,
        kind: Optional[RequestEventKind] = None,
    ) -> Callable[[], None]:
        """Register *handler* for *kind* (or every kind when None).

        Returns a callable that removes the subscription.
        """
        self._handlers.setdefault(kind, []).append(handler)

        def _unsubscribe() -> None:
            handlers = self._handlers.get(kind, [])
            if handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def notify(self, event: RequestEvent) -> None:
        for handler in [*self._handlers.get(event.kind, []), *self._handlers.get(None, [])]:
            handler(event)


def _log_event(event: RequestEvent) -> None:
    logger.info(
        "holiday request %s %s (employee=%s, %s→%s, status=%s, days=%d)",
        event.request_id,
        event.kind.value,
        event.employee_id,
        event.start_date.isoformat(),
        event.end_date.isoformat(),
        event.status.value,
        event.days_affected,
    )


event_bus = EventBus()
event_bus.subscribe(_log_event)


def get_event_bus() -> EventBus:
    """FastAPI dependency: the application-wide event bus."""
    return event_bus
