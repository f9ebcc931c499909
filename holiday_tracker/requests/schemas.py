"""Holiday request Pydantic v2 schemas.

Naming conventions:
  - *Create / *Update   -> request bodies (write)
  - *Out                -> response bodies (read)

Date order is checked in the service so that a reversed range surfaces as
InvalidRangeError rather than a generic validation failure.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from holiday_tracker.common.constants import AbsenceType, RequestStatus


# ═════════════════════════════════════════════════════════════════════
# Write
# ═════════════════════════════════════════════════════════════════════


class RequestCreate(BaseModel):
    """Body for POST /requests."""

    type: AbsenceType = AbsenceType.holiday
    start_date: date = Field(..., description="First day off (inclusive)")
    end_date: date = Field(..., description="Last day off (inclusive)")
    # Admins may book on behalf of someone; staff always book for themselves.
    employee_id: Optional[uuid.UUID] = None


class RequestUpdate(BaseModel):
    """Body for PUT /requests/{id} while the request is still pending."""

    type: AbsenceType
    start_date: date
    end_date: date


# ═════════════════════════════════════════════════════════════════════
# Read
# ═════════════════════════════════════════════════════════════════════


class RequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    type: AbsenceType
    start_date: date
    end_date: date
    status: RequestStatus
    created_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None


class ApprovalOut(BaseModel):
    """Result of an approval or cancellation approval."""

    request: RequestOut
    days_applied: int = 0


class ReviewItem(BaseModel):
    """A request awaiting an admin decision, with the colleagues it clashes with."""

    request: RequestOut
    employee_name: str
    store: str
    clashes: list[str] = Field(default_factory=list)


class ClashEntry(BaseModel):
    request_id: uuid.UUID
    names: list[str]


class ClashReport(BaseModel):
    clashes: list[ClashEntry]
