"""Entitlement calculator: per-employee absence counts and remaining holiday."""

from __future__ import annotations

from typing import Iterable, Optional

from holiday_tracker.absences.schemas import EntitlementSummary
from holiday_tracker.common.constants import AbsenceType


def summarize(
    employee,
    absences: Iterable,
    *,
    year: Optional[int] = None,
) -> EntitlementSummary:
    """Count the employee's absences by type.

    Only Holiday absences draw down the entitlement; Sick and Personal days
    are reported but leave ``remaining`` alone. With *year* set, only
    records dated in that calendar year are counted.
    """
    counts = {t: 0 for t in AbsenceType}
    for absence in absences:
        if absence.employee_id != employee.id:
            continue
        if year is not None and absence.date.year != year:
            continue
        counts[absence.type] += 1

    holiday = counts[AbsenceType.holiday]
    return EntitlementSummary(
        employee_id=employee.id,
        name=employee.name,
        store=employee.store,
        holiday=holiday,
        sick=counts[AbsenceType.sick],
        personal=counts[AbsenceType.personal],
        entitlement=employee.entitlement_days,
        remaining=employee.entitlement_days - holiday,
    )
