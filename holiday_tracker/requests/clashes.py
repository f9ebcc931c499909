"""Clash detection for pending holiday requests.

A pending request clashes with a colleague from the same store when the
colleague already has an absence inside the requested range, or has another
pending request whose range overlaps it. Requests awaiting cancellation are
not scored: they free cover rather than consume it.

Plain nested scans; O(P² + P·A) is fine for a handful of stores.
"""

from __future__ import annotations

import uuid
from typing import Iterable

from holiday_tracker.common.constants import RequestStatus


def ranges_overlap(start_a, end_a, start_b, end_b) -> bool:
    """Inclusive date ranges share at least one day."""
    return start_a <= end_b and end_a >= start_b


def detect_clashes(
    requests: Iterable,
    absences: Iterable,
    employees: Iterable,
) -> dict[uuid.UUID, set[str]]:
    """Map each clashing pending request id to the names it clashes with.

    Requests with no clash are left out of the result.
    """
    employees_by_id = {emp.id: emp for emp in employees}
    pending = [r for r in requests if r.status == RequestStatus.pending]

    absence_dates: dict[uuid.UUID, list] = {}
    for absence in absences:
        absence_dates.setdefault(absence.employee_id, []).append(absence.date)

    result: dict[uuid.UUID, set[str]] = {}
    for req in pending:
        emp = employees_by_id.get(req.employee_id)
        if emp is None:
            continue

        names: set[str] = set()

        # Colleagues already off inside the range
        for other in employees_by_id.values():
            if other.id == emp.id or other.store != emp.store:
                continue
            if any(
                req.start_date <= d <= req.end_date
                for d in absence_dates.get(other.id, ())
            ):
                names.add(other.name)

        # Other pending requests for the same store
        for other_req in pending:
            if other_req.id == req.id:
                continue
            other_emp = employees_by_id.get(other_req.employee_id)
            if other_emp is None or other_emp.store != emp.store:
                continue
            if ranges_overlap(
                req.start_date, req.end_date,
                other_req.start_date, other_req.end_date,
            ):
                names.add(other_emp.name)

        if names:
            result[req.id] = names

    return result
