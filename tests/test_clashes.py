"""Clash detector tests over plain in-memory records."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date

from holiday_tracker.common.constants import AbsenceType, RequestStatus
from holiday_tracker.requests.clashes import detect_clashes, ranges_overlap


@dataclass
class _Emp:
    name: str
    store: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class _Req:
    employee_id: uuid.UUID
    start_date: date
    end_date: date
    status: RequestStatus = RequestStatus.pending
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class _Abs:
    employee_id: uuid.UUID
    date: date
    type: AbsenceType = AbsenceType.holiday


def test_ranges_overlap_is_inclusive():
    assert ranges_overlap(date(2026, 6, 1), date(2026, 6, 3), date(2026, 6, 3), date(2026, 6, 5))
    assert not ranges_overlap(date(2026, 6, 1), date(2026, 6, 2), date(2026, 6, 3), date(2026, 6, 5))


def test_downtown_scenario():
    """A, B in Downtown and C in Uptown, all off around the same week."""
    a = _Emp("A", "Downtown")
    b = _Emp("B", "Downtown")
    c = _Emp("C", "Uptown")
    req_a = _Req(a.id, date(2026, 6, 1), date(2026, 6, 5))
    absences = [_Abs(b.id, date(2026, 6, 3)), _Abs(c.id, date(2026, 6, 3))]

    result = detect_clashes([req_a], absences, [a, b, c])

    assert result == {req_a.id: {"B"}}


def test_overlapping_pending_requests_clash_both_ways():
    a = _Emp("A", "Downtown")
    b = _Emp("B", "Downtown")
    req_a = _Req(a.id, date(2026, 6, 1), date(2026, 6, 5))
    req_b = _Req(b.id, date(2026, 6, 5), date(2026, 6, 9))

    result = detect_clashes([req_a, req_b], [], [a, b])

    assert result == {req_a.id: {"B"}, req_b.id: {"A"}}


def test_other_stores_are_ignored():
    a = _Emp("A", "Downtown")
    c = _Emp("C", "Uptown")
    req_a = _Req(a.id, date(2026, 6, 1), date(2026, 6, 5))
    req_c = _Req(c.id, date(2026, 6, 1), date(2026, 6, 5))

    assert detect_clashes([req_a, req_c], [_Abs(c.id, date(2026, 6, 2))], [a, c]) == {}


def test_own_absences_do_not_clash():
    a = _Emp("A", "Downtown")
    req_a = _Req(a.id, date(2026, 6, 1), date(2026, 6, 5))

    assert detect_clashes([req_a], [_Abs(a.id, date(2026, 6, 2))], [a]) == {}


def test_same_employee_overlapping_pending_requests_are_reported():
    a = _Emp("A", "Downtown")
    first = _Req(a.id, date(2026, 6, 1), date(2026, 6, 5))
    second = _Req(a.id, date(2026, 6, 4), date(2026, 6, 8))

    result = detect_clashes([first, second], [], [a])

    assert result == {first.id: {"A"}, second.id: {"A"}}


def test_only_pending_requests_are_scored_or_counted():
    a = _Emp("A", "Downtown")
    b = _Emp("B", "Downtown")
    approved = _Req(a.id, date(2026, 6, 1), date(2026, 6, 5), status=RequestStatus.approved)
    cancel_pending = _Req(
        b.id, date(2026, 6, 1), date(2026, 6, 5), status=RequestStatus.cancel_pending,
    )

    assert detect_clashes([approved, cancel_pending], [], [a, b]) == {}


def test_names_are_deduplicated():
    a = _Emp("A", "Downtown")
    b = _Emp("B", "Downtown")
    req_a = _Req(a.id, date(2026, 6, 1), date(2026, 6, 5))
    req_b = _Req(b.id, date(2026, 6, 2), date(2026, 6, 3))
    absences = [_Abs(b.id, date(2026, 6, 1)), _Abs(b.id, date(2026, 6, 4))]

    result = detect_clashes([req_a, req_b], absences, [a, b])

    assert result[req_a.id] == {"B"}


def test_absence_outside_range_does_not_clash():
    a = _Emp("A", "Downtown")
    b = _Emp("B", "Downtown")
    req_a = _Req(a.id, date(2026, 6, 2), date(2026, 6, 4))

    assert detect_clashes([req_a], [_Abs(b.id, date(2026, 6, 5))], [a, b]) == {}


def test_request_for_unknown_employee_is_skipped():
    a = _Emp("A", "Downtown")
    orphan = _Req(uuid.uuid4(), date(2026, 6, 1), date(2026, 6, 5))
    req_a = _Req(a.id, date(2026, 6, 1), date(2026, 6, 5))

    assert detect_clashes([orphan, req_a], [], [a]) == {}
