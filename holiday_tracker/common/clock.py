"""Clock collaborator so lifecycle rules can be evaluated against a fixed "now"."""

from __future__ import annotations

from datetime import datetime, timezone


class Clock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given instant; used by tests and back-dated imports."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


system_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency: the clock used by lifecycle operations."""
    return system_clock
