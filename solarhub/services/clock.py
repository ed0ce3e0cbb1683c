"""
Clock used by services that stamp or compare timestamps.

All instants are naive UTC datetimes, the same convention the models store.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current instant in UTC (naive)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Clock:
    def now(self) -> datetime:
        return utcnow()


class FixedClock(Clock):
    """Clock pinned to one instant; used for replays and tests."""

    def __init__(self, instant: datetime):
        self.instant = _naive_utc(instant)

    def now(self) -> datetime:
        return self.instant

    def advance(self, **delta) -> datetime:
        self.instant = self.instant + timedelta(**delta)
        return self.instant


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


system_clock = Clock()


def resolve_clock(clock: Optional[Clock]) -> Clock:
    return clock or system_clock


def get_clock() -> Clock:
    """FastAPI dependency; tests override it with a FixedClock."""
    return system_clock
