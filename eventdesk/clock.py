"""Injectable clock so date defaults and projections can be pinned in tests."""

from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current local time."""

    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Clock backed by the wall clock."""

    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock frozen at a given instant."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def today(self) -> date:
        return self.instant.date()


system_clock = SystemClock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    return system_clock
