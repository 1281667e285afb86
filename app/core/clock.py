"""Injectable clock so "now" and "today" can be pinned in tests."""

from datetime import date, datetime


class Clock:
    """Wall clock in naive UTC, matching the timestamps stored by the models."""

    def now(self) -> datetime:
        return datetime.utcnow()

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock frozen at a given instant."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


system_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    return system_clock
