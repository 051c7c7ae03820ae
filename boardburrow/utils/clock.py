"""
Calendar arithmetic behind an injectable clock.

All date math in the rental engine goes through a ``Clock`` so tests can
pin "now" and the local timezone.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional


class Clock(ABC):
    """Source of the current time plus the calendar operations the domain needs."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current local time."""
        pass

    def add_days(self, moment: datetime, days: int) -> datetime:
        """Move a moment by whole calendar days, keeping the wall-clock time."""
        return moment + timedelta(days=days)

    def add_hours(self, moment: datetime, hours: int) -> datetime:
        """Move a moment by a number of hours."""
        return moment + timedelta(hours=hours)

    def at_hour(self, moment: datetime, hour: int) -> datetime:
        """Return the same calendar day at ``hour``:00."""
        return moment.replace(hour=hour, minute=0, second=0, microsecond=0)


class SystemClock(Clock):
    """Clock backed by the host's local time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Clock frozen at a given moment; ``advance`` moves it forward."""

    def __init__(self, moment: Optional[datetime] = None):
        self._moment = moment or datetime(2025, 8, 25, 10, 0)

    def now(self) -> datetime:
        return self._moment

    def advance(self, **delta) -> None:
        """Move the clock forward by a ``timedelta(**delta)``."""
        self._moment = self._moment + timedelta(**delta)
