# src/shlfcore/clock.py
"""
Injectable date/time providers.

Every "today"/"now" dependency in the tracking core goes through a
:class:`Clock` so day boundaries can be simulated deterministically.
All datetimes are naive and expressed in local wall-clock time; a calendar
day is the local date of a timestamp.

Example:
    >>> clock = FixedClock(datetime(2025, 3, 1, 21, 30))
    >>> clock.today()
    datetime.date(2025, 3, 1)
    >>> clock.advance(days=1).today()
    datetime.date(2025, 3, 2)
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Protocol for wall-clock providers."""

    def now(self) -> datetime: ...
    def today(self) -> date: ...


class SystemClock:
    """Clock backed by the system's local time."""

    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """
    A manually driven clock.

    Args:
        current: Initial instant. Defaults to the current local time.
    """

    def __init__(self, current: datetime | None = None) -> None:
        self._current = current or datetime.now()

    def now(self) -> datetime:
        return self._current

    def today(self) -> date:
        return self._current.date()

    def set(self, current: datetime) -> FixedClock:
        """Jump to an absolute instant."""
        self._current = current
        return self

    def advance(self, days: int = 0, hours: int = 0, minutes: int = 0) -> FixedClock:
        """Move the clock forward (or backward, with negative values)."""
        self._current = self._current + timedelta(days=days, hours=hours, minutes=minutes)
        return self


def start_of_day(day: date) -> datetime:
    """Return local midnight at the beginning of *day*."""
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    """Return the last representable instant of *day*."""
    return datetime.combine(day, time.max)
