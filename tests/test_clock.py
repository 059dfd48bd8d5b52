# tests/test_clock.py
"""Tests for the injectable clocks."""

from datetime import date, datetime, time

from shlfcore.clock import Clock, FixedClock, SystemClock, end_of_day, start_of_day


class TestFixedClock:
    """Tests for the manually driven clock."""

    def test_now_and_today(self):
        clock = FixedClock(datetime(2025, 3, 1, 21, 30))
        assert clock.now() == datetime(2025, 3, 1, 21, 30)
        assert clock.today() == date(2025, 3, 1)

    def test_advance_crosses_midnight(self):
        clock = FixedClock(datetime(2025, 3, 1, 23, 50))
        clock.advance(minutes=15)
        assert clock.today() == date(2025, 3, 2)

    def test_advance_chains(self):
        clock = FixedClock(datetime(2025, 3, 1, 8, 0))
        assert clock.advance(days=1).advance(hours=2).now() == datetime(2025, 3, 2, 10, 0)

    def test_set(self):
        clock = FixedClock(datetime(2025, 3, 1))
        clock.set(datetime(2024, 2, 29, 6, 0))
        assert clock.today() == date(2024, 2, 29)

    def test_satisfies_protocol(self):
        assert isinstance(FixedClock(), Clock)
        assert isinstance(SystemClock(), Clock)


class TestDayBounds:
    """Tests for start_of_day / end_of_day."""

    def test_bounds(self):
        day = date(2025, 3, 10)
        assert start_of_day(day) == datetime(2025, 3, 10, 0, 0)
        assert end_of_day(day).time() == time.max
        assert end_of_day(day).date() == day
