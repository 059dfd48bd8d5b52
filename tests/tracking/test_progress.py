# tests/tracking/test_progress.py
"""
Tests for goal progress resolution and manual-edit reconciliation.

Covers:
- Baseline progress per goal type
- Displayed value = max(0, baseline + adjustment)
- Reconciling user-entered values against a moving baseline
"""

from datetime import timedelta

import pytest

from shlfcore.exceptions import InvalidProgressError
from shlfcore.models import GoalType, ReadingGoal
from shlfcore.tracking import add_months
from shlfcore.tracking.progress import clamp_percentage


@pytest.fixture
def make_goal(now):
    def _make(goal_type=GoalType.BOOKS_PER_MONTH, target=4, **overrides):
        data = {
            "type": goal_type,
            "target_value": target,
            "start_date": now,
            "end_date": add_months(now, 1),
        }
        data.update(overrides)
        return ReadingGoal(**data)

    return _make


class TestBaseProgress:
    """Tests for progress derived from the ledger alone."""

    def test_books_within_window(self, resolver, make_goal, finish_book, profile, now):
        goal = make_goal()
        finish_book("before", at=now - timedelta(days=1))
        finish_book("b1", at=now + timedelta(days=1))
        finish_book("b2", at=now + timedelta(days=2))
        finish_book("b2", at=now + timedelta(days=3))
        finish_book("after", at=add_months(now, 1) + timedelta(seconds=1))
        assert resolver.base_progress(goal, profile) == 2

    def test_pages_today(self, resolver, make_goal, log_session, profile, now):
        goal = make_goal(GoalType.PAGES_PER_DAY, 30)
        log_session(pages=12)
        log_session(pages=8)
        log_session(pages=100, at=now - timedelta(days=1))
        assert resolver.base_progress(goal, profile) == 20

    def test_pages_floored_at_zero(self, resolver, make_goal, log_session, profile):
        goal = make_goal(GoalType.PAGES_PER_DAY, 30)
        log_session(pages=10)
        log_session(pages=-25)
        assert resolver.base_progress(goal, profile) == 0

    def test_daily_baseline_resets_on_new_day(self, resolver, make_goal, log_session, profile, clock):
        goal = make_goal(GoalType.PAGES_PER_DAY, 30)
        log_session(pages=25)
        clock.advance(days=1)
        assert resolver.base_progress(goal, profile) == 0

    def test_minutes_today(self, resolver, make_goal, log_session, profile):
        goal = make_goal(GoalType.MINUTES_PER_DAY, 60)
        log_session(minutes=20)
        log_session(minutes=25)
        log_session(minutes=90, counts=False)
        assert resolver.base_progress(goal, profile) == 45

    def test_streak(self, resolver, make_goal, profile):
        goal = make_goal(GoalType.READING_STREAK, 30)
        profile.current_streak = 6
        assert resolver.base_progress(goal, profile) == 6
        profile.streaks_paused = True
        assert resolver.base_progress(goal, profile) == 0


class TestDisplayedValue:
    """Tests for the displayed value and percentage."""

    def test_adjustment_applied(self, resolver, make_goal, finish_book, profile):
        goal = make_goal(manual_adjustment=2)
        finish_book("b1")
        assert resolver.displayed_value(goal, profile) == 3

    def test_floored_at_zero(self, resolver, make_goal, finish_book, profile):
        goal = make_goal(manual_adjustment=-10)
        finish_book("b1")
        assert resolver.displayed_value(goal, profile) == 0

    def test_no_upper_clamp(self, resolver, make_goal, profile):
        goal = make_goal(target=4, manual_adjustment=9)
        assert resolver.displayed_value(goal, profile) == 9
        assert resolver.progress_percentage(goal, profile) == 100.0

    @pytest.mark.parametrize(
        "value, target, expected",
        [(0, 4, 0.0), (2, 4, 50.0), (8, 4, 100.0), (-3, 4, 0.0), (5, 0, 0.0)],
    )
    def test_clamp_percentage(self, value, target, expected):
        assert clamp_percentage(value, target) == expected

    def test_resolve_snapshot(self, resolver, make_goal, finish_book, profile):
        goal = make_goal(manual_adjustment=1)
        finish_book("b1")
        finish_book("b2")
        snapshot = resolver.resolve(goal, profile)
        assert snapshot.baseline == 2
        assert snapshot.manual_adjustment == 1
        assert snapshot.displayed_value == 3
        assert snapshot.percentage == 75.0
        assert snapshot.target_reached is False

    def test_apply_writes_current_value(self, resolver, make_goal, finish_book, profile):
        goal = make_goal()
        finish_book("b1")
        assert resolver.apply(goal, profile) == 1
        assert goal.current_value == 1


class TestReconcile:
    """Tests for manual-edit reconciliation."""

    def test_books_per_month_scenario(self, resolver, make_goal, finish_book, profile, now):
        goal = make_goal(target=4)
        finish_book("b1", at=now + timedelta(hours=1))
        finish_book("b2", at=now + timedelta(hours=2))
        assert resolver.progress_percentage(goal, profile) == 50.0

        resolver.reconcile_manual_edit(goal, profile, 3)
        assert goal.manual_adjustment == 1
        assert goal.current_value == 3

        finish_book("b3", at=now + timedelta(hours=3))
        assert resolver.displayed_value(goal, profile) == 4
        assert resolver.should_auto_complete(goal, profile)

    @pytest.mark.parametrize("value", [0, 1, 2, 7, 250])
    def test_round_trip(self, resolver, make_goal, finish_book, profile, value):
        goal = make_goal()
        finish_book("b1")
        finish_book("b2")
        resolver.reconcile_manual_edit(goal, profile, value)
        assert resolver.displayed_value(goal, profile) == value

    def test_negative_rejected(self, resolver, make_goal, profile):
        goal = make_goal(manual_adjustment=2, current_value=2)
        with pytest.raises(InvalidProgressError):
            resolver.reconcile_manual_edit(goal, profile, -1)
        assert goal.manual_adjustment == 2
        assert goal.current_value == 2

    def test_daily_goal_adjustment_carries_over(self, resolver, make_goal, log_session, profile, clock):
        goal = make_goal(GoalType.PAGES_PER_DAY, 30)
        log_session(pages=10)
        resolver.reconcile_manual_edit(goal, profile, 15)
        assert goal.manual_adjustment == 5
        clock.advance(days=1)
        assert resolver.displayed_value(goal, profile) == 5
