# src/shlfcore/tracking/progress.py
"""
Goal progress resolution and manual-edit reconciliation.

A goal's *baseline* is what the activity ledger alone says about it. The
value shown to the user is the baseline plus the goal's stored
``manual_adjustment``, floored at zero (a user may overshoot the target).

When the user sets the displayed value directly, the adjustment is
recomputed as ``value - baseline`` so that later ledger growth keeps
moving the displayed value from the user's correction instead of
overwriting it.

Example:
    resolver = GoalProgressResolver(ledger, clock=clock)
    resolver.reconcile_manual_edit(goal, profile, 3)
    assert resolver.displayed_value(goal, profile) == 3
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..clock import Clock, SystemClock, end_of_day, start_of_day
from ..exceptions import InvalidProgressError
from ..models import GoalType, ReadingGoal, UserProfile
from .ledger import ActivityLedgerProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressSnapshot:
    """Everything the presentation layer needs to render one goal."""

    baseline: int
    manual_adjustment: int
    displayed_value: int
    target_value: int
    percentage: float
    target_reached: bool


def clamp_percentage(value: int, target: int) -> float:
    """``value / target`` as a percentage bounded to [0, 100]."""
    if target < 1:
        return 0.0
    return max(0.0, min(100.0, value / target * 100))


class GoalProgressResolver:
    """
    Computes baseline and displayed progress for reading goals.

    Args:
        ledger: Activity ledger queried on every call; results are never
            cached so each read reflects every entry appended before it.
        clock: Source of "today" for daily goals.
    """

    def __init__(self, ledger: ActivityLedgerProtocol, clock: Optional[Clock] = None) -> None:
        self.ledger = ledger
        self.clock = clock or SystemClock()

    def base_progress(self, goal: ReadingGoal, profile: UserProfile) -> int:
        """
        Progress derivable from the ledger alone, ignoring manual edits.

        - Book goals: distinct books finished within the goal window.
        - Daily goals: pages or minutes logged today.
        - Streak goals: the profile's current streak (0 while paused).
        """
        if goal.type.counts_books:
            events = self.ledger.completion_events_in_range(goal.start_date, goal.end_date)
            return len({e.book_id for e in events})

        if goal.type.is_daily:
            today = self.clock.today()
            sessions = self.ledger.sessions_in_range(start_of_day(today), end_of_day(today))
            if goal.type is GoalType.PAGES_PER_DAY:
                return max(0, sum(s.pages_read for s in sessions))
            return sum(s.duration_minutes for s in sessions)

        if goal.type.is_streak:
            return 0 if profile.streaks_paused else profile.current_streak

        raise ValueError(f"Unhandled goal type: {goal.type!r}")

    def displayed_value(self, goal: ReadingGoal, profile: UserProfile) -> int:
        return max(0, self.base_progress(goal, profile) + goal.manual_adjustment)

    def progress_percentage(self, goal: ReadingGoal, profile: UserProfile) -> float:
        return clamp_percentage(self.displayed_value(goal, profile), goal.target_value)

    def should_auto_complete(self, goal: ReadingGoal, profile: UserProfile) -> bool:
        return self.displayed_value(goal, profile) >= goal.target_value

    def resolve(self, goal: ReadingGoal, profile: UserProfile) -> ProgressSnapshot:
        baseline = self.base_progress(goal, profile)
        displayed = max(0, baseline + goal.manual_adjustment)
        return ProgressSnapshot(
            baseline=baseline,
            manual_adjustment=goal.manual_adjustment,
            displayed_value=displayed,
            target_value=goal.target_value,
            percentage=clamp_percentage(displayed, goal.target_value),
            target_reached=displayed >= goal.target_value,
        )

    def apply(self, goal: ReadingGoal, profile: UserProfile) -> int:
        """Write the displayed value into ``goal.current_value`` and return it."""
        value = self.displayed_value(goal, profile)
        goal.current_value = value
        return value

    def reconcile_manual_edit(self, goal: ReadingGoal, profile: UserProfile, value: int) -> ReadingGoal:
        """
        Record a user-entered progress value.

        Sets ``manual_adjustment = value - baseline`` and
        ``current_value = value`` on *goal*. Nothing is persisted here;
        callers save afterwards.

        Raises:
            InvalidProgressError: If *value* is negative.
        """
        if value < 0:
            raise InvalidProgressError(value)

        baseline = self.base_progress(goal, profile)
        goal.manual_adjustment = value - baseline
        goal.current_value = value
        logger.debug(
            "Goal %s reconciled: value=%d baseline=%d adjustment=%d",
            goal.id,
            value,
            baseline,
            goal.manual_adjustment,
        )
        return goal
