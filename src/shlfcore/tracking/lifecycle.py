# src/shlfcore/tracking/lifecycle.py
"""
Goal lifecycle orchestration.

:class:`GoalLifecycleManager` is the entry point presentation layers use to
create, edit, complete, refresh and delete reading goals. It validates
every change before touching the goal, routes progress through
:class:`~shlfcore.tracking.progress.GoalProgressResolver`, and commits the
profile after each mutation.

Completion has two writers:
- Automatic: a goal whose displayed value reaches its target is marked
  completed (latching; it is not un-completed by a later drop).
- Manual: :meth:`GoalLifecycleManager.set_completed` records a sticky
  override that automatic refreshes never flip. Editing the goal's target
  or dates clears the override and re-derives completion.

Example:
    manager = GoalLifecycleManager(store, ledger, clock=clock)
    profile = manager.get_or_create_profile()
    goal = manager.create_goal(profile, GoalType.BOOKS_PER_MONTH, 4, duration=GoalDuration.MONTH)
    manager.update_manual_progress(profile, goal.id, 3)
    unlocked = manager.record_activity(profile)
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Union

from ..clock import Clock, SystemClock, end_of_day, start_of_day
from ..config.tracking_config import GoalsConfig
from ..exceptions import (
    GoalNotFoundError,
    InvalidDateRangeError,
    InvalidProgressError,
    InvalidTargetError,
    UnavailableGoalTypeError,
)
from ..logging_config import log_display
from ..models import Achievement, GoalDuration, GoalType, ReadingGoal, UserProfile
from .achievements import AchievementEvaluator
from .gamification import GamificationEngine, StreakStatus
from .ledger import ActivityLedgerProtocol
from .progress import GoalProgressResolver
from .store import ProfileStorageProtocol, ProfileStore

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar-correct month addition; the day is clamped to the month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _as_end_datetime(value: DateLike) -> datetime:
    # A bare date covers the whole day
    if isinstance(value, datetime):
        return value
    return end_of_day(value)


class GoalLifecycleManager:
    """
    Orchestrates goal creation, edits, completion, expiry and deletion.

    Args:
        store: Profile storage backend; ``commit`` is called after every mutation.
        ledger: Activity ledger shared with the engines.
        clock: Source of "now"; defaults to the system clock.
        engine: Gamification engine (built from *ledger* when omitted).
        resolver: Progress resolver (built from *ledger* when omitted).
        evaluator: Achievement evaluator (built from *engine* when omitted).
        goals_config: Goal creation bounds.
        achievements_enabled: Evaluate achievements in :meth:`record_activity`.
    """

    def __init__(
        self,
        store: ProfileStorageProtocol,
        ledger: ActivityLedgerProtocol,
        clock: Optional[Clock] = None,
        engine: Optional[GamificationEngine] = None,
        resolver: Optional[GoalProgressResolver] = None,
        evaluator: Optional[AchievementEvaluator] = None,
        goals_config: Optional[GoalsConfig] = None,
        achievements_enabled: bool = True,
    ) -> None:
        self.store = store
        self.ledger = ledger
        self.clock = clock or SystemClock()
        self.engine = engine or GamificationEngine(ledger, clock=self.clock)
        self.resolver = resolver or GoalProgressResolver(ledger, clock=self.clock)
        self.evaluator = evaluator or AchievementEvaluator(self.engine, clock=self.clock)
        self.goals_config = goals_config or GoalsConfig()
        self.achievements_enabled = achievements_enabled

    # ----- factory ------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: Any,
        ledger: ActivityLedgerProtocol,
        clock: Optional[Clock] = None,
        store: Optional[ProfileStorageProtocol] = None,
    ) -> GoalLifecycleManager:
        """
        Create a fully wired manager from a :class:`~shlfcore.config.TrackingConfig`.

        Args:
            config: Root tracking configuration.
            ledger: Activity ledger.
            clock: Optional clock override.
            store: Optional storage override (default: ProfileStore from config).
        """
        clock = clock or SystemClock()
        if store is None:
            store = ProfileStore.from_config(config.storage)
        engine = GamificationEngine.from_config(config, ledger, clock=clock)
        return cls(
            store=store,
            ledger=ledger,
            clock=clock,
            engine=engine,
            goals_config=config.goals,
            achievements_enabled=config.achievements.enabled,
        )

    # ----- profile ------------------------------------------------------------

    def get_or_create_profile(self) -> UserProfile:
        """Load the profile, creating and committing a default one when none exists."""
        profile = self.store.load_profile()
        if profile is None:
            profile = UserProfile()
            logger.info("No profile found; created default profile %s", profile.id)
            self._commit(profile)
        return profile

    def delete_profile(self) -> None:
        """Discard the profile along with every goal and achievement it owns."""
        self.store.delete_profile()

    # ----- goal types and durations -------------------------------------------

    def available_goal_types(self, profile: UserProfile) -> List[GoalType]:
        return [t for t in GoalType if not (t.is_streak and profile.streaks_paused)]

    def normalize_goal_type(self, profile: UserProfile, selected: Union[GoalType, str]) -> GoalType:
        """Return *selected* if still available, else the first available type."""
        available = self.available_goal_types(profile)
        selected = GoalType(selected)
        if selected in available:
            return selected
        logger.debug("Goal type %s unavailable; falling back to %s", selected.value, available[0].value)
        return available[0]

    def end_date_for(
        self,
        duration: Union[GoalDuration, str],
        custom_end: Optional[DateLike] = None,
        start: Optional[datetime] = None,
    ) -> datetime:
        """
        Compute a goal's end from a duration preset.

        Args:
            duration: Week, Month, Quarter, Year or Custom.
            custom_end: The user-picked end for Custom; must not be before today.
            start: Window start; defaults to now.

        Raises:
            InvalidDateRangeError: If a Custom end is missing or in the past.
        """
        start = start or self.clock.now()
        duration = GoalDuration(duration)

        if duration is GoalDuration.WEEK:
            return start + timedelta(weeks=1)
        if duration is GoalDuration.MONTH:
            return add_months(start, 1)
        if duration is GoalDuration.QUARTER:
            return add_months(start, 3)
        if duration is GoalDuration.YEAR:
            return add_months(start, 12)

        if custom_end is None:
            raise InvalidDateRangeError(start, None, "A custom duration needs an end date.")
        end = _as_end_datetime(custom_end)
        if end.date() < self.clock.today():
            raise InvalidDateRangeError(start, end, "Custom end date cannot be before today.")
        return end

    # ----- creation -----------------------------------------------------------

    def create_goal(
        self,
        profile: UserProfile,
        goal_type: Union[GoalType, str],
        target_value: int,
        end_date: Optional[DateLike] = None,
        duration: Optional[Union[GoalDuration, str]] = None,
    ) -> ReadingGoal:
        """
        Create a goal starting now and attach it to *profile*.

        Either *end_date* (treated like a Custom duration) or *duration*
        may be given; with neither, the configured default duration is used.

        Raises:
            InvalidTargetError: If *target_value* is below 1 or above the configured maximum.
            InvalidDateRangeError: If the end date is before today.
            UnavailableGoalTypeError: If the type is not offered for *profile*.
        """
        goal_type = GoalType(goal_type)
        if goal_type not in self.available_goal_types(profile):
            raise UnavailableGoalTypeError(goal_type.value)
        self._validate_target(target_value)

        now = self.clock.now()
        if end_date is not None:
            end = self.end_date_for(GoalDuration.CUSTOM, custom_end=end_date, start=now)
        else:
            end = self.end_date_for(duration or self.goals_config.default_duration, start=now)
        if end < now:
            raise InvalidDateRangeError(now, end)

        self.engine.sync(profile)
        goal = ReadingGoal(
            type=goal_type,
            target_value=target_value,
            start_date=now,
            end_date=end,
            created_at=now,
            profile_id=profile.id,
        )
        self.resolver.apply(goal, profile)
        self._apply_auto_completion(goal)

        profile.goals.append(goal)
        logger.info(
            "Goal created: %s target=%d %s until %s (id=%s)",
            goal_type.value,
            target_value,
            goal_type.unit,
            end.date().isoformat(),
            goal.id,
        )
        self._commit(profile)
        return goal

    # ----- queries ------------------------------------------------------------

    def get_goal(self, profile: UserProfile, goal_id: str) -> ReadingGoal:
        goal = profile.get_goal(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)
        return goal

    def resolve_displayed_value(self, goal: ReadingGoal, profile: UserProfile) -> int:
        self.engine.sync(profile)
        return self.resolver.displayed_value(goal, profile)

    def expired_goals(self, profile: UserProfile) -> List[ReadingGoal]:
        """Goals whose window has ended without being completed."""
        now = self.clock.now()
        return [g for g in profile.goals if g.has_ended(now) and not g.is_completed]

    def active_goals(self, profile: UserProfile) -> List[ReadingGoal]:
        now = self.clock.now()
        return [g for g in profile.goals if g.is_active(now)]

    def streak_status(self, profile: UserProfile) -> StreakStatus:
        return self.engine.streak_status(profile)

    # ----- edits --------------------------------------------------------------

    def reconcile_manual_edit(self, goal: ReadingGoal, profile: UserProfile, value: int) -> ReadingGoal:
        """Reconcile a user-entered value without committing."""
        self.engine.sync(profile)
        return self.resolver.reconcile_manual_edit(goal, profile, value)

    def update_manual_progress(self, profile: UserProfile, goal_id: str, value: int) -> ReadingGoal:
        """
        Set a goal's displayed progress directly.

        The manual adjustment is recomputed against the current baseline
        before the profile is committed.
        """
        goal = self.get_goal(profile, goal_id)
        self.reconcile_manual_edit(goal, profile, value)
        self._apply_auto_completion(goal)
        self._commit(profile)
        return goal

    def edit_goal(
        self,
        profile: UserProfile,
        goal_id: str,
        target_value: Optional[int] = None,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        current_value: Optional[int] = None,
    ) -> ReadingGoal:
        """
        Edit a goal's target, window and/or displayed progress.

        All values are validated before the goal is modified. Changing the
        target or dates clears any manual completion override and
        re-derives completion from the new values. When *current_value* is
        given it is reconciled against the baseline of the edited window.

        Raises:
            InvalidTargetError: If *target_value* is out of bounds.
            InvalidDateRangeError: If the edited window would end before it starts.
            InvalidProgressError: If *current_value* is negative.
        """
        goal = self.get_goal(profile, goal_id)
        if target_value is not None:
            self._validate_target(target_value)

        new_start = goal.start_date
        if start_date is not None:
            new_start = start_date if isinstance(start_date, datetime) else start_of_day(start_date)
        new_end = goal.end_date if end_date is None else _as_end_datetime(end_date)
        if new_end < new_start:
            raise InvalidDateRangeError(new_start, new_end)
        if current_value is not None and current_value < 0:
            raise InvalidProgressError(current_value)

        definition_changed = (
            (target_value is not None and target_value != goal.target_value)
            or new_start != goal.start_date
            or new_end != goal.end_date
        )

        if target_value is not None:
            goal.target_value = target_value
        goal.start_date = new_start
        goal.end_date = new_end

        self.engine.sync(profile)
        if current_value is not None:
            self.resolver.reconcile_manual_edit(goal, profile, current_value)
        else:
            self.resolver.apply(goal, profile)

        if definition_changed:
            goal.completion_override = None
            goal.is_completed = goal.current_value >= goal.target_value
            logger.debug("Goal %s redefined; completion re-derived as %s", goal.id, goal.is_completed)
        else:
            self._apply_auto_completion(goal)

        self._commit(profile)
        return goal

    def set_completed(self, profile: UserProfile, goal_id: str, completed: bool) -> ReadingGoal:
        """Manually mark a goal completed or incomplete. The choice is sticky."""
        goal = self.get_goal(profile, goal_id)
        goal.completion_override = completed
        goal.is_completed = completed
        logger.info("Goal %s manually marked %s", goal.id, "completed" if completed else "incomplete")
        self._commit(profile)
        return goal

    def delete_goal(self, profile: UserProfile, goal_id: str) -> None:
        goal = self.get_goal(profile, goal_id)
        profile.goals.remove(goal)
        logger.info("Goal deleted: %s", goal_id)
        self._commit(profile)

    # ----- recomputation ------------------------------------------------------

    def refresh_goals(self, profile: UserProfile) -> List[ReadingGoal]:
        """
        Recompute every running goal from the ledger and commit.

        Goals whose window has ended keep their last value.

        Returns:
            Goals that became completed during this refresh.
        """
        completed = self._refresh(profile)
        self._commit(profile)
        return completed

    def evaluate_achievements(self, profile: UserProfile) -> List[Achievement]:
        """Unlock newly reached achievements; commits only when something was unlocked."""
        unlocked = self.evaluator.evaluate(profile)
        if unlocked:
            self._commit(profile)
        return unlocked

    def record_activity(self, profile: UserProfile) -> List[Achievement]:
        """
        Bring the profile up to date after the ledger changed.

        Syncs XP and streaks, refreshes goals, evaluates achievements and
        commits once.

        Returns:
            Achievements unlocked by this call.
        """
        self._refresh(profile)
        unlocked = self.evaluator.evaluate(profile) if self.achievements_enabled else []
        self._commit(profile)
        return unlocked

    # ----- internals ----------------------------------------------------------

    def _refresh(self, profile: UserProfile) -> List[ReadingGoal]:
        self.engine.sync(profile)
        now = self.clock.now()
        completed: List[ReadingGoal] = []
        for goal in profile.goals:
            if goal.has_ended(now):
                logger.debug("Skipping ended goal %s (%s)", goal.id, goal.type.value)
                continue
            self.resolver.apply(goal, profile)
            if self._apply_auto_completion(goal):
                completed.append(goal)
        return completed

    def _apply_auto_completion(self, goal: ReadingGoal) -> bool:
        if goal.completion_override is not None or goal.is_completed:
            return False
        if goal.current_value >= goal.target_value:
            goal.is_completed = True
            log_display(logger, logging.INFO, "Goal completed: %s (id=%s)", goal.type.value, goal.id)
            return True
        return False

    def _validate_target(self, target_value: int) -> None:
        if target_value < 1 or target_value > self.goals_config.max_target_value:
            raise InvalidTargetError(target_value)

    def _commit(self, profile: UserProfile) -> bool:
        return self.store.commit(profile)
