# src/shlfcore/tracking/gamification.py
"""
Gamification engine: XP, levels and reading streaks.

All aggregates are derived from the activity ledger. The counters stored
on :class:`~shlfcore.models.UserProfile` (``total_xp``, ``current_streak``,
``longest_streak``, ``last_reading_date``) are a cache that
:meth:`GamificationEngine.sync` refreshes. XP is re-derived whenever the
ledger revision changes; streaks are recomputed on every sync unless they
are paused. Replaying or re-reading the ledger can never double-count an
award.

XP rules (defaults, see :class:`~shlfcore.config.XPConfig`):
- 1 XP per page logged (negative correction sessions earn nothing)
- +50 XP per finished book
- +10 XP for every reading day whose previous calendar day also qualified

Streak rules:
- A day qualifies if it has at least one counted session, or was saved
  with a pardon.
- The current streak is the run ending today or yesterday; a missing
  "today" does not break it until the whole day passes.

Example:
    engine = GamificationEngine(ledger, clock=FixedClock(now))
    engine.sync(profile)
    print(profile.current_level, engine.streak_status(profile))
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from ..clock import Clock, SystemClock, end_of_day, start_of_day
from ..config.tracking_config import StreakConfig, XPConfig
from ..models import XP_PER_LEVEL, ReadingSession, StreakEvent, StreakEventType, UserProfile
from .ledger import ActivityLedgerProtocol

logger = logging.getLogger(__name__)


def level_for_xp(xp: int) -> int:
    """Level reached with *xp* points. Never below 1."""
    return max(0, xp) // XP_PER_LEVEL + 1


# =============================================================================
# Streak primitives
# =============================================================================


@dataclass(frozen=True)
class StreakStatus:
    """Snapshot of streak counters."""

    current_streak: int
    longest_streak: int
    last_reading_date: Optional[date] = None


def compute_streaks(days: Iterable[date], today: date) -> StreakStatus:
    """
    Compute streak counters from a set of qualifying days.

    Days after *today* are ignored. The current streak is the length of
    the run ending on the last qualifying day, provided that day is today
    or yesterday; otherwise it is 0.

    Args:
        days: Qualifying calendar days, in any order, duplicates allowed.
        today: The local date to evaluate against.

    Returns:
        StreakStatus with current and longest run lengths.
    """
    sorted_days = sorted({d for d in days if d <= today})
    if not sorted_days:
        return StreakStatus(current_streak=0, longest_streak=0, last_reading_date=None)

    longest = 0
    run = 0
    previous: Optional[date] = None
    for day in sorted_days:
        if previous is not None and (day - previous).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day

    last_day = sorted_days[-1]
    current = run if (today - last_day).days <= 1 else 0
    return StreakStatus(current_streak=current, longest_streak=longest, last_reading_date=last_day)


class PardonState(Enum):
    NOT_NEEDED = "not_needed"
    AVAILABLE = "available"
    COOLDOWN = "cooldown"
    EXPIRED = "expired"


@dataclass(frozen=True)
class PardonEligibility:
    """
    Whether a broken streak can be saved.

    Attributes:
        state: Eligibility state.
        missed_day: The single missed day (AVAILABLE / EXPIRED).
        deadline: Last instant the pardon may be applied (AVAILABLE).
        next_available: When the cooldown ends (COOLDOWN).
    """

    state: PardonState
    missed_day: Optional[date] = None
    deadline: Optional[datetime] = None
    next_available: Optional[datetime] = None


@runtime_checkable
class StreakEventSink(Protocol):
    """Ledgers that accept streak events (required to apply pardons)."""

    def add_streak_event(self, event: StreakEvent) -> StreakEvent: ...


# =============================================================================
# Engine
# =============================================================================


class GamificationEngine:
    """
    Derives XP, level and streak aggregates from an activity ledger.

    Args:
        ledger: The activity ledger to read from.
        clock: Source of "now"; defaults to the system clock.
        xp_config: XP award rates.
        streak_config: Pardon settings.
    """

    def __init__(
        self,
        ledger: ActivityLedgerProtocol,
        clock: Optional[Clock] = None,
        xp_config: Optional[XPConfig] = None,
        streak_config: Optional[StreakConfig] = None,
    ) -> None:
        self.ledger = ledger
        self.clock = clock or SystemClock()
        self.xp_config = xp_config or XPConfig()
        self.streak_config = streak_config or StreakConfig()

    @classmethod
    def from_config(
        cls,
        config: Any,
        ledger: ActivityLedgerProtocol,
        clock: Optional[Clock] = None,
    ) -> GamificationEngine:
        """Create an engine from a :class:`~shlfcore.config.TrackingConfig`."""
        return cls(ledger, clock=clock, xp_config=config.xp, streak_config=config.streaks)

    # ----- aggregates ---------------------------------------------------------

    def total_books_read(self) -> int:
        return len({e.book_id for e in self.ledger.all_completion_events()})

    def total_pages_read(self) -> int:
        # Large corrections never push the total below zero
        return max(0, sum(s.pages_read for s in self.ledger.all_sessions()))

    def total_reading_minutes(self) -> int:
        return sum(s.duration_minutes for s in self.ledger.all_sessions())

    def books_read_this_year(self) -> int:
        year = self.clock.today().year
        return len(
            {e.book_id for e in self.ledger.all_completion_events() if e.completed_at.year == year}
        )

    def books_read_this_month(self) -> int:
        today = self.clock.today()
        return len(
            {
                e.book_id
                for e in self.ledger.all_completion_events()
                if (e.completed_at.year, e.completed_at.month) == (today.year, today.month)
            }
        )

    def sessions_today(self) -> List[ReadingSession]:
        today = self.clock.today()
        return self.ledger.sessions_in_range(start_of_day(today), end_of_day(today))

    def pages_read_today(self) -> int:
        return max(0, sum(s.pages_read for s in self.sessions_today()))

    def minutes_read_today(self) -> int:
        return sum(s.duration_minutes for s in self.sessions_today())

    def pages_by_day(self) -> Dict[date, int]:
        totals: Dict[date, int] = defaultdict(int)
        for session in self.ledger.all_sessions():
            totals[session.day] += session.pages_read
        return dict(totals)

    def longest_session_minutes(self) -> int:
        return max((s.duration_minutes for s in self.ledger.all_sessions()), default=0)

    # ----- streaks ------------------------------------------------------------

    def qualifying_days(self) -> set[date]:
        return self.ledger.all_session_dates() | self.ledger.pardoned_days()

    def compute_streaks(self) -> StreakStatus:
        return compute_streaks(self.qualifying_days(), self.clock.today())

    def streak_status(self, profile: UserProfile) -> StreakStatus:
        """Current and longest streak for *profile*, refreshed from the ledger."""
        self.sync(profile)
        return StreakStatus(
            current_streak=profile.current_streak,
            longest_streak=profile.longest_streak,
            last_reading_date=profile.last_reading_date,
        )

    def streak_deadline(self, profile: UserProfile) -> Optional[datetime]:
        """Start of tomorrow if the streak is still alive, else None."""
        self.sync(profile)
        if profile.last_reading_date is None:
            return None
        today = self.clock.today()
        if (today - profile.last_reading_date).days > 1:
            return None
        return start_of_day(today + timedelta(days=1))

    def pardon_eligibility(self, profile: UserProfile) -> PardonEligibility:
        """
        Determine whether the streak can be saved by pardoning a missed day.

        Only a single missed day can be pardoned, within
        ``pardon_window_hours`` of the start of that day, and at most once
        per ``pardon_cooldown_days``.
        """
        if profile.streaks_paused:
            return PardonEligibility(PardonState.NOT_NEEDED)

        self.sync(profile)
        last_day = profile.last_reading_date
        if last_day is None:
            return PardonEligibility(PardonState.NOT_NEEDED)

        now = self.clock.now()
        days_since = (self.clock.today() - last_day).days
        if days_since < 2:
            return PardonEligibility(PardonState.NOT_NEEDED)

        missed_day = last_day + timedelta(days=1)
        if days_since != 2:
            return PardonEligibility(PardonState.EXPIRED, missed_day=missed_day)

        deadline = start_of_day(missed_day) + timedelta(hours=self.streak_config.pardon_window_hours)
        if now > deadline:
            return PardonEligibility(PardonState.EXPIRED, missed_day=missed_day)

        if profile.last_pardon_date is not None:
            cooldown_end = profile.last_pardon_date + timedelta(
                days=self.streak_config.pardon_cooldown_days
            )
            if now < cooldown_end:
                return PardonEligibility(PardonState.COOLDOWN, next_available=cooldown_end)

        return PardonEligibility(PardonState.AVAILABLE, missed_day=missed_day, deadline=deadline)

    def apply_pardon(self, profile: UserProfile) -> PardonEligibility:
        """
        Save the missed day if a pardon is available.

        Records a ``SAVED`` streak event in the ledger and refreshes the
        profile's streak counters.

        Returns:
            The eligibility that was evaluated. The pardon was applied only
            when its state is AVAILABLE.

        Raises:
            TypeError: If the ledger does not accept streak events.
        """
        eligibility = self.pardon_eligibility(profile)
        if eligibility.state is not PardonState.AVAILABLE:
            logger.debug("Pardon not applied: %s", eligibility.state.value)
            return eligibility

        if not isinstance(self.ledger, StreakEventSink):
            raise TypeError(f"Ledger {type(self.ledger).__name__} does not accept streak events")

        self.ledger.add_streak_event(
            StreakEvent(
                day=eligibility.missed_day,
                type=StreakEventType.SAVED,
                streak_length=profile.current_streak,
            )
        )
        profile.last_pardon_date = self.clock.now()
        self.sync(profile, force=True)
        logger.info(
            "Streak pardon applied for %s; streak is now %d",
            eligibility.missed_day,
            profile.current_streak,
        )
        return eligibility

    # ----- XP -----------------------------------------------------------------

    def xp_for_session(self, session: ReadingSession) -> int:
        xp = max(0, session.pages_read) * self.xp_config.xp_per_page
        for tier in self.xp_config.duration_bonuses:
            if session.duration_minutes >= tier.min_minutes:
                xp += tier.bonus
                break
        return xp

    def streak_extension_days(self) -> int:
        """Reading days whose previous calendar day also qualified."""
        qualifying = self.qualifying_days()
        return sum(
            1 for day in self.ledger.all_session_dates() if day - timedelta(days=1) in qualifying
        )

    def derive_total_xp(self) -> int:
        """Total XP re-derived from the full ledger."""
        session_xp = sum(self.xp_for_session(s) for s in self.ledger.all_sessions())
        book_xp = self.total_books_read() * self.xp_config.book_completion_bonus
        streak_xp = self.streak_extension_days() * self.xp_config.streak_day_bonus
        return session_xp + book_xp + streak_xp

    def sync(self, profile: UserProfile, force: bool = False) -> bool:
        """
        Refresh the profile's cached counters from the ledger.

        XP is recomputed when the ledger revision changed. Streaks are
        recomputed on every call unless streaks are paused, so resuming
        streaks picks up days logged while paused. ``longest_streak``
        never decreases.

        Args:
            profile: Profile whose counters are refreshed in place.
            force: Recompute XP even if the ledger did not change.

        Returns:
            True if any cached counter or the sync stamp changed.
        """
        revision = self.ledger.revision
        today = self.clock.today()
        ledger_changed = force or profile.ledger_revision != revision
        changed = ledger_changed or profile.synced_on != today

        if ledger_changed:
            previous_level = profile.current_level
            profile.total_xp = self.derive_total_xp()
            if profile.current_level > previous_level:
                logger.info("Level up: %d -> %d", previous_level, profile.current_level)

        if not profile.streaks_paused:
            status = self.compute_streaks()
            counters = (
                status.current_streak,
                max(profile.longest_streak, status.longest_streak),
                status.last_reading_date,
            )
            if counters != (profile.current_streak, profile.longest_streak, profile.last_reading_date):
                profile.current_streak, profile.longest_streak, profile.last_reading_date = counters
                changed = True

        if not changed:
            return False

        profile.ledger_revision = revision
        profile.synced_on = today
        logger.debug(
            "Profile %s synced at ledger revision %d: xp=%d streak=%d/%d",
            profile.id,
            revision,
            profile.total_xp,
            profile.current_streak,
            profile.longest_streak,
        )
        return True
