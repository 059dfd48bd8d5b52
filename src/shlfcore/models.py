# src/shlfcore/models.py
"""
Core data models for the shlfcore library.

This module defines the Pydantic models used to represent reading goals,
the user profile with its gamification counters, unlocked achievements,
and the append-only activity ledger entries (reading sessions, book
completions and streak events).

Enumerations are stored as their typed discriminant. Unknown values are
rejected at validation time rather than silently mapped to a default.

Ownership is single-directional: a :class:`UserProfile` owns its goals and
achievements. A goal's ``profile_id`` is a non-owning back reference used
purely for lookup.
"""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import InvalidDateRangeError

XP_PER_LEVEL = 1000


def _new_id() -> str:
    return str(uuid.uuid4())


class _LenientEnum(str, Enum):
    """String enum that matches values and member names case-insensitively."""

    @classmethod
    def _missing_(cls, value: object):  # type: ignore[override]
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered or member.name.lower() == lowered:
                    return member
        return None  # Let Pydantic raise for truly unknown variants


class GoalType(_LenientEnum):
    """The quantity a reading goal measures."""
    BOOKS_PER_YEAR = "books_per_year"
    BOOKS_PER_MONTH = "books_per_month"
    PAGES_PER_DAY = "pages_per_day"
    MINUTES_PER_DAY = "minutes_per_day"
    READING_STREAK = "reading_streak"

    @property
    def unit(self) -> str:
        return _GOAL_UNITS[self]

    @property
    def is_daily(self) -> bool:
        """Daily goals reset at local midnight."""
        return self in (GoalType.PAGES_PER_DAY, GoalType.MINUTES_PER_DAY)

    @property
    def counts_books(self) -> bool:
        return self in (GoalType.BOOKS_PER_YEAR, GoalType.BOOKS_PER_MONTH)

    @property
    def is_streak(self) -> bool:
        return self is GoalType.READING_STREAK


_GOAL_UNITS = {
    GoalType.BOOKS_PER_YEAR: "books",
    GoalType.BOOKS_PER_MONTH: "books",
    GoalType.PAGES_PER_DAY: "pages",
    GoalType.MINUTES_PER_DAY: "minutes",
    GoalType.READING_STREAK: "days",
}


class GoalDuration(_LenientEnum):
    """Duration presets offered when creating a goal."""
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    CUSTOM = "custom"


class AchievementCategory(_LenientEnum):
    BOOKS = "books"
    PAGES = "pages"
    STREAK = "streak"
    LEVEL = "level"
    SPECIAL = "special"


class AchievementType(_LenientEnum):
    """Milestones that can be unlocked once per profile."""
    FIRST_BOOK = "first_book"
    TEN_BOOKS = "ten_books"
    FIFTY_BOOKS = "fifty_books"
    HUNDRED_BOOKS = "hundred_books"

    HUNDRED_PAGES = "hundred_pages"
    THOUSAND_PAGES = "thousand_pages"
    TEN_THOUSAND_PAGES = "ten_thousand_pages"

    SEVEN_DAY_STREAK = "seven_day_streak"
    THIRTY_DAY_STREAK = "thirty_day_streak"
    HUNDRED_DAY_STREAK = "hundred_day_streak"

    LEVEL_FIVE = "level_five"
    LEVEL_TEN = "level_ten"
    LEVEL_TWENTY = "level_twenty"

    HUNDRED_PAGES_IN_DAY = "hundred_pages_in_day"
    MARATHON_READER = "marathon_reader"

    @property
    def title(self) -> str:
        return _ACHIEVEMENT_TITLES[self]

    @property
    def category(self) -> AchievementCategory:
        return _ACHIEVEMENT_CATEGORIES[self]

    @property
    def is_streak_achievement(self) -> bool:
        return self.category is AchievementCategory.STREAK


_ACHIEVEMENT_TITLES = {
    AchievementType.FIRST_BOOK: "Chapter One",
    AchievementType.TEN_BOOKS: "Shelf Stacker",
    AchievementType.FIFTY_BOOKS: "Library Builder",
    AchievementType.HUNDRED_BOOKS: "Archive Legend",
    AchievementType.HUNDRED_PAGES: "Page Turner",
    AchievementType.THOUSAND_PAGES: "Page Voyager",
    AchievementType.TEN_THOUSAND_PAGES: "Page Titan",
    AchievementType.SEVEN_DAY_STREAK: "Weekly Flame",
    AchievementType.THIRTY_DAY_STREAK: "Monthly Blaze",
    AchievementType.HUNDRED_DAY_STREAK: "Iron Streak",
    AchievementType.LEVEL_FIVE: "Rising Reader",
    AchievementType.LEVEL_TEN: "Seasoned Reader",
    AchievementType.LEVEL_TWENTY: "Master Reader",
    AchievementType.HUNDRED_PAGES_IN_DAY: "Century Sprint",
    AchievementType.MARATHON_READER: "Long Haul",
}

_ACHIEVEMENT_CATEGORIES = {
    AchievementType.FIRST_BOOK: AchievementCategory.BOOKS,
    AchievementType.TEN_BOOKS: AchievementCategory.BOOKS,
    AchievementType.FIFTY_BOOKS: AchievementCategory.BOOKS,
    AchievementType.HUNDRED_BOOKS: AchievementCategory.BOOKS,
    AchievementType.HUNDRED_PAGES: AchievementCategory.PAGES,
    AchievementType.THOUSAND_PAGES: AchievementCategory.PAGES,
    AchievementType.TEN_THOUSAND_PAGES: AchievementCategory.PAGES,
    AchievementType.SEVEN_DAY_STREAK: AchievementCategory.STREAK,
    AchievementType.THIRTY_DAY_STREAK: AchievementCategory.STREAK,
    AchievementType.HUNDRED_DAY_STREAK: AchievementCategory.STREAK,
    AchievementType.LEVEL_FIVE: AchievementCategory.LEVEL,
    AchievementType.LEVEL_TEN: AchievementCategory.LEVEL,
    AchievementType.LEVEL_TWENTY: AchievementCategory.LEVEL,
    AchievementType.HUNDRED_PAGES_IN_DAY: AchievementCategory.SPECIAL,
    AchievementType.MARATHON_READER: AchievementCategory.SPECIAL,
}


class StreakEventType(_LenientEnum):
    DAY = "day"
    SAVED = "saved"
    LOST = "lost"
    STARTED = "started"


# =============================================================================
# Ledger entries
# =============================================================================


class ReadingSession(BaseModel):
    """
    A logged reading session.

    Attributes:
        id: Unique identifier for the session.
        book_id: Identifier of the book that was read.
        started_at: Local time the session started; its date is the session's day.
        pages_read: Pages read. Negative values are corrections.
        duration_minutes: Time spent reading.
        counts_toward_stats: Sessions with this unset never contribute to
            aggregates, streaks or goals.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id, description="Unique identifier for the session.")
    book_id: str = Field(description="Identifier of the book that was read.")
    started_at: datetime = Field(description="Local time at which the session started.")
    pages_read: int = Field(default=0, description="Pages read; negative for corrections.")
    duration_minutes: int = Field(default=0, ge=0, description="Session length in minutes.")
    counts_toward_stats: bool = Field(default=True, description="Whether the session feeds aggregates.")

    @property
    def day(self) -> date:
        return self.started_at.date()


class CompletionEvent(BaseModel):
    """A book being marked finished."""
    model_config = ConfigDict(frozen=True)

    book_id: str = Field(description="Identifier of the finished book.")
    completed_at: datetime = Field(description="Local time at which the book was finished.")


class StreakEvent(BaseModel):
    """A streak history marker. ``SAVED`` days count as reading days."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    day: date
    type: StreakEventType
    streak_length: int = Field(default=0, ge=0)


# =============================================================================
# Goals, achievements and the profile
# =============================================================================


class ReadingGoal(BaseModel):
    """
    A user-defined reading goal.

    ``current_value`` is the value shown to the user. It is kept equal to
    ``max(0, baseline + manual_adjustment)`` where the baseline is derived
    from the activity ledger. ``completion_override`` records a sticky user
    toggle of ``is_completed``; ``None`` means completion is automatic.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=_new_id, description="Opaque goal identifier.")
    type: GoalType = Field(description="What the goal measures.")
    target_value: int = Field(ge=1, description="Quantity to reach (minimum 1).")
    current_value: int = Field(default=0, ge=0, description="Displayed progress.")
    manual_adjustment: int = Field(default=0, description="Signed offset applied on top of the baseline.")
    start_date: datetime = Field(description="Inclusive start of the goal window.")
    end_date: datetime = Field(description="Inclusive end of the goal window.")
    is_completed: bool = False
    completion_override: Optional[bool] = Field(
        default=None, description="Sticky manual completion toggle; None when automatic."
    )
    created_at: datetime = Field(default_factory=datetime.now)
    profile_id: Optional[str] = Field(default=None, description="Non-owning reference to the owning profile.")

    @property
    def progress_percentage(self) -> float:
        """Percentage of the target reached, bounded to [0, 100]."""
        return max(0.0, min(100.0, self.current_value / self.target_value * 100))

    def is_active(self, now: datetime) -> bool:
        return self.start_date <= now <= self.end_date and not self.is_completed

    def has_ended(self, now: datetime) -> bool:
        return self.end_date < now

    def check_window(self) -> None:
        """Raise :class:`InvalidDateRangeError` when the window is inverted."""
        if self.end_date < self.start_date:
            raise InvalidDateRangeError(self.start_date, self.end_date)


class Achievement(BaseModel):
    """An unlocked milestone. ``unlocked_at`` never changes once set."""
    id: str = Field(default_factory=_new_id)
    type: AchievementType
    unlocked_at: datetime
    is_new: bool = True


class UserProfile(BaseModel):
    """
    The single profile of an installation.

    ``total_xp``, ``current_streak``, ``longest_streak`` and
    ``last_reading_date`` are caches of values derived from the ledger;
    ``ledger_revision`` and ``synced_on`` record the ledger revision and
    the local day they were derived at (``-1`` / ``None`` when never synced).
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=_new_id)
    total_xp: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_reading_date: Optional[date] = None
    streaks_paused: bool = False
    last_pardon_date: Optional[datetime] = None
    ledger_revision: int = -1
    synced_on: Optional[date] = None
    goals: List[ReadingGoal] = Field(default_factory=list)
    achievements: List[Achievement] = Field(default_factory=list)

    @property
    def current_level(self) -> int:
        return max(0, self.total_xp) // XP_PER_LEVEL + 1

    @property
    def xp_for_next_level(self) -> int:
        return self.current_level * XP_PER_LEVEL

    @property
    def xp_progress_in_level(self) -> int:
        return max(0, self.total_xp) % XP_PER_LEVEL

    @property
    def xp_progress_percentage(self) -> float:
        return self.xp_progress_in_level / XP_PER_LEVEL * 100

    def get_goal(self, goal_id: str) -> Optional[ReadingGoal]:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        return None

    def has_achievement(self, achievement_type: AchievementType) -> bool:
        return any(a.type == achievement_type for a in self.achievements)
