# src/shlfcore/tracking/achievements.py
"""
Achievement evaluation.

Each :class:`~shlfcore.models.AchievementType` is bound to one rule: a
metric read from the gamification engine and a threshold. Evaluation
unlocks every type whose rule holds and that the profile does not already
own. Rules are independent, so evaluation order never changes the result,
and nothing is ever revoked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..clock import Clock
from ..logging_config import log_display
from ..models import Achievement, AchievementType, UserProfile
from .gamification import GamificationEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementRule:
    """Unlock ``type`` once ``metric`` reaches ``threshold``."""

    type: AchievementType
    metric: str
    threshold: int


ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule(AchievementType.FIRST_BOOK, "books", 1),
    AchievementRule(AchievementType.TEN_BOOKS, "books", 10),
    AchievementRule(AchievementType.FIFTY_BOOKS, "books", 50),
    AchievementRule(AchievementType.HUNDRED_BOOKS, "books", 100),
    AchievementRule(AchievementType.HUNDRED_PAGES, "pages", 100),
    AchievementRule(AchievementType.THOUSAND_PAGES, "pages", 1_000),
    AchievementRule(AchievementType.TEN_THOUSAND_PAGES, "pages", 10_000),
    AchievementRule(AchievementType.SEVEN_DAY_STREAK, "streak", 7),
    AchievementRule(AchievementType.THIRTY_DAY_STREAK, "streak", 30),
    AchievementRule(AchievementType.HUNDRED_DAY_STREAK, "streak", 100),
    AchievementRule(AchievementType.LEVEL_FIVE, "level", 5),
    AchievementRule(AchievementType.LEVEL_TEN, "level", 10),
    AchievementRule(AchievementType.LEVEL_TWENTY, "level", 20),
    AchievementRule(AchievementType.HUNDRED_PAGES_IN_DAY, "best_day_pages", 100),
    AchievementRule(AchievementType.MARATHON_READER, "longest_session_minutes", 180),
)


class AchievementEvaluator:
    """
    Unlocks achievements from the engine's aggregates.

    Args:
        engine: Gamification engine providing the aggregates.
        clock: Source of ``unlocked_at`` timestamps.
        rules: Rule set; defaults to :data:`ACHIEVEMENT_RULES`.
    """

    def __init__(
        self,
        engine: GamificationEngine,
        clock: Optional[Clock] = None,
        rules: Iterable[AchievementRule] = ACHIEVEMENT_RULES,
    ) -> None:
        self.engine = engine
        self.clock = clock or engine.clock
        self.rules = tuple(rules)

    def metrics(self, profile: UserProfile) -> Dict[str, int]:
        """Current value of every metric referenced by the rules."""
        self.engine.sync(profile)
        best_day = max(self.engine.pages_by_day().values(), default=0)
        return {
            "books": self.engine.total_books_read(),
            "pages": self.engine.total_pages_read(),
            "streak": max(profile.current_streak, profile.longest_streak),
            "level": profile.current_level,
            "best_day_pages": best_day,
            "longest_session_minutes": self.engine.longest_session_minutes(),
        }

    def pending(self, profile: UserProfile) -> List[AchievementType]:
        """Types whose rule holds but which the profile does not own yet."""
        values = self.metrics(profile)
        owned = {a.type for a in profile.achievements}
        result: List[AchievementType] = []
        for rule in self.rules:
            if rule.type in owned or rule.type in result:
                continue
            if rule.type.is_streak_achievement and profile.streaks_paused:
                continue
            if values[rule.metric] >= rule.threshold:
                result.append(rule.type)
        return result

    def evaluate(self, profile: UserProfile) -> List[Achievement]:
        """
        Unlock every newly satisfied achievement.

        Returns:
            The achievements created by this call; empty when nothing new
            was reached.
        """
        unlocked: List[Achievement] = []
        for achievement_type in self.pending(profile):
            achievement = Achievement(type=achievement_type, unlocked_at=self.clock.now(), is_new=True)
            profile.achievements.append(achievement)
            unlocked.append(achievement)
            log_display(
                logger, logging.INFO, "Achievement unlocked: %s (%s)", achievement_type.title, achievement_type.value
            )
        return unlocked

    @staticmethod
    def mark_seen(profile: UserProfile, types: Optional[Iterable[AchievementType]] = None) -> int:
        """
        Clear the ``is_new`` flag.

        Args:
            profile: Owner of the achievements.
            types: Restrict to these types; all when omitted.

        Returns:
            Number of achievements that changed.
        """
        wanted = set(types) if types is not None else None
        changed = 0
        for achievement in profile.achievements:
            if achievement.is_new and (wanted is None or achievement.type in wanted):
                achievement.is_new = False
                changed += 1
        return changed
