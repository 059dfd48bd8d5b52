# src/shlfcore/tracking/__init__.py
"""
Goal tracking and gamification for shlfcore.

Components (leaf to root):
    - ActivityLedgerProtocol, InMemoryActivityLedger: append-only activity history
    - GamificationEngine: XP, level and streak derivation (with streak pardons)
    - GoalProgressResolver: baseline progress and manual-edit reconciliation
    - AchievementEvaluator: one-time milestone unlocks
    - GoalLifecycleManager: create / edit / complete / refresh / delete goals
    - ProfileStore, InMemoryProfileStore: profile persistence

Example:
    from shlfcore.clock import SystemClock
    from shlfcore.config import load_tracking_config
    from shlfcore.tracking import GoalLifecycleManager, InMemoryActivityLedger

    config = load_tracking_config(config_path="~/.config/shlfcore/config.toml")
    ledger = InMemoryActivityLedger()
    manager = GoalLifecycleManager.from_config(config, ledger)

    profile = manager.get_or_create_profile()
    goal = manager.create_goal(profile, "pages_per_day", 30, duration="week")
"""

from .achievements import ACHIEVEMENT_RULES, AchievementEvaluator, AchievementRule
from .gamification import (
    GamificationEngine,
    PardonEligibility,
    PardonState,
    StreakStatus,
    compute_streaks,
    level_for_xp,
)
from .ledger import ActivityLedgerProtocol, InMemoryActivityLedger
from .lifecycle import GoalLifecycleManager, add_months
from .progress import GoalProgressResolver, ProgressSnapshot
from .store import InMemoryProfileStore, ProfileStorageProtocol, ProfileStore

__all__ = [
    "ACHIEVEMENT_RULES",
    "AchievementEvaluator",
    "AchievementRule",
    "ActivityLedgerProtocol",
    "GamificationEngine",
    "GoalLifecycleManager",
    "GoalProgressResolver",
    "InMemoryActivityLedger",
    "InMemoryProfileStore",
    "PardonEligibility",
    "PardonState",
    "ProfileStorageProtocol",
    "ProfileStore",
    "ProgressSnapshot",
    "StreakStatus",
    "add_months",
    "compute_streaks",
    "level_for_xp",
]
