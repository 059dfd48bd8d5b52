# src/shlfcore/__init__.py
"""
shlfcore - Goal tracking and gamification core for a personal reading tracker.

This library derives reading goal progress, XP, levels, streaks and
achievements from an append-only activity ledger, while letting users
manually correct goal progress without losing the auto-tracked baseline.
"""

from importlib.metadata import PackageNotFoundError, version

from .clock import Clock, FixedClock, SystemClock
from .config import TrackingConfig, load_tracking_config
from .exceptions import (
    ConfigError,
    GoalNotFoundError,
    GoalValidationError,
    InvalidDateRangeError,
    InvalidProgressError,
    InvalidTargetError,
    ProfileStorageError,
    ShlfCoreError,
    StorageError,
    UnavailableGoalTypeError,
    UnknownVariantError,
)
from .models import (
    Achievement,
    AchievementCategory,
    AchievementType,
    CompletionEvent,
    GoalDuration,
    GoalType,
    ReadingGoal,
    ReadingSession,
    StreakEvent,
    StreakEventType,
    UserProfile,
)
from .tracking import (
    AchievementEvaluator,
    GamificationEngine,
    GoalLifecycleManager,
    GoalProgressResolver,
    InMemoryActivityLedger,
    InMemoryProfileStore,
    ProfileStore,
    StreakStatus,
)

try:
    __version__ = version("shlfcore")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",

    # Configuration
    "TrackingConfig",
    "load_tracking_config",

    # Models
    "Achievement",
    "AchievementCategory",
    "AchievementType",
    "CompletionEvent",
    "GoalDuration",
    "GoalType",
    "ReadingGoal",
    "ReadingSession",
    "StreakEvent",
    "StreakEventType",
    "UserProfile",

    # Components
    "AchievementEvaluator",
    "GamificationEngine",
    "GoalLifecycleManager",
    "GoalProgressResolver",
    "InMemoryActivityLedger",
    "InMemoryProfileStore",
    "ProfileStore",
    "StreakStatus",

    # Exceptions
    "ConfigError",
    "GoalNotFoundError",
    "GoalValidationError",
    "InvalidDateRangeError",
    "InvalidProgressError",
    "InvalidTargetError",
    "ProfileStorageError",
    "ShlfCoreError",
    "StorageError",
    "UnavailableGoalTypeError",
    "UnknownVariantError",

    "__version__",
]
