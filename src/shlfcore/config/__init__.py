# src/shlfcore/config/__init__.py
"""
Configuration module for the shlfcore library.

Configuration is read from the ``[tracking]`` section of a TOML file (or
an equivalent dictionary) and validated into Pydantic models.

Configuration files:
    - User config: ~/.config/shlfcore/config.toml
    - Custom config: any path passed to ``load_tracking_config``
"""

from .tracking_config import (
    AchievementsConfig,
    DurationBonus,
    GoalsConfig,
    StorageConfig,
    StreakConfig,
    TrackingConfig,
    XPConfig,
    load_tracking_config,
)

__all__ = [
    "AchievementsConfig",
    "DurationBonus",
    "GoalsConfig",
    "StorageConfig",
    "StreakConfig",
    "TrackingConfig",
    "XPConfig",
    "load_tracking_config",
]
