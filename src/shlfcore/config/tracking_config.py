# src/shlfcore/config/tracking_config.py
"""
Tracking configuration models.

This module defines Pydantic models for every configuration section of
the goal tracking and gamification core. These models are used for:
1. Type-safe configuration loading
2. Validation with sensible defaults
3. Runtime configuration of the engines via ``from_config`` factories

The configuration hierarchy:
    TrackingConfig (root)
    ├── XPConfig            - XP awards per page, book and streak day
    ├── StreakConfig        - Streak pardon window and cooldown
    ├── GoalsConfig         - Goal target bounds and default duration
    ├── AchievementsConfig  - Achievement evaluation switch
    ├── StorageConfig       - Profile persistence location
    └── logging             - Raw dict handed to configure_logging()

Usage:
    >>> from shlfcore.config.tracking_config import TrackingConfig
    >>> config = TrackingConfig()  # All defaults
    >>> config.xp.book_completion_bonus
    50

    >>> config = load_tracking_config(config_dict={
    ...     "tracking": {"xp": {"xp_per_page": 2}}
    ... })
    >>> config.xp.xp_per_page
    2
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..exceptions import ConfigError
from ..models import GoalDuration

# =============================================================================
# XP CONFIGURATION
# =============================================================================


class DurationBonus(BaseModel):
    """Bonus XP granted to a single session lasting at least ``min_minutes``."""

    min_minutes: int = Field(ge=1, description="Minimum session length in minutes")
    bonus: int = Field(ge=0, description="Bonus XP granted")


class XPConfig(BaseModel):
    """
    XP award rates.

    Examples:
        >>> config = XPConfig()
        >>> (config.xp_per_page, config.book_completion_bonus, config.streak_day_bonus)
        (1, 50, 10)
    """

    xp_per_page: int = Field(default=1, ge=0, description="XP per page logged")
    book_completion_bonus: int = Field(
        default=50, ge=0, description="Bonus XP for each finished book"
    )
    streak_day_bonus: int = Field(
        default=10, ge=0, description="Bonus XP for each day that extends a streak"
    )
    duration_bonuses: list[DurationBonus] = Field(
        default_factory=list,
        description=(
            "Optional session-length bonus tiers. Only the highest tier a "
            "session reaches is applied."
        ),
    )

    @field_validator("duration_bonuses")
    @classmethod
    def sort_tiers(cls, v: list[DurationBonus]) -> list[DurationBonus]:
        """Keep tiers ordered from the longest threshold down."""
        return sorted(v, key=lambda tier: tier.min_minutes, reverse=True)


# =============================================================================
# STREAK CONFIGURATION
# =============================================================================


class StreakConfig(BaseModel):
    """
    Streak pardon settings.

    A single missed day may be saved within ``pardon_window_hours`` of the
    start of that day, at most once per ``pardon_cooldown_days``.
    """

    pardon_window_hours: int = Field(default=48, ge=0, le=24 * 7)
    pardon_cooldown_days: int = Field(default=7, ge=0, le=365)


# =============================================================================
# GOALS CONFIGURATION
# =============================================================================


class GoalsConfig(BaseModel):
    """Goal creation bounds."""

    max_target_value: int = Field(
        default=1000, ge=1, description="Largest target a goal may be given"
    )
    default_duration: GoalDuration = Field(
        default=GoalDuration.MONTH,
        description="Duration preset used when none is given and no end date is supplied",
    )


class AchievementsConfig(BaseModel):
    enabled: bool = Field(default=True, description="Evaluate achievements after activity")


# =============================================================================
# STORAGE CONFIGURATION
# =============================================================================


class StorageConfig(BaseModel):
    """Profile persistence settings."""

    profile_path: str = Field(
        default="~/.local/share/shlfcore/profile.json",
        description=(
            "Path to the profile storage file (JSON). "
            "Tilde and environment variable expansion is applied."
        ),
    )

    @field_validator("profile_path")
    @classmethod
    def expand_profile_path(cls, v: str) -> str:
        """Expand ~ and environment variables in profile_path."""
        return os.path.expanduser(os.path.expandvars(v))


# =============================================================================
# ROOT
# =============================================================================


class TrackingConfig(BaseModel):
    """Root configuration for the tracking core."""

    xp: XPConfig = Field(default_factory=XPConfig)
    streaks: StreakConfig = Field(default_factory=StreakConfig)
    goals: GoalsConfig = Field(default_factory=GoalsConfig)
    achievements: AchievementsConfig = Field(default_factory=AchievementsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: dict[str, Any] = Field(
        default_factory=dict,
        description="Logging section passed through to configure_logging()",
    )


# =============================================================================
# HELPER: LOAD FROM TOML DICT
# =============================================================================


def load_tracking_config(
    config_dict: dict[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> TrackingConfig:
    """
    Load tracking configuration from a dictionary or TOML file.

    Args:
        config_dict: Pre-parsed configuration dictionary. If provided,
            extracts the ``"tracking"`` key if present. Takes precedence
            over ``config_path``.
        config_path: Path to a TOML file. If provided, reads and parses
            it, then extracts the ``"tracking"`` section.

    Returns:
        Validated TrackingConfig instance with defaults for
        any unspecified settings.

    Raises:
        ConfigError: If the file is missing, is not valid TOML, or any
            value fails validation.
    """
    data: dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e
        data = raw.get("tracking", {})

    if config_dict is not None:
        if "tracking" in config_dict:
            data = config_dict["tracking"]
        else:
            data = config_dict

    try:
        return TrackingConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid tracking configuration: {e}") from e
