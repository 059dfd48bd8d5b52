# tests/config/test_tracking_config.py
"""
Tests for the tracking configuration models and loader.

Covers:
- Defaults of every section
- Loading from dicts (with and without the ``tracking`` key)
- Loading from TOML files
- Validation failures surfacing as ConfigError
"""

import pytest

from shlfcore.config import (
    DurationBonus,
    StorageConfig,
    TrackingConfig,
    XPConfig,
    load_tracking_config,
)
from shlfcore.exceptions import ConfigError
from shlfcore.models import GoalDuration


class TestDefaults:
    """Tests for default values."""

    def test_xp_defaults(self):
        config = XPConfig()
        assert config.xp_per_page == 1
        assert config.book_completion_bonus == 50
        assert config.streak_day_bonus == 10
        assert config.duration_bonuses == []

    def test_root_defaults(self):
        config = TrackingConfig()
        assert config.streaks.pardon_window_hours == 48
        assert config.streaks.pardon_cooldown_days == 7
        assert config.goals.max_target_value == 1000
        assert config.goals.default_duration is GoalDuration.MONTH
        assert config.achievements.enabled is True
        assert config.logging == {}

    def test_storage_path_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SHLF_DATA", str(tmp_path))
        config = StorageConfig(profile_path="$SHLF_DATA/profile.json")
        assert config.profile_path == str(tmp_path / "profile.json")

    def test_storage_tilde_expanded(self):
        assert not StorageConfig().profile_path.startswith("~")


class TestDurationBonuses:
    """Tests for session-length bonus tiers."""

    def test_tiers_sorted_longest_first(self):
        config = XPConfig(
            duration_bonuses=[
                DurationBonus(min_minutes=30, bonus=5),
                DurationBonus(min_minutes=120, bonus=25),
                DurationBonus(min_minutes=60, bonus=10),
            ]
        )
        assert [t.min_minutes for t in config.duration_bonuses] == [120, 60, 30]

    def test_tier_minimum(self):
        with pytest.raises(ConfigError):
            load_tracking_config(config_dict={"xp": {"duration_bonuses": [{"min_minutes": 0, "bonus": 5}]}})


class TestLoadFromDict:
    """Tests for load_tracking_config with dictionaries."""

    def test_empty_dict(self):
        assert load_tracking_config(config_dict={}) == TrackingConfig()

    def test_no_arguments(self):
        assert load_tracking_config() == TrackingConfig()

    def test_tracking_section(self):
        config = load_tracking_config(config_dict={"tracking": {"xp": {"xp_per_page": 2}}})
        assert config.xp.xp_per_page == 2
        assert config.xp.book_completion_bonus == 50

    def test_bare_section(self):
        config = load_tracking_config(config_dict={"goals": {"default_duration": "week"}})
        assert config.goals.default_duration is GoalDuration.WEEK

    def test_invalid_value(self):
        with pytest.raises(ConfigError, match="Invalid tracking configuration"):
            load_tracking_config(config_dict={"xp": {"xp_per_page": -1}})

    def test_unknown_duration(self):
        with pytest.raises(ConfigError):
            load_tracking_config(config_dict={"goals": {"default_duration": "fortnight"}})


class TestLoadFromFile:
    """Tests for load_tracking_config with TOML files."""

    def test_toml_file(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            "[tracking.xp]\n"
            "book_completion_bonus = 75\n"
            "\n"
            "[[tracking.xp.duration_bonuses]]\n"
            "min_minutes = 60\n"
            "bonus = 20\n"
            "\n"
            "[tracking.streaks]\n"
            "pardon_cooldown_days = 14\n"
            "\n"
            "[tracking.logging]\n"
            "console_enabled = true\n",
            encoding="utf-8",
        )
        config = load_tracking_config(config_path=config_file)
        assert config.xp.book_completion_bonus == 75
        assert config.xp.duration_bonuses[0].bonus == 20
        assert config.streaks.pardon_cooldown_days == 14
        assert config.logging == {"console_enabled": True}

    def test_file_without_tracking_section(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text("[other]\nkey = 1\n", encoding="utf-8")
        assert load_tracking_config(config_path=config_file) == TrackingConfig()

    def test_dict_takes_precedence(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text("[tracking.xp]\nxp_per_page = 3\n", encoding="utf-8")
        config = load_tracking_config(
            config_dict={"tracking": {"xp": {"xp_per_page": 5}}}, config_path=config_file
        )
        assert config.xp.xp_per_page == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_tracking_config(config_path=tmp_path / "absent.toml")

    def test_invalid_toml(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text("[tracking\nxp = ", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_tracking_config(config_path=config_file)
