"""Tests for settings loading."""

import pytest

from health_insights.config import Settings, load_settings
from health_insights.exceptions import InvalidArgumentError


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self, settings):
        assert settings.hrv_baseline_days == 30
        assert settings.logistic_k == pytest.approx(0.87)
        assert settings.training_load_days == 7
        assert settings.training_load_daily_minutes == 60
        assert settings.sleep_floor_hours == 4
        assert settings.default_trend_weeks == 4
        assert settings.default_distance_unit == "km"
        assert settings.plain_duration_policy == "minutes"
        assert settings.log_level == "INFO"

    def test_environment(self, monkeypatch):
        """Values are read from HEALTH_INSIGHTS_-prefixed variables."""
        monkeypatch.setenv("HEALTH_INSIGHTS_HRV_BASELINE_DAYS", "14")
        monkeypatch.setenv("HEALTH_INSIGHTS_DEFAULT_DISTANCE_UNIT", "mi")
        monkeypatch.setenv("HEALTH_INSIGHTS_LOG_LEVEL", "debug")

        settings = load_settings(_env_file=None)

        assert settings.hrv_baseline_days == 14
        assert settings.default_distance_unit == "mi"
        assert settings.log_level == "DEBUG"

    def test_overrides(self):
        settings = load_settings(_env_file=None, training_load_days=14)
        assert isinstance(settings, Settings)
        assert settings.training_load_days == 14

    @pytest.mark.parametrize("overrides", [
        {"hrv_baseline_days": 0},
        {"logistic_k": -1},
        {"training_load_daily_minutes": 0},
        {"sleep_floor_hours": 30},
        {"default_trend_weeks": -2},
        {"default_distance_unit": "furlong"},
        {"plain_duration_policy": "seconds"},
        {"log_level": "LOUD"},
    ])
    def test_invalid(self, overrides):
        """Bad values are reported as InvalidArgumentError naming the field."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            load_settings(_env_file=None, **overrides)

        assert list(overrides)[0] in exc_info.value.message

    def test_env_file_in_working_directory(self, tmp_path, monkeypatch):
        """A .env file is looked up in the current working directory."""
        monkeypatch.delenv("HEALTH_INSIGHTS_DEFAULT_TREND_WEEKS", raising=False)
        (tmp_path / ".env").write_text("HEALTH_INSIGHTS_DEFAULT_TREND_WEEKS=6\n")
        monkeypatch.chdir(tmp_path)

        assert load_settings().default_trend_weeks == 6
