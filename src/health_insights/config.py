"""Configuration settings for the health insights engine.

Settings are built once, explicitly, by ``load_settings()`` at process
start and handed to the scorer, normalizer and trend service. Nothing in
the package reads a cached global.
"""

from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import InvalidArgumentError


DistanceUnit = Literal["km", "m", "mi", "yd"]
PlainDurationPolicy = Literal["minutes", "magnitude"]


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HEALTH_INSIGHTS_",
        env_file=".env",  # resolved against the working directory
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Readiness
    hrv_baseline_days: int = Field(30, description="Trailing HRV baseline window")
    logistic_k: float = Field(0.87, description="Steepness of the z-score S-curve")
    training_load_days: int = Field(7, description="Trailing training load window")
    training_load_daily_minutes: float = Field(60.0, description="Target minutes per day")
    sleep_floor_hours: float = Field(4.0, description="Below this, sleep quantity scores 0")

    # Trends
    default_trend_weeks: int = 4
    default_distance_unit: DistanceUnit = "km"
    plain_duration_policy: PlainDurationPolicy = "minutes"

    # Logging
    log_level: str = "INFO"

    @field_validator(
        "hrv_baseline_days",
        "training_load_days",
        "default_trend_weeks",
    )
    @classmethod
    def validate_positive_days(cls, v: int) -> int:
        """Windows must cover at least one day/week."""
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v

    @field_validator("logistic_k", "training_load_daily_minutes")
    @classmethod
    def validate_positive_float(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v

    @field_validator("sleep_floor_hours")
    @classmethod
    def validate_floor(cls, v: float) -> float:
        if not 0 <= v <= 24:
            raise ValueError("must be between 0 and 24 hours")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {v!r}")
        return level


def load_settings(**overrides: Any) -> Settings:
    """Build and validate settings from the environment plus overrides.

    Call once at start-up and inject the result.

    Raises:
        InvalidArgumentError: If any setting fails validation.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        fields = [".".join(str(x) for x in err["loc"]) for err in e.errors()]
        raise InvalidArgumentError(
            f"Invalid configuration: {', '.join(fields)}",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
