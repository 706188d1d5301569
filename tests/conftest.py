"""Pytest configuration and fixtures."""

from datetime import date, timedelta

import pytest

from health_insights.config import load_settings
from health_insights.models import DailyMetricSample, RawWorkout, SleepSample
from health_insights.repository import InMemoryMetricRepository


TARGET_DATE = date(2024, 3, 10)


@pytest.fixture
def settings():
    """Default settings, isolated from any local .env file."""
    return load_settings(_env_file=None)


@pytest.fixture
def target_date():
    return TARGET_DATE


def hrv_history(target: date, values, days: int = 30):
    """Daily samples on the ``days`` days before ``target``, cycling through ``values``."""
    return [
        DailyMetricSample(date=target - timedelta(days=i), hrv=values[i % len(values)])
        for i in range(1, days + 1)
    ]


@pytest.fixture
def baseline_metrics(target_date):
    """30 days alternating 45/55 ms (mean 50, sd 5) plus 42 ms on the target date."""
    return hrv_history(target_date, [45, 55]) + [DailyMetricSample(date=target_date, hrv=42)]


@pytest.fixture
def empty_repository(baseline_metrics):
    """HRV only: no sleep and no workouts."""
    return InMemoryMetricRepository(daily_metrics=baseline_metrics)


@pytest.fixture
def full_repository(target_date, baseline_metrics):
    """HRV, two weeks of sleep and a week of workouts."""
    sleep = [
        SleepSample(
            date=target_date - timedelta(days=i),
            asleep=7.5 if i % 2 else 6.5,
            in_bed=8.0,
            awake=0.25,
            wake_count=3,
            bedtime="23:00",
        )
        for i in range(0, 14)
    ]
    workouts = [
        RawWorkout(date=(target_date - timedelta(days=i)).isoformat(), label="Outdoor Run", duration=30, distance=5)
        for i in range(0, 7)
    ]
    return InMemoryMetricRepository(
        daily_metrics=baseline_metrics,
        sleep_samples=sleep,
        workouts=workouts,
    )
