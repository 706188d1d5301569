"""
Weekly Trend Analysis

Buckets normalized workouts into ISO weeks per discipline, derives pace
or speed, and classifies each discipline as progressing or stalling by
comparing its two most recent weeks.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .config import Settings
from .exceptions import InvalidArgumentError
from .models import (
    NormalizedWorkout,
    Progression,
    TrendSummary,
    WeeklyAggregate,
    WorkoutCategory,
)
from .normalizer import WorkoutNormalizer
from .repository import MetricRepository, call_repository

logger = logging.getLogger(__name__)


COMBINED = "combined"
TREND_VIEWS = (
    WorkoutCategory.RUN.value,
    WorkoutCategory.CYCLE.value,
    WorkoutCategory.SWIM.value,
    WorkoutCategory.STRENGTH.value,
    COMBINED,
)

# Volume metric used for progression, highest priority first
PROGRESSION_METRICS = ("total_tonnage", "total_distance_km", "total_duration_minutes")

_CATEGORY_ORDER = {category: i for i, category in enumerate(WorkoutCategory)}


def iso_week_key(day: date) -> str:
    """ISO week key using the ISO week-numbering year: 2024-12-30 -> '2025-W01'."""
    year, week, _ = day.isocalendar()
    return f"{year}-W{week:02d}"


def validate_view(weeks: int, category: str) -> None:
    """
    Raises:
        InvalidArgumentError: If weeks <= 0 or the category is not a trend view
    """
    if weeks <= 0:
        raise InvalidArgumentError("weeks parameter must be > 0", field="weeks")
    if category not in TREND_VIEWS:
        raise InvalidArgumentError(
            f"Unknown trend category {category!r}, expected one of: {', '.join(TREND_VIEWS)}",
            field="category",
        )


def _apply_rate(aggregate: WeeklyAggregate) -> None:
    if aggregate.category in (WorkoutCategory.RUN, WorkoutCategory.SWIM):
        aggregate.rate_unit = "min/km"
        if aggregate.total_distance_km > 0:
            aggregate.avg_rate = aggregate.total_duration_minutes / aggregate.total_distance_km
    elif aggregate.category == WorkoutCategory.CYCLE:
        aggregate.rate_unit = "km/h"
        if aggregate.total_duration_minutes > 0:
            aggregate.avg_rate = aggregate.total_distance_km / (aggregate.total_duration_minutes / 60)


def classify_progression(last: WeeklyAggregate, previous: WeeklyAggregate) -> Progression:
    """
    Compare two weeks of one discipline.

    Uses the first of tonnage, distance, duration that either week
    recorded, so both sides are always measured the same way.
    """
    for metric in PROGRESSION_METRICS:
        last_value = getattr(last, metric)
        previous_value = getattr(previous, metric)
        if last_value or previous_value:
            if last_value > previous_value:
                return Progression.PROGRESSING
            return Progression.STALLING
    return Progression.STALLING


class TrendAggregator:
    """Pure weekly aggregation over already-normalized workouts."""

    def aggregate(
        self,
        workouts: Iterable[NormalizedWorkout],
        weeks: int,
        category: str = COMBINED,
    ) -> TrendSummary:
        """
        Build the weekly trend view.

        Args:
            workouts: Normalized workouts
            weeks: Number of most recent ISO weeks to report (> 0)
            category: 'run', 'cycle', 'swim', 'strength' or 'combined'

        Returns:
            TrendSummary; empty when there are no workouts

        Raises:
            InvalidArgumentError: If weeks <= 0 or category is unknown
        """
        validate_view(weeks, category)

        groups: Dict[Tuple[str, WorkoutCategory], WeeklyAggregate] = {}
        for workout in workouts:
            if category != COMBINED and workout.category.value != category:
                continue
            key = (iso_week_key(workout.date), workout.category)
            entry = groups.get(key)
            if entry is None:
                entry = groups[key] = WeeklyAggregate(week=key[0], category=key[1])
            entry.session_count += 1
            entry.total_distance_km += workout.distance_km
            entry.total_duration_minutes += workout.duration_minutes
            entry.total_tonnage += workout.tonnage

        # Zero-padded "YYYY-Www" keys sort chronologically
        kept_weeks = set(sorted({week for week, _ in groups})[-weeks:])

        by_category: Dict[WorkoutCategory, List[WeeklyAggregate]] = defaultdict(list)
        for (week, cat), entry in sorted(groups.items(), key=lambda item: item[0][0]):
            if week in kept_weeks:
                _apply_rate(entry)
                by_category[cat].append(entry)

        summary = TrendSummary(category=category)
        for cat in sorted(by_category, key=_CATEGORY_ORDER.get):
            series = by_category[cat]
            for previous, last in zip(series, series[1:]):
                last.progression = classify_progression(last, previous)
            latest = series[-1].progression
            if latest == Progression.PROGRESSING:
                summary.progressing.append(cat.value)
            elif latest == Progression.STALLING:
                summary.stalling.append(cat.value)

        summary.weeks = sorted(
            (entry for series in by_category.values() for entry in series),
            key=lambda entry: (entry.week, _CATEGORY_ORDER[entry.category]),
        )
        return summary


class TrendService:
    """Fetches, normalizes and aggregates workouts for a trailing window."""

    def __init__(
        self,
        repository: MetricRepository,
        settings: Settings,
        normalizer: Optional[WorkoutNormalizer] = None,
        aggregator: Optional[TrendAggregator] = None,
    ) -> None:
        self._repository = repository
        self._settings = settings
        self._normalizer = normalizer or WorkoutNormalizer(settings)
        self._aggregator = aggregator or TrendAggregator()

    async def compute_trends(
        self,
        weeks: Optional[int] = None,
        category: str = COMBINED,
        end_date: Optional[date] = None,
    ) -> TrendSummary:
        """
        Weekly trends for the ``weeks`` weeks ending on ``end_date``.

        Args:
            weeks: Number of weeks (defaults to the configured value)
            category: Trend view
            end_date: Last day included (defaults to today)

        Raises:
            InvalidArgumentError: If weeks <= 0 or category is unknown
            UpstreamUnavailableError: If the workout read fails
        """
        if weeks is None:
            weeks = self._settings.default_trend_weeks
        validate_view(weeks, category)

        end = end_date or date.today()
        start = end - timedelta(days=weeks * 7)
        rows = await call_repository("get_workouts", self._repository.get_workouts(start, end))

        workouts = [
            w for w in self._normalizer.normalize_all(rows)
            if start <= w.date <= end
        ]
        logger.debug(f"Trends {category} {start}..{end}: {len(workouts)} of {len(rows)} rows usable")
        return self._aggregator.aggregate(workouts, weeks, category)
