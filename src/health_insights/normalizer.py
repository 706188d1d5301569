"""
Workout normalization.

Turns raw workout rows from spreadsheets and exports into
NormalizedWorkout records: one date, one category, minutes, kilometres.
Rows whose date or duration cannot be understood are dropped; partial
and blank historical rows are expected and are not errors.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import Settings
from .models import NormalizedWorkout, RawWorkout, WorkoutCategory
from .parsing import (
    is_blank,
    parse_date,
    parse_distance_km,
    parse_duration_minutes,
    to_float,
)

logger = logging.getLogger(__name__)


# Evaluated top to bottom, first match wins. Swim and cycle come before
# run so "Open Water Swim" or "Hand Cycling" never fall through to a
# broader keyword. Cycle keywords must not occur inside running terms
# ("ride" is a substring of "stride").
CATEGORY_KEYWORDS: Sequence[Tuple[WorkoutCategory, Tuple[str, ...]]] = (
    (WorkoutCategory.SWIM, ("swim", "pool", "open water")),
    (WorkoutCategory.CYCLE, ("cycl", "bike", "biking", "riding", "spin")),
    (WorkoutCategory.RUN, ("run", "jog", "treadmill")),
    (WorkoutCategory.STRENGTH, (
        "strength", "weight", "lift", "bench", "press", "squat",
        "deadlift", "curl", "pull-up", "pullup", "lunge",
    )),
)


def classify_category(label: Optional[str]) -> WorkoutCategory:
    """Classify a free-text workout label.

    Examples:
        "Outdoor Run" -> run, "Indoor Cycle" -> cycle,
        "Pool Swim" -> swim, "Bench Press" -> strength, "Yoga" -> other
    """
    text = (label or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return WorkoutCategory.OTHER


def calculate_tonnage(weight, reps, sets) -> float:
    """Strength volume: weight x reps x sets, with missing sets counted as one."""
    w = to_float(weight)
    r = to_float(reps)
    if not w or not r or w <= 0 or r <= 0:
        return 0.0
    s = to_float(sets)
    if not s or s <= 0:
        s = 1.0
    return w * r * s


class WorkoutNormalizer:
    """Normalizes raw workout rows using the configured unit policies."""

    def __init__(self, settings: Settings) -> None:
        self._default_distance_unit = settings.default_distance_unit
        self._plain_duration_policy = settings.plain_duration_policy

    def normalize(self, raw: RawWorkout) -> Optional[NormalizedWorkout]:
        """Normalize one row.

        Returns:
            NormalizedWorkout, or None when the date or duration is unparsable
        """
        workout_date = parse_date(raw.date)
        if workout_date is None:
            logger.debug(f"Skipping workout with unparsable date {raw.date!r}")
            return None

        if is_blank(raw.duration):
            duration = 0.0
        else:
            duration = parse_duration_minutes(raw.duration, self._plain_duration_policy)
            if duration is None:
                logger.debug(f"Skipping workout on {workout_date} with unparsable duration {raw.duration!r}")
                return None

        distance = parse_distance_km(raw.distance, self._default_distance_unit)
        if distance is None:
            logger.debug(f"Ignoring unparsable distance {raw.distance!r} on {workout_date}")
            distance = 0.0

        return NormalizedWorkout(
            date=workout_date,
            category=classify_category(raw.label),
            duration_minutes=duration,
            distance_km=distance,
            tonnage=calculate_tonnage(raw.weight, raw.reps, raw.sets),
        )

    def normalize_all(self, rows: Iterable[RawWorkout]) -> List[NormalizedWorkout]:
        """Normalize many rows, silently dropping the unparsable ones."""
        normalized = []
        skipped = 0
        for raw in rows:
            workout = self.normalize(raw)
            if workout is None:
                skipped += 1
            else:
                normalized.append(workout)
        if skipped:
            logger.debug(f"Dropped {skipped} unparsable workout rows")
        return normalized
