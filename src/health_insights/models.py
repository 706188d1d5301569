"""Data models for measurements, workouts, readiness and trends."""

from dataclasses import dataclass, field, asdict
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import json


RawValue = Union[str, int, float, None]


class WorkoutCategory(str, Enum):
    """Disciplines a workout can be classified into."""
    RUN = "run"
    CYCLE = "cycle"
    SWIM = "swim"
    STRENGTH = "strength"
    OTHER = "other"


class Progression(str, Enum):
    """Week-over-week progression of a discipline."""
    PROGRESSING = "progressing"
    STALLING = "stalling"
    UNKNOWN = "unknown"


# =============================================================================
# Inputs (supplied by the repository)
# =============================================================================

@dataclass(frozen=True)
class DailyMetricSample:
    """Daily physiological measurements."""
    date: date
    hrv: RawValue = None  # ms
    resting_heart_rate: RawValue = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "hrv": self.hrv,
            "resting_heart_rate": self.resting_heart_rate,
            "extra": dict(self.extra),
        }


@dataclass(frozen=True)
class SleepSample:
    """One night of sleep as exported, durations still in their raw encoding."""
    date: date
    asleep: RawValue = None
    in_bed: RawValue = None
    awake: RawValue = None
    wake_count: RawValue = None
    efficiency_pct: RawValue = None
    bedtime: RawValue = None  # time of day, e.g. "23:30"

    def to_dict(self) -> dict:
        d = asdict(self)
        d["date"] = self.date.isoformat()
        return d


@dataclass(frozen=True)
class RawWorkout:
    """Workout row before normalization.

    ``date``, ``duration`` and ``distance`` may arrive in any of the
    encodings the normalizer understands. ``distance`` may be a flat value
    or a mapping such as ``{"qty": 5.2, "units": "mi"}``. Strength sets
    carry ``weight``/``reps``/``sets`` instead of a distance.
    """
    date: Any
    label: str = ""
    duration: Any = None
    distance: Any = None
    weight: RawValue = None
    reps: RawValue = None
    sets: RawValue = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RawWorkout":
        """Build from a loosely-keyed spreadsheet/export row."""
        lowered = {str(k).lower(): v for k, v in row.items()}

        def pick(*keys: str) -> Any:
            for key in keys:
                value = lowered.get(key)
                if value not in (None, ""):
                    return value
            return None

        return cls(
            date=pick("date", "date/time", "timestamp", "start"),
            label=str(pick("type", "label", "exercise", "name") or ""),
            duration=pick("duration", "total time", "duration_min"),
            distance=pick("distance", "distance_km"),
            weight=pick("weight"),
            reps=pick("reps"),
            sets=pick("sets"),
        )


# =============================================================================
# Derived records
# =============================================================================

@dataclass(frozen=True)
class NormalizedWorkout:
    """Canonical workout: minutes, kilometres and kilograms."""
    date: date
    category: WorkoutCategory
    duration_minutes: float = 0.0
    distance_km: float = 0.0
    tonnage: float = 0.0

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "category": self.category.value,
            "duration_minutes": self.duration_minutes,
            "distance_km": self.distance_km,
            "tonnage": self.tonnage,
        }


@dataclass(frozen=True)
class BaselineStats:
    """Mean and population standard deviation of a reference window."""
    mean: float = 0.0
    sd: float = 0.0
    count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SleepBreakdown:
    """Sleep sub-scores together with the normalized inputs behind them."""
    quantity_score: float
    quality_score: float
    architecture_score: float
    physiology_score: float
    regularity_score: float
    subjective_score: float
    sleep_hours: float = 0.0
    in_bed_hours: float = 0.0
    awake_minutes: int = 0
    wake_count: int = 0
    efficiency_pct: Optional[float] = None
    awake_penalty: int = 0
    wake_penalty: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Recommendation:
    """One piece of training advice derived from readiness and load."""
    kind: str  # 'recovery' or 'training'
    message: str
    priority: str  # 'high' or 'medium'

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class ReadinessRecord:
    """Complete readiness assessment for one day."""
    date: date
    hrv: float
    hrv_z: float
    hrv_score: int
    hrv_baseline: BaselineStats
    sleep_baseline: BaselineStats
    sleep: SleepBreakdown
    sleep_score: int
    training_load_minutes: float
    training_load_window_days: int
    training_load_score: int
    composite_score: int
    training_load_level: str = "low"  # 'low', 'medium' or 'high'
    recommendations: Tuple[Recommendation, ...] = ()

    @property
    def zone(self) -> str:
        """Traffic-light zone of the composite score."""
        if self.composite_score >= 67:
            return "green"
        elif self.composite_score >= 34:
            return "yellow"
        return "red"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "date": self.date.isoformat(),
            "hrv": self.hrv,
            "hrv_z": round(self.hrv_z, 4),
            "hrv_score": self.hrv_score,
            "hrv_baseline": self.hrv_baseline.to_dict(),
            "sleep_baseline": self.sleep_baseline.to_dict(),
            "sleep": self.sleep.to_dict(),
            "sleep_score": self.sleep_score,
            "training_load_minutes": self.training_load_minutes,
            "training_load_window_days": self.training_load_window_days,
            "training_load_score": self.training_load_score,
            "composite_score": self.composite_score,
            "zone": self.zone,
            "training_load_level": self.training_load_level,
            "recommendations": [r.to_dict() for r in self.recommendations],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class WeeklyAggregate:
    """Totals for one discipline in one ISO week."""
    week: str  # "YYYY-Www"
    category: WorkoutCategory
    session_count: int = 0
    total_distance_km: float = 0.0
    total_duration_minutes: float = 0.0
    total_tonnage: float = 0.0
    avg_rate: Optional[float] = None
    rate_unit: Optional[str] = None  # 'min/km' or 'km/h'
    progression: Progression = Progression.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "week": self.week,
            "category": self.category.value,
            "session_count": self.session_count,
            "total_distance_km": round(self.total_distance_km, 2),
            "total_duration_minutes": round(self.total_duration_minutes, 1),
            "total_tonnage": round(self.total_tonnage, 1),
            "avg_rate": round(self.avg_rate, 2) if self.avg_rate is not None else None,
            "rate_unit": self.rate_unit,
            "progression": self.progression.value,
        }


@dataclass
class TrendSummary:
    """Weekly trend view for one discipline or for all of them combined."""
    category: str  # a WorkoutCategory value or 'combined'
    weeks: List[WeeklyAggregate] = field(default_factory=list)
    progressing: List[str] = field(default_factory=list)
    stalling: List[str] = field(default_factory=list)

    @property
    def is_combined(self) -> bool:
        return self.category == "combined"

    def to_dict(self) -> Dict[str, Any]:
        """Single-discipline views report ``progressing`` as a bool."""
        return {
            "category": self.category,
            "weeks": [w.to_dict() for w in self.weeks],
            "progressing": (
                list(self.progressing) if self.is_combined
                else self.category in self.progressing
            ),
            "stalling": list(self.stalling),
        }
