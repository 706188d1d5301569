"""
Health Insights

Daily readiness scores (HRV, sleep, training load) and weekly workout
trends computed from exported health data.
"""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .exceptions import (
    DataNotFoundError,
    ErrorCode,
    HealthInsightsError,
    InvalidArgumentError,
    UpstreamUnavailableError,
)
from .models import (
    BaselineStats,
    DailyMetricSample,
    NormalizedWorkout,
    Progression,
    RawWorkout,
    ReadinessRecord,
    Recommendation,
    SleepBreakdown,
    SleepSample,
    TrendSummary,
    WeeklyAggregate,
    WorkoutCategory,
)
from .normalizer import WorkoutNormalizer, classify_category
from .readiness import ReadinessScorer
from .repository import InMemoryMetricRepository, MetricRepository
from .trends import TrendAggregator, TrendService, iso_week_key

__all__ = [
    "__version__",
    # Configuration
    "Settings",
    "load_settings",
    # Errors
    "ErrorCode",
    "HealthInsightsError",
    "InvalidArgumentError",
    "DataNotFoundError",
    "UpstreamUnavailableError",
    # Models
    "BaselineStats",
    "DailyMetricSample",
    "NormalizedWorkout",
    "Progression",
    "RawWorkout",
    "ReadinessRecord",
    "Recommendation",
    "SleepBreakdown",
    "SleepSample",
    "TrendSummary",
    "WeeklyAggregate",
    "WorkoutCategory",
    # Services
    "InMemoryMetricRepository",
    "MetricRepository",
    "ReadinessScorer",
    "TrendAggregator",
    "TrendService",
    "WorkoutNormalizer",
    "classify_category",
    "iso_week_key",
]
