"""
Readiness Score Calculation

Combines three factors into a 0-100 daily readiness score:
- HRV against a trailing personal baseline
- A sleep composite (quantity, quality, architecture, physiology,
  regularity, subjective)
- Recent training load

All weights are fixed and sum to 1, so a composite of 0-100 inputs stays
within 0-100. Every sub-score and baseline is kept on the resulting
ReadinessRecord, together with the training load level and the training
recommendations derived from it.
"""

import asyncio
import logging
import math
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from .baselines import (
    calculate_baseline,
    logistic,
    population_stats,
    round_half_up,
    round_score,
    z_score,
)
from .config import Settings
from .exceptions import DataNotFoundError
from .models import (
    BaselineStats,
    ReadinessRecord,
    Recommendation,
    SleepBreakdown,
    SleepSample,
)
from .normalizer import WorkoutNormalizer
from .parsing import parse_bedtime_hours, parse_hours, to_float
from .repository import MetricRepository, call_repository

logger = logging.getLogger(__name__)


SLEEP_WEIGHTS = {
    "quantity": 0.25,
    "quality": 0.20,
    "architecture": 0.15,
    "physiology": 0.25,
    "regularity": 0.10,
    "subjective": 0.05,
}

READINESS_WEIGHTS = {
    "hrv": 0.45,
    "sleep": 0.45,
    "training_load": 0.10,
}

# No sleep-stage or survey input exists yet
NEUTRAL_SCORE = 50.0

MIN_BEDTIME_SAMPLES = 4


# =============================================================================
# HRV
# =============================================================================

def calculate_hrv_score(
    hrv_today: float,
    baseline: BaselineStats,
    k: float = 0.87,
) -> Tuple[int, float]:
    """
    Score today's HRV against the trailing baseline.

    Args:
        hrv_today: Today's HRV in ms
        baseline: Trailing baseline (target date excluded)
        k: Logistic steepness

    Returns:
        Tuple of (hrv_score, z)
    """
    z = z_score(hrv_today, baseline)
    return round_score(logistic(z, k)), z


# =============================================================================
# Sleep
# =============================================================================

def calculate_awake_penalty(awake_minutes: float) -> int:
    """
    Penalty for time awake during the night.

    The first 10 minutes are free, then 2 points per additional full
    10 minutes: 10 -> 0, 25 -> 2, 40 -> 6.
    """
    return max(0, math.floor((awake_minutes - 10) / 10) * 2)


def calculate_wake_penalty(wake_count: int) -> int:
    """Penalty of 3 points per wake-up beyond the second: 2 -> 0, 5 -> 9."""
    return max(0, (wake_count - 2) * 3)


def calculate_quantity_score(
    sleep_hours: float,
    population: BaselineStats,
    k: float = 0.87,
    floor_hours: float = 4.0,
) -> float:
    """
    Score sleep duration against your own sleep history.

    Below ``floor_hours`` the score is 0 whatever the z-score says.
    """
    if sleep_hours < floor_hours:
        return 0.0
    return logistic(z_score(sleep_hours, population), k)


def calculate_quality_score(
    sleep_hours: float,
    in_bed_hours: float,
    awake_minutes: float,
    wake_count: int,
    efficiency_pct: Optional[float] = None,
) -> float:
    """
    Sleep quality from efficiency minus fragmentation penalties.

    Efficiency is taken as reported when available, otherwise derived as
    asleep / in bed.

    Returns:
        Quality score 0-100
    """
    if efficiency_pct:
        efficiency = efficiency_pct
    elif in_bed_hours:
        efficiency = sleep_hours / in_bed_hours * 100
    else:
        efficiency = 0.0

    score = efficiency - calculate_awake_penalty(awake_minutes) - calculate_wake_penalty(wake_count)
    return min(100.0, max(0.0, score))


def calculate_regularity_score(bedtimes: Iterable) -> float:
    """
    Bedtime consistency: 100 minus 10 points per hour of standard deviation.

    Bedtimes are read relative to midnight (23:30 -> -0.5) so a schedule
    straddling midnight is not mistaken for an irregular one. With three
    or fewer usable bedtimes the score is neutral.
    """
    hours = [h for h in (parse_bedtime_hours(b) for b in bedtimes) if h is not None]
    if len(hours) < MIN_BEDTIME_SAMPLES:
        return NEUTRAL_SCORE
    sd = population_stats(hours).sd
    return max(0.0, 100 - sd * 10)


def combine_sleep_score(
    quantity: float,
    quality: float,
    architecture: float,
    physiology: float,
    regularity: float,
    subjective: float,
) -> int:
    """Weighted sleep composite, 0-100."""
    return round_score(
        SLEEP_WEIGHTS["quantity"] * quantity
        + SLEEP_WEIGHTS["quality"] * quality
        + SLEEP_WEIGHTS["architecture"] * architecture
        + SLEEP_WEIGHTS["physiology"] * physiology
        + SLEEP_WEIGHTS["regularity"] * regularity
        + SLEEP_WEIGHTS["subjective"] * subjective
    )


def score_sleep(
    sample: Optional[SleepSample],
    history: Sequence[SleepSample],
    hrv_score: int,
    k: float = 0.87,
    floor_hours: float = 4.0,
) -> Tuple[SleepBreakdown, int, BaselineStats]:
    """
    Calculate every sleep sub-score for one night.

    Args:
        sample: Tonight's sleep, or None (scored as no sleep)
        history: Sleep samples used as the duration population and for
            bedtime regularity
        hrv_score: Reused as the physiology component
        k: Logistic steepness
        floor_hours: Quantity safety floor

    Returns:
        Tuple of (breakdown, sleep_score, duration population stats)
    """
    if sample is None:
        sample = SleepSample(date=date.min)

    sleep_hours = parse_hours(sample.asleep) or 0.0
    in_bed_hours = parse_hours(sample.in_bed) or 0.0
    awake_minutes = round_half_up((parse_hours(sample.awake) or 0.0) * 60)
    wake_count = int(to_float(sample.wake_count) or 0)
    efficiency_pct = to_float(sample.efficiency_pct)

    durations = [h for h in (parse_hours(s.asleep) for s in history) if h is not None]
    population = population_stats(durations)

    breakdown = SleepBreakdown(
        quantity_score=calculate_quantity_score(sleep_hours, population, k, floor_hours),
        quality_score=calculate_quality_score(
            sleep_hours, in_bed_hours, awake_minutes, wake_count, efficiency_pct
        ),
        architecture_score=NEUTRAL_SCORE,
        physiology_score=float(hrv_score),
        regularity_score=calculate_regularity_score(s.bedtime for s in history),
        subjective_score=NEUTRAL_SCORE,
        sleep_hours=sleep_hours,
        in_bed_hours=in_bed_hours,
        awake_minutes=awake_minutes,
        wake_count=wake_count,
        efficiency_pct=efficiency_pct,
        awake_penalty=calculate_awake_penalty(awake_minutes),
        wake_penalty=calculate_wake_penalty(wake_count),
    )

    sleep_score = combine_sleep_score(
        breakdown.quantity_score,
        breakdown.quality_score,
        breakdown.architecture_score,
        breakdown.physiology_score,
        breakdown.regularity_score,
        breakdown.subjective_score,
    )
    return breakdown, sleep_score, population


# =============================================================================
# Training load and composite
# =============================================================================

def calculate_training_load_score(
    total_minutes: float,
    window_days: int,
    daily_target_minutes: float = 60.0,
) -> int:
    """
    Recent volume as a share of the target (60 min/day by default), 0-100.
    """
    target = window_days * daily_target_minutes
    if target <= 0:
        return 0
    ratio = min(1.0, max(0.0, total_minutes / target))
    return round_score(ratio * 100)


def combine_readiness_score(hrv_score: float, sleep_score: float, training_load_score: float) -> int:
    """Weighted readiness composite, 0-100."""
    return round_score(
        READINESS_WEIGHTS["hrv"] * hrv_score
        + READINESS_WEIGHTS["sleep"] * sleep_score
        + READINESS_WEIGHTS["training_load"] * training_load_score
    )


# =============================================================================
# Recommendations
# =============================================================================

def classify_training_load(training_load_score: int) -> str:
    """Bucket the training load score into 'low', 'medium' or 'high'."""
    if training_load_score > 70:
        return "high"
    elif training_load_score > 35:
        return "medium"
    return "low"


def generate_recommendations(composite_score: int, load_level: str) -> List[Recommendation]:
    """
    Training advice from the composite score and the training load level.

    Readiness below 60 asks for recovery and above 85 allows hard training.
    A high load always adds a recovery suggestion. A low load with
    readiness above 70 suggests raising intensity.
    """
    recommendations = []

    if composite_score < 60:
        recommendations.append(Recommendation(
            kind="recovery",
            message="Low readiness - keep today to recovery and light activity",
            priority="high",
        ))
    elif composite_score > 85:
        recommendations.append(Recommendation(
            kind="training",
            message="High readiness - good day for an intense session",
            priority="medium",
        ))

    if load_level == "high":
        recommendations.append(Recommendation(
            kind="recovery",
            message="Training load is high - consider a recovery day",
            priority="high",
        ))
    elif load_level == "low" and composite_score > 70:
        recommendations.append(Recommendation(
            kind="training",
            message="Low training load with good readiness - time to add intensity",
            priority="medium",
        ))

    return recommendations


# =============================================================================
# Orchestration
# =============================================================================

class ReadinessScorer:
    """
    Computes daily readiness from repository data.

    Stateless between calls: the result depends only on the date and on
    what the repository returns.
    """

    def __init__(
        self,
        repository: MetricRepository,
        settings: Settings,
        normalizer: Optional[WorkoutNormalizer] = None,
    ) -> None:
        self._repository = repository
        self._settings = settings
        self._normalizer = normalizer or WorkoutNormalizer(settings)

    async def compute_readiness(self, target_date: date) -> ReadinessRecord:
        """
        Calculate the readiness record for ``target_date`` without storing it.

        Raises:
            DataNotFoundError: If there is no usable HRV sample for the date
            UpstreamUnavailableError: If a repository call fails
        """
        settings = self._settings
        repo = self._repository

        today_metric, hrv_history, sleep_sample, sleep_history = await asyncio.gather(
            call_repository("get_daily_metric", repo.get_daily_metric(target_date)),
            call_repository(
                "get_historical_daily_metrics",
                repo.get_historical_daily_metrics(target_date, settings.hrv_baseline_days),
            ),
            call_repository("get_sleep_sample", repo.get_sleep_sample(target_date)),
            call_repository("get_historical_sleep_samples", repo.get_historical_sleep_samples()),
        )

        # HRV is the one required signal
        hrv_today = to_float(today_metric.hrv) if today_metric is not None else None
        if hrv_today is None:
            raise DataNotFoundError("HRV", target_date.isoformat())

        hrv_baseline = calculate_baseline(
            ((m.date, to_float(m.hrv)) for m in hrv_history),
            target_date,
            settings.hrv_baseline_days,
        )
        hrv_score, hrv_z = calculate_hrv_score(hrv_today, hrv_baseline, settings.logistic_k)
        logger.debug(
            f"HRV {target_date}: today={hrv_today} mean={hrv_baseline.mean:.2f} "
            f"sd={hrv_baseline.sd:.2f} z={hrv_z:.3f} score={hrv_score}"
        )

        if sleep_sample is None:
            logger.warning(f"No sleep sample for {target_date}, scoring as no sleep")
        history = [s for s in sleep_history if s.date <= target_date]
        sleep, sleep_score, sleep_baseline = score_sleep(
            sleep_sample,
            history,
            hrv_score,
            k=settings.logistic_k,
            floor_hours=settings.sleep_floor_hours,
        )
        logger.debug(f"Sleep {target_date}: {sleep.to_dict()} score={sleep_score}")

        load_minutes = await self._training_minutes(target_date)
        training_load_score = calculate_training_load_score(
            load_minutes,
            settings.training_load_days,
            settings.training_load_daily_minutes,
        )
        logger.debug(
            f"Training load {target_date}: {load_minutes:.1f} min over "
            f"{settings.training_load_days} days, score={training_load_score}"
        )

        composite_score = combine_readiness_score(hrv_score, sleep_score, training_load_score)
        load_level = classify_training_load(training_load_score)

        return ReadinessRecord(
            date=target_date,
            hrv=hrv_today,
            hrv_z=hrv_z,
            hrv_score=hrv_score,
            hrv_baseline=hrv_baseline,
            sleep_baseline=sleep_baseline,
            sleep=sleep,
            sleep_score=sleep_score,
            training_load_minutes=load_minutes,
            training_load_window_days=settings.training_load_days,
            training_load_score=training_load_score,
            composite_score=composite_score,
            training_load_level=load_level,
            recommendations=tuple(generate_recommendations(composite_score, load_level)),
        )

    async def compute_and_store(self, target_date: date) -> ReadinessRecord:
        """Calculate readiness and hand the record to the repository."""
        record = await self.compute_readiness(target_date)
        await call_repository("store_readiness", self._repository.store_readiness(record))
        return record

    async def _training_minutes(self, target_date: date) -> float:
        """Total workout minutes over the window ending on (and including) ``target_date``."""
        window_days = self._settings.training_load_days
        start = target_date - timedelta(days=window_days - 1)
        rows = await call_repository(
            "get_workouts", self._repository.get_workouts(start, target_date)
        )
        workouts = [
            w for w in self._normalizer.normalize_all(rows)
            if start <= w.date <= target_date
        ]
        if not workouts:
            logger.warning(f"No workouts between {start} and {target_date}, training load is 0")
            return 0.0
        return sum(w.duration_minutes for w in workouts)
