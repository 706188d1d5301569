"""Personal baseline statistics and the z-score to score transform.

Every score is relative to *your* history: today's value is standardized
against a trailing window that never includes today, then mapped onto
0-100 with a logistic curve centred on 50.
"""

import math
import statistics
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence, Tuple

from .models import BaselineStats


DEFAULT_LOGISTIC_K = 0.87


def population_stats(values: Sequence[float]) -> BaselineStats:
    """Mean and population standard deviation of ``values``.

    Returns:
        BaselineStats; an empty input gives mean 0, sd 0
    """
    if not values:
        return BaselineStats(mean=0.0, sd=0.0, count=0)
    return BaselineStats(
        mean=statistics.fmean(values),
        sd=statistics.pstdev(values),
        count=len(values),
    )


def calculate_baseline(
    series: Iterable[Tuple[date, Optional[float]]],
    target: date,
    window_days: int = 30,
) -> BaselineStats:
    """Calculate the trailing baseline for ``target``.

    Args:
        series: (date, value) pairs in any order; None values are skipped
        target: Date being scored, always excluded from the window
        window_days: Window length; values dated in
            [target - window_days, target) are used

    Returns:
        BaselineStats over the window
    """
    start = target - timedelta(days=window_days)
    values = [
        float(value)
        for day, value in series
        if value is not None and start <= day < target
    ]
    return population_stats(values)


def z_score(value: float, baseline: BaselineStats) -> float:
    """Standardized deviation from baseline.

    A flat baseline (sd == 0) carries no signal and yields 0.
    """
    if baseline.sd <= 0:
        return 0.0
    return (value - baseline.mean) / baseline.sd


def logistic(z: float, k: float = DEFAULT_LOGISTIC_K) -> float:
    """Map a z-score onto 0-100; z == 0 gives exactly 50."""
    exponent = -k * z
    if exponent > 700:  # math.exp overflows near 709.8
        return 0.0
    return 100 / (1 + math.exp(exponent))


def round_half_up(value: float) -> int:
    """62.5 -> 63, unlike round()'s banker's rounding."""
    return int(math.floor(value + 0.5))


def round_score(value: float) -> int:
    """Round half up and clamp to 0-100."""
    return min(100, max(0, round_half_up(value)))
