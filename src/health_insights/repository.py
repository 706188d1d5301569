"""
Repository protocol consumed by the scoring engine.

The engine only ever reads samples and writes readiness records through
this interface. Storage, retries and timeouts belong to implementations.
"""

import logging
from datetime import date, timedelta
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Protocol, TypeVar, runtime_checkable

from .exceptions import HealthInsightsError, UpstreamUnavailableError
from .models import DailyMetricSample, RawWorkout, ReadinessRecord, SleepSample
from .parsing import parse_date

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_repository(operation: str, awaitable: Awaitable[T]) -> T:
    """Await a repository call, surfacing any failure as UpstreamUnavailableError.

    No retry is attempted.
    """
    try:
        return await awaitable
    except HealthInsightsError:
        raise
    except Exception as e:
        logger.error(f"Repository call {operation} failed: {e}")
        raise UpstreamUnavailableError(operation, str(e)) from e


@runtime_checkable
class MetricRepository(Protocol):
    """
    Protocol for the measurement store.

    Missing samples are returned as None, never raised. Any exception
    raised by an implementation is treated as the store being unavailable.
    """

    async def get_daily_metric(self, day: date) -> Optional[DailyMetricSample]:
        """Get the daily metric sample for a date."""
        ...

    async def get_historical_daily_metrics(
        self,
        end_exclusive: date,
        window_days: int,
    ) -> List[DailyMetricSample]:
        """Get samples dated in [end_exclusive - window_days, end_exclusive), oldest first."""
        ...

    async def get_sleep_sample(self, day: date) -> Optional[SleepSample]:
        """Get the sleep sample for the night ending on a date."""
        ...

    async def get_historical_sleep_samples(self) -> List[SleepSample]:
        """Get the full sleep history, oldest first."""
        ...

    async def get_workouts(self, start: date, end: date) -> List[RawWorkout]:
        """Get raw workouts dated in [start, end]."""
        ...

    async def store_readiness(self, record: ReadinessRecord) -> None:
        """Persist a computed readiness record."""
        ...


class InMemoryMetricRepository:
    """
    Dictionary-backed MetricRepository.

    Used by the CLI over a JSON snapshot and by tests. Storing the same
    date twice replaces the earlier record.
    """

    def __init__(
        self,
        daily_metrics: Optional[List[DailyMetricSample]] = None,
        sleep_samples: Optional[List[SleepSample]] = None,
        workouts: Optional[List[RawWorkout]] = None,
    ) -> None:
        self._daily: Dict[date, DailyMetricSample] = {m.date: m for m in daily_metrics or []}
        self._sleep: Dict[date, SleepSample] = {s.date: s for s in sleep_samples or []}
        self._workouts: List[RawWorkout] = list(workouts or [])
        self.readiness: Dict[date, ReadinessRecord] = {}

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any]) -> "InMemoryMetricRepository":
        """Build from a snapshot of the form
        ``{"daily_metrics": [...], "sleep": [...], "workouts": [...]}``.

        Metric and sleep rows without a parsable date are skipped.
        """
        daily = []
        for row in snapshot.get("daily_metrics", []):
            day = parse_date(row.get("date"))
            if day is None:
                logger.debug(f"Skipping daily metric row without a date: {row!r}")
                continue
            extra = {k: v for k, v in row.items() if k not in ("date", "hrv", "resting_heart_rate")}
            daily.append(DailyMetricSample(
                date=day,
                hrv=row.get("hrv"),
                resting_heart_rate=row.get("resting_heart_rate"),
                extra=extra,
            ))

        sleep = []
        for row in snapshot.get("sleep", []):
            day = parse_date(row.get("date"))
            if day is None:
                logger.debug(f"Skipping sleep row without a date: {row!r}")
                continue
            sleep.append(SleepSample(
                date=day,
                asleep=row.get("asleep"),
                in_bed=row.get("in_bed", row.get("inbed")),
                awake=row.get("awake"),
                wake_count=row.get("wake_count", row.get("wake count")),
                efficiency_pct=row.get("efficiency_pct", row.get("efficiency")),
                bedtime=row.get("bedtime", row.get("start")),
            ))

        workouts = [RawWorkout.from_row(row) for row in snapshot.get("workouts", [])]
        return cls(daily_metrics=daily, sleep_samples=sleep, workouts=workouts)

    async def get_daily_metric(self, day: date) -> Optional[DailyMetricSample]:
        return self._daily.get(day)

    async def get_historical_daily_metrics(
        self,
        end_exclusive: date,
        window_days: int,
    ) -> List[DailyMetricSample]:
        start = end_exclusive - timedelta(days=window_days)
        return [
            self._daily[d] for d in sorted(self._daily)
            if start <= d < end_exclusive
        ]

    async def get_sleep_sample(self, day: date) -> Optional[SleepSample]:
        return self._sleep.get(day)

    async def get_historical_sleep_samples(self) -> List[SleepSample]:
        return [self._sleep[d] for d in sorted(self._sleep)]

    async def get_workouts(self, start: date, end: date) -> List[RawWorkout]:
        """Rows with unparsable dates are passed through for the normalizer to drop."""
        selected = []
        for workout in self._workouts:
            day = parse_date(workout.date)
            if day is None or start <= day <= end:
                selected.append(workout)
        return selected

    async def store_readiness(self, record: ReadinessRecord) -> None:
        self.readiness[record.date] = record
        logger.info(f"Stored readiness {record.composite_score} for {record.date}")
