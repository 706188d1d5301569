"""Tests for the repository protocol and the in-memory repository."""

from datetime import date

import pytest

from health_insights.exceptions import DataNotFoundError, UpstreamUnavailableError
from health_insights.readiness import ReadinessScorer
from health_insights.repository import InMemoryMetricRepository, MetricRepository, call_repository


SNAPSHOT = {
    "daily_metrics": [
        {"date": "2024-03-08", "hrv": 48, "resting_heart_rate": 52, "vo2max": 51},
        {"date": "2024-03-09", "hrv": "55"},
        {"date": "2024-03-10", "hrv": 42},
        {"hrv": 60},
    ],
    "sleep": [
        {"date": "3/9/2024", "asleep": "7h:10m", "inbed": "7:45", "wake count": 3, "efficiency": 91, "start": "23:05"},
        {"date": "2024-03-10", "asleep": 6.5, "in_bed": 7.5, "awake": 0.3, "wake_count": 1, "bedtime": "00:20"},
    ],
    "workouts": [
        {"Date": "2024-03-01", "Type": "Outdoor Run", "Duration": 30, "Distance": 5},
        {"Date": "2024-03-09", "Type": "Pool Swim", "Duration": "0:40", "Distance": {"qty": 1500, "units": "m"}},
        {"Date": "", "Type": "Yoga", "Duration": 60},
    ],
}


class TestInMemoryMetricRepository:
    """Tests for InMemoryMetricRepository."""

    @pytest.fixture
    def repository(self):
        return InMemoryMetricRepository.from_snapshot(SNAPSHOT)

    def test_satisfies_protocol(self, repository):
        assert isinstance(repository, MetricRepository)

    @pytest.mark.asyncio
    async def test_daily_metric(self, repository):
        """Extra columns are kept, rows without a date are skipped."""
        sample = await repository.get_daily_metric(date(2024, 3, 8))

        assert sample.hrv == 48
        assert sample.resting_heart_rate == 52
        assert sample.extra == {"vo2max": 51}
        assert await repository.get_daily_metric(date(2024, 3, 11)) is None

    @pytest.mark.asyncio
    async def test_historical_window_excludes_end(self, repository):
        samples = await repository.get_historical_daily_metrics(date(2024, 3, 10), 2)
        assert [s.date for s in samples] == [date(2024, 3, 8), date(2024, 3, 9)]

    @pytest.mark.asyncio
    async def test_sleep_aliases(self, repository):
        """Export column names map onto the sleep sample fields."""
        sample = await repository.get_sleep_sample(date(2024, 3, 9))

        assert sample.in_bed == "7:45"
        assert sample.wake_count == 3
        assert sample.efficiency_pct == 91
        assert sample.bedtime == "23:05"

    @pytest.mark.asyncio
    async def test_sleep_history_sorted(self, repository):
        history = await repository.get_historical_sleep_samples()
        assert [s.date for s in history] == [date(2024, 3, 9), date(2024, 3, 10)]

    @pytest.mark.asyncio
    async def test_workouts_in_range(self, repository):
        """Dated rows are filtered, undated rows are left for the normalizer."""
        rows = await repository.get_workouts(date(2024, 3, 4), date(2024, 3, 10))
        assert [r.label for r in rows] == ["Pool Swim", "Yoga"]

    @pytest.mark.asyncio
    async def test_store_upserts(self, repository, settings):
        scorer = ReadinessScorer(repository, settings)
        first = await scorer.compute_and_store(date(2024, 3, 10))
        second = await scorer.compute_and_store(date(2024, 3, 10))

        assert first == second
        assert list(repository.readiness) == [date(2024, 3, 10)]


class TestCallRepository:
    """Tests for call_repository."""

    @pytest.mark.asyncio
    async def test_passes_result_through(self):
        async def read():
            return 42

        assert await call_repository("read", read()) == 42

    @pytest.mark.asyncio
    async def test_wraps_failures(self):
        async def read():
            raise KeyError("sheet")

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await call_repository("read", read())

        assert exc_info.value.status_code == 503
        assert exc_info.value.details == {"operation": "read"}
        assert isinstance(exc_info.value.__cause__, KeyError)

    @pytest.mark.asyncio
    async def test_engine_errors_propagate(self):
        """Engine exceptions raised by a repository are not re-wrapped."""
        async def read():
            raise DataNotFoundError("HRV", "2024-03-10")

        with pytest.raises(DataNotFoundError):
            await call_repository("read", read())
