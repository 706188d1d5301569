"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from health_insights import __version__
from health_insights.main import create_app
from health_insights.models import RawWorkout
from health_insights.repository import InMemoryMetricRepository


@pytest.fixture
def client(full_repository, settings):
    with TestClient(create_app(full_repository, settings)) as client:
        yield client


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": __version__}


class TestReadinessRoutes:
    """Tests for /api/v1/readiness."""

    def test_get_computes_without_storing(self, client, full_repository):
        response = client.get("/api/v1/readiness/2024-03-10")

        assert response.status_code == 200
        data = response.json()
        assert data["date"] == "2024-03-10"
        assert data["hrv_score"] == 20
        assert data["composite_score"] == 36
        assert data["zone"] == "yellow"
        assert data["training_load_level"] == "medium"
        assert data["recommendations"][0]["kind"] == "recovery"
        assert full_repository.readiness == {}

    def test_post_stores(self, client, full_repository, target_date):
        response = client.post("/api/v1/readiness/2024-03-10")

        assert response.status_code == 200
        assert full_repository.readiness[target_date].composite_score == response.json()["composite_score"]

    def test_missing_hrv(self, client):
        """No HRV for the date maps to 404 with the error envelope."""
        response = client.get("/api/v1/readiness/2023-01-01")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "DATA_NOT_FOUND"
        assert error["details"]["date"] == "2023-01-01"

    def test_malformed_date(self, client):
        response = client.get("/api/v1/readiness/yesterday")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_repository_failure(self, settings, baseline_metrics):
        """Storage failures map to 503."""

        class BrokenRepository(InMemoryMetricRepository):
            async def get_workouts(self, start, end):
                raise ConnectionError("down")

        app = create_app(BrokenRepository(daily_metrics=baseline_metrics), settings)
        with TestClient(app) as client:
            response = client.get("/api/v1/readiness/2024-03-10")

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "UPSTREAM_UNAVAILABLE"


class TestTrendRoutes:
    """Tests for /api/v1/trends."""

    @pytest.fixture
    def trend_client(self, settings):
        repository = InMemoryMetricRepository(workouts=[
            RawWorkout(date="2024-03-05", label="Outdoor Run", duration=60, distance=10),
            RawWorkout(date="2024-03-12", label="Outdoor Run", duration=50, distance=12),
            RawWorkout(date="2024-03-12", label="Bench Press", weight=80, reps=8, sets=3),
        ])
        with TestClient(create_app(repository, settings)) as client:
            yield client

    def test_single_category(self, trend_client):
        response = trend_client.get("/api/v1/trends/run", params={"weeks": 2, "end": "2024-03-17"})

        assert response.status_code == 200
        data = response.json()
        assert data["category"] == "run"
        assert data["progressing"] is True
        assert [w["week"] for w in data["weeks"]] == ["2024-W10", "2024-W11"]
        assert data["weeks"][1]["avg_rate"] == pytest.approx(4.17)

    def test_combined(self, trend_client):
        response = trend_client.get("/api/v1/trends/combined", params={"weeks": 2, "end": "2024-03-17"})

        data = response.json()
        assert data["progressing"] == ["run"]
        strength = [w for w in data["weeks"] if w["category"] == "strength"]
        assert strength[0]["total_tonnage"] == 1920

    def test_invalid_weeks(self, trend_client):
        response = trend_client.get("/api/v1/trends/run", params={"weeks": 0})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"]["field"] == "weeks"

    def test_unknown_category(self, trend_client):
        response = trend_client.get("/api/v1/trends/rowing")

        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "category"
