"""Dependency injection for API routes.

Services are built from the repository and settings the app was created
with, both held on ``app.state``.
"""

from fastapi import Request

from ..config import Settings
from ..readiness import ReadinessScorer
from ..repository import MetricRepository
from ..trends import TrendService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> MetricRepository:
    return request.app.state.repository


def get_readiness_scorer(request: Request) -> ReadinessScorer:
    """Get the readiness scorer bound to the app's repository."""
    return ReadinessScorer(get_repository(request), get_settings(request))


def get_trend_service(request: Request) -> TrendService:
    """Get the trend service bound to the app's repository."""
    return TrendService(get_repository(request), get_settings(request))
