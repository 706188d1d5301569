"""FastAPI application for the health insights engine."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .api.exception_handlers import register_exception_handlers
from .api.routes import readiness, trends
from .config import Settings, load_settings
from .repository import MetricRepository

logger = logging.getLogger(__name__)


def create_app(repository: MetricRepository, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API around a repository.

    Args:
        repository: Measurement store used by every request
        settings: Engine settings; loaded from the environment when omitted
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting health insights API v{__version__}")
        logger.info(
            f"HRV baseline {settings.hrv_baseline_days} days, "
            f"training load window {settings.training_load_days} days"
        )
        yield
        logger.info("Shutting down health insights API")

    app = FastAPI(
        title="Health Insights API",
        description="Daily readiness scores and weekly workout trends",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.repository = repository
    app.state.settings = settings

    register_exception_handlers(app)

    app.include_router(readiness.router, prefix="/api/v1/readiness", tags=["readiness"])
    app.include_router(trends.router, prefix="/api/v1/trends", tags=["trends"])

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
