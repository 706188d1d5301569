"""Workout trend API routes."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_trend_service
from ...trends import TrendService


router = APIRouter()


@router.get("/{category}")
async def get_trends(
    category: str,
    weeks: Optional[int] = Query(default=None, description="Number of ISO weeks to report"),
    end: Optional[date] = Query(default=None, description="Last day included, defaults to today"),
    service: TrendService = Depends(get_trend_service),
):
    """
    Get weekly trends for one discipline (run, cycle, swim, strength) or
    for all of them combined.
    """
    summary = await service.compute_trends(weeks=weeks, category=category, end_date=end)
    return summary.to_dict()
