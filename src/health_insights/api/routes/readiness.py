"""Readiness API routes."""

from datetime import date

from fastapi import APIRouter, Depends

from ..deps import get_readiness_scorer
from ...readiness import ReadinessScorer


router = APIRouter()


@router.get("/{target_date}")
async def get_readiness(
    target_date: date,
    scorer: ReadinessScorer = Depends(get_readiness_scorer),
):
    """Compute the readiness record for a date (YYYY-MM-DD) without storing it."""
    record = await scorer.compute_readiness(target_date)
    return record.to_dict()


@router.post("/{target_date}")
async def compute_and_store_readiness(
    target_date: date,
    scorer: ReadinessScorer = Depends(get_readiness_scorer),
):
    """Compute the readiness record for a date and persist it."""
    record = await scorer.compute_and_store(target_date)
    return record.to_dict()
