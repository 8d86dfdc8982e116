"""Endpoints that run the insight pipeline for a partner."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from insight_engine.dependencies import get_store
from insight_engine.models import schemas
from insight_engine.services.insight_engine import InsightEngine
from insight_engine.services.pattern_detector import PatternDetector
from insight_engine.store.base import RecordStore


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/couples", tags=["insights"])


@router.post("/{couple_id}/check-ins")
async def submit_check_in(
    couple_id: str,
    check_in: schemas.CheckInCreate,
    store: RecordStore = Depends(get_store),
) -> dict:
    """
    Store a check-in and run the insight pipeline for its author.

    Raises:
        HTTPException: 400 if the body names a different couple, 503 if the
            check-in could not be stored
    """
    if check_in.couple_id != couple_id:
        raise HTTPException(status_code=400, detail="couple_id in body does not match path")

    result = store.insert_check_in(check_in)
    if not result.ok:
        raise HTTPException(status_code=503, detail="Check-in could not be saved")

    run = InsightEngine(store).run(couple_id, check_in.user_id)
    return {
        "check_in": result.value.model_dump(mode="json"),
        "insights": run.model_dump(mode="json"),
    }


@router.get("/{couple_id}/users/{user_id}/patterns")
async def detect_patterns(
    couple_id: str,
    user_id: str,
    store: RecordStore = Depends(get_store),
) -> list[schemas.DetectionResult]:
    """Dry-run detection: report which rules fire without creating alerts."""
    return PatternDetector(store).detect_patterns(couple_id, user_id)


@router.post("/{couple_id}/users/{user_id}/insights")
async def run_insights(
    couple_id: str,
    user_id: str,
    store: RecordStore = Depends(get_store),
) -> schemas.InsightRun:
    """Detect patterns, create alerts and recommend exercises for one partner."""
    logger.info("Handling insight run | couple=%s user=%s", couple_id, user_id)
    return InsightEngine(store).run(couple_id, user_id)
