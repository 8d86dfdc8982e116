"""API endpoints for exercise recommendations."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from insight_engine.dependencies import get_store
from insight_engine.models import schemas
from insight_engine.services.recommendation_engine import RecommendationEngine
from insight_engine.store.base import RecordStore


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])


@router.get("/{couple_id}/{user_id}")
async def get_recommendations(
    couple_id: str,
    user_id: str,
    store: RecordStore = Depends(get_store),
) -> list[schemas.Recommendation]:
    """Open recommendations for the user, highest priority first."""
    return RecommendationEngine(store).get_personalized_recommendations(user_id, couple_id)


@router.post("/{couple_id}/{user_id}/generate")
async def generate_recommendations(
    couple_id: str,
    user_id: str,
    alert_type: schemas.AlertType,
    store: RecordStore = Depends(get_store),
) -> list[schemas.Recommendation]:
    """
    Generate recommendations for an alert type without running detection.

    Args:
        couple_id: Couple the user belongs to
        user_id: User to recommend exercises to
        alert_type: Alert type that selects the exercise categories

    Returns:
        Recommendations created by this request (existing open ones are not repeated)
    """
    logger.info("Generating recommendations | couple=%s user=%s type=%s", couple_id, user_id, alert_type)
    return RecommendationEngine(store).generate_recommendations(user_id, couple_id, alert_type)
