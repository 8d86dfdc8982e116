"""Guided exercise catalogue and session endpoints."""
from fastapi import APIRouter, Depends, HTTPException

from insight_engine.dependencies import get_store
from insight_engine.models import schemas
from insight_engine.services.recommendation_engine import RecommendationEngine
from insight_engine.store.base import RecordStore

router = APIRouter(prefix="/api/exercises", tags=["exercises"])


@router.get("")
async def list_exercises(
    category: schemas.ExerciseCategory | None = None,
    store: RecordStore = Depends(get_store),
) -> list[schemas.GuidedExercise]:
    """Active exercises, optionally limited to one category, easiest first."""
    return RecommendationEngine(store).list_exercises(category)


@router.post("/sessions")
async def record_session(
    session: schemas.ExerciseSessionCreate,
    store: RecordStore = Depends(get_store),
) -> schemas.ExerciseSession:
    """
    Record a completed exercise and close matching open recommendations.

    Raises:
        HTTPException: 503 if the session could not be stored
    """
    recorded = RecommendationEngine(store).record_exercise_session(session)
    if recorded is None:
        raise HTTPException(status_code=503, detail="Exercise session could not be recorded")
    return recorded


@router.get("/sessions/{couple_id}/{user_id}")
async def get_history(
    couple_id: str,
    user_id: str,
    store: RecordStore = Depends(get_store),
) -> list[schemas.ExerciseSession]:
    return RecommendationEngine(store).get_exercise_history(user_id, couple_id)


@router.get("/stats/{couple_id}/{user_id}")
async def get_stats(
    couple_id: str,
    user_id: str,
    store: RecordStore = Depends(get_store),
) -> schemas.ExerciseStats:
    return RecommendationEngine(store).get_exercise_stats(user_id, couple_id)


@router.get("/{exercise_id}")
async def get_exercise(
    exercise_id: str,
    store: RecordStore = Depends(get_store),
) -> schemas.GuidedExercise:
    """
    Fetch one active exercise.

    Raises:
        HTTPException: 404 if the exercise does not exist or is inactive
    """
    exercise = RecommendationEngine(store).get_exercise(exercise_id)
    if exercise is None:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise
