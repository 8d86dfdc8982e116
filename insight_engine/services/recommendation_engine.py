"""Exercise recommendations derived from detected patterns."""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable

from insight_engine.config import get_settings
from insight_engine.models import schemas
from insight_engine.models.database_models import utcnow
from insight_engine.store.base import RecordStore


logger = logging.getLogger(__name__)

CATEGORY_MAP: dict[str, tuple[str, ...]] = {
    "low_connection": ("connection", "quality_time", "intimacy"),
    "low_mood": ("stress_relief", "emotional_support", "gratitude"),
    "streak_achieved": ("connection", "gratitude", "quality_time"),
    "pattern_detected": ("communication", "connection", "emotional_support"),
    "relationship_insight": ("communication", "intimacy", "quality_time"),
}
DEFAULT_CATEGORIES: tuple[str, ...] = ("connection",)
EXERCISES_PER_CATEGORY = 2

# Higher priority for more urgent alert types
ALERT_TYPE_PRIORITY: dict[str, int] = {
    "low_connection": 3,
    "low_mood": 4,
    "streak_achieved": 1,
    "pattern_detected": 2,
    "relationship_insight": 2,
}
# Higher priority for easier exercises
DIFFICULTY_PRIORITY: dict[str, int] = {
    "beginner": 3,
    "intermediate": 2,
    "advanced": 1,
}

REASONS: dict[str, str] = {
    "low_connection": "This exercise can help strengthen your connection and address the pattern we detected.",
    "low_mood": "This exercise can help improve your mood and provide emotional support.",
    "streak_achieved": "Great job! This exercise can help you maintain and build on your positive streak.",
    "pattern_detected": "This exercise can help address the pattern we detected in your relationship.",
    "relationship_insight": "This exercise can help you explore and understand your relationship better.",
}
DEFAULT_REASON = "This exercise can help improve your relationship."


def recommendation_priority(alert_type: str, difficulty: str) -> int:
    """Score a candidate exercise; larger numbers are recommended more strongly."""
    return ALERT_TYPE_PRIORITY.get(alert_type, 0) + DIFFICULTY_PRIORITY.get(difficulty, 0)


def recommendation_reason(alert_type: str) -> str:
    return REASONS.get(alert_type, DEFAULT_REASON)


class RecommendationEngine:
    """Selects, scores and persists guided-exercise recommendations."""

    def __init__(
        self,
        store: RecordStore,
        lifetime_days: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        settings = get_settings()
        self.store = store
        self.lifetime = timedelta(
            days=lifetime_days if lifetime_days is not None else settings.recommendation_lifetime_days
        )
        self.clock = clock

    def candidate_exercises(self, alert_type: str) -> list[schemas.GuidedExercise]:
        """Up to two of the easiest active exercises from each mapped category."""

        candidates: list[schemas.GuidedExercise] = []
        for category in CATEGORY_MAP.get(alert_type, DEFAULT_CATEGORIES):
            result = self.store.list_exercises_by_category(category)
            if not result.ok:
                logger.warning("Exercises unavailable for category %s (%s)", category, result.error.value)
                continue
            exercises = result.unwrap_or([])
            if not exercises:
                logger.info("No active exercises in category %s", category)
            candidates.extend(exercises[:EXERCISES_PER_CATEGORY])
        return candidates

    def generate_recommendations(
        self,
        user_id: str,
        couple_id: str,
        alert_type: str,
    ) -> list[schemas.Recommendation]:
        """
        Persist recommendations for an alert type, skipping open duplicates.

        An exercise that appears under two mapped categories is considered once.
        Exercises that already have an open recommendation for this user and
        couple are skipped.

        Args:
            user_id: User the recommendations are for
            couple_id: Couple the user belongs to
            alert_type: Type of the alert that triggered the recommendations

        Returns:
            Recommendations created by this call
        """
        now = self.clock()
        reason = recommendation_reason(alert_type)
        seen: set[str] = set()
        created: list[schemas.Recommendation] = []

        for exercise in self.candidate_exercises(alert_type):
            if exercise.id in seen:
                continue
            seen.add(exercise.id)

            existing = self.store.find_open_recommendation(user_id, couple_id, exercise.id, now)
            if not existing.ok:
                logger.warning(
                    "Skipping exercise %s, open-recommendation lookup failed (%s)",
                    exercise.id,
                    existing.error.value,
                )
                continue
            if existing.value is not None:
                logger.debug("Open recommendation already exists for exercise %s", exercise.id)
                continue

            result = self.store.insert_recommendation(
                schemas.RecommendationCreate(
                    user_id=user_id,
                    couple_id=couple_id,
                    exercise_id=exercise.id,
                    reason=reason,
                    priority=recommendation_priority(alert_type, exercise.difficulty),
                    expires_at=now + self.lifetime,
                    is_completed=False,
                    created_at=now,
                )
            )
            if not result.ok:
                logger.warning("Recommendation for exercise %s not created (%s)", exercise.id, result.error.value)
                continue
            created.append(result.value)

        logger.info("Generated %d exercise recommendations for %s", len(created), alert_type)
        return created

    def get_personalized_recommendations(self, user_id: str, couple_id: str) -> list[schemas.Recommendation]:
        """Open recommendations, highest priority first."""

        result = self.store.list_open_recommendations(user_id, couple_id, self.clock())
        if not result.ok:
            logger.warning("Recommendations unavailable for user %s (%s)", user_id, result.error.value)
        return result.unwrap_or([])

    def list_exercises(self, category: str | None = None) -> list[schemas.GuidedExercise]:
        if category:
            result = self.store.list_exercises_by_category(category)
        else:
            result = self.store.list_exercises()
        if not result.ok:
            logger.warning("Exercises unavailable (%s)", result.error.value)
        return result.unwrap_or([])

    def get_exercise(self, exercise_id: str) -> schemas.GuidedExercise | None:
        result = self.store.get_exercise(exercise_id)
        if not result.ok:
            logger.warning("Exercise %s unavailable (%s)", exercise_id, result.error.value)
        return result.unwrap_or(None)

    def record_exercise_session(self, data: schemas.ExerciseSessionCreate) -> schemas.ExerciseSession | None:
        """Store a completed session and close the matching open recommendations."""

        result = self.store.insert_exercise_session(data)
        if not result.ok:
            logger.warning("Exercise session not recorded (%s)", result.error.value)
            return None

        completed = self.store.mark_recommendation_completed(
            data.user_id, data.couple_id, data.exercise_id, self.clock()
        )
        if not completed.ok:
            logger.warning(
                "Session %s recorded but recommendations not closed (%s)",
                result.value.id,
                completed.error.value,
            )
        elif completed.value:
            logger.info("Marked %d recommendation(s) completed for exercise %s", completed.value, data.exercise_id)

        return result.value

    def get_exercise_history(self, user_id: str, couple_id: str) -> list[schemas.ExerciseSession]:
        result = self.store.list_exercise_sessions(user_id, couple_id)
        if not result.ok:
            logger.warning("Exercise history unavailable for user %s (%s)", user_id, result.error.value)
        return result.unwrap_or([])

    def get_exercise_stats(self, user_id: str, couple_id: str) -> schemas.ExerciseStats:
        """
        Summarise a user's completed exercises.

        The streak counts sessions chained back from now where each session is
        at most one day older than the previous link.
        """
        history = self.get_exercise_history(user_id, couple_id)
        if not history:
            return schemas.ExerciseStats()

        total_minutes = sum(session.duration_minutes or 0 for session in history)
        ratings = [session.rating for session in history if session.rating]
        average_rating = round(sum(ratings) / len(ratings), 1) if ratings else 0.0

        streak_days = 0
        anchor = self.clock()
        for session in sorted(history, key=lambda s: s.completed_at, reverse=True):
            if anchor - session.completed_at <= timedelta(days=1):
                streak_days += 1
                anchor = session.completed_at
            else:
                break

        category_counts: Counter[str] = Counter()
        for session in history:
            exercise = self.get_exercise(session.exercise_id)
            if exercise:
                category_counts[exercise.category] += 1
        favorite_category = category_counts.most_common(1)[0][0] if category_counts else ""

        return schemas.ExerciseStats(
            total_completed=len(history),
            total_minutes=total_minutes,
            average_rating=average_rating,
            favorite_category=favorite_category,
            streak_days=streak_days,
        )
