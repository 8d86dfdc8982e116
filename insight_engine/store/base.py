"""Record store interface consumed by the insight services."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from insight_engine.models import schemas
from insight_engine.store.result import StoreResult


class RecordStore(Protocol):
    """Queryable, transactional storage for check-ins, alerts and exercises."""

    # Check-ins
    def insert_check_in(self, data: schemas.CheckInCreate) -> StoreResult[schemas.CheckIn]: ...

    def list_check_ins(self, couple_id: str) -> StoreResult[list[schemas.CheckIn]]: ...

    # Rules
    def insert_rule(self, data: schemas.PatternRuleCreate) -> StoreResult[schemas.PatternRule]: ...

    def list_active_rules(self) -> StoreResult[list[schemas.PatternRule]]: ...

    # Alerts
    def insert_alert(self, data: schemas.AlertCreate) -> StoreResult[schemas.Alert]: ...

    def list_alerts(
        self, couple_id: str, active_only: bool, now: datetime
    ) -> StoreResult[list[schemas.Alert]]: ...

    def find_active_alert(
        self, couple_id: str, user_id: str, alert_type: str, now: datetime
    ) -> StoreResult[schemas.Alert | None]: ...

    def update_alert(self, alert_id: str, user_id: str, fields: dict[str, Any]) -> StoreResult[bool]: ...

    def list_alert_preferences(self, user_id: str) -> StoreResult[list[schemas.AlertPreference]]: ...

    def upsert_alert_preference(
        self, user_id: str, alert_type: str, fields: dict[str, Any]
    ) -> StoreResult[schemas.AlertPreference]: ...

    # Exercises
    def insert_exercise(self, data: schemas.GuidedExerciseCreate) -> StoreResult[schemas.GuidedExercise]: ...

    def list_exercises(self) -> StoreResult[list[schemas.GuidedExercise]]: ...

    def list_exercises_by_category(self, category: str) -> StoreResult[list[schemas.GuidedExercise]]: ...

    def get_exercise(self, exercise_id: str) -> StoreResult[schemas.GuidedExercise | None]: ...

    # Recommendations
    def find_open_recommendation(
        self, user_id: str, couple_id: str, exercise_id: str, now: datetime
    ) -> StoreResult[schemas.Recommendation | None]: ...

    def insert_recommendation(self, data: schemas.RecommendationCreate) -> StoreResult[schemas.Recommendation]: ...

    def list_open_recommendations(
        self, user_id: str, couple_id: str, now: datetime
    ) -> StoreResult[list[schemas.Recommendation]]: ...

    def mark_recommendation_completed(
        self, user_id: str, couple_id: str, exercise_id: str, now: datetime
    ) -> StoreResult[int]: ...

    # Exercise sessions
    def insert_exercise_session(
        self, data: schemas.ExerciseSessionCreate
    ) -> StoreResult[schemas.ExerciseSession]: ...

    def list_exercise_sessions(
        self, user_id: str, couple_id: str
    ) -> StoreResult[list[schemas.ExerciseSession]]: ...
