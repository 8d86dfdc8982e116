"""SQLAlchemy implementation of the record store."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import and_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from insight_engine.models import schemas
from insight_engine.models.database_models import (
    CheckIn,
    ExerciseRecommendation,
    ExerciseSession,
    GuidedExercise,
    PatternAlert,
    PatternAlertPreference,
    PatternRule,
    utcnow,
)
from insight_engine.store.result import ErrorKind, StoreResult, classify_error


logger = logging.getLogger(__name__)

T = TypeVar("T")

_ALERT_UPDATABLE = {"is_read", "is_dismissed"}
_PREFERENCE_UPDATABLE = {"enabled", "notification_enabled", "email_enabled"}


class SqlAlchemyRecordStore:
    """Record store backed by a SQLAlchemy session factory.

    Each call runs in its own short transaction. Database errors are logged and
    returned as :class:`StoreResult` failures; nothing is raised to callers.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _run(self, operation: str, fn: Callable[[Session], T]) -> StoreResult[T]:
        try:
            with self._session() as session:
                return StoreResult.success(fn(session))
        except SQLAlchemyError as exc:
            kind = classify_error(exc)
            logger.error("Record store %s failed (%s): %s", operation, kind.value, exc)
            return StoreResult.failure(kind, str(exc))
        except ValidationError as exc:
            logger.error("Record store %s returned a malformed row: %s", operation, exc)
            return StoreResult.failure(ErrorKind.QUERY, str(exc))

    # ------------------------------------------------------------------ check-ins

    def insert_check_in(self, data: schemas.CheckInCreate) -> StoreResult[schemas.CheckIn]:
        def _insert(session: Session) -> schemas.CheckIn:
            row = CheckIn(**data.model_dump())
            session.add(row)
            session.flush()
            return schemas.CheckIn.model_validate(row)

        return self._run("insert_check_in", _insert)

    def list_check_ins(self, couple_id: str) -> StoreResult[list[schemas.CheckIn]]:
        def _list(session: Session) -> list[schemas.CheckIn]:
            rows = (
                session.query(CheckIn)
                .filter(CheckIn.couple_id == couple_id)
                .order_by(CheckIn.date.asc())
                .all()
            )
            return _validate_rows(schemas.CheckIn, rows, "check-in")

        return self._run("list_check_ins", _list)

    # ---------------------------------------------------------------------- rules

    def insert_rule(self, data: schemas.PatternRuleCreate) -> StoreResult[schemas.PatternRule]:
        def _insert(session: Session) -> schemas.PatternRule:
            row = PatternRule(
                rule_name=data.rule_name,
                rule_type=data.rule_type,
                conditions=data.conditions.model_dump(),
                priority=data.priority,
                is_active=data.is_active,
            )
            session.add(row)
            session.flush()
            return schemas.pattern_rule_adapter.validate_python(_rule_payload(row))

        return self._run("insert_rule", _insert)

    def list_active_rules(self) -> StoreResult[list[schemas.PatternRule]]:
        def _list(session: Session) -> list[schemas.PatternRule]:
            rows = (
                session.query(PatternRule)
                .filter(PatternRule.is_active.is_(True))
                .order_by(PatternRule.priority.asc())
                .all()
            )
            rules: list[schemas.PatternRule] = []
            for row in rows:
                try:
                    rules.append(schemas.pattern_rule_adapter.validate_python(_rule_payload(row)))
                except ValidationError as exc:
                    logger.warning("Skipping malformed pattern rule %s: %s", row.rule_name, exc)
            return rules

        return self._run("list_active_rules", _list)

    # --------------------------------------------------------------------- alerts

    def insert_alert(self, data: schemas.AlertCreate) -> StoreResult[schemas.Alert]:
        def _insert(session: Session) -> schemas.Alert:
            row = PatternAlert(**data.model_dump(exclude_none=True), is_read=False, is_dismissed=False)
            session.add(row)
            session.flush()
            return schemas.Alert.model_validate(row)

        return self._run("insert_alert", _insert)

    def list_alerts(
        self, couple_id: str, active_only: bool, now: datetime
    ) -> StoreResult[list[schemas.Alert]]:
        def _list(session: Session) -> list[schemas.Alert]:
            query = session.query(PatternAlert).filter(PatternAlert.couple_id == couple_id)
            if active_only:
                query = query.filter(
                    PatternAlert.is_dismissed.is_(False),
                    PatternAlert.expires_at > now,
                )
            rows = query.order_by(PatternAlert.created_at.desc()).all()
            return _validate_rows(schemas.Alert, rows, "alert")

        return self._run("list_alerts", _list)

    def find_active_alert(
        self, couple_id: str, user_id: str, alert_type: str, now: datetime
    ) -> StoreResult[schemas.Alert | None]:
        def _find(session: Session) -> schemas.Alert | None:
            row = (
                session.query(PatternAlert)
                .filter(
                    and_(
                        PatternAlert.couple_id == couple_id,
                        PatternAlert.user_id == user_id,
                        PatternAlert.type == alert_type,
                        PatternAlert.is_dismissed.is_(False),
                        PatternAlert.expires_at > now,
                    )
                )
                .order_by(PatternAlert.created_at.desc())
                .first()
            )
            return schemas.Alert.model_validate(row) if row else None

        return self._run("find_active_alert", _find)

    def update_alert(self, alert_id: str, user_id: str, fields: dict[str, Any]) -> StoreResult[bool]:
        values = {key: value for key, value in fields.items() if key in _ALERT_UPDATABLE}
        values["updated_at"] = utcnow()

        def _update(session: Session) -> bool:
            result = session.execute(
                update(PatternAlert)
                .where(PatternAlert.id == alert_id, PatternAlert.user_id == user_id)
                .values(**values)
            )
            return result.rowcount > 0

        return self._run("update_alert", _update)

    def list_alert_preferences(self, user_id: str) -> StoreResult[list[schemas.AlertPreference]]:
        def _list(session: Session) -> list[schemas.AlertPreference]:
            rows = (
                session.query(PatternAlertPreference)
                .filter(PatternAlertPreference.user_id == user_id)
                .order_by(PatternAlertPreference.alert_type.asc())
                .all()
            )
            return _validate_rows(schemas.AlertPreference, rows, "alert preference")

        return self._run("list_alert_preferences", _list)

    def upsert_alert_preference(
        self, user_id: str, alert_type: str, fields: dict[str, Any]
    ) -> StoreResult[schemas.AlertPreference]:
        def _upsert(session: Session) -> schemas.AlertPreference:
            row = (
                session.query(PatternAlertPreference)
                .filter(
                    PatternAlertPreference.user_id == user_id,
                    PatternAlertPreference.alert_type == alert_type,
                )
                .first()
            )
            if row is None:
                row = PatternAlertPreference(
                    user_id=user_id,
                    alert_type=alert_type,
                    enabled=True,
                    notification_enabled=True,
                    email_enabled=False,
                )
                session.add(row)
            for key, value in fields.items():
                if key in _PREFERENCE_UPDATABLE and value is not None:
                    setattr(row, key, value)
            row.updated_at = utcnow()
            session.flush()
            return schemas.AlertPreference.model_validate(row)

        return self._run("upsert_alert_preference", _upsert)

    # ------------------------------------------------------------------ exercises

    def insert_exercise(self, data: schemas.GuidedExerciseCreate) -> StoreResult[schemas.GuidedExercise]:
        def _insert(session: Session) -> schemas.GuidedExercise:
            row = GuidedExercise(**data.model_dump())
            session.add(row)
            session.flush()
            return schemas.GuidedExercise.model_validate(row)

        return self._run("insert_exercise", _insert)

    def list_exercises(self) -> StoreResult[list[schemas.GuidedExercise]]:
        def _list(session: Session) -> list[schemas.GuidedExercise]:
            rows = (
                session.query(GuidedExercise)
                .filter(GuidedExercise.is_active.is_(True))
                .order_by(GuidedExercise.category.asc(), GuidedExercise.title.asc())
                .all()
            )
            return _sort_by_difficulty(_validate_rows(schemas.GuidedExercise, rows, "exercise"), by_category=True)

        return self._run("list_exercises", _list)

    def list_exercises_by_category(self, category: str) -> StoreResult[list[schemas.GuidedExercise]]:
        def _list(session: Session) -> list[schemas.GuidedExercise]:
            rows = (
                session.query(GuidedExercise)
                .filter(
                    GuidedExercise.category == category,
                    GuidedExercise.is_active.is_(True),
                )
                .order_by(GuidedExercise.title.asc())
                .all()
            )
            return _sort_by_difficulty(_validate_rows(schemas.GuidedExercise, rows, "exercise"))

        return self._run("list_exercises_by_category", _list)

    def get_exercise(self, exercise_id: str) -> StoreResult[schemas.GuidedExercise | None]:
        def _get(session: Session) -> schemas.GuidedExercise | None:
            row = (
                session.query(GuidedExercise)
                .filter(GuidedExercise.id == exercise_id, GuidedExercise.is_active.is_(True))
                .first()
            )
            return schemas.GuidedExercise.model_validate(row) if row else None

        return self._run("get_exercise", _get)

    # ------------------------------------------------------------ recommendations

    def find_open_recommendation(
        self, user_id: str, couple_id: str, exercise_id: str, now: datetime
    ) -> StoreResult[schemas.Recommendation | None]:
        def _find(session: Session) -> schemas.Recommendation | None:
            row = (
                session.query(ExerciseRecommendation)
                .filter(
                    ExerciseRecommendation.user_id == user_id,
                    ExerciseRecommendation.couple_id == couple_id,
                    ExerciseRecommendation.exercise_id == exercise_id,
                    ExerciseRecommendation.is_completed.is_(False),
                    ExerciseRecommendation.expires_at > now,
                )
                .first()
            )
            return schemas.Recommendation.model_validate(row) if row else None

        return self._run("find_open_recommendation", _find)

    def insert_recommendation(self, data: schemas.RecommendationCreate) -> StoreResult[schemas.Recommendation]:
        def _insert(session: Session) -> schemas.Recommendation:
            row = ExerciseRecommendation(**data.model_dump(exclude_none=True))
            session.add(row)
            session.flush()
            return schemas.Recommendation.model_validate(row)

        return self._run("insert_recommendation", _insert)

    def list_open_recommendations(
        self, user_id: str, couple_id: str, now: datetime
    ) -> StoreResult[list[schemas.Recommendation]]:
        def _list(session: Session) -> list[schemas.Recommendation]:
            rows = (
                session.query(ExerciseRecommendation)
                .filter(
                    ExerciseRecommendation.user_id == user_id,
                    ExerciseRecommendation.couple_id == couple_id,
                    ExerciseRecommendation.is_completed.is_(False),
                    ExerciseRecommendation.expires_at > now,
                )
                .order_by(
                    ExerciseRecommendation.priority.desc(),
                    ExerciseRecommendation.created_at.desc(),
                )
                .all()
            )
            return _validate_rows(schemas.Recommendation, rows, "recommendation")

        return self._run("list_open_recommendations", _list)

    def mark_recommendation_completed(
        self, user_id: str, couple_id: str, exercise_id: str, now: datetime
    ) -> StoreResult[int]:
        def _mark(session: Session) -> int:
            result = session.execute(
                update(ExerciseRecommendation)
                .where(
                    ExerciseRecommendation.user_id == user_id,
                    ExerciseRecommendation.couple_id == couple_id,
                    ExerciseRecommendation.exercise_id == exercise_id,
                    ExerciseRecommendation.is_completed.is_(False),
                    ExerciseRecommendation.expires_at > now,
                )
                .values(is_completed=True)
            )
            return result.rowcount

        return self._run("mark_recommendation_completed", _mark)

    # ---------------------------------------------------------- exercise sessions

    def insert_exercise_session(
        self, data: schemas.ExerciseSessionCreate
    ) -> StoreResult[schemas.ExerciseSession]:
        def _insert(session: Session) -> schemas.ExerciseSession:
            row = ExerciseSession(**data.model_dump())
            session.add(row)
            session.flush()
            return schemas.ExerciseSession.model_validate(row)

        return self._run("insert_exercise_session", _insert)

    def list_exercise_sessions(
        self, user_id: str, couple_id: str
    ) -> StoreResult[list[schemas.ExerciseSession]]:
        def _list(session: Session) -> list[schemas.ExerciseSession]:
            rows = (
                session.query(ExerciseSession)
                .filter(
                    ExerciseSession.user_id == user_id,
                    ExerciseSession.couple_id == couple_id,
                )
                .order_by(ExerciseSession.completed_at.desc())
                .all()
            )
            return _validate_rows(schemas.ExerciseSession, rows, "exercise session")

        return self._run("list_exercise_sessions", _list)


M = TypeVar("M", bound=BaseModel)


def _validate_rows(model: type[M], rows: list[Any], label: str) -> list[M]:
    """Convert rows to ``model``, dropping any that no longer validate."""
    items: list[M] = []
    for row in rows:
        try:
            items.append(model.model_validate(row))
        except ValidationError as exc:
            logger.warning("Skipping malformed %s row %s: %s", label, row.id, exc)
    return items


_DIFFICULTY_ORDER = {"beginner": 0, "intermediate": 1, "advanced": 2}


def _sort_by_difficulty(
    exercises: list[schemas.GuidedExercise], by_category: bool = False
) -> list[schemas.GuidedExercise]:
    # Difficulty is stored as text, so an SQL ORDER BY would sort it alphabetically.
    def key(exercise: schemas.GuidedExercise):
        rank = _DIFFICULTY_ORDER.get(exercise.difficulty, len(_DIFFICULTY_ORDER))
        return (exercise.category, rank) if by_category else (rank,)

    return sorted(exercises, key=key)


def _rule_payload(row: PatternRule) -> dict[str, Any]:
    return {
        "id": row.id,
        "rule_name": row.rule_name,
        "rule_type": row.rule_type,
        "conditions": row.conditions or {},
        "priority": row.priority,
        "is_active": row.is_active,
    }
