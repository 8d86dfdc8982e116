"""Tests for the SQLAlchemy record store and its result wrapper."""
from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

from sqlalchemy import exc as sa_exc

from conftest import COUPLE_ID, NOW, USER_ID, create_check_ins, create_exercise
from insight_engine.models import schemas
from insight_engine.models.database_models import CheckIn, GuidedExercise
from insight_engine.store.result import ErrorKind, StoreResult, classify_error
from insight_engine.store.sqlalchemy_store import SqlAlchemyRecordStore


class TestStoreResult:
    """Value-or-error semantics."""

    def test_success(self):
        result = StoreResult.success([1, 2])

        assert result.ok is True
        assert result.unwrap_or([]) == [1, 2]

    def test_failure(self):
        result = StoreResult.failure(ErrorKind.TIMEOUT, "slow")

        assert result.ok is False
        assert result.error is ErrorKind.TIMEOUT
        assert result.unwrap_or([]) == []

    def test_none_value_unwraps_to_default(self):
        assert StoreResult.success(None).unwrap_or("fallback") == "fallback"


class TestClassifyError:
    """SQLAlchemy exception mapping."""

    def test_timeout(self):
        assert classify_error(sa_exc.TimeoutError("pool exhausted")) is ErrorKind.TIMEOUT

    def test_locked_database_is_timeout(self):
        error = sa_exc.OperationalError("SELECT 1", {}, Exception("database is locked"))

        assert classify_error(error) is ErrorKind.TIMEOUT

    def test_operational_error_is_unavailable(self):
        error = sa_exc.OperationalError("SELECT 1", {}, Exception("unable to open database file"))

        assert classify_error(error) is ErrorKind.UNAVAILABLE

    def test_integrity(self):
        error = sa_exc.IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        assert classify_error(error) is ErrorKind.INTEGRITY

    def test_other_errors_are_query_errors(self):
        assert classify_error(sa_exc.InvalidRequestError("bad")) is ErrorKind.QUERY


class TestSqlAlchemyRecordStore:
    """Database-backed behaviour."""

    def test_failures_are_returned_not_raised(self):
        factory = MagicMock(side_effect=sa_exc.OperationalError("connect", {}, Exception("connection refused")))
        store = SqlAlchemyRecordStore(factory)

        result = store.list_check_ins(COUPLE_ID)

        assert result.ok is False
        assert result.error is ErrorKind.UNAVAILABLE

    def test_missing_tables_fail_open(self):
        from sqlalchemy.orm import sessionmaker

        from insight_engine.database import build_engine

        store = SqlAlchemyRecordStore(sessionmaker(bind=build_engine("sqlite://", timeout_seconds=1.0)))

        result = store.list_alerts(COUPLE_ID, active_only=True, now=NOW)

        assert result.ok is False
        assert result.unwrap_or([]) == []

    def test_duplicate_rule_name_is_integrity_error(self, store):
        rule = schemas.PatternRuleCreate(
            rule_name="dup",
            rule_type="low_mood",
            conditions=schemas.RuleConditions(metric="mood", operator="<=", threshold=4, consecutive_days=3),
        )

        assert store.insert_rule(rule).ok is True
        assert store.insert_rule(rule).error is ErrorKind.INTEGRITY

    def test_exercises_sorted_by_difficulty_not_alphabetically(self, store):
        create_exercise(store, "A", "gratitude", "intermediate")
        create_exercise(store, "B", "gratitude", "advanced")
        create_exercise(store, "C", "gratitude", "beginner")

        exercises = store.list_exercises_by_category("gratitude").value

        assert [e.difficulty for e in exercises] == ["beginner", "intermediate", "advanced"]

    def test_list_exercises_groups_by_category(self, store):
        create_exercise(store, "Gaze", "intimacy", "advanced")
        create_exercise(store, "Kiss", "connection", "intermediate")
        create_exercise(store, "Talk", "connection", "beginner")

        exercises = store.list_exercises().value

        assert [e.title for e in exercises] == ["Talk", "Kiss", "Gaze"]

    def test_get_exercise_hides_inactive(self, store):
        active = create_exercise(store, "Kiss")
        retired = create_exercise(store, "Old", is_active=False)

        assert store.get_exercise(active.id).value.title == "Kiss"
        assert store.get_exercise(retired.id).value is None

    def test_update_alert_ignores_unknown_fields(self, store):
        alert = store.insert_alert(
            schemas.AlertCreate(
                couple_id=COUPLE_ID,
                user_id=USER_ID,
                type="low_mood",
                title="t",
                message="m",
                suggested_action="s",
                severity="high",
                expires_at=NOW,
            )
        ).value

        result = store.update_alert(alert.id, USER_ID, {"is_read": True, "severity": "low"})

        assert result.value is True
        [stored] = store.list_alerts(COUPLE_ID, active_only=False, now=NOW).value
        assert stored.is_read is True
        assert stored.severity == "high"


class TestMalformedRows:
    """Rows written outside the API that no longer validate."""

    def test_invalid_check_in_is_skipped(self, store, session_factory):
        create_check_ins(store, moods=[5])
        with session_factory() as session:
            session.add(
                CheckIn(user_id=USER_ID, couple_id=COUPLE_ID, date=date(2026, 10, 2), mood_rating=0, connection_rating=5)
            )
            session.commit()

        result = store.list_check_ins(COUPLE_ID)

        assert result.ok is True
        assert [c.mood_rating for c in result.value] == [5]

    def test_invalid_exercise_is_skipped_in_lists(self, store, session_factory):
        create_exercise(store, "Kiss", "connection")
        expert_id = add_expert_exercise(session_factory)

        assert [e.title for e in store.list_exercises_by_category("connection").value] == ["Kiss"]
        assert [e.title for e in store.list_exercises().value] == ["Kiss"]

        single = store.get_exercise(expert_id)
        assert single.ok is False
        assert single.error is ErrorKind.QUERY


def add_expert_exercise(session_factory) -> str:
    with session_factory() as session:
        row = GuidedExercise(
            title="Expert",
            description="Not a known difficulty",
            duration=10,
            category="connection",
            difficulty="expert",
            instructions=[],
        )
        session.add(row)
        session.commit()
        return row.id
