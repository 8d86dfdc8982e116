"""Pytest configuration for global fixtures and logging setup."""
from __future__ import annotations

import os
from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

os.environ["INSIGHTS_DATABASE_URL"] = os.environ.get("INSIGHTS_DATABASE_URL") or "sqlite://"
os.environ["INSIGHTS_LOG_LEVEL"] = os.environ.get("INSIGHTS_LOG_LEVEL") or "DEBUG"

from insight_engine.logging_config import configure_logging

configure_logging()

from insight_engine.database import Base, build_engine
from insight_engine.dependencies import get_store
from insight_engine.main import app
from insight_engine.models import schemas
from insight_engine.models import database_models  # noqa: F401  # Register tables on Base.metadata.
from insight_engine.store.sqlalchemy_store import SqlAlchemyRecordStore

COUPLE_ID = "couple-1"
USER_ID = "user-a"
PARTNER_ID = "user-b"
NOW = datetime(2026, 10, 16, 12, 0, 0)


@pytest.fixture
def session_factory():
    """Fresh in-memory database per test."""

    engine = build_engine("sqlite://", timeout_seconds=1.0)
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield factory
    engine.dispose()


@pytest.fixture
def store(session_factory) -> SqlAlchemyRecordStore:
    return SqlAlchemyRecordStore(session_factory)


@pytest.fixture
def clock():
    """Fixed clock so expiry comparisons are deterministic."""

    return lambda: NOW


@pytest.fixture
def test_client(store) -> TestClient:
    """Provide a FastAPI test client bound to the in-memory store."""

    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_check_ins(
    store,
    moods: list[int],
    connections: list[int] | None = None,
    user_id: str = USER_ID,
    couple_id: str = COUPLE_ID,
    start: date = date(2026, 10, 1),
) -> list[schemas.CheckIn]:
    """Store one check-in per day starting at ``start``."""

    connections = connections or [7] * len(moods)
    stored = []
    for offset, (mood, connection) in enumerate(zip(moods, connections)):
        result = store.insert_check_in(
            schemas.CheckInCreate(
                user_id=user_id,
                couple_id=couple_id,
                date=start + timedelta(days=offset),
                mood_rating=mood,
                connection_rating=connection,
                reflection=f"day {offset + 1}",
            )
        )
        assert result.ok
        stored.append(result.value)
    return stored


def create_rule(
    store,
    rule_type: str = "low_mood",
    metric: str = "mood",
    operator: str = "<=",
    threshold: float = 4,
    consecutive_days: int = 3,
    rule_name: str | None = None,
    priority: int = 1,
    is_active: bool = True,
) -> schemas.PatternRule:
    result = store.insert_rule(
        schemas.PatternRuleCreate(
            rule_name=rule_name or f"{rule_type}_{metric}_{consecutive_days}",
            rule_type=rule_type,
            conditions=schemas.RuleConditions(
                metric=metric,
                operator=operator,
                threshold=threshold,
                consecutive_days=consecutive_days,
            ),
            priority=priority,
            is_active=is_active,
        )
    )
    assert result.ok
    return result.value


def create_exercise(
    store,
    title: str,
    category: str = "connection",
    difficulty: str = "beginner",
    is_active: bool = True,
) -> schemas.GuidedExercise:
    result = store.insert_exercise(
        schemas.GuidedExerciseCreate(
            title=title,
            description=f"{title} description",
            duration=10,
            category=category,
            difficulty=difficulty,
            instructions=["Step one", "Step two"],
            is_active=is_active,
        )
    )
    assert result.ok
    return result.value
