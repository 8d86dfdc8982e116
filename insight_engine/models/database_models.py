"""SQLAlchemy ORM models for check-ins, rules, alerts and exercises."""
from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import Integer, Date, DateTime, String, Boolean, Text, ForeignKey, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from insight_engine.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the representation used by every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_id() -> str:
    return str(uuid4())


class CheckIn(Base):
    """Daily self-reported mood and connection check-in."""

    __tablename__ = "check_ins"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    couple_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    mood_rating: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-10
    connection_rating: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-10
    reflection: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_shared: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class PatternRule(Base):
    """Configured threshold/run-length rule evaluated against check-ins."""

    __tablename__ = "pattern_detection_rules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    rule_name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    rule_type: Mapped[str] = mapped_column(String(50), nullable=False)  # low_connection, low_mood, streak_achieved, ...
    conditions: Mapped[dict] = mapped_column(JSON, nullable=False)  # metric, operator, threshold, consecutive_days
    priority: Mapped[int] = mapped_column(Integer, default=1, nullable=False)  # lower runs first
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class PatternAlert(Base):
    """User-facing alert produced when a pattern rule fires."""

    __tablename__ = "pattern_alerts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    couple_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # Alert classification
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False)  # low, medium, high
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    suggested_action: Mapped[str] = mapped_column(Text, nullable=False)
    pattern_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # Status tracking
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_dismissed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        # Lookup used by the one-active-alert-per-type check
        Index(
            "ix_pattern_alerts_owner_type",
            "couple_id",
            "user_id",
            "type",
            "is_dismissed",
        ),
    )


class PatternAlertPreference(Base):
    """Per-user opt-in/out for each alert type."""

    __tablename__ = "pattern_alert_preferences"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    alert_type: Mapped[str] = mapped_column(String(50), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notification_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    email_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_pattern_alert_preferences_user_type", "user_id", "alert_type", unique=True),
    )


class GuidedExercise(Base):
    """Static guided-exercise reference data."""

    __tablename__ = "guided_exercises"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)  # beginner, intermediate, advanced
    instructions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    materials_needed: Mapped[list | None] = mapped_column(JSON, nullable=True)
    benefits: Mapped[list | None] = mapped_column(JSON, nullable=True)
    when_to_use: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class ExerciseRecommendation(Base):
    """Exercise suggested to a user after an alert."""

    __tablename__ = "exercise_recommendations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    couple_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    exercise_id: Mapped[str] = mapped_column(String(36), ForeignKey("guided_exercises.id"), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False)  # higher = more urgent
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    __table_args__ = (
        Index(
            "ix_exercise_recommendations_open",
            "user_id",
            "couple_id",
            "exercise_id",
            "is_completed",
        ),
    )

    exercise: Mapped["GuidedExercise"] = relationship("GuidedExercise", foreign_keys=[exercise_id])


class ExerciseSession(Base):
    """A completed run-through of a guided exercise."""

    __tablename__ = "exercise_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    couple_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    exercise_id: Mapped[str] = mapped_column(String(36), ForeignKey("guided_exercises.id"), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 1-5
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_with_partner: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    exercise: Mapped["GuidedExercise"] = relationship("GuidedExercise", foreign_keys=[exercise_id])
