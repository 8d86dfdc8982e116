"""Pydantic models shared by the store, the services and the API."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator


AlertType = Literal[
    "low_connection",
    "low_mood",
    "streak_achieved",
    "pattern_detected",
    "relationship_insight",
]
Severity = Literal["low", "medium", "high"]
Metric = Literal["mood", "connection"]
Operator = Literal["<=", ">=", "<", ">", "=="]
ExerciseCategory = Literal[
    "communication",
    "connection",
    "intimacy",
    "conflict_resolution",
    "gratitude",
    "quality_time",
    "stress_relief",
    "emotional_support",
]
Difficulty = Literal["beginner", "intermediate", "advanced"]


_METRIC_ALIASES = {
    "mood_rating": "mood",
    "connection_rating": "connection",
}


# Check-ins
class CheckInCreate(BaseModel):
    """Schema for submitting a daily check-in."""

    user_id: str
    couple_id: str
    date: date
    mood_rating: int = Field(ge=1, le=10)
    connection_rating: int = Field(ge=1, le=10)
    reflection: str | None = None
    is_shared: bool = False


class CheckIn(CheckInCreate):
    """Stored check-in."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    updated_at: datetime


# Pattern rules
class RuleConditions(BaseModel):
    """Threshold/run-length condition attached to a pattern rule."""

    model_config = ConfigDict(populate_by_name=True)

    metric: Metric
    operator: Operator
    threshold: int | float
    consecutive_days: int = Field(
        ge=1,
        validation_alias=AliasChoices("consecutive_days", "consecutiveDays"),
    )

    @field_validator("metric", mode="before")
    @classmethod
    def normalize_metric(cls, value: str) -> str:
        """Accept the column-style names older rule rows were written with."""
        if isinstance(value, str):
            return _METRIC_ALIASES.get(value, value)
        return value


class _PatternRuleBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    rule_name: str
    conditions: RuleConditions
    priority: int = 1
    is_active: bool = True


class LowConnectionRule(_PatternRuleBase):
    rule_type: Literal["low_connection"]


class LowMoodRule(_PatternRuleBase):
    rule_type: Literal["low_mood"]


class StreakAchievedRule(_PatternRuleBase):
    rule_type: Literal["streak_achieved"]


class PatternDetectedRule(_PatternRuleBase):
    rule_type: Literal["pattern_detected"]


class RelationshipInsightRule(_PatternRuleBase):
    rule_type: Literal["relationship_insight"]


PatternRule = Annotated[
    Union[
        LowConnectionRule,
        LowMoodRule,
        StreakAchievedRule,
        PatternDetectedRule,
        RelationshipInsightRule,
    ],
    Field(discriminator="rule_type"),
]
pattern_rule_adapter: TypeAdapter[PatternRule] = TypeAdapter(PatternRule)


class PatternRuleCreate(BaseModel):
    """Schema for seeding a pattern rule."""

    rule_name: str
    rule_type: AlertType
    conditions: RuleConditions
    priority: int = 1
    is_active: bool = True


# Detection results and alerts
class PatternData(BaseModel):
    """Evidence recorded on an alert."""

    metric: Metric
    threshold: int | float
    consecutive_days: int
    current_streak: int
    rule_name: str


class DetectionResult(BaseModel):
    """A rule that fired for one user, with its user-facing copy."""

    alert_type: AlertType
    severity: Severity
    title: str
    message: str
    suggested_action: str
    pattern_data: PatternData


class AlertCreate(BaseModel):
    """Fields needed to persist a new alert."""

    couple_id: str
    user_id: str
    type: AlertType
    title: str
    message: str
    suggested_action: str
    pattern_data: PatternData | None = None
    severity: Severity
    expires_at: datetime
    created_at: datetime | None = None


class Alert(BaseModel):
    """Stored alert."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    couple_id: str
    user_id: str
    type: str
    title: str
    message: str
    suggested_action: str
    pattern_data: dict | None = None
    severity: str
    is_read: bool
    is_dismissed: bool
    expires_at: datetime
    created_at: datetime
    updated_at: datetime


class AlertPreference(BaseModel):
    """Stored per-user alert preference."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    alert_type: str
    enabled: bool
    notification_enabled: bool
    email_enabled: bool
    created_at: datetime
    updated_at: datetime


class AlertPreferenceUpdate(BaseModel):
    """Partial update of an alert preference."""

    alert_type: AlertType
    enabled: bool | None = None
    notification_enabled: bool | None = None
    email_enabled: bool | None = None


# Exercises and recommendations
class GuidedExerciseCreate(BaseModel):
    """Schema for seeding a guided exercise."""

    title: str
    description: str
    duration: int = Field(ge=1, description="Duration in minutes")
    category: ExerciseCategory
    difficulty: Difficulty
    instructions: list[str] = []
    materials_needed: list[str] = []
    benefits: list[str] = []
    when_to_use: str | None = None
    is_active: bool = True


class GuidedExercise(GuidedExerciseCreate):
    """Stored guided exercise."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    materials_needed: list[str] = []
    benefits: list[str] = []

    @field_validator("materials_needed", "benefits", mode="before")
    @classmethod
    def empty_when_missing(cls, value):
        return value or []


class RecommendationCreate(BaseModel):
    """Fields needed to persist a recommendation."""

    user_id: str
    couple_id: str
    exercise_id: str
    reason: str
    priority: int
    expires_at: datetime
    is_completed: bool = False
    created_at: datetime | None = None


class Recommendation(RecommendationCreate):
    """Stored recommendation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class ExerciseSessionCreate(BaseModel):
    """Schema for recording that an exercise was done."""

    user_id: str
    couple_id: str
    exercise_id: str
    completed_at: datetime
    duration_minutes: int | None = Field(None, ge=0)
    rating: int | None = Field(None, ge=1, le=5)
    notes: str | None = None
    completed_with_partner: bool = False

    @field_validator("completed_at")
    @classmethod
    def to_naive_utc(cls, value: datetime) -> datetime:
        """Stored timestamps are naive UTC; convert offset-aware input first."""
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class ExerciseSession(ExerciseSessionCreate):
    """Stored exercise session."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class ExerciseStats(BaseModel):
    """Aggregate exercise activity for one user in a couple."""

    total_completed: int = 0
    total_minutes: int = 0
    average_rating: float = 0.0
    favorite_category: str = ""
    streak_days: int = 0


class InsightRun(BaseModel):
    """Everything produced by one pass of the insight pipeline."""

    detections: list[DetectionResult] = []
    alerts: list[Alert] = []
    recommendations: list[Recommendation] = []
