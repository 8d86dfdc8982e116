"""Initial insight engine schema."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261016_01"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def upgrade() -> None:
    op.create_table(
        "check_ins",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("couple_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("mood_rating", sa.Integer(), nullable=False),
        sa.Column("connection_rating", sa.Integer(), nullable=False),
        sa.Column("reflection", sa.Text(), nullable=True),
        sa.Column("is_shared", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_check_ins_user_id", "check_ins", ["user_id"])
    op.create_index("ix_check_ins_couple_id", "check_ins", ["couple_id"])
    op.create_index("ix_check_ins_date", "check_ins", ["date"])

    op.create_table(
        "pattern_detection_rules",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("rule_name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("rule_type", sa.String(length=50), nullable=False),
        sa.Column("conditions", sa.JSON(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "pattern_alerts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("couple_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("severity", sa.String(length=20), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("suggested_action", sa.Text(), nullable=False),
        sa.Column("pattern_data", sa.JSON(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_dismissed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_pattern_alerts_couple_id", "pattern_alerts", ["couple_id"])
    op.create_index("ix_pattern_alerts_user_id", "pattern_alerts", ["user_id"])
    op.create_index("ix_pattern_alerts_expires_at", "pattern_alerts", ["expires_at"])
    op.create_index(
        "ix_pattern_alerts_owner_type",
        "pattern_alerts",
        ["couple_id", "user_id", "type", "is_dismissed"],
    )

    op.create_table(
        "pattern_alert_preferences",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("alert_type", sa.String(length=50), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notification_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("email_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_pattern_alert_preferences_user_id", "pattern_alert_preferences", ["user_id"])
    op.create_index(
        "ix_pattern_alert_preferences_user_type",
        "pattern_alert_preferences",
        ["user_id", "alert_type"],
        unique=True,
    )

    op.create_table(
        "guided_exercises",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("difficulty", sa.String(length=20), nullable=False),
        sa.Column("instructions", sa.JSON(), nullable=False),
        sa.Column("materials_needed", sa.JSON(), nullable=True),
        sa.Column("benefits", sa.JSON(), nullable=True),
        sa.Column("when_to_use", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_guided_exercises_category", "guided_exercises", ["category"])

    op.create_table(
        "exercise_recommendations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("couple_id", sa.String(length=36), nullable=False),
        sa.Column("exercise_id", sa.String(length=36), sa.ForeignKey("guided_exercises.id"), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_exercise_recommendations_user_id", "exercise_recommendations", ["user_id"])
    op.create_index("ix_exercise_recommendations_couple_id", "exercise_recommendations", ["couple_id"])
    op.create_index(
        "ix_exercise_recommendations_open",
        "exercise_recommendations",
        ["user_id", "couple_id", "exercise_id", "is_completed"],
    )

    op.create_table(
        "exercise_sessions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("couple_id", sa.String(length=36), nullable=False),
        sa.Column("exercise_id", sa.String(length=36), sa.ForeignKey("guided_exercises.id"), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("completed_with_partner", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_exercise_sessions_user_id", "exercise_sessions", ["user_id"])
    op.create_index("ix_exercise_sessions_couple_id", "exercise_sessions", ["couple_id"])


def downgrade() -> None:
    op.drop_table("exercise_sessions")
    op.drop_table("exercise_recommendations")
    op.drop_table("guided_exercises")
    op.drop_table("pattern_alert_preferences")
    op.drop_table("pattern_alerts")
    op.drop_table("pattern_detection_rules")
    op.drop_table("check_ins")
