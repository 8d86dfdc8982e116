"""Tests for pattern detection and alert copy."""
from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

from conftest import COUPLE_ID, PARTNER_ID, USER_ID, create_check_ins, create_rule
from insight_engine.models import schemas
from insight_engine.models.database_models import PatternRule
from insight_engine.services.alert_factory import build_detection
from insight_engine.services.pattern_detector import PatternDetector
from insight_engine.store.result import ErrorKind, StoreResult


def make_rule(rule_type: str, metric: str = "mood", operator: str = "<=", threshold=4, days: int = 3):
    return schemas.pattern_rule_adapter.validate_python(
        {
            "id": "rule-1",
            "rule_name": f"{rule_type}_rule",
            "rule_type": rule_type,
            "conditions": {
                "metric": metric,
                "operator": operator,
                "threshold": threshold,
                "consecutive_days": days,
            },
        }
    )


class TestAlertFactory:
    """Rule type to severity and copy mapping."""

    def test_low_mood_is_high_severity(self):
        detection = build_detection(make_rule("low_mood"), 3)

        assert detection.severity == "high"
        assert detection.title == "Mood Pattern Detected"
        assert "3+ consecutive days with mood ratings ≤4/10" in detection.message

    def test_streak_achieved_is_low_severity(self):
        detection = build_detection(make_rule("streak_achieved", "connection", ">=", 8, 7), 9)

        assert detection.severity == "low"
        assert detection.title.startswith("Achievement Unlocked")
        assert "7+ consecutive days with connection ratings ≥8/10" in detection.message
        assert detection.pattern_data.current_streak == 9

    def test_low_connection_is_medium_severity(self):
        detection = build_detection(make_rule("low_connection", "connection"), 4)

        assert detection.severity == "medium"
        assert detection.title == "Connection Pattern Detected"
        assert "connection ratings ≤4/10" in detection.message

    def test_other_types_use_generic_copy(self):
        for rule_type in ("pattern_detected", "relationship_insight"):
            detection = build_detection(make_rule(rule_type, "connection"), 3)

            assert detection.severity == "medium"
            assert detection.title == "Pattern Detected"
            assert detection.message == "A pattern has been detected in your connection data."
            assert detection.alert_type == rule_type

    def test_pattern_data_records_rule(self):
        detection = build_detection(make_rule("low_mood", threshold=3.5, days=2), 5)

        assert detection.pattern_data.model_dump() == {
            "metric": "mood",
            "threshold": 3.5,
            "consecutive_days": 2,
            "current_streak": 5,
            "rule_name": "low_mood_rule",
        }
        assert "≤3.5/10" in detection.message


class TestRuleParsing:
    """Tagged-union parsing of stored rule conditions."""

    def test_legacy_metric_names_are_normalised(self):
        rule = schemas.pattern_rule_adapter.validate_python(
            {
                "id": "r",
                "rule_name": "legacy",
                "rule_type": "low_connection",
                "conditions": {
                    "metric": "connection_rating",
                    "operator": "<=",
                    "threshold": 3,
                    "consecutiveDays": 2,
                },
            }
        )

        assert isinstance(rule, schemas.LowConnectionRule)
        assert rule.conditions.metric == "connection"
        assert rule.conditions.consecutive_days == 2

    def test_malformed_rule_rows_are_skipped(self, store, session_factory):
        create_rule(store, rule_name="good")
        with session_factory() as session:
            session.add(
                PatternRule(
                    rule_name="bad",
                    rule_type="low_mood",
                    conditions={"metric": "sleep", "operator": "<=", "threshold": 3, "consecutive_days": 2},
                )
            )
            session.commit()

        rules = store.list_active_rules().value

        assert [rule.rule_name for rule in rules] == ["good"]


class TestPatternDetector:
    """Detection over stored check-ins."""

    def test_detects_low_mood_run(self, store):
        create_rule(store, "low_mood", "mood", "<=", 4, 3)
        create_check_ins(store, moods=[3, 4, 2, 6, 1])

        results = PatternDetector(store).detect_patterns(COUPLE_ID, USER_ID)

        assert len(results) == 1
        assert results[0].alert_type == "low_mood"
        assert results[0].severity == "high"
        assert results[0].pattern_data.current_streak == 3

    def test_no_detection_without_qualifying_run(self, store):
        create_rule(store, "low_mood", "mood", "<=", 4, 3)
        create_check_ins(store, moods=[8, 9, 7])

        assert PatternDetector(store).detect_patterns(COUPLE_ID, USER_ID) == []

    def test_only_users_own_check_ins_are_evaluated(self, store):
        create_rule(store, "low_mood", "mood", "<=", 4, 3)
        create_check_ins(store, moods=[2, 2], user_id=USER_ID)
        create_check_ins(store, moods=[2, 2, 2], user_id=PARTNER_ID)

        assert PatternDetector(store).detect_patterns(COUPLE_ID, USER_ID) == []
        assert len(PatternDetector(store).detect_patterns(COUPLE_ID, PARTNER_ID)) == 1

    def test_other_couples_are_ignored(self, store):
        create_rule(store, "low_mood", "mood", "<=", 4, 3)
        create_check_ins(store, moods=[2, 2, 2], couple_id="other-couple")

        assert PatternDetector(store).detect_patterns(COUPLE_ID, USER_ID) == []

    def test_check_ins_are_sorted_by_date(self, store):
        create_rule(store, "low_mood", "mood", "<=", 4, 3)
        # Stored out of order: chronologically the low days are not adjacent.
        create_check_ins(store, moods=[2], start=date(2026, 10, 1))
        create_check_ins(store, moods=[2], start=date(2026, 10, 4))
        create_check_ins(store, moods=[9], start=date(2026, 10, 2))
        create_check_ins(store, moods=[2], start=date(2026, 10, 3))

        assert PatternDetector(store).detect_patterns(COUPLE_ID, USER_ID) == []

    def test_calendar_gaps_do_not_break_runs(self, store):
        create_rule(store, "low_mood", "mood", "<=", 4, 3)
        create_check_ins(store, moods=[3], start=date(2026, 10, 1))
        create_check_ins(store, moods=[3], start=date(2026, 10, 6))
        create_check_ins(store, moods=[3], start=date(2026, 10, 20))

        results = PatternDetector(store).detect_patterns(COUPLE_ID, USER_ID)

        assert len(results) == 1
        assert results[0].pattern_data.current_streak == 3

    def test_multiple_rules_fire_in_priority_order(self, store):
        create_rule(store, "streak_achieved", "connection", ">=", 8, 2, priority=5)
        create_rule(store, "low_mood", "mood", "<=", 4, 2, priority=1)
        create_rule(store, "low_connection", "connection", "<=", 3, 2, priority=2)
        create_check_ins(store, moods=[3, 3, 3], connections=[9, 9, 9])

        results = PatternDetector(store).detect_patterns(COUPLE_ID, USER_ID)

        assert [r.alert_type for r in results] == ["low_mood", "streak_achieved"]

    def test_inactive_rules_are_ignored(self, store):
        create_rule(store, "low_mood", "mood", "<=", 4, 2, is_active=False)
        create_check_ins(store, moods=[1, 1, 1])

        assert PatternDetector(store).detect_patterns(COUPLE_ID, USER_ID) == []

    def test_no_rules_yields_nothing(self, store):
        create_check_ins(store, moods=[1, 1, 1])

        assert PatternDetector(store).detect_patterns(COUPLE_ID, USER_ID) == []

    def test_store_failure_fails_open(self):
        broken = MagicMock()
        broken.list_check_ins.return_value = StoreResult.failure(ErrorKind.TIMEOUT, "timed out")

        assert PatternDetector(broken).detect_patterns(COUPLE_ID, USER_ID) == []
        broken.list_active_rules.assert_not_called()

    def test_rule_store_failure_fails_open(self):
        broken = MagicMock()
        broken.list_check_ins.return_value = StoreResult.success([])
        broken.list_active_rules.return_value = StoreResult.failure(ErrorKind.UNAVAILABLE)

        assert PatternDetector(broken).detect_patterns(COUPLE_ID, USER_ID) == []
