"""Pattern detection over a couple's check-in history."""
from __future__ import annotations

import logging

from insight_engine.models import schemas
from insight_engine.services.alert_factory import build_detection
from insight_engine.services.streak_evaluator import evaluate_streak
from insight_engine.store.base import RecordStore


logger = logging.getLogger(__name__)


def metric_values(check_ins: list[schemas.CheckIn], metric: str) -> list[int]:
    """Pull the rating a rule inspects out of each check-in."""
    if metric == "mood":
        return [check_in.mood_rating for check_in in check_ins]
    return [check_in.connection_rating for check_in in check_ins]


class PatternDetector:
    """Evaluates active pattern rules against one user's check-ins."""

    def __init__(self, store: RecordStore):
        self.store = store

    def detect_patterns(self, couple_id: str, user_id: str) -> list[schemas.DetectionResult]:
        """
        Run every active rule over the user's check-ins within the couple.

        Args:
            couple_id: Couple whose check-ins are loaded
            user_id: Partner whose own entries are evaluated

        Returns:
            One detection result per rule that found a qualifying run; empty
            when the store is unavailable or no rule fires
        """
        logger.info("Checking for patterns | couple=%s user=%s", couple_id, user_id)

        check_ins_result = self.store.list_check_ins(couple_id)
        if not check_ins_result.ok:
            logger.warning(
                "Skipping pattern detection, check-ins unavailable (%s)",
                check_ins_result.error.value,
            )
            return []

        rules_result = self.store.list_active_rules()
        if not rules_result.ok:
            logger.warning(
                "Skipping pattern detection, rules unavailable (%s)",
                rules_result.error.value,
            )
            return []

        rules = rules_result.unwrap_or([])
        if not rules:
            logger.info("No active pattern rules configured")
            return []

        user_check_ins = sorted(
            (c for c in check_ins_result.unwrap_or([]) if c.user_id == user_id),
            key=lambda c: c.date,
        )

        results: list[schemas.DetectionResult] = []
        for rule in rules:
            conditions = rule.conditions
            streak = evaluate_streak(
                metric_values(user_check_ins, conditions.metric),
                conditions.operator,
                conditions.threshold,
                conditions.consecutive_days,
            )
            if not streak.has_qualifying_run:
                continue

            detection = build_detection(rule, streak.max_streak)
            logger.info(
                "Rule %s fired | type=%s max_streak=%d",
                rule.rule_name,
                rule.rule_type,
                streak.max_streak,
            )
            results.append(detection)

        logger.info("Pattern detection completed: %d patterns found", len(results))
        return results
