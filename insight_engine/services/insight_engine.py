"""End-to-end insight pipeline: detect, alert, recommend."""
from __future__ import annotations

import logging

from insight_engine.models import schemas
from insight_engine.services.alert_manager import AlertLifecycleManager
from insight_engine.services.pattern_detector import PatternDetector
from insight_engine.services.recommendation_engine import RecommendationEngine
from insight_engine.store.base import RecordStore


logger = logging.getLogger(__name__)


class InsightEngine:
    """Wires the detector, alert manager and recommendation engine around one store."""

    def __init__(
        self,
        store: RecordStore,
        detector: PatternDetector | None = None,
        alerts: AlertLifecycleManager | None = None,
        recommendations: RecommendationEngine | None = None,
    ):
        self.store = store
        self.detector = detector or PatternDetector(store)
        self.alerts = alerts or AlertLifecycleManager(store)
        self.recommendations = recommendations or RecommendationEngine(store)

    def run(self, couple_id: str, user_id: str) -> schemas.InsightRun:
        """
        Run one pass of the pipeline for a user, typically after a check-in.

        Recommendations are generated once per alert created in this pass, so a
        detection suppressed by deduplication or preferences adds none.
        """
        detections = self.detector.detect_patterns(couple_id, user_id)
        alerts = self.alerts.create_alerts_from_detections(couple_id, user_id, detections)

        recommendations: list[schemas.Recommendation] = []
        for alert in alerts:
            recommendations.extend(
                self.recommendations.generate_recommendations(user_id, couple_id, alert.type)
            )

        logger.info(
            "Insight run finished | couple=%s user=%s detections=%d alerts=%d recommendations=%d",
            couple_id,
            user_id,
            len(detections),
            len(alerts),
            len(recommendations),
        )
        return schemas.InsightRun(
            detections=detections,
            alerts=alerts,
            recommendations=recommendations,
        )
