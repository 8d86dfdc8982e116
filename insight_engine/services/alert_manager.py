"""Alert creation, listing and user state transitions."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from insight_engine.config import get_settings
from insight_engine.models import schemas
from insight_engine.models.database_models import utcnow
from insight_engine.store.base import RecordStore


logger = logging.getLogger(__name__)


class AlertLifecycleManager:
    """Owns alert expiry, deduplication and read/dismiss state."""

    def __init__(
        self,
        store: RecordStore,
        lifetime_days: int | None = None,
        dedup_enabled: bool | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        settings = get_settings()
        self.store = store
        self.lifetime = timedelta(
            days=lifetime_days if lifetime_days is not None else settings.alert_lifetime_days
        )
        self.dedup_enabled = dedup_enabled if dedup_enabled is not None else settings.alert_dedup_enabled
        self.clock = clock

    def create_alert(
        self,
        couple_id: str,
        user_id: str,
        detection: schemas.DetectionResult,
    ) -> schemas.Alert | None:
        """Persist an unread, undismissed alert that expires after the configured lifetime."""

        now = self.clock()
        data = schemas.AlertCreate(
            couple_id=couple_id,
            user_id=user_id,
            type=detection.alert_type,
            title=detection.title,
            message=detection.message,
            suggested_action=detection.suggested_action,
            pattern_data=detection.pattern_data,
            severity=detection.severity,
            expires_at=now + self.lifetime,
            created_at=now,
        )
        result = self.store.insert_alert(data)
        if not result.ok:
            logger.warning("Alert %s not created (%s)", detection.alert_type, result.error.value)
            return None

        logger.info("Pattern alert created: %s", result.value.title)
        return result.value

    def create_alerts_from_detections(
        self,
        couple_id: str,
        user_id: str,
        detections: list[schemas.DetectionResult],
    ) -> list[schemas.Alert]:
        """
        Create alerts for detections the user has not opted out of.

        With deduplication on, a detection is skipped while the user already has
        an active alert of the same type in this couple.

        Returns:
            Only the alerts created by this call
        """
        if not detections:
            return []

        disabled = self._disabled_types(user_id)
        now = self.clock()
        created: list[schemas.Alert] = []

        for detection in detections:
            if detection.alert_type in disabled:
                logger.info("Alert type %s disabled for user %s", detection.alert_type, user_id)
                continue

            if self.dedup_enabled:
                existing = self.store.find_active_alert(couple_id, user_id, detection.alert_type, now)
                if not existing.ok:
                    logger.warning(
                        "Alert %s not created, dedup lookup failed (%s)",
                        detection.alert_type,
                        existing.error.value,
                    )
                    continue
                if existing.value is not None:
                    logger.debug(
                        "Active %s alert %s already exists, skipping",
                        detection.alert_type,
                        existing.value.id,
                    )
                    continue

            alert = self.create_alert(couple_id, user_id, detection)
            if alert:
                created.append(alert)

        return created

    def get_active_alerts(self, couple_id: str) -> list[schemas.Alert]:
        """Undismissed, unexpired alerts for the couple, newest first."""

        result = self.store.list_alerts(couple_id, active_only=True, now=self.clock())
        if not result.ok:
            logger.warning("Active alerts unavailable for couple %s (%s)", couple_id, result.error.value)
        return result.unwrap_or([])

    def mark_read(self, alert_id: str, user_id: str) -> bool:
        return self._set_flag(alert_id, user_id, "is_read")

    def dismiss(self, alert_id: str, user_id: str) -> bool:
        return self._set_flag(alert_id, user_id, "is_dismissed")

    def _set_flag(self, alert_id: str, user_id: str, flag: str) -> bool:
        result = self.store.update_alert(alert_id, user_id, {flag: True})
        if not result.ok:
            logger.warning("Failed to set %s on alert %s (%s)", flag, alert_id, result.error.value)
            return False
        if result.value:
            logger.info("Alert %s updated: %s", alert_id, flag)
        return bool(result.value)

    def get_alert_preferences(self, user_id: str) -> list[schemas.AlertPreference]:
        result = self.store.list_alert_preferences(user_id)
        if not result.ok:
            logger.warning("Alert preferences unavailable for user %s (%s)", user_id, result.error.value)
        return result.unwrap_or([])

    def update_alert_preferences(
        self,
        user_id: str,
        update: schemas.AlertPreferenceUpdate,
    ) -> schemas.AlertPreference | None:
        fields = update.model_dump(exclude={"alert_type"}, exclude_none=True)
        result = self.store.upsert_alert_preference(user_id, update.alert_type, fields)
        if not result.ok:
            logger.warning(
                "Alert preferences not updated for user %s, type %s (%s)",
                user_id,
                update.alert_type,
                result.error.value,
            )
            return None
        logger.info("Alert preferences updated for user %s, type %s", user_id, update.alert_type)
        return result.value

    def _disabled_types(self, user_id: str) -> set[str]:
        return {pref.alert_type for pref in self.get_alert_preferences(user_id) if not pref.enabled}
