"""Alert management API endpoints."""
from fastapi import APIRouter, Depends, HTTPException

from insight_engine.dependencies import get_store
from insight_engine.models import schemas
from insight_engine.services.alert_manager import AlertLifecycleManager
from insight_engine.store.base import RecordStore

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("/preferences/{user_id}")
async def get_alert_preferences(
    user_id: str,
    store: RecordStore = Depends(get_store),
) -> list[schemas.AlertPreference]:
    """Return the user's stored alert preferences (missing types are enabled)."""
    return AlertLifecycleManager(store).get_alert_preferences(user_id)


@router.put("/preferences/{user_id}")
async def update_alert_preferences(
    user_id: str,
    update: schemas.AlertPreferenceUpdate,
    store: RecordStore = Depends(get_store),
) -> schemas.AlertPreference:
    """
    Create or update the user's preference for one alert type.

    Raises:
        HTTPException: 503 if the preference could not be saved
    """
    preference = AlertLifecycleManager(store).update_alert_preferences(user_id, update)
    if preference is None:
        raise HTTPException(status_code=503, detail="Alert preferences could not be saved")
    return preference


@router.get("/{couple_id}/active")
async def get_active_alerts(
    couple_id: str,
    store: RecordStore = Depends(get_store),
) -> dict:
    """
    Get undismissed, unexpired alerts for a couple.

    Args:
        couple_id: Couple to list alerts for
        store: Record store

    Returns:
        Dictionary with count and list of active alerts, newest first
    """
    alerts = AlertLifecycleManager(store).get_active_alerts(couple_id)
    return {
        "count": len(alerts),
        "alerts": [alert.model_dump(mode="json") for alert in alerts],
    }


@router.post("/{alert_id}/read")
async def mark_alert_read(
    alert_id: str,
    user_id: str,
    store: RecordStore = Depends(get_store),
) -> dict:
    """
    Mark an alert as read.

    Raises:
        HTTPException: 404 if no alert with this id belongs to the user
    """
    if not AlertLifecycleManager(store).mark_read(alert_id, user_id):
        raise HTTPException(status_code=404, detail="Alert not found")
    return {"status": "success", "message": "Alert marked as read"}


@router.post("/{alert_id}/dismiss")
async def dismiss_alert(
    alert_id: str,
    user_id: str,
    store: RecordStore = Depends(get_store),
) -> dict:
    """
    Dismiss an alert so it no longer shows as active.

    Raises:
        HTTPException: 404 if no alert with this id belongs to the user
    """
    if not AlertLifecycleManager(store).dismiss(alert_id, user_id):
        raise HTTPException(status_code=404, detail="Alert not found")
    return {"status": "success", "message": "Alert dismissed"}
