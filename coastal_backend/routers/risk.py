import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from coastal_backend.config import Settings, get_app_settings
from coastal_backend.core.errors import RiskEngineError
from coastal_backend.core.risk import assess_risk
from coastal_backend.feeds.predictions import mock_predictions
from coastal_backend.routers.alerts import get_alert_store
from coastal_backend.routers.sensors import load_sensors
from coastal_backend.schemas.coastal import RiskAssessment
from coastal_backend.store.alerts import AlertStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/risk", tags=["risk"])


@router.get("/assessment", response_model=RiskAssessment)
async def get_risk_assessment(
    settings: Settings = Depends(get_app_settings),
    store: AlertStore = Depends(get_alert_store),
) -> RiskAssessment:
    """
    Overall coastal risk from the current alerts, sensor tiers and forecasts.
    Any incomplete entity in the snapshot yields 503 so the dashboard shows
    the panel as unavailable instead of an under-counted score.
    """
    alerts = store.list()
    predictions = mock_predictions()
    try:
        sensors = await asyncio.to_thread(load_sensors, settings)
        return assess_risk(alerts, sensors, predictions, settings.weights)
    except RiskEngineError as e:
        logger.error(f"Risk assessment rejected: {e}")
        raise HTTPException(503, detail=f"Risk data unavailable: {e}")
