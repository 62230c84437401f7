from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from coastal_backend.core.errors import AlertTransitionError
from coastal_backend.core.statistics import alert_statistics
from coastal_backend.schemas.coastal import (
    Alert,
    AlertCreate,
    AlertPage,
    AlertStatistics,
    AlertStatusUpdate,
    AlertUpdate,
)
from coastal_backend.schemas.enums import AlertSeverity, AlertStatus
from coastal_backend.store.alerts import AlertStore
from coastal_backend.store.paging import paginate

router = APIRouter(prefix="/alerts", tags=["alerts"])

alert_store = AlertStore()


def get_alert_store() -> AlertStore:
    return alert_store


@router.get("", response_model=AlertPage)
async def list_alerts(
    status: Optional[AlertStatus] = None,
    severity: Optional[AlertSeverity] = None,
    location: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    store: AlertStore = Depends(get_alert_store),
) -> AlertPage:
    alerts, pagination = paginate(store.list(status=status, severity=severity, location=location), page, limit)
    return AlertPage(alerts=alerts, pagination=pagination)


@router.get("/active", response_model=list[Alert])
async def list_active_alerts(
    location: Optional[str] = None,
    store: AlertStore = Depends(get_alert_store),
) -> list[Alert]:
    return store.list(status=AlertStatus.ACTIVE, location=location)


@router.get("/statistics", response_model=AlertStatistics)
async def get_alert_statistics(store: AlertStore = Depends(get_alert_store)) -> AlertStatistics:
    return alert_statistics(store.list())


@router.post("", response_model=Alert, status_code=201)
async def create_alert(payload: AlertCreate, store: AlertStore = Depends(get_alert_store)) -> Alert:
    return store.create(payload)


@router.get("/{alert_id}", response_model=Alert)
async def get_alert(alert_id: str, store: AlertStore = Depends(get_alert_store)) -> Alert:
    alert = store.get(alert_id)
    if alert is None:
        raise HTTPException(404, detail="Alert not found")
    return alert


@router.put("/{alert_id}", response_model=Alert)
async def update_alert(
    alert_id: str,
    payload: AlertUpdate,
    store: AlertStore = Depends(get_alert_store),
) -> Alert:
    alert = store.update(alert_id, payload)
    if alert is None:
        raise HTTPException(404, detail="Alert not found")
    return alert


@router.patch("/{alert_id}/status", response_model=Alert)
async def update_alert_status(
    alert_id: str,
    payload: AlertStatusUpdate,
    store: AlertStore = Depends(get_alert_store),
) -> Alert:
    try:
        alert = store.update_status(alert_id, payload.status)
    except AlertTransitionError as e:
        raise HTTPException(409, detail=str(e))
    if alert is None:
        raise HTTPException(404, detail="Alert not found")
    return alert
