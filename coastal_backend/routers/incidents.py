from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from coastal_backend.core.errors import IncidentTransitionError, ReportLockedError
from coastal_backend.schemas.enums import AlertSeverity, IncidentStatus
from coastal_backend.schemas.incident_report import (
    IncidentPage,
    IncidentReport,
    IncidentReportCreate,
    IncidentReportUpdate,
    IncidentResolve,
    IncidentVerify,
)
from coastal_backend.store.incidents import IncidentStore
from coastal_backend.store.paging import paginate

router = APIRouter(prefix="/incidents", tags=["incidents"])

incident_store = IncidentStore()


def get_incident_store() -> IncidentStore:
    return incident_store


def _found(report: Optional[IncidentReport]) -> IncidentReport:
    if report is None:
        raise HTTPException(404, detail="Incident report not found")
    return report


@router.post("", response_model=IncidentReport, status_code=201)
async def submit_incident(
    request: IncidentReportCreate,
    store: IncidentStore = Depends(get_incident_store),
) -> IncidentReport:
    """
    Citizen / field-officer report of something observed on the coast.
    Stored as PENDING until an authority verifies or resolves it.
    """
    return store.create(request)


@router.get("", response_model=IncidentPage)
async def list_incidents(
    incident_type: Optional[str] = None,
    severity: Optional[AlertSeverity] = None,
    status: Optional[IncidentStatus] = None,
    location: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    store: IncidentStore = Depends(get_incident_store),
) -> IncidentPage:
    reports = store.list(incident_type=incident_type, severity=severity, status=status, location=location)
    incidents, pagination = paginate(reports, page, limit)
    return IncidentPage(incidents=incidents, pagination=pagination)


@router.get("/{report_id}", response_model=IncidentReport)
async def get_incident(report_id: str, store: IncidentStore = Depends(get_incident_store)) -> IncidentReport:
    return _found(store.get(report_id))


@router.put("/{report_id}", response_model=IncidentReport)
async def update_incident(
    report_id: str,
    payload: IncidentReportUpdate,
    store: IncidentStore = Depends(get_incident_store),
) -> IncidentReport:
    try:
        report = store.update(report_id, payload)
    except ReportLockedError as e:
        raise HTTPException(409, detail=str(e))
    return _found(report)


@router.post("/{report_id}/verify", response_model=IncidentReport)
async def verify_incident(
    report_id: str,
    payload: Optional[IncidentVerify] = None,
    store: IncidentStore = Depends(get_incident_store),
) -> IncidentReport:
    payload = payload or IncidentVerify()
    try:
        report = store.verify(report_id, verified_by=payload.verified_by)
    except IncidentTransitionError as e:
        raise HTTPException(409, detail=str(e))
    return _found(report)


@router.post("/{report_id}/resolve", response_model=IncidentReport)
async def resolve_incident(
    report_id: str,
    payload: Optional[IncidentResolve] = None,
    store: IncidentStore = Depends(get_incident_store),
) -> IncidentReport:
    payload = payload or IncidentResolve()
    try:
        report = store.resolve(report_id, resolved_by=payload.resolved_by, resolution_notes=payload.resolution_notes)
    except IncidentTransitionError as e:
        raise HTTPException(409, detail=str(e))
    return _found(report)
