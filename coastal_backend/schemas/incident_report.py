from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from coastal_backend.schemas.coastal import Location, Pagination
from coastal_backend.schemas.enums import AlertSeverity, IncidentStatus


class IncidentReportCreate(BaseModel):
    incident_type: str              # oil_spill | erosion | flooding | illegal_fishing | ...
    incident_title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    severity: AlertSeverity
    location: str                   # free-text place name
    date_time: datetime             # when the incident was observed
    coordinates: Optional[Location] = None
    nearest_landmark: Optional[str] = None
    weather_conditions: Optional[str] = None
    tide_level: Optional[float] = None      # m
    wind_speed: Optional[float] = None      # m/s
    public_health_risk: bool = False
    authorities_notified: bool = False
    reporter_name: Optional[str] = None
    reporter_email: Optional[str] = None
    photos: list[str] = Field(default_factory=list)   # URLs
    additional_notes: Optional[str] = None


class IncidentReportUpdate(BaseModel):
    """Edits to a pending report. Omitted or null fields keep their current value."""

    incident_type: Optional[str] = None
    incident_title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    severity: Optional[AlertSeverity] = None
    location: Optional[str] = None
    date_time: Optional[datetime] = None
    coordinates: Optional[Location] = None
    nearest_landmark: Optional[str] = None
    weather_conditions: Optional[str] = None
    tide_level: Optional[float] = None
    wind_speed: Optional[float] = None
    public_health_risk: Optional[bool] = None
    authorities_notified: Optional[bool] = None
    photos: Optional[list[str]] = None
    additional_notes: Optional[str] = None


class IncidentVerify(BaseModel):
    verified_by: Optional[str] = None


class IncidentResolve(BaseModel):
    resolved_by: Optional[str] = None
    resolution_notes: Optional[str] = None  # replaces additional_notes when given


class IncidentReport(IncidentReportCreate):
    id: str                         # uuid
    status: IncidentStatus = IncidentStatus.PENDING
    reported_at: datetime
    updated_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None


class IncidentPage(BaseModel):
    incidents: list[IncidentReport]
    pagination: Pagination
