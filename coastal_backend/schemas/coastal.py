from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from coastal_backend.schemas.enums import (
    AlertSeverity,
    AlertStatus,
    AlertType,
    DataSource,
    ForecastRisk,
    ParameterKind,
    RiskLevel,
    SensorType,
    StatusTier,
)


class Location(BaseModel):
    lat: float
    lng: float
    name: str


class Reading(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    value: float
    unit: str                               # m | m/s | °C | pH
    parameter_kind: ParameterKind
    status: Optional[StatusTier] = None     # filled in by the classifier


class Sensor(BaseModel):
    id: str
    name: str
    location: Location
    type: SensorType
    parameter_kind: ParameterKind
    source: DataSource
    readings: list[Reading] = Field(default_factory=list)   # oldest -> newest
    last_updated: datetime

    @property
    def latest_reading(self) -> Optional[Reading]:
        return self.readings[-1] if self.readings else None


class SensorStatus(BaseModel):
    sensor_id: str
    name: str
    parameter_kind: ParameterKind
    value: Optional[float] = None
    unit: Optional[str] = None
    status: Optional[StatusTier] = None
    timestamp: Optional[datetime] = None


class ClassificationResult(BaseModel):
    parameter_kind: ParameterKind
    value: float
    status: StatusTier


class AlertCreate(BaseModel):
    type: AlertType
    severity: AlertSeverity
    location: Location
    description: str
    affected_area: float = Field(default=0.0, ge=0)     # km²
    recommendations: list[str] = Field(default_factory=list)


class Alert(AlertCreate):
    id: str
    status: AlertStatus = AlertStatus.ACTIVE
    timestamp: datetime
    updated_at: Optional[datetime] = None


class AlertStatusUpdate(BaseModel):
    status: AlertStatus


class AlertUpdate(BaseModel):
    """Editable alert fields. Omitted or null fields keep their current value."""

    type: Optional[AlertType] = None
    severity: Optional[AlertSeverity] = None
    location: Optional[Location] = None
    description: Optional[str] = None
    affected_area: Optional[float] = Field(default=None, ge=0)
    recommendations: Optional[list[str]] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int              # matches before paging


class AlertPage(BaseModel):
    alerts: list[Alert]
    pagination: Pagination


class ForecastPoint(BaseModel):
    timestamp: datetime
    value: float
    confidence: float = Field(ge=0, le=1)
    risk_level: ForecastRisk


class Prediction(BaseModel):
    id: str
    type: str                     # tide_level | storm_surge | erosion_risk | water_quality
    location: Location
    model: str
    forecast: list[ForecastPoint]
    last_updated: datetime


class RiskAssessment(BaseModel):
    risk_score: int = Field(ge=0)
    risk_level: RiskLevel
    risk_factors: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class SensorStatistics(BaseModel):
    total: int
    active: int
    inactive: int
    by_type: dict[str, int]
    by_status: dict[str, int]


class AlertStatistics(BaseModel):
    total: int
    active: int
    resolved: int
    by_severity: dict[str, int]
    by_type: dict[str, int]
