"""
Shared vocabulary for the engine, the feeds and the HTTP layer.

All severity / status strings the dashboard understands are defined here once.
"""

from __future__ import annotations

from enum import Enum


class ParameterKind(str, Enum):
    TIDE = "tide"
    WAVE = "wave"
    TEMPERATURE = "temperature"
    WIND_SPEED = "wind_speed"
    PH = "ph"
    OTHER = "other"


class StatusTier(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {
    StatusTier.NORMAL: 0,
    StatusTier.WARNING: 1,
    StatusTier.CRITICAL: 2,
}


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    ACTIVE = "active"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"


class AlertType(str, Enum):
    STORM_SURGE = "storm_surge"
    COASTAL_EROSION = "coastal_erosion"
    WATER_POLLUTION = "water_pollution"
    ILLEGAL_ACTIVITY = "illegal_activity"
    ALGAL_BLOOM = "algal_bloom"
    OTHER = "other"


class ForecastRisk(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(RiskLevel).index(self)


class SensorType(str, Enum):
    TIDE_GAUGE = "tide_gauge"
    WEATHER_STATION = "weather_station"
    WATER_QUALITY = "water_quality"
    WAVE_BUOY = "wave_buoy"
    SATELLITE = "satellite"


class DataSource(str, Enum):
    NOAA = "noaa"
    NDBC = "ndbc"
    USGS = "usgs"
    SIMULATED = "simulated"


class IncidentStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    RESOLVED = "resolved"
