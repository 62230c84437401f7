import os

# Never hit the real marine APIs from the test suite.
os.environ.setdefault("USE_SIMULATED_DATA", "true")

from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from coastal_backend.config import Settings
from coastal_backend.schemas.coastal import (
    Alert,
    ForecastPoint,
    Location,
    Prediction,
    Reading,
    Sensor,
)
from coastal_backend.schemas.enums import (
    AlertSeverity,
    AlertStatus,
    AlertType,
    DataSource,
    ForecastRisk,
    ParameterKind,
    SensorType,
    StatusTier,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
PIER = Location(lat=18.92, lng=72.83, name="Mumbai Harbor")


# =============================================================================
# BUILDERS
# =============================================================================

def make_alert(
    severity: AlertSeverity = AlertSeverity.HIGH,
    status: AlertStatus = AlertStatus.ACTIVE,
    alert_id: str = "a1",
) -> Alert:
    return Alert(
        id=alert_id,
        type=AlertType.STORM_SURGE,
        severity=severity,
        status=status,
        location=PIER,
        description="Surge expected at high tide",
        timestamp=NOW,
    )


def make_sensor(tier: StatusTier = StatusTier.NORMAL, sensor_id: str = "tide_1") -> Sensor:
    return Sensor(
        id=sensor_id,
        name="Harbor tide",
        location=PIER,
        type=SensorType.TIDE_GAUGE,
        parameter_kind=ParameterKind.TIDE,
        source=DataSource.SIMULATED,
        readings=[
            Reading(timestamp=NOW, value=1.0, unit="m", parameter_kind=ParameterKind.TIDE, status=StatusTier.NORMAL),
            Reading(timestamp=NOW, value=2.7, unit="m", parameter_kind=ParameterKind.TIDE, status=tier),
        ],
        last_updated=NOW,
    )


def make_prediction(levels: List[ForecastRisk], pred_id: str = "p1") -> Prediction:
    return Prediction(
        id=pred_id,
        type="storm_surge",
        location=PIER,
        model="Storm-Surge-Forecast-v1.5",
        forecast=[
            ForecastPoint(timestamp=NOW, value=1.0, confidence=0.9, risk_level=level) for level in levels
        ],
        last_updated=NOW,
    )


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def simulated_settings() -> Settings:
    return Settings(use_simulated_data=True, sensor_cache_seconds=0.0)


@pytest.fixture
def alert_payload() -> Dict[str, Any]:
    return {
        "type": "storm_surge",
        "severity": "high",
        "location": {"lat": 13.08, "lng": 80.27, "name": "Chennai Coast"},
        "description": "Storm surge of 1.5 m expected",
        "affected_area": 12.5,
        "recommendations": ["Move boats to harbor"],
    }
