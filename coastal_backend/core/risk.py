"""
Composite coastal risk score.

Additive point scoring over one snapshot of alerts, sensors and predictions:
  1. active high/critical alerts        -> weights.high_alert each
  2. sensors whose latest tier is WARNING -> weights.warning_sensor each
  3. predictions with any HIGH forecast  -> weights.high_prediction each

Factors are emitted in that order. A sensor at CRITICAL is not counted in
step 2 and adds nothing on its own.

Entities may be pydantic models or plain dicts. A present entity missing a
field the score depends on rejects the whole call (IncompleteEntity); empty
sequences simply contribute nothing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, Type, TypeVar

from coastal_backend.core.errors import IncompleteEntity
from coastal_backend.schemas.coastal import RiskAssessment
from coastal_backend.schemas.enums import (
    AlertSeverity,
    AlertStatus,
    ForecastRisk,
    RiskLevel,
    StatusTier,
)

E = TypeVar("E", bound=Enum)

HIGH_SEVERITIES = frozenset({AlertSeverity.HIGH, AlertSeverity.CRITICAL})

# Shown next to every assessment on the dashboard banner.
DEFAULT_RECOMMENDATIONS = (
    "Monitor all active alerts closely",
    "Review sensor readings for anomalies",
    "Prepare emergency response protocols",
    "Communicate with affected communities",
)


@dataclass(frozen=True)
class RiskWeights:
    high_alert: int = 25
    warning_sensor: int = 15
    high_prediction: int = 20
    # minimum score for each level, checked highest first
    critical_at: int = 80
    high_at: int = 60
    medium_at: int = 30

    def __post_init__(self) -> None:
        if min(self.high_alert, self.warning_sensor, self.high_prediction) < 0:
            raise ValueError("risk weights must be non-negative")
        if not 0 <= self.medium_at <= self.high_at <= self.critical_at:
            raise ValueError("risk level breakpoints must satisfy 0 <= medium <= high <= critical")

    def level_for(self, score: int) -> RiskLevel:
        if score >= self.critical_at:
            return RiskLevel.CRITICAL
        if score >= self.high_at:
            return RiskLevel.HIGH
        if score >= self.medium_at:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW


DEFAULT_WEIGHTS = RiskWeights()


def _field(entity: Any, name: str) -> Any:
    if isinstance(entity, Mapping):
        return entity.get(name)
    return getattr(entity, name, None)


def _entity_id(entity: Any) -> Optional[str]:
    value = _field(entity, "id")
    return None if value is None else str(value)


def _require_enum(entity: Any, name: str, enum_cls: Type[E], kind: str, index: int) -> E:
    raw = _field(entity, name)
    if raw is None:
        raise IncompleteEntity(kind, index, name, _entity_id(entity))
    try:
        return enum_cls(raw)
    except ValueError:
        raise IncompleteEntity(kind, index, name, _entity_id(entity), reason="has unrecognised value in") from None


def count_high_severity_alerts(alerts: Iterable[Any]) -> int:
    count = 0
    for i, alert in enumerate(alerts):
        status = _require_enum(alert, "status", AlertStatus, "alert", i)
        severity = _require_enum(alert, "severity", AlertSeverity, "alert", i)
        if status is AlertStatus.ACTIVE and severity in HIGH_SEVERITIES:
            count += 1
    return count


def latest_sensor_tier(sensor: Any, index: int) -> StatusTier:
    """Tier already attached to the sensor's most recent reading."""
    readings = _field(sensor, "readings")
    if not readings:
        raise IncompleteEntity("sensor", index, "readings", _entity_id(sensor))
    return _require_enum(readings[-1], "status", StatusTier, "sensor", index)


def count_warning_sensors(sensors: Iterable[Any]) -> int:
    return sum(1 for i, sensor in enumerate(sensors) if latest_sensor_tier(sensor, i) is StatusTier.WARNING)


def count_high_risk_predictions(predictions: Iterable[Any]) -> int:
    count = 0
    for i, prediction in enumerate(predictions):
        forecast = _field(prediction, "forecast")
        if forecast is None:
            raise IncompleteEntity("prediction", i, "forecast", _entity_id(prediction))
        # every point is validated, not just up to the first HIGH
        levels = [
            _require_enum(point, "risk_level", ForecastRisk, "prediction", i)
            for point in forecast
        ]
        if ForecastRisk.HIGH in levels:
            count += 1
    return count


def assess_risk(
    alerts: Sequence[Any],
    sensors: Sequence[Any],
    predictions: Sequence[Any],
    weights: RiskWeights = DEFAULT_WEIGHTS,
) -> RiskAssessment:
    """Fold one snapshot of alerts, sensors and predictions into a RiskAssessment."""
    # Count everything before scoring so a bad entity anywhere rejects the call.
    high_alerts = count_high_severity_alerts(alerts)
    warning_sensors = count_warning_sensors(sensors)
    high_predictions = count_high_risk_predictions(predictions)

    score = 0
    factors: list[str] = []

    if high_alerts > 0:
        score += high_alerts * weights.high_alert
        factors.append(f"{high_alerts} high-severity alerts active")

    if warning_sensors > 0:
        score += warning_sensors * weights.warning_sensor
        factors.append(f"{warning_sensors} sensors showing warnings")

    if high_predictions > 0:
        score += high_predictions * weights.high_prediction
        factors.append(f"{high_predictions} high-risk predictions")

    return RiskAssessment(
        risk_score=score,
        risk_level=weights.level_for(score),
        risk_factors=factors,
        recommendations=list(DEFAULT_RECOMMENDATIONS),
    )
