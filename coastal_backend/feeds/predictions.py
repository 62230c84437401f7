"""
Forecast "predictions" shown on the dashboard.

There is no trained model behind these yet: each forecast is a fixed
72 h curve per location, and the risk level of every point is derived
from its value with the same ranking the threshold table uses.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from coastal_backend.feeds.stations import get_station
from coastal_backend.schemas.coastal import ForecastPoint, Prediction
from coastal_backend.schemas.enums import ForecastRisk

HORIZON_HOURS = 72
STEP_HOURS = 12

# id -> (type, station, model name, values per step, (medium_at, high_at))
_FORECAST_CURVES = {
    "pred_tide_mumbai": (
        "tide_level", "46042", "AI-Tide-Predictor-v2.1",
        (2.1, 2.4, 2.6, 2.3, 2.0, 1.8, 1.9), (2.5, 3.0),
    ),
    "pred_surge_chennai": (
        "storm_surge", "41008", "Storm-Surge-Forecast-v1.5",
        (0.6, 0.9, 1.4, 1.8, 1.5, 1.1, 0.8), (1.0, 1.6),
    ),
    "pred_erosion_kerala": (
        "erosion_risk", "46088", "Coastal-Erosion-Risk-v1.8",
        (0.32, 0.35, 0.38, 0.41, 0.44, 0.46, 0.47), (0.4, 0.7),
    ),
    "pred_quality_goa": (
        "water_quality", "41012", "Water-Quality-Analyzer-v2.0",
        (7.9, 7.9, 8.0, 8.1, 8.0, 7.9, 7.8), (8.5, 9.0),
    ),
}


def _risk_for(value: float, medium_at: float, high_at: float) -> ForecastRisk:
    if value > high_at:
        return ForecastRisk.HIGH
    if value > medium_at:
        return ForecastRisk.MEDIUM
    return ForecastRisk.LOW


def mock_predictions(now: Optional[datetime] = None) -> list[Prediction]:
    now = now or datetime.now(timezone.utc)
    predictions = []
    for pred_id, (pred_type, station_id, model, values, (medium_at, high_at)) in _FORECAST_CURVES.items():
        forecast = []
        for step, value in enumerate(values):
            hours_ahead = step * STEP_HOURS
            forecast.append(
                ForecastPoint(
                    timestamp=now + timedelta(hours=hours_ahead),
                    value=value,
                    # confidence decays with distance from now
                    confidence=round(0.95 - 0.3 * hours_ahead / HORIZON_HOURS, 2),
                    risk_level=_risk_for(value, medium_at, high_at),
                )
            )
        predictions.append(
            Prediction(
                id=pred_id,
                type=pred_type,
                location=get_station(station_id).location,
                model=model,
                forecast=forecast,
                last_updated=now,
            )
        )
    return predictions
