"""
Sensor router: marine station readings, each classified NORMAL / WARNING / CRITICAL.

Feeds are fetched in a worker thread and the snapshot is reused for
SENSOR_CACHE_SECONDS so the dashboard's polling doesn't hammer NOAA/NDBC/USGS.
A snapshot is only reused for the same stations and threshold table.
"""

import asyncio
import logging
import threading
import time
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException

from coastal_backend.config import Settings, get_app_settings
from coastal_backend.core.errors import InvalidParameterKind, RiskEngineError
from coastal_backend.core.statistics import sensor_statistics
from coastal_backend.core.thresholds import classify, resolve_parameter_kind
from coastal_backend.feeds.marine_feeds import collect_sensors
from coastal_backend.schemas.coastal import ClassificationResult, Sensor, SensorStatistics, SensorStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sensors", tags=["sensors"])

# --- Snapshot cache ---

_snapshot: Optional[list[Sensor]] = None
_snapshot_key: Optional[tuple[Any, ...]] = None
_snapshot_at: float = 0.0
# held for the whole collection so concurrent cold requests fetch once
_snapshot_lock = threading.Lock()


def _cache_key(settings: Settings) -> tuple[Any, ...]:
    return (
        settings.use_simulated_data,
        settings.noaa_stations,
        settings.ndbc_buoys,
        settings.usgs_sites,
        settings.thresholds,
    )


def load_sensors(settings: Settings) -> list[Sensor]:
    """Blocking: returns the cached snapshot or collects a fresh one."""
    global _snapshot, _snapshot_key, _snapshot_at
    key = _cache_key(settings)
    with _snapshot_lock:
        fresh = (time.monotonic() - _snapshot_at) < settings.sensor_cache_seconds
        if _snapshot is not None and fresh and _snapshot_key == key:
            return _snapshot
        sensors = collect_sensors(settings)
        _snapshot, _snapshot_key, _snapshot_at = sensors, key, time.monotonic()
        return sensors


def reset_sensor_cache() -> None:
    global _snapshot, _snapshot_key, _snapshot_at
    with _snapshot_lock:
        _snapshot = None
        _snapshot_key = None
        _snapshot_at = 0.0


async def _current_sensors(settings: Settings) -> list[Sensor]:
    try:
        return await asyncio.to_thread(load_sensors, settings)
    except RiskEngineError as e:
        logger.error(f"Sensor snapshot rejected: {e}")
        raise HTTPException(503, detail=f"Sensor data unavailable: {e}")


# --- Endpoints ---


@router.get("", response_model=list[Sensor])
async def get_sensors(settings: Settings = Depends(get_app_settings)) -> list[Sensor]:
    return await _current_sensors(settings)


@router.get("/statistics", response_model=SensorStatistics)
async def get_sensor_statistics(settings: Settings = Depends(get_app_settings)) -> SensorStatistics:
    sensors = await _current_sensors(settings)
    return sensor_statistics(sensors)


@router.get("/status", response_model=list[SensorStatus])
async def get_sensor_status(settings: Settings = Depends(get_app_settings)) -> list[SensorStatus]:
    """Latest reading and tier per sensor, for the dashboard cards."""
    sensors = await _current_sensors(settings)
    out = []
    for sensor in sensors:
        latest = sensor.latest_reading
        out.append(
            SensorStatus(
                sensor_id=sensor.id,
                name=sensor.name,
                parameter_kind=sensor.parameter_kind,
                value=latest.value if latest else None,
                unit=latest.unit if latest else None,
                status=latest.status if latest else None,
                timestamp=latest.timestamp if latest else None,
            )
        )
    return out


@router.get("/classify", response_model=ClassificationResult)
async def get_classification(
    parameter_kind: str,
    value: float,
    settings: Settings = Depends(get_app_settings),
) -> ClassificationResult:
    try:
        kind = resolve_parameter_kind(parameter_kind)
        status = classify(value, kind, settings.thresholds)
    except InvalidParameterKind as e:
        raise HTTPException(400, detail=str(e))
    except ValueError as e:
        raise HTTPException(400, detail=f"Cannot classify value: {e}")
    return ClassificationResult(parameter_kind=kind, value=value, status=status)


@router.get("/{sensor_id}", response_model=Sensor)
async def get_sensor(sensor_id: str, settings: Settings = Depends(get_app_settings)) -> Sensor:
    sensors = await _current_sensors(settings)
    for sensor in sensors:
        if sensor.id == sensor_id:
            return sensor
    raise HTTPException(404, detail=f"Sensor {sensor_id} not found")
