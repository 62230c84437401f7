"""
Marine data feeds: NOAA tide gauges, NDBC buoys and USGS water-quality sites.

- Fetches raw observations from the public APIs (no keys required).
- Every reading is classified through the threshold table before it leaves
  this module, so downstream code only sees Readings with a status.
- If a station is unreachable or returns nothing usable, a simulated 24 h
  series is substituted for that station and a warning is logged.
  USE_SIMULATED_DATA=true skips the network entirely.
"""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

import requests

from coastal_backend.config import Settings
from coastal_backend.core.errors import FeedError, RiskEngineError
from coastal_backend.core.thresholds import ThresholdTable, classify
from coastal_backend.feeds.stations import get_station
from coastal_backend.schemas.coastal import Reading, Sensor
from coastal_backend.schemas.enums import DataSource, ParameterKind, SensorType

logger = logging.getLogger(__name__)

NOAA_DATAGETTER_URL = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"
NDBC_REALTIME_URL = "https://www.ndbc.noaa.gov/data/realtime2/{buoy_id}.txt"
USGS_IV_URL = "https://waterservices.usgs.gov/nwis/iv/"

NDBC_MISSING = "MM"
USGS_PARAMETER_CODES = {
    "00010": ParameterKind.TEMPERATURE,
    "00400": ParameterKind.PH,
}

# Kinds the feeds below produce sensors for.
FEED_KINDS = (
    ParameterKind.TIDE,
    ParameterKind.WAVE,
    ParameterKind.WIND_SPEED,
    ParameterKind.TEMPERATURE,
    ParameterKind.PH,
)

UNITS = {
    ParameterKind.TIDE: "m",
    ParameterKind.WAVE: "m",
    ParameterKind.WIND_SPEED: "m/s",
    ParameterKind.TEMPERATURE: "°C",
    ParameterKind.PH: "pH",
}

# kind -> (baseline, daily amplitude, noise half-width, floor)
_SIMULATION_PROFILES = {
    ParameterKind.TIDE: (1.5, 0.8, 0.15, 0.0),
    ParameterKind.WAVE: (1.2, 0.6, 0.2, 0.0),
    ParameterKind.WIND_SPEED: (8.0, 4.0, 1.5, 0.0),
    ParameterKind.TEMPERATURE: (24.0, 2.0, 0.5, None),
    ParameterKind.PH: (7.8, 0.2, 0.1, None),
}

# Outage or garbled payload. Some RiskEngineErrors are ValueErrors, so handlers
# around classification re-raise RiskEngineError before catching these.
_FEED_ERRORS = (requests.RequestException, FeedError, ValueError, KeyError, TypeError)


def _reading(ts: datetime, value: float, kind: ParameterKind, thresholds: ThresholdTable) -> Reading:
    return Reading(
        timestamp=ts,
        value=value,
        unit=UNITS[kind],
        parameter_kind=kind,
        status=classify(value, kind, thresholds),
    )


# --- NOAA Tides & Currents ---


def fetch_noaa_water_levels(station_id: str, timeout: float, hours: int = 24) -> dict[str, Any]:
    params = {
        "station": station_id,
        "product": "water_level",
        "datum": "MLLW",
        "time_zone": "gmt",
        "units": "metric",
        "format": "json",
        "range": str(hours),
    }
    r = requests.get(NOAA_DATAGETTER_URL, params=params, timeout=timeout)
    if r.status_code != 200:
        raise FeedError(f"NOAA {station_id}: HTTP {r.status_code}")
    payload = r.json()
    if "error" in payload:
        raise FeedError(f"NOAA {station_id}: {payload['error'].get('message', 'unknown error')}")
    return payload


def parse_noaa_readings(payload: dict[str, Any], thresholds: ThresholdTable) -> list[Reading]:
    """NOAA rows look like {"t": "2024-01-15 12:00", "v": "1.234", ...}; blank v means no data."""
    readings = []
    for row in payload.get("data", []):
        raw = str(row.get("v", "")).strip()
        if not raw:
            continue
        ts = datetime.strptime(row["t"], "%Y-%m-%d %H:%M").replace(tzinfo=timezone.utc)
        readings.append(_reading(ts, float(raw), ParameterKind.TIDE, thresholds))
    readings.sort(key=lambda r: r.timestamp)
    return readings


# --- NDBC buoys ---


def fetch_ndbc_text(buoy_id: str, timeout: float) -> str:
    r = requests.get(NDBC_REALTIME_URL.format(buoy_id=buoy_id), timeout=timeout)
    if r.status_code != 200:
        raise FeedError(f"NDBC {buoy_id}: HTTP {r.status_code}")
    return r.text


def parse_ndbc_table(text: str) -> list[dict[str, str]]:
    """
    NDBC realtime2 files: first line is the '#YY MM DD hh mm ...' header,
    second '#' line holds units, then whitespace-separated rows, newest first.
    """
    header: Optional[list[str]] = None
    rows = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        if line.startswith("#"):
            if header is None:
                header = line.lstrip("#").split()
            continue
        if header is None:
            raise FeedError("NDBC file has no header line")
        rows.append(dict(zip(header, line.split())))
    return rows


def _ndbc_timestamp(row: dict[str, str]) -> datetime:
    year = int(row["YY"])
    if year < 100:
        year += 2000
    return datetime(year, int(row["MM"]), int(row["DD"]), int(row["hh"]), int(row["mm"]), tzinfo=timezone.utc)


def ndbc_readings(
    rows: Iterable[dict[str, str]], column: str, kind: ParameterKind, thresholds: ThresholdTable
) -> list[Reading]:
    readings = []
    for row in rows:
        raw = row.get(column, NDBC_MISSING)
        if raw == NDBC_MISSING:
            continue
        readings.append(_reading(_ndbc_timestamp(row), float(raw), kind, thresholds))
    readings.sort(key=lambda r: r.timestamp)
    return readings


# --- USGS water services ---


def fetch_usgs_water_quality(site_id: str, timeout: float) -> dict[str, Any]:
    params = {
        "sites": site_id,
        "parameterCd": ",".join(USGS_PARAMETER_CODES),
        "format": "json",
        "siteStatus": "all",
    }
    r = requests.get(USGS_IV_URL, params=params, timeout=timeout)
    if r.status_code != 200:
        raise FeedError(f"USGS {site_id}: HTTP {r.status_code}")
    return r.json()


def parse_usgs_readings(payload: dict[str, Any], thresholds: ThresholdTable) -> dict[ParameterKind, list[Reading]]:
    out: dict[ParameterKind, list[Reading]] = {}
    for series in payload.get("value", {}).get("timeSeries", []):
        variable = series.get("variable", {})
        codes = variable.get("variableCode") or [{}]
        kind = USGS_PARAMETER_CODES.get(codes[0].get("value"))
        if kind is None or kind not in thresholds:
            continue
        no_data = variable.get("noDataValue")
        for block in series.get("values", []):
            for point in block.get("value", []):
                value = float(point["value"])
                if no_data is not None and value == float(no_data):
                    continue
                ts = datetime.fromisoformat(point["dateTime"])
                out.setdefault(kind, []).append(_reading(ts, value, kind, thresholds))
    for readings in out.values():
        readings.sort(key=lambda r: r.timestamp)
    return out


# --- Simulated fallback ---


def simulate_readings(
    kind: ParameterKind,
    thresholds: ThresholdTable,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    hours: int = 24,
) -> list[Reading]:
    """Hourly sinusoid with noise, oldest first."""
    now = now or datetime.now(timezone.utc)
    rng = rng or random.Random()
    base, amplitude, noise, floor = _SIMULATION_PROFILES[kind]
    readings = []
    for i in range(hours):
        ts = now - timedelta(hours=hours - 1 - i)
        value = base + math.sin(i / hours * 2 * math.pi) * amplitude + (rng.random() - 0.5) * 2 * noise
        if floor is not None:
            value = max(floor, value)
        readings.append(_reading(ts, round(value, 3), kind, thresholds))
    return readings


# --- Sensor assembly ---


def _sensor(
    sensor_id: str,
    station_id: str,
    sensor_type: SensorType,
    kind: ParameterKind,
    source: DataSource,
    readings: list[Reading],
    now: datetime,
) -> Sensor:
    station = get_station(station_id)
    label = kind.value.replace("_", " ")
    return Sensor(
        id=sensor_id,
        name=f"{station.name} {label}",
        location=station.location,
        type=sensor_type,
        parameter_kind=kind,
        source=source,
        readings=readings,
        last_updated=now,
    )


def _tide_sensor(station_id: str, settings: Settings, now: datetime, rng: random.Random) -> Sensor:
    source, readings = DataSource.SIMULATED, []
    if not settings.use_simulated_data:
        try:
            payload = fetch_noaa_water_levels(station_id, settings.feed_timeout_seconds)
            readings = parse_noaa_readings(payload, settings.thresholds)
            source = DataSource.NOAA
        except RiskEngineError:
            raise
        except _FEED_ERRORS as e:
            logger.warning(f"NOAA station {station_id} unavailable ({e}), using simulated data")
    if not readings:
        source = DataSource.SIMULATED
        readings = simulate_readings(ParameterKind.TIDE, settings.thresholds, now, rng)
    return _sensor(f"tide_{station_id}", station_id, SensorType.TIDE_GAUGE, ParameterKind.TIDE, source, readings, now)


_BUOY_COLUMNS = (
    ("WVHT", ParameterKind.WAVE, SensorType.WAVE_BUOY, "wave"),
    ("WSPD", ParameterKind.WIND_SPEED, SensorType.WEATHER_STATION, "wind"),
)

_WATER_QUALITY_KINDS = ((ParameterKind.TEMPERATURE, "temp"), (ParameterKind.PH, "ph"))


def _buoy_sensors(buoy_id: str, settings: Settings, now: datetime, rng: random.Random) -> list[Sensor]:
    columns = [c for c in _BUOY_COLUMNS if c[1] in settings.thresholds]
    if not columns:
        return []

    rows: list[dict[str, str]] = []
    if not settings.use_simulated_data:
        try:
            rows = parse_ndbc_table(fetch_ndbc_text(buoy_id, settings.feed_timeout_seconds))
        except _FEED_ERRORS as e:
            logger.warning(f"NDBC buoy {buoy_id} unavailable ({e}), using simulated data")

    sensors = []
    for column, kind, sensor_type, prefix in columns:
        source, readings = DataSource.NDBC, []
        try:
            readings = ndbc_readings(rows, column, kind, settings.thresholds)
        except RiskEngineError:
            raise
        except _FEED_ERRORS as e:
            logger.warning(f"NDBC buoy {buoy_id} column {column} unparseable ({e})")
        if not readings:
            source = DataSource.SIMULATED
            readings = simulate_readings(kind, settings.thresholds, now, rng)
        sensors.append(_sensor(f"{prefix}_{buoy_id}", buoy_id, sensor_type, kind, source, readings, now))
    return sensors


def _water_quality_sensors(site_id: str, settings: Settings, now: datetime, rng: random.Random) -> list[Sensor]:
    kinds = [k for k in _WATER_QUALITY_KINDS if k[0] in settings.thresholds]
    if not kinds:
        return []

    parsed: dict[ParameterKind, list[Reading]] = {}
    if not settings.use_simulated_data:
        try:
            payload = fetch_usgs_water_quality(site_id, settings.feed_timeout_seconds)
            parsed = parse_usgs_readings(payload, settings.thresholds)
        except RiskEngineError:
            raise
        except _FEED_ERRORS as e:
            logger.warning(f"USGS site {site_id} unavailable ({e}), using simulated data")

    sensors = []
    for kind, prefix in kinds:
        readings = parsed.get(kind, [])
        source = DataSource.USGS
        if not readings:
            source = DataSource.SIMULATED
            readings = simulate_readings(kind, settings.thresholds, now, rng)
        sensors.append(
            _sensor(f"{prefix}_{site_id}", site_id, SensorType.WATER_QUALITY, kind, source, readings, now)
        )
    return sensors


def collect_sensors(
    settings: Settings, now: Optional[datetime] = None, rng: Optional[random.Random] = None
) -> list[Sensor]:
    """
    One snapshot of every configured station. Blocking; run it off the event loop.

    Parameter kinds the threshold table has no band for produce no sensors.
    Threshold errors raised while classifying are not treated as outages and
    propagate as RiskEngineError.
    """
    now = now or datetime.now(timezone.utc)
    rng = rng or random.Random()
    skipped = [k.value for k in FEED_KINDS if k not in settings.thresholds]
    if skipped:
        logger.warning(f"No thresholds configured for {', '.join(skipped)}; those sensors are skipped")

    sensors: list[Sensor] = []
    if ParameterKind.TIDE in settings.thresholds:
        for station_id in settings.noaa_stations:
            sensors.append(_tide_sensor(station_id, settings, now, rng))
    for buoy_id in settings.ndbc_buoys:
        sensors.extend(_buoy_sensors(buoy_id, settings, now, rng))
    for site_id in settings.usgs_sites:
        sensors.extend(_water_quality_sensors(site_id, settings, now, rng))
    return sensors
