from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

from coastal_backend.core.risk import RiskWeights
from coastal_backend.core.thresholds import DEFAULT_THRESHOLDS, ThresholdTable

# Station ids from the public NOAA / NDBC / USGS registries.
DEFAULT_NOAA_STATIONS = ("9447130", "8727520", "9410230", "9443090")
DEFAULT_NDBC_BUOYS = ("46088", "41012", "46042", "41008")
DEFAULT_USGS_SITES = ("12345678", "8764227")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes")


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def load_thresholds(path: Optional[str]) -> ThresholdTable:
    """Threshold table from a JSON file, or the built-in defaults when no path is given."""
    if not path:
        return DEFAULT_THRESHOLDS
    with Path(path).open(encoding="utf-8") as fh:
        return ThresholdTable.from_mapping(json.load(fh))


@dataclass(frozen=True)
class Settings:
    use_simulated_data: bool = False
    feed_timeout_seconds: float = 10.0
    sensor_cache_seconds: float = 30.0
    noaa_stations: tuple[str, ...] = DEFAULT_NOAA_STATIONS
    ndbc_buoys: tuple[str, ...] = DEFAULT_NDBC_BUOYS
    usgs_sites: tuple[str, ...] = DEFAULT_USGS_SITES
    thresholds: ThresholdTable = field(default_factory=lambda: DEFAULT_THRESHOLDS)
    weights: RiskWeights = field(default_factory=RiskWeights)
    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"
    log_file: Optional[str] = None


def get_settings() -> Settings:
    # Real environment variables win over anything load_dotenv() read from .env.
    weights = RiskWeights(
        high_alert=int(os.getenv("RISK_WEIGHT_HIGH_ALERT", "25")),
        warning_sensor=int(os.getenv("RISK_WEIGHT_WARNING_SENSOR", "15")),
        high_prediction=int(os.getenv("RISK_WEIGHT_HIGH_PREDICTION", "20")),
    )

    return Settings(
        use_simulated_data=_env_bool("USE_SIMULATED_DATA", False),
        feed_timeout_seconds=float(os.getenv("FEED_TIMEOUT_SECONDS", "10")),
        sensor_cache_seconds=float(os.getenv("SENSOR_CACHE_SECONDS", "30")),
        noaa_stations=_env_list("NOAA_STATIONS", DEFAULT_NOAA_STATIONS),
        ndbc_buoys=_env_list("NDBC_BUOYS", DEFAULT_NDBC_BUOYS),
        usgs_sites=_env_list("USGS_SITES", DEFAULT_USGS_SITES),
        thresholds=load_thresholds(os.getenv("THRESHOLDS_FILE", "").strip() or None),
        weights=weights,
        cors_origins=_env_list("CORS_ORIGINS", ("*",)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("LOG_FILE", "").strip() or None,
    )


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    """Process-wide settings, read once. Routers take this as a dependency."""
    return get_settings()
