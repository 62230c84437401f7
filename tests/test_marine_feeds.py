"""Tests for marine feed parsing and the simulated fallback.

Network calls are patched; nothing here reaches NOAA / NDBC / USGS.
"""

import random
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from coastal_backend.config import Settings
from coastal_backend.core.errors import FeedError, MalformedThresholdTable
from coastal_backend.core.thresholds import DEFAULT_THRESHOLDS, ThresholdBand, ThresholdTable
from coastal_backend.feeds import marine_feeds
from coastal_backend.feeds.marine_feeds import (
    collect_sensors,
    ndbc_readings,
    parse_ndbc_table,
    parse_noaa_readings,
    parse_usgs_readings,
    simulate_readings,
)
from coastal_backend.feeds.predictions import mock_predictions
from coastal_backend.schemas.enums import DataSource, ForecastRisk, ParameterKind, StatusTier

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

NDBC_SAMPLE = """\
#YY  MM DD hh mm WDIR WSPD GST  WVHT   DPD   APD MWD   PRES  ATMP  WTMP  DEWP  VIS PTDY  TIDE
#yr  mo dy hr mn degT m/s  m/s     m   sec   sec degT   hPa  degC  degC  degC  nmi  hPa    ft
2026 03 01 12 00 250 16.0 19.0   4.5    8     6  260 1015.2  10.1  12.3   MM   MM   MM    MM
2026 03 01 11 00 245  9.0 11.0    MM   MM    MM   MM 1015.0  10.0  12.2   MM   MM   MM    MM
2026 03 01 10 00 240  8.0 10.0   1.1    7     5  255 1014.8   9.9  12.1   MM   MM   MM    MM
"""


# =============================================================================
# NOAA
# =============================================================================

def test_parse_noaa_readings_sorted_and_classified():
    payload = {
        "metadata": {"id": "9447130"},
        "data": [
            {"t": "2026-03-01 12:00", "v": "3.100"},
            {"t": "2026-03-01 10:00", "v": "1.200"},
            {"t": "2026-03-01 11:00", "v": ""},
            {"t": "2026-03-01 11:30", "v": "2.600"},
        ],
    }
    readings = parse_noaa_readings(payload, DEFAULT_THRESHOLDS)

    assert [r.value for r in readings] == [1.2, 2.6, 3.1]
    assert [r.status for r in readings] == [StatusTier.NORMAL, StatusTier.WARNING, StatusTier.CRITICAL]
    assert all(r.unit == "m" and r.parameter_kind is ParameterKind.TIDE for r in readings)


# =============================================================================
# NDBC
# =============================================================================

def test_parse_ndbc_table_uses_first_header():
    rows = parse_ndbc_table(NDBC_SAMPLE)
    assert len(rows) == 3
    assert rows[0]["WVHT"] == "4.5"
    assert rows[1]["WVHT"] == "MM"


def test_ndbc_readings_skip_missing_and_sort_oldest_first():
    rows = parse_ndbc_table(NDBC_SAMPLE)
    waves = ndbc_readings(rows, "WVHT", ParameterKind.WAVE, DEFAULT_THRESHOLDS)
    wind = ndbc_readings(rows, "WSPD", ParameterKind.WIND_SPEED, DEFAULT_THRESHOLDS)

    assert [r.value for r in waves] == [1.1, 4.5]
    assert waves[-1].status is StatusTier.CRITICAL
    assert [r.value for r in wind] == [8.0, 9.0, 16.0]
    assert wind[-1].status is StatusTier.WARNING
    assert wind[-1].timestamp == NOW


def test_ndbc_without_header_is_an_error():
    with pytest.raises(FeedError):
        parse_ndbc_table("2026 03 01 12 00 250 16.0\n")


# =============================================================================
# USGS
# =============================================================================

def test_parse_usgs_readings_by_parameter_code():
    payload = {
        "value": {
            "timeSeries": [
                {
                    "variable": {"variableCode": [{"value": "00010"}], "noDataValue": -999999.0},
                    "values": [{"value": [
                        {"value": "22.5", "dateTime": "2026-03-01T11:00:00.000+00:00"},
                        {"value": "-999999", "dateTime": "2026-03-01T11:30:00.000+00:00"},
                        {"value": "31.5", "dateTime": "2026-03-01T12:00:00.000+00:00"},
                    ]}],
                },
                {
                    "variable": {"variableCode": [{"value": "00400"}], "noDataValue": -999999.0},
                    "values": [{"value": [{"value": "5.8", "dateTime": "2026-03-01T12:00:00.000+00:00"}]}],
                },
                {
                    "variable": {"variableCode": [{"value": "00300"}]},
                    "values": [{"value": [{"value": "8.0", "dateTime": "2026-03-01T12:00:00.000+00:00"}]}],
                },
            ]
        }
    }
    parsed = parse_usgs_readings(payload, DEFAULT_THRESHOLDS)

    assert set(parsed) == {ParameterKind.TEMPERATURE, ParameterKind.PH}
    assert [r.value for r in parsed[ParameterKind.TEMPERATURE]] == [22.5, 31.5]
    assert parsed[ParameterKind.TEMPERATURE][-1].status is StatusTier.WARNING
    assert parsed[ParameterKind.PH][0].status is StatusTier.CRITICAL


# =============================================================================
# SIMULATION AND FALLBACK
# =============================================================================

@pytest.mark.parametrize("kind", [k for k in ParameterKind if k is not ParameterKind.OTHER])
def test_simulated_series_is_hourly_and_classified(kind):
    readings = simulate_readings(kind, DEFAULT_THRESHOLDS, NOW, random.Random(1))
    assert len(readings) == 24
    assert readings[-1].timestamp == NOW
    assert all(r.status is not None for r in readings)
    assert readings == sorted(readings, key=lambda r: r.timestamp)


def test_simulated_only_settings_never_touch_network(simulated_settings):
    with patch.object(marine_feeds.requests, "get") as mock_get:
        sensors = collect_sensors(simulated_settings, NOW, random.Random(3))

    mock_get.assert_not_called()
    # 4 tide gauges + 4 buoys x (wave, wind) + 2 sites x (temp, pH)
    assert len(sensors) == 4 + 8 + 4
    assert {s.source for s in sensors} == {DataSource.SIMULATED}
    assert all(s.readings for s in sensors)


def test_unreachable_station_falls_back_to_simulation():
    settings = Settings(noaa_stations=("9447130",), ndbc_buoys=(), usgs_sites=())
    with patch.object(marine_feeds.requests, "get", side_effect=requests.ConnectionError("offline")):
        sensors = collect_sensors(settings, NOW, random.Random(3))

    assert len(sensors) == 1
    assert sensors[0].id == "tide_9447130"
    assert sensors[0].source is DataSource.SIMULATED
    assert sensors[0].name.startswith("Seattle")


def test_ndbc_response_builds_wave_and_wind_sensors():
    settings = Settings(noaa_stations=(), ndbc_buoys=("46042",), usgs_sites=())
    response = MagicMock(status_code=200, text=NDBC_SAMPLE)
    with patch.object(marine_feeds.requests, "get", return_value=response):
        sensors = collect_sensors(settings, NOW, random.Random(3))

    by_id = {s.id: s for s in sensors}
    assert set(by_id) == {"wave_46042", "wind_46042"}
    assert by_id["wave_46042"].source is DataSource.NDBC
    assert by_id["wave_46042"].latest_reading.status is StatusTier.CRITICAL
    assert by_id["wind_46042"].latest_reading.value == 16.0


def test_noaa_error_payload_falls_back():
    settings = Settings(noaa_stations=("0000000",), ndbc_buoys=(), usgs_sites=())
    response = MagicMock(status_code=200)
    response.json.return_value = {"error": {"message": "No data was found"}}
    with patch.object(marine_feeds.requests, "get", return_value=response):
        sensors = collect_sensors(settings, NOW, random.Random(3))

    assert sensors[0].source is DataSource.SIMULATED
    assert sensors[0].name.startswith("Station 0000000")


# =============================================================================
# PARTIAL THRESHOLD TABLES
# =============================================================================

WATER_QUALITY_ONLY = ThresholdTable(
    {ParameterKind.TEMPERATURE: ThresholdBand(warning=30.0, critical=35.0, warning_low=5.0, critical_low=0.0)}
)


def test_kinds_without_band_produce_no_sensors():
    settings = Settings(use_simulated_data=True, thresholds=WATER_QUALITY_ONLY)
    sensors = collect_sensors(settings, NOW, random.Random(3))

    assert {s.parameter_kind for s in sensors} == {ParameterKind.TEMPERATURE}
    assert len(sensors) == len(settings.usgs_sites)


def test_usgs_series_outside_table_is_skipped_not_fatal():
    settings = Settings(noaa_stations=(), ndbc_buoys=(), usgs_sites=("8764227",), thresholds=WATER_QUALITY_ONLY)
    response = MagicMock(status_code=200)
    response.json.return_value = {
        "value": {
            "timeSeries": [
                {
                    "variable": {"variableCode": [{"value": "00010"}]},
                    "values": [{"value": [{"value": "22.5", "dateTime": "2026-03-01T12:00:00+00:00"}]}],
                },
                {
                    "variable": {"variableCode": [{"value": "00400"}]},
                    "values": [{"value": [{"value": "7.9", "dateTime": "2026-03-01T12:00:00+00:00"}]}],
                },
            ]
        }
    }
    with patch.object(marine_feeds.requests, "get", return_value=response):
        sensors = collect_sensors(settings, NOW, random.Random(3))

    assert [s.id for s in sensors] == ["temp_8764227"]
    assert sensors[0].source is DataSource.USGS
    assert sensors[0].latest_reading.value == 22.5


def test_threshold_errors_are_not_treated_as_outages():
    settings = Settings(noaa_stations=("9447130",), ndbc_buoys=(), usgs_sites=())
    response = MagicMock(status_code=200)
    response.json.return_value = {"data": [{"t": "2026-03-01 12:00", "v": "1.0"}]}
    with patch.object(marine_feeds.requests, "get", return_value=response), \
            patch.object(marine_feeds, "classify", side_effect=MalformedThresholdTable("tide: bad band")):
        with pytest.raises(MalformedThresholdTable):
            collect_sensors(settings, NOW, random.Random(3))


# =============================================================================
# PREDICTIONS
# =============================================================================

def test_mock_predictions_shape():
    predictions = mock_predictions(NOW)
    assert len(predictions) == 4
    for prediction in predictions:
        assert len(prediction.forecast) == 7
        assert prediction.forecast[0].timestamp == NOW
        confidences = [p.confidence for p in prediction.forecast]
        assert confidences == sorted(confidences, reverse=True)

    high = [p.id for p in predictions if any(f.risk_level is ForecastRisk.HIGH for f in p.forecast)]
    assert high == ["pred_surge_chennai"]
