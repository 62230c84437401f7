"""Tests for the composite risk aggregator.

Run:
    pytest tests/test_risk.py -v
"""

import random

import pytest

from conftest import make_alert, make_prediction, make_sensor
from coastal_backend.core.errors import IncompleteEntity
from coastal_backend.core.risk import DEFAULT_RECOMMENDATIONS, RiskWeights, assess_risk
from coastal_backend.schemas.enums import (
    AlertSeverity,
    AlertStatus,
    ForecastRisk,
    RiskLevel,
    StatusTier,
)


# =============================================================================
# SCENARIOS
# =============================================================================

def test_empty_inputs_score_zero():
    result = assess_risk([], [], [])
    assert result.risk_score == 0
    assert result.risk_level is RiskLevel.LOW
    assert result.risk_factors == []
    assert result.recommendations == list(DEFAULT_RECOMMENDATIONS)


def test_two_high_alerts_and_one_warning_sensor():
    alerts = [
        make_alert(AlertSeverity.HIGH, alert_id="a1"),
        make_alert(AlertSeverity.HIGH, alert_id="a2"),
    ]
    sensors = [make_sensor(StatusTier.WARNING)]
    result = assess_risk(alerts, sensors, [])

    assert result.risk_score == 65
    assert result.risk_level is RiskLevel.HIGH
    assert result.risk_factors == ["2 high-severity alerts active", "1 sensors showing warnings"]


def test_three_high_risk_predictions():
    predictions = [
        make_prediction([ForecastRisk.LOW, ForecastRisk.HIGH], pred_id=f"p{i}") for i in range(3)
    ]
    result = assess_risk([], [], predictions)

    assert result.risk_score == 60
    assert result.risk_level is RiskLevel.HIGH
    assert result.risk_factors == ["3 high-risk predictions"]


def test_factor_order_is_fixed():
    result = assess_risk(
        [make_alert(AlertSeverity.CRITICAL)],
        [make_sensor(StatusTier.WARNING)],
        [make_prediction([ForecastRisk.HIGH])],
    )
    assert result.risk_score == 25 + 15 + 20
    assert result.risk_factors == [
        "1 high-severity alerts active",
        "1 sensors showing warnings",
        "1 high-risk predictions",
    ]


@pytest.mark.parametrize(
    "score_alerts, expected",
    [
        (1, RiskLevel.LOW),        # 25
        (2, RiskLevel.MEDIUM),     # 50
        (3, RiskLevel.HIGH),       # 75
        (4, RiskLevel.CRITICAL),   # 100
    ],
)
def test_level_breakpoints(score_alerts, expected):
    alerts = [make_alert(alert_id=str(i)) for i in range(score_alerts)]
    assert assess_risk(alerts, [], []).risk_level is expected


def test_breakpoints_are_inclusive():
    weights = RiskWeights()
    assert weights.level_for(29) is RiskLevel.LOW
    assert weights.level_for(30) is RiskLevel.MEDIUM
    assert weights.level_for(60) is RiskLevel.HIGH
    assert weights.level_for(80) is RiskLevel.CRITICAL


# =============================================================================
# WHAT DOES NOT COUNT
# =============================================================================

def test_only_active_high_alerts_count():
    alerts = [
        make_alert(AlertSeverity.HIGH, AlertStatus.RESOLVED, "r"),
        make_alert(AlertSeverity.CRITICAL, AlertStatus.INVESTIGATING, "i"),
        make_alert(AlertSeverity.MEDIUM, AlertStatus.ACTIVE, "m"),
        make_alert(AlertSeverity.LOW, AlertStatus.ACTIVE, "l"),
    ]
    result = assess_risk(alerts, [], [])
    assert result.risk_score == 0
    assert result.risk_factors == []


def test_critical_sensor_adds_nothing():
    result = assess_risk([], [make_sensor(StatusTier.CRITICAL)], [])
    assert result.risk_score == 0
    assert result.risk_factors == []


def test_only_latest_reading_counts():
    sensor = make_sensor(StatusTier.NORMAL)
    sensor.readings[0] = sensor.readings[0].model_copy(update={"status": StatusTier.WARNING})
    assert assess_risk([], [sensor], []).risk_score == 0


def test_medium_forecast_is_not_high_risk():
    result = assess_risk([], [], [make_prediction([ForecastRisk.MEDIUM, ForecastRisk.LOW])])
    assert result.risk_score == 0


def test_prediction_with_several_high_points_counts_once():
    result = assess_risk([], [], [make_prediction([ForecastRisk.HIGH, ForecastRisk.HIGH])])
    assert result.risk_score == 20


# =============================================================================
# PROPERTIES
# =============================================================================

def test_order_independent():
    alerts = [make_alert(s, alert_id=str(i)) for i, s in enumerate(AlertSeverity)]
    sensors = [make_sensor(t, sensor_id=str(i)) for i, t in enumerate(StatusTier)] * 2
    predictions = [make_prediction([r], pred_id=str(i)) for i, r in enumerate(ForecastRisk)]
    baseline = assess_risk(alerts, sensors, predictions)

    rng = random.Random(7)
    for _ in range(10):
        rng.shuffle(alerts)
        rng.shuffle(sensors)
        rng.shuffle(predictions)
        shuffled = assess_risk(alerts, sensors, predictions)
        assert shuffled.risk_score == baseline.risk_score
        assert shuffled.risk_level is baseline.risk_level
        assert shuffled.risk_factors == baseline.risk_factors


def test_adding_high_alert_is_monotonic():
    alerts = []
    sensors = [make_sensor(StatusTier.WARNING)]
    predictions = [make_prediction([ForecastRisk.HIGH])]
    previous = assess_risk(alerts, sensors, predictions)
    for i in range(6):
        alerts.append(make_alert(AlertSeverity.HIGH, alert_id=str(i)))
        current = assess_risk(alerts, sensors, predictions)
        assert current.risk_score >= previous.risk_score
        assert current.risk_level.rank >= previous.risk_level.rank
        previous = current


def test_custom_weights():
    weights = RiskWeights(high_alert=10, warning_sensor=5, high_prediction=1)
    result = assess_risk([make_alert()], [make_sensor(StatusTier.WARNING)], [make_prediction([ForecastRisk.HIGH])], weights)
    assert result.risk_score == 16
    assert result.risk_level is RiskLevel.LOW


def test_negative_weights_rejected():
    with pytest.raises(ValueError):
        RiskWeights(high_alert=-1)


# =============================================================================
# PLAIN DICT INPUTS AND INCOMPLETE ENTITIES
# =============================================================================

def test_accepts_plain_dicts():
    alerts = [{"id": "x", "severity": "critical", "status": "active"}]
    sensors = [{"id": "s", "readings": [{"status": "warning"}]}]
    predictions = [{"id": "p", "forecast": [{"risk_level": "high"}]}]
    assert assess_risk(alerts, sensors, predictions).risk_score == 60


@pytest.mark.parametrize(
    "alerts, sensors, predictions, entity, field",
    [
        ([{"id": "x", "status": "active"}], [], [], "alert", "severity"),
        ([{"id": "x", "severity": "high"}], [], [], "alert", "status"),
        ([], [{"id": "s", "readings": []}], [], "sensor", "readings"),
        ([], [{"id": "s"}], [], "sensor", "readings"),
        ([], [{"id": "s", "readings": [{"value": 1.0}]}], [], "sensor", "status"),
        ([], [], [{"id": "p"}], "prediction", "forecast"),
        ([], [], [{"id": "p", "forecast": [{"value": 1.0}]}], "prediction", "risk_level"),
    ],
)
def test_incomplete_entity_rejects_whole_call(alerts, sensors, predictions, entity, field):
    with pytest.raises(IncompleteEntity) as exc_info:
        assess_risk(alerts, sensors, predictions)
    assert exc_info.value.entity == entity
    assert exc_info.value.field == field
    assert exc_info.value.index == 0


def test_incomplete_entity_after_valid_ones_still_rejects():
    alerts = [make_alert(alert_id="ok"), {"id": "bad", "status": "active"}]
    with pytest.raises(IncompleteEntity) as exc_info:
        assess_risk(alerts, [], [])
    assert exc_info.value.index == 1
    assert exc_info.value.entity_id == "bad"
    assert "alert[1] (id=bad)" in str(exc_info.value)


def test_unrecognised_severity_is_rejected():
    with pytest.raises(IncompleteEntity):
        assess_risk([{"id": "x", "severity": "extreme", "status": "active"}], [], [])


def test_model_sensor_without_tier_is_rejected():
    sensor = make_sensor(StatusTier.WARNING)
    sensor.readings[-1] = sensor.readings[-1].model_copy(update={"status": None})
    with pytest.raises(IncompleteEntity):
        assess_risk([], [sensor], [])
