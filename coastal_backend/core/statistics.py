from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from coastal_backend.schemas.coastal import Alert, AlertStatistics, Sensor, SensorStatistics
from coastal_backend.schemas.enums import AlertStatus

# A sensor that has not reported within this window counts as inactive.
ACTIVE_WINDOW = timedelta(minutes=5)


def _as_utc(ts: datetime) -> datetime:
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def sensor_statistics(sensors: Sequence[Sensor], now: Optional[datetime] = None) -> SensorStatistics:
    now = now or datetime.now(timezone.utc)
    active = sum(1 for s in sensors if _as_utc(s.last_updated) > now - ACTIVE_WINDOW)

    by_status: Counter[str] = Counter()
    for sensor in sensors:
        latest = sensor.latest_reading
        if latest is not None and latest.status is not None:
            by_status[latest.status.value] += 1

    return SensorStatistics(
        total=len(sensors),
        active=active,
        inactive=len(sensors) - active,
        by_type=dict(Counter(s.type.value for s in sensors)),
        by_status=dict(by_status),
    )


def alert_statistics(alerts: Sequence[Alert]) -> AlertStatistics:
    return AlertStatistics(
        total=len(alerts),
        active=sum(1 for a in alerts if a.status is AlertStatus.ACTIVE),
        resolved=sum(1 for a in alerts if a.status is AlertStatus.RESOLVED),
        by_severity=dict(Counter(a.severity.value for a in alerts)),
        by_type=dict(Counter(a.type.value for a in alerts)),
    )
