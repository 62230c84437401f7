"""
In-process alert store.

Alerts are created ACTIVE and may move to INVESTIGATING or RESOLVED.
RESOLVED is terminal. Access is guarded by a lock since FastAPI serves
sync work from a thread pool.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Optional

from coastal_backend.core.errors import AlertTransitionError
from coastal_backend.schemas.coastal import Alert, AlertCreate, AlertUpdate
from coastal_backend.schemas.enums import AlertSeverity, AlertStatus
from coastal_backend.store.paging import matches_location

_ALLOWED_TRANSITIONS = {
    AlertStatus.ACTIVE: {AlertStatus.INVESTIGATING, AlertStatus.RESOLVED},
    AlertStatus.INVESTIGATING: {AlertStatus.ACTIVE, AlertStatus.RESOLVED},
    AlertStatus.RESOLVED: set(),
}


class AlertStore:
    def __init__(self) -> None:
        self._alerts: dict[str, Alert] = {}
        self._lock = threading.Lock()

    def create(self, payload: AlertCreate) -> Alert:
        alert = Alert(
            **payload.model_dump(),
            id=str(uuid.uuid4()),
            status=AlertStatus.ACTIVE,
            timestamp=datetime.now(timezone.utc),
        )
        with self._lock:
            self._alerts[alert.id] = alert
        return alert

    def get(self, alert_id: str) -> Optional[Alert]:
        with self._lock:
            return self._alerts.get(alert_id)

    def list(
        self,
        status: Optional[AlertStatus] = None,
        severity: Optional[AlertSeverity] = None,
        location: Optional[str] = None,
    ) -> list[Alert]:
        """Newest first. `location` matches a substring of the location name."""
        with self._lock:
            alerts = list(self._alerts.values())
        if status is not None:
            alerts = [a for a in alerts if a.status is status]
        if severity is not None:
            alerts = [a for a in alerts if a.severity is severity]
        if location:
            alerts = [a for a in alerts if matches_location(a.location.name, location)]
        return sorted(alerts, key=lambda a: a.timestamp, reverse=True)

    def update(self, alert_id: str, changes: AlertUpdate) -> Optional[Alert]:
        """Edits descriptive fields. Status only moves through update_status."""
        with self._lock:
            current = self._alerts.get(alert_id)
            if current is None:
                return None
            fields = changes.model_dump(exclude_unset=True, exclude_none=True)
            updated = Alert.model_validate(
                {**current.model_dump(), **fields, "updated_at": datetime.now(timezone.utc)}
            )
            self._alerts[alert_id] = updated
            return updated

    def update_status(self, alert_id: str, status: AlertStatus) -> Optional[Alert]:
        """Returns None for an unknown id; raises AlertTransitionError for an illegal move."""
        with self._lock:
            current = self._alerts.get(alert_id)
            if current is None:
                return None
            if status is current.status:
                return current
            if status not in _ALLOWED_TRANSITIONS[current.status]:
                raise AlertTransitionError(alert_id, current.status.value, status.value)
            updated = current.model_copy(update={"status": status, "updated_at": datetime.now(timezone.utc)})
            self._alerts[alert_id] = updated
            return updated

    def clear(self) -> None:
        with self._lock:
            self._alerts.clear()
