"""
In-process store for citizen incident reports.

Reports arrive PENDING, get VERIFIED by an authority and end RESOLVED.
A pending report may be resolved directly (false alarm, duplicate).
RESOLVED is terminal, and only PENDING reports accept edits.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from coastal_backend.core.errors import IncidentTransitionError, ReportLockedError
from coastal_backend.schemas.enums import AlertSeverity, IncidentStatus
from coastal_backend.schemas.incident_report import IncidentReport, IncidentReportCreate, IncidentReportUpdate
from coastal_backend.store.paging import matches_location

_ALLOWED_TRANSITIONS = {
    IncidentStatus.PENDING: {IncidentStatus.VERIFIED, IncidentStatus.RESOLVED},
    IncidentStatus.VERIFIED: {IncidentStatus.RESOLVED},
    IncidentStatus.RESOLVED: set(),
}


class IncidentStore:
    def __init__(self) -> None:
        self._reports: dict[str, IncidentReport] = {}
        self._lock = threading.Lock()

    def create(self, payload: IncidentReportCreate) -> IncidentReport:
        report = IncidentReport(
            **payload.model_dump(),
            id=str(uuid.uuid4()),
            status=IncidentStatus.PENDING,
            reported_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._reports[report.id] = report
        return report

    def get(self, report_id: str) -> Optional[IncidentReport]:
        with self._lock:
            return self._reports.get(report_id)

    def list(
        self,
        incident_type: Optional[str] = None,
        severity: Optional[AlertSeverity] = None,
        status: Optional[IncidentStatus] = None,
        location: Optional[str] = None,
    ) -> list[IncidentReport]:
        """Newest first. `location` is a case-insensitive substring match."""
        with self._lock:
            reports = list(self._reports.values())
        if incident_type:
            reports = [r for r in reports if r.incident_type == incident_type]
        if severity is not None:
            reports = [r for r in reports if r.severity is severity]
        if status is not None:
            reports = [r for r in reports if r.status is status]
        if location:
            reports = [r for r in reports if matches_location(r.location, location)]
        return sorted(reports, key=lambda r: r.reported_at, reverse=True)

    def update(self, report_id: str, changes: IncidentReportUpdate) -> Optional[IncidentReport]:
        """Returns None for an unknown id; raises ReportLockedError once the report left PENDING."""
        with self._lock:
            current = self._reports.get(report_id)
            if current is None:
                return None
            if current.status is not IncidentStatus.PENDING:
                raise ReportLockedError(report_id, current.status.value)
            fields = changes.model_dump(exclude_unset=True, exclude_none=True)
            updated = IncidentReport.model_validate(
                {**current.model_dump(), **fields, "updated_at": datetime.now(timezone.utc)}
            )
            self._reports[report_id] = updated
            return updated

    def verify(self, report_id: str, verified_by: Optional[str] = None) -> Optional[IncidentReport]:
        now = datetime.now(timezone.utc)
        return self._transition(report_id, IncidentStatus.VERIFIED, now, {"verified_by": verified_by, "verified_at": now})

    def resolve(
        self,
        report_id: str,
        resolved_by: Optional[str] = None,
        resolution_notes: Optional[str] = None,
    ) -> Optional[IncidentReport]:
        now = datetime.now(timezone.utc)
        extra: dict[str, Any] = {"resolved_by": resolved_by, "resolved_at": now}
        if resolution_notes:
            extra["additional_notes"] = resolution_notes
        return self._transition(report_id, IncidentStatus.RESOLVED, now, extra)

    def _transition(
        self, report_id: str, status: IncidentStatus, now: datetime, extra: dict[str, Any]
    ) -> Optional[IncidentReport]:
        with self._lock:
            current = self._reports.get(report_id)
            if current is None:
                return None
            if status is current.status:
                return current
            if status not in _ALLOWED_TRANSITIONS[current.status]:
                raise IncidentTransitionError(report_id, current.status.value, status.value)
            updated = current.model_copy(update={**extra, "status": status, "updated_at": now})
            self._reports[report_id] = updated
            return updated

    def clear(self) -> None:
        with self._lock:
            self._reports.clear()
