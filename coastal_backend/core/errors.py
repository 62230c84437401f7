from __future__ import annotations

from typing import Any, Optional


class RiskEngineError(Exception):
    """Base class for classification / aggregation failures."""


class InvalidParameterKind(RiskEngineError, ValueError):
    def __init__(self, parameter_kind: Any) -> None:
        self.parameter_kind = parameter_kind
        super().__init__(f"No thresholds for parameter kind {parameter_kind!r}")


class MalformedThresholdTable(RiskEngineError, ValueError):
    pass


class IncompleteEntity(RiskEngineError):
    """
    An alert / sensor / prediction is present in the snapshot but lacks a
    field the aggregator needs. The whole assessment is rejected.
    """

    def __init__(
        self,
        entity: str,
        index: int,
        field: str,
        entity_id: Optional[str] = None,
        reason: str = "is missing required field",
    ) -> None:
        self.entity = entity
        self.index = index
        self.field = field
        self.entity_id = entity_id
        label = f"{entity}[{index}]"
        if entity_id:
            label += f" (id={entity_id})"
        super().__init__(f"{label} {reason} '{field}'")


class AlertTransitionError(Exception):
    def __init__(self, alert_id: str, current: str, requested: str) -> None:
        self.alert_id = alert_id
        self.current = current
        self.requested = requested
        super().__init__(f"Alert {alert_id} cannot move from {current} to {requested}")


class FeedError(Exception):
    """Upstream marine data API returned nothing usable."""


class IncidentTransitionError(Exception):
    def __init__(self, report_id: str, current: str, requested: str) -> None:
        self.report_id = report_id
        self.current = current
        self.requested = requested
        super().__init__(f"Incident report {report_id} cannot move from {current} to {requested}")


class ReportLockedError(Exception):
    """Only pending incident reports may be edited."""

    def __init__(self, report_id: str, status: str) -> None:
        self.report_id = report_id
        self.status = status
        super().__init__(f"Incident report {report_id} is {status}; only pending reports can be edited")
