"""
Alert service.
Resolution lifecycle, filtered views, severity summaries and classification
of production anomalies into alerts.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

import structlog

from ..config import settings
from ..errors import AlreadyResolved, InvalidFilter
from ..models.enums import AlertFilter, AlertSeverity, AlertType, SystemStatus
from ..models.models import Alert, ProductionRecord, Project
from .clock import Clock, resolve_clock

logger = structlog.get_logger(__name__)


TYPE_LABELS = {
    AlertType.LOW_GENERATION: "Low generation",
    AlertType.HIGH_CONSUMPTION: "High consumption",
    AlertType.SYSTEM_FAILURE: "System failure",
    AlertType.MAINTENANCE: "Maintenance",
}

SEVERITY_LABELS = {
    AlertSeverity.HIGH: "High",
    AlertSeverity.MEDIUM: "Medium",
    AlertSeverity.LOW: "Low",
}

MISSING_PROJECT_TITLE = "Project not found"


@dataclass
class AlertSummary:
    high: int = 0
    medium: int = 0
    low: int = 0
    resolved: int = 0
    active: int = 0

    def to_dict(self) -> dict:
        return {
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "resolved": self.resolved,
            "active": self.active,
        }


@dataclass
class AlertDraft:
    type: AlertType
    severity: AlertSeverity
    message: str


def resolve(alert: Alert, *, clock: Optional[Clock] = None) -> Alert:
    """
    Mark an alert resolved and stamp resolved_at.

    Resolution is one-way. A second call is rejected so the original
    resolved_at is never overwritten.

    Raises:
        AlreadyResolved: If the alert is already resolved
    """
    if alert.resolved:
        raise AlreadyResolved(f"Alert {alert.id} is already resolved")
    alert.resolved = True
    alert.resolved_at = resolve_clock(clock).now()
    logger.info("alert_resolved", alert_id=alert.id, project_id=alert.project_id)
    return alert


def parse_filter(mode: Union[str, AlertFilter, None]) -> AlertFilter:
    if isinstance(mode, AlertFilter):
        return mode
    try:
        return AlertFilter(str(mode).strip().lower())
    except ValueError:
        valid = ", ".join(f.value for f in AlertFilter)
        raise InvalidFilter(f"Invalid filter '{mode}'. Must be one of: {valid}")


def filter_alerts(alerts: Iterable[Alert], mode: Union[str, AlertFilter] = AlertFilter.ACTIVE) -> List[Alert]:
    """
    Alerts matching mode (active / all / resolved), newest first.

    Ordering is by created_at only; there is no secondary key.
    """
    mode = parse_filter(mode)
    if mode == AlertFilter.ACTIVE:
        selected = [a for a in alerts if not a.resolved]
    elif mode == AlertFilter.RESOLVED:
        selected = [a for a in alerts if a.resolved]
    else:
        selected = list(alerts)
    return sorted(selected, key=lambda a: a.created_at, reverse=True)


def summarize(alerts: Iterable[Alert]) -> AlertSummary:
    """
    Severity counters over the whole alert set.

    Independent of any filter view; high/medium/low count active alerts only.
    """
    summary = AlertSummary()
    for alert in alerts:
        if alert.resolved:
            summary.resolved += 1
            continue
        summary.active += 1
        severity = AlertSeverity(alert.severity)
        if severity == AlertSeverity.HIGH:
            summary.high += 1
        elif severity == AlertSeverity.MEDIUM:
            summary.medium += 1
        else:
            summary.low += 1
    return summary


def alert_to_dict(alert: Alert) -> dict:
    return {
        "id": alert.id,
        "project_id": alert.project_id,
        "type": AlertType(alert.type).value,
        "type_label": TYPE_LABELS.get(AlertType(alert.type)),
        "severity": AlertSeverity(alert.severity).value,
        "severity_label": SEVERITY_LABELS.get(AlertSeverity(alert.severity)),
        "message": alert.message,
        "resolved": bool(alert.resolved),
        "created_at": alert.created_at.isoformat() if alert.created_at else None,
        "resolved_at": alert.resolved_at.isoformat() if alert.resolved_at else None,
    }


def describe_alerts(alerts: Iterable[Alert], projects: Iterable[Project]) -> List[dict]:
    """
    Serialize alerts with their project title and client name.

    An alert whose project no longer resolves gets a placeholder title
    instead of failing the whole list.
    """
    by_id: Dict[str, Project] = {p.id: p for p in projects}
    result = []
    for alert in alerts:
        data = alert_to_dict(alert)
        project = by_id.get(alert.project_id)
        if project is None:
            data["project_title"] = MISSING_PROJECT_TITLE
            data["client_name"] = ""
        else:
            data["project_title"] = project.title
            data["client_name"] = project.client_name or ""
        result.append(data)
    return result


def classify_record(
    record: ProductionRecord,
    *,
    power_kwp: Optional[float] = None,
    peak_sun_hours: Optional[float] = None,
    low_generation_ratio: Optional[float] = None,
    high_consumption_ratio: Optional[float] = None,
) -> Optional[AlertDraft]:
    """
    Classify one day of production into an alert draft, or None if normal.

    Rules, first match wins:
      - critical system status -> system_failure / high
      - generation under low_generation_ratio of expected (power_kwp x
        peak_sun_hours) -> low_generation; high below half that, else medium
      - consumption over high_consumption_ratio x generation ->
        high_consumption / medium
      - alert system status -> maintenance / low

    The low generation rule needs power_kwp; without it the rule is skipped.
    """
    if peak_sun_hours is None:
        peak_sun_hours = settings.peak_sun_hours
    if low_generation_ratio is None:
        low_generation_ratio = settings.low_generation_ratio
    if high_consumption_ratio is None:
        high_consumption_ratio = settings.high_consumption_ratio

    status = SystemStatus(record.system_status)
    generation = record.generation_kwh or 0.0
    consumption = record.consumption_kwh or 0.0
    day = record.date.isoformat() if record.date else "unknown date"

    if status == SystemStatus.CRITICAL:
        return AlertDraft(
            AlertType.SYSTEM_FAILURE,
            AlertSeverity.HIGH,
            f"System reported a critical status on {day}",
        )

    if power_kwp:
        expected = power_kwp * peak_sun_hours
        threshold = expected * low_generation_ratio
        if generation < threshold:
            severity = AlertSeverity.HIGH if generation < threshold / 2 else AlertSeverity.MEDIUM
            return AlertDraft(
                AlertType.LOW_GENERATION,
                severity,
                f"Generation of {generation:.1f} kWh on {day} is below the expected {expected:.1f} kWh",
            )

    if consumption > generation * high_consumption_ratio:
        return AlertDraft(
            AlertType.HIGH_CONSUMPTION,
            AlertSeverity.MEDIUM,
            f"Consumption of {consumption:.1f} kWh on {day} exceeds generation of {generation:.1f} kWh",
        )

    if status == SystemStatus.ALERT:
        return AlertDraft(
            AlertType.MAINTENANCE,
            AlertSeverity.LOW,
            f"System flagged for maintenance on {day}",
        )
    return None


def raise_alerts(
    records: Iterable[ProductionRecord],
    projects: Iterable[Project],
    *,
    clock: Optional[Clock] = None,
) -> List[Alert]:
    """
    Build unresolved Alert rows for every anomalous record tied to a project.

    Records without a project, or whose project no longer resolves, are
    skipped. Nothing is persisted; the caller adds and commits the alerts.
    """
    by_id: Dict[str, Project] = {p.id: p for p in projects}
    now = resolve_clock(clock).now()
    created = []
    for record in records:
        project = by_id.get(record.project_id) if record.project_id else None
        if project is None:
            continue
        draft = classify_record(record, power_kwp=project.power_kwp)
        if draft is None:
            continue
        alert = Alert(
            project_id=project.id,
            type=draft.type,
            severity=draft.severity,
            message=draft.message,
            resolved=False,
            created_at=now,
        )
        created.append(alert)
        logger.info(
            "alert_raised",
            project_id=project.id,
            type=draft.type.value,
            severity=draft.severity.value,
            record_date=record.date.isoformat() if record.date else None,
        )
    return created
