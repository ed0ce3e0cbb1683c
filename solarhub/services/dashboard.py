"""
Dashboard views.
Combine pipeline, metrics and alert services into the company overview and
the client production dashboard.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..models.enums import AlertFilter
from ..models.models import Alert, Client, ProductionRecord, Project
from . import alerts as alert_service
from . import metrics as metrics_service
from . import pipeline as pipeline_service
from .clock import Clock

ACTIVE_ALERTS_SHOWN = 3
HISTORY_DAYS_SHOWN = 10


@dataclass
class CompanyOverview:
    total_projects: int = 0
    active_projects: int = 0
    active_clients: int = 0
    active_alerts: int = 0
    pipeline: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_projects": self.total_projects,
            "active_projects": self.active_projects,
            "active_clients": self.active_clients,
            "active_alerts": self.active_alerts,
            "pipeline": dict(self.pipeline),
        }


def company_overview(
    clients: Iterable[Client],
    projects: Iterable[Project],
    alerts: Iterable[Alert],
) -> CompanyOverview:
    """
    Counters for the company overview tab.

    A project is active while it is neither completed nor cancelled. A client
    is active when at least one active project references it and the client
    still exists.
    """
    projects = list(projects)
    client_ids = {c.id for c in clients}
    active = [p for p in projects if not pipeline_service.is_terminal(p.status)]
    return CompanyOverview(
        total_projects=len(projects),
        active_projects=len(active),
        active_clients=len({p.client_id for p in active if p.client_id in client_ids}),
        active_alerts=alert_service.summarize(alerts).active,
        pipeline=pipeline_service.stage_counts(projects),
    )


def client_dashboard(
    records: Iterable[ProductionRecord],
    alerts: Iterable[Alert],
    window_days: int,
    *,
    clock: Optional[Clock] = None,
    unit_price: Optional[float] = None,
) -> dict:
    """
    Production summary for one client, their newest active alerts and
    the most recent daily history.
    """
    summary = metrics_service.aggregate(records, window_days, clock=clock, unit_price=unit_price)
    active: List[Alert] = alert_service.filter_alerts(alerts, AlertFilter.ACTIVE)
    return {
        "summary": summary.to_dict(),
        "active_alerts": [alert_service.alert_to_dict(a) for a in active[:ACTIVE_ALERTS_SHOWN]],
        "history": [metrics_service.record_to_dict(r) for r in summary.records[:HISTORY_DAYS_SHOWN]],
    }
