from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional

from ..db import get_db
from ..models.models import Alert
from ..schemas.alerts import AlertCreate, AlertResponse
from ..services import alerts as alert_service
from ..services import metrics as metrics_service
from ..services.clock import Clock, get_clock
from ..services.store import RecordStore


router = APIRouter(prefix="/alerts", tags=["alerts"])


def _describe(store: RecordStore, alerts: List[Alert]) -> List[AlertResponse]:
    rows = alert_service.describe_alerts(alerts, store.list_projects())
    return [AlertResponse.model_validate(row) for row in rows]


@router.post("", response_model=AlertResponse, status_code=201)
def create_alert(payload: AlertCreate, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    store = RecordStore(db)
    alert = Alert(**payload.model_dump(), resolved=False, created_at=clock.now())
    store.upsert(alert)
    store.commit()
    return _describe(store, [alert])[0]


@router.get("", response_model=List[AlertResponse])
def list_alerts(filter: str = "active", project_id: Optional[str] = None, db: Session = Depends(get_db)):
    store = RecordStore(db)
    alerts = store.list_alerts(project_ids=[project_id] if project_id else None)
    return _describe(store, alert_service.filter_alerts(alerts, filter))


@router.get("/summary")
def alert_summary(project_id: Optional[str] = None, db: Session = Depends(get_db)):
    # Always over the unfiltered set, whatever filter the list view uses
    alerts = RecordStore(db).list_alerts(project_ids=[project_id] if project_id else None)
    return alert_service.summarize(alerts).to_dict()


@router.post("/{alert_id}/resolve", response_model=AlertResponse)
def resolve_alert(alert_id: str, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    store = RecordStore(db)
    alert = store.get_alert(alert_id)
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    alert_service.resolve(alert, clock=clock)
    store.commit()
    return _describe(store, [alert])[0]


@router.post("/scan", response_model=List[AlertResponse])
def scan_production(window_days: int = 7, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    """
    Classify windowed production records and create alerts for anomalies.
    An anomaly already reported by any alert with the same message is skipped,
    resolved ones included, so a resolved anomaly stays resolved.
    """
    store = RecordStore(db)
    window_days = metrics_service.validate_window(window_days)
    records = metrics_service.filter_window(store.list_production_records(), window_days, now=clock.now())
    existing = {(a.project_id, a.message) for a in store.list_alerts()}

    created = []
    for alert in alert_service.raise_alerts(records, store.list_projects(), clock=clock):
        if (alert.project_id, alert.message) in existing:
            continue
        existing.add((alert.project_id, alert.message))
        created.append(store.upsert(alert))
    store.commit()
    return _describe(store, created)
