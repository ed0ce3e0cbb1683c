from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from ..config import settings
from ..db import get_db
from ..services import dashboard as dashboard_service
from ..services.clock import Clock, get_clock
from ..services.store import RecordStore
from .production import scoped_records


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/company")
def company_dashboard(db: Session = Depends(get_db)):
    store = RecordStore(db)
    overview = dashboard_service.company_overview(
        store.list_clients(company_id=settings.company_id),
        store.list_projects(company_id=settings.company_id),
        store.list_alerts(),
    )
    return overview.to_dict()


@router.get("/client")
def client_dashboard(
    client_id: Optional[str] = None,
    window_days: Optional[int] = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    store = RecordStore(db)
    records = scoped_records(store, client_id=client_id)
    if client_id:
        project_ids = [p.id for p in store.list_projects(client_id=client_id)]
        alerts = store.list_alerts(project_ids=project_ids)
    else:
        alerts = store.list_alerts()
    return dashboard_service.client_dashboard(
        records,
        alerts,
        window_days if window_days is not None else settings.default_window_days,
        clock=clock,
    )
