from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from ..config import settings
from ..db import get_db
from ..errors import MissingReference
from ..models.models import ProductionRecord
from ..schemas.alerts import AlertResponse
from ..schemas.production import ProductionRecordCreate, ProductionRecordResponse
from ..services import alerts as alert_service
from ..services import metrics as metrics_service
from ..services.clock import Clock, get_clock
from ..services.store import RecordStore


router = APIRouter(prefix="/production", tags=["production"])


def scoped_records(store: RecordStore, client_id: Optional[str] = None, project_id: Optional[str] = None):
    """Production records for one project, one client's projects, or everything."""
    if project_id:
        if not store.get_project(project_id):
            raise MissingReference(f"Project {project_id} not found")
        return store.list_production_records(project_ids=[project_id])
    if client_id:
        if not store.get_client(client_id):
            raise MissingReference(f"Client {client_id} not found")
        project_ids = [p.id for p in store.list_projects(client_id=client_id)]
        return store.list_production_records(project_ids=project_ids)
    return store.list_production_records()


@router.post("", status_code=201)
def create_record(
    payload: ProductionRecordCreate,
    classify: bool = True,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    store = RecordStore(db)
    record = ProductionRecord(**payload.model_dump(), created_at=clock.now())
    store.upsert(record)

    raised = []
    if classify and record.project_id:
        project = store.get_project(record.project_id)
        if project is not None:
            raised = alert_service.raise_alerts([record], [project], clock=clock)
            for alert in raised:
                store.upsert(alert)
    store.commit()
    return {
        "record": ProductionRecordResponse.model_validate(record).model_dump(mode="json"),
        "alerts": [AlertResponse.model_validate(alert_service.alert_to_dict(a)).model_dump(mode="json") for a in raised],
    }


@router.get("", response_model=List[ProductionRecordResponse])
def list_records(
    window_days: Optional[int] = None,
    client_id: Optional[str] = None,
    project_id: Optional[str] = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    records = scoped_records(RecordStore(db), client_id=client_id, project_id=project_id)
    if window_days is not None:
        window_days = metrics_service.validate_window(window_days)
        records = metrics_service.filter_window(records, window_days, now=clock.now())
    return metrics_service.sort_recent_first(records)


@router.get("/summary")
def production_summary(
    window_days: Optional[int] = None,
    client_id: Optional[str] = None,
    project_id: Optional[str] = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    records = scoped_records(RecordStore(db), client_id=client_id, project_id=project_id)
    summary = metrics_service.aggregate(
        records,
        window_days if window_days is not None else settings.default_window_days,
        clock=clock,
    )
    return summary.to_dict()
