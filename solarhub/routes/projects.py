from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional

from ..config import settings
from ..db import get_db
from ..errors import MissingReference
from ..models.models import Project
from ..schemas.projects import ProjectCreate, ProjectResponse, ProjectUpdate
from ..services import pipeline as pipeline_service
from ..services.clock import Clock, get_clock
from ..services.store import RecordStore


router = APIRouter(prefix="/projects", tags=["projects"])


def _require_client(store: RecordStore, client_id: str):
    client = store.get_client(client_id)
    if not client:
        raise MissingReference(f"Client {client_id} not found")
    return client


@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(payload: ProjectCreate, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    store = RecordStore(db)
    client = _require_client(store, payload.client_id)
    now = clock.now()
    project = Project(
        **payload.model_dump(),
        client_name=client.name,
        company_id=settings.company_id,
        created_at=now,
        updated_at=now,
    )
    store.upsert(project)
    store.commit()
    return project


@router.get("", response_model=List[ProjectResponse])
def list_projects(client_id: Optional[str] = None, status: Optional[str] = None, db: Session = Depends(get_db)):
    projects = RecordStore(db).list_projects(company_id=settings.company_id, client_id=client_id)
    if status:
        wanted = pipeline_service.parse_status(status)
        projects = [p for p in projects if p.status == wanted]
    return projects


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, db: Session = Depends(get_db)):
    project = RecordStore(db).get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(project_id: str, payload: ProjectUpdate, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    store = RecordStore(db)
    project = store.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    client = _require_client(store, payload.client_id)

    data = payload.model_dump()
    new_status = data.pop("status")
    # Status goes through the pipeline so the transition policy applies to edits too
    pipeline_service.request_transition(project, new_status, clock=clock)
    for key, value in data.items():
        setattr(project, key, value)
    project.client_name = client.name
    project.updated_at = clock.now()
    store.commit()
    return project
