from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..schemas.projects import PipelineBoard, PipelineColumn, ProjectResponse, TransitionRequest, TransitionResponse
from ..services import pipeline as pipeline_service
from ..services.clock import Clock, get_clock
from ..services.store import RecordStore


router = APIRouter(prefix="/pipeline", tags=["pipeline"])


@router.get("", response_model=PipelineBoard)
def get_board(db: Session = Depends(get_db)):
    projects = RecordStore(db).list_projects(company_id=settings.company_id)
    board = pipeline_service.group_by_status(projects)
    columns = [
        PipelineColumn(
            status=status,
            label=pipeline_service.STATUS_LABELS[status],
            count=len(items),
            projects=[ProjectResponse.model_validate(p) for p in items],
        )
        for status, items in board.items()
    ]
    return PipelineBoard(columns=columns, counts={c.status.value: c.count for c in columns})


@router.post("/{project_id}/transition", response_model=TransitionResponse)
def transition_project(
    project_id: str,
    payload: TransitionRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    store = RecordStore(db)
    project = store.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    changed = pipeline_service.request_transition(project, payload.status, clock=clock)
    if changed:
        store.commit()
    return TransitionResponse(project=ProjectResponse.model_validate(project), changed=changed)
