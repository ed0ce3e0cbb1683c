from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from ..models.enums import InverterModel, ProjectStatus


class ProjectBase(BaseModel):
    client_id: str
    title: str
    status: ProjectStatus = ProjectStatus.LEAD
    power_kwp: float = Field(ge=0)
    project_value: float = Field(ge=0)
    panel_count: int = Field(ge=0)
    inverter_model: InverterModel = InverterModel.GROWATT
    address: Optional[str] = None
    start_date: Optional[date] = None
    completion_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator('address', 'notes', 'start_date', 'completion_date', mode='before')
    @classmethod
    def empty_to_none(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(ProjectBase):
    pass


class ProjectResponse(ProjectBase):
    id: str
    client_name: str
    company_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TransitionRequest(BaseModel):
    # Plain string so out-of-enum values reach the pipeline service and raise InvalidStatus
    status: str


class TransitionResponse(BaseModel):
    project: ProjectResponse
    changed: bool


class PipelineColumn(BaseModel):
    status: ProjectStatus
    label: str
    count: int
    projects: List[ProjectResponse]


class PipelineBoard(BaseModel):
    columns: List[PipelineColumn]
    counts: Dict[str, int]
