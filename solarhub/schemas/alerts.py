from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from ..models.enums import AlertSeverity, AlertType


class AlertCreate(BaseModel):
    project_id: str
    type: AlertType
    severity: AlertSeverity
    message: str


class AlertResponse(AlertCreate):
    id: str
    resolved: bool
    created_at: datetime
    resolved_at: Optional[datetime] = None
    type_label: Optional[str] = None
    severity_label: Optional[str] = None
    project_title: Optional[str] = None
    client_name: Optional[str] = None

    class Config:
        from_attributes = True
