import datetime as dt
from typing import Optional
from pydantic import BaseModel, Field

from ..models.enums import SystemStatus


class ProductionRecordCreate(BaseModel):
    project_id: Optional[str] = None
    date: dt.date
    generation_kwh: float = Field(ge=0)
    consumption_kwh: float = Field(ge=0)
    savings: float = 0.0
    system_status: SystemStatus = SystemStatus.NORMAL


class ProductionRecordResponse(ProductionRecordCreate):
    id: str

    class Config:
        from_attributes = True
