import datetime as dt
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Date,
    Boolean,
    Integer,
    Float,
    Enum,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from ..db import Base
from ..services.clock import utcnow
from ..services.ids import new_id
from .enums import AlertSeverity, AlertType, InverterModel, ProjectStatus, SystemStatus


def string_pk() -> Mapped[str]:
    return mapped_column(String(36), primary_key=True, default=new_id)


def enum_column(enum_cls, **kwargs):
    # Store the enum value ("lead"), not the member name ("LEAD")
    return Enum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
        **kwargs,
    )


class Client(Base):
    __tablename__ = "clients"

    id: Mapped[str] = string_pk()
    company_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    tax_id: Mapped[Optional[str]] = mapped_column(String(50))  # CPF/CNPJ
    address: Mapped[Optional[str]] = mapped_column(String(500))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    state: Mapped[Optional[str]] = mapped_column(String(100))
    postal_code: Mapped[Optional[str]] = mapped_column(String(20))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = string_pk()
    company_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    # Lookup key only; deleting a client never cascades here
    client_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    # Snapshot of Client.name at create/edit time; may drift from the client record
    client_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[ProjectStatus] = mapped_column(
        enum_column(ProjectStatus), nullable=False, default=ProjectStatus.LEAD, index=True
    )
    power_kwp: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    project_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    panel_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    inverter_model: Mapped[InverterModel] = mapped_column(
        enum_column(InverterModel), nullable=False, default=InverterModel.GROWATT
    )
    address: Mapped[Optional[str]] = mapped_column(String(500))
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    completion_date: Mapped[Optional[date]] = mapped_column(Date)
    notes: Mapped[Optional[str]] = mapped_column(String(2000))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=utcnow)


class ProductionRecord(Base):
    """One calendar day of generation/consumption for a site. Append-only."""

    __tablename__ = "production_records"
    # No unique constraint on (project_id, date): duplicates are tolerated and summed
    __table_args__ = (Index("ix_production_project_date", "project_id", "date"),)

    id: Mapped[str] = string_pk()
    project_id: Mapped[Optional[str]] = mapped_column(String(36))
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    generation_kwh: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    consumption_kwh: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    savings: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # stored as reported
    system_status: Mapped[SystemStatus] = mapped_column(
        enum_column(SystemStatus), nullable=False, default=SystemStatus.NORMAL
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class Alert(Base):
    __tablename__ = "alerts"

    id: Mapped[str] = string_pk()
    project_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    type: Mapped[AlertType] = mapped_column(enum_column(AlertType), nullable=False)
    severity: Mapped[AlertSeverity] = mapped_column(enum_column(AlertSeverity), nullable=False, index=True)
    message: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    # Set exactly when resolved flips to True
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
