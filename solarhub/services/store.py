"""
Record store over a SQLAlchemy session.
Flat CRUD accessors for the four top-level record types.
"""
from typing import List, Optional, TypeVar

from sqlalchemy.orm import Session

from ..models.models import Alert, Client, ProductionRecord, Project

RecordT = TypeVar("RecordT", Client, Project, ProductionRecord, Alert)


class RecordStore:
    def __init__(self, db: Session):
        self.db = db

    # Listing keeps storage (insertion) order; callers sort when they need to
    def list_clients(self, company_id: Optional[str] = None) -> List[Client]:
        query = self.db.query(Client)
        if company_id:
            query = query.filter(Client.company_id == company_id)
        return query.order_by(Client.created_at.asc()).all()

    def list_projects(self, company_id: Optional[str] = None, client_id: Optional[str] = None) -> List[Project]:
        query = self.db.query(Project)
        if company_id:
            query = query.filter(Project.company_id == company_id)
        if client_id:
            query = query.filter(Project.client_id == client_id)
        return query.order_by(Project.created_at.asc()).all()

    def list_production_records(self, project_ids: Optional[List[str]] = None) -> List[ProductionRecord]:
        query = self.db.query(ProductionRecord)
        if project_ids is not None:
            query = query.filter(ProductionRecord.project_id.in_(project_ids))
        return query.order_by(ProductionRecord.created_at.asc()).all()

    def list_alerts(self, project_ids: Optional[List[str]] = None) -> List[Alert]:
        query = self.db.query(Alert)
        if project_ids is not None:
            query = query.filter(Alert.project_id.in_(project_ids))
        return query.order_by(Alert.created_at.asc()).all()

    def get_client(self, client_id: str) -> Optional[Client]:
        return self.db.get(Client, client_id)

    def get_project(self, project_id: str) -> Optional[Project]:
        return self.db.get(Project, project_id)

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        return self.db.get(Alert, alert_id)

    def upsert(self, record: RecordT) -> RecordT:
        """Insert a new record or merge changes to an existing one; flushes, does not commit."""
        if record.id is not None and self.db.get(type(record), record.id) is not None:
            record = self.db.merge(record)
        else:
            self.db.add(record)
        self.db.flush()
        return record

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
