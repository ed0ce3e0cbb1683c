"""
Shared pytest fixtures for the SolarHub test suite.

Provides:
    - engine / db_session: in-memory SQLite, tables recreated per test
    - clock: FixedClock pinned to NOW
    - make_client / make_project / make_record / make_alert: record factories
    - api: FastAPI TestClient with get_db and get_clock overridden
"""

import os

# Must be set before solarhub.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_DB", "false")
os.environ.setdefault("RATE_LIMIT", "100000/minute")

from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from solarhub.db import Base, get_db
from solarhub.models.enums import AlertSeverity, AlertType, ProjectStatus, SystemStatus
from solarhub.models.models import Alert, Client, ProductionRecord, Project
from solarhub.services.clock import FixedClock, get_clock


NOW = datetime(2024, 6, 15, 14, 30, 0)
TODAY = NOW.date()


def days_ago(n: int) -> date:
    return TODAY - timedelta(days=n)


# ── DB fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = Session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


# ── Record factories (unsaved unless a session is passed) ────────────────


@pytest.fixture
def make_client(db_session):
    def _make(name="Maria Silva", save=True, **kwargs):
        client = Client(name=name, company_id="company-1", created_at=NOW, **kwargs)
        if save:
            db_session.add(client)
            db_session.commit()
        return client
    return _make


@pytest.fixture
def make_project(db_session):
    def _make(client=None, title="Residential 5 kWp", status=ProjectStatus.LEAD, save=True, **kwargs):
        fields = dict(
            power_kwp=5.0,
            project_value=25000.0,
            panel_count=12,
            created_at=NOW,
            updated_at=NOW,
        )
        fields.update(kwargs)
        project = Project(
            client_id=client.id if client else "missing-client",
            client_name=client.name if client else "",
            company_id="company-1",
            title=title,
            status=status,
            **fields,
        )
        if save:
            db_session.add(project)
            db_session.commit()
        return project
    return _make


@pytest.fixture
def make_record(db_session):
    def _make(day, generation=10.0, consumption=8.0, savings=7.5, status=SystemStatus.NORMAL, project=None, save=False):
        record = ProductionRecord(
            project_id=project.id if project else None,
            date=day,
            generation_kwh=generation,
            consumption_kwh=consumption,
            savings=savings,
            system_status=status,
            created_at=NOW,
        )
        if save:
            db_session.add(record)
            db_session.commit()
        return record
    return _make


@pytest.fixture
def make_alert(db_session):
    def _make(
        project_id="project-1",
        created_at=NOW,
        severity=AlertSeverity.MEDIUM,
        type=AlertType.LOW_GENERATION,
        resolved=False,
        resolved_at=None,
        message="Generation below expected",
        save=False,
    ):
        alert = Alert(
            project_id=project_id,
            type=type,
            severity=severity,
            message=message,
            resolved=resolved,
            resolved_at=resolved_at,
            created_at=created_at,
        )
        if save:
            db_session.add(alert)
            db_session.commit()
        return alert
    return _make


# ── API fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def api(engine, clock):
    from solarhub.main import app

    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    def _get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
