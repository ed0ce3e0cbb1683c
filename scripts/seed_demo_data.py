"""
Seed the local database with demo clients, pipeline projects, daily
production readings and the alerts those readings trigger.

Usage:
  python scripts/seed_demo_data.py [--days 90] [--seed 42]

Clients are upserted by email, projects by title; production records are
append-only, so each run adds another batch of readings.
"""

import argparse
import os
import random
import sys
from datetime import timedelta

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables first
try:
    from dotenv import load_dotenv
    load_dotenv()
except Exception as e:
    print(f"WARNING: Could not load .env file: {e}")

from solarhub.config import settings
from solarhub.db import Base, SessionLocal, engine
from solarhub.models.enums import InverterModel, ProjectStatus, SystemStatus
from solarhub.models.models import Client, ProductionRecord, Project
from solarhub.services import alerts as alert_service
from solarhub.services.clock import system_clock
from solarhub.services.store import RecordStore


DEMO_CLIENTS = [
    {"name": "Maria Silva", "email": "maria.silva@example.com", "phone": "(11) 98765-4321", "city": "Sao Paulo", "state": "SP"},
    {"name": "Joao Santos", "email": "joao.santos@example.com", "phone": "(21) 97654-3210", "city": "Rio de Janeiro", "state": "RJ"},
    {"name": "Padaria Sol Nascente", "email": "contato@solnascente.example.com", "phone": "(31) 3333-4444", "city": "Belo Horizonte", "state": "MG"},
]

DEMO_PROJECTS = [
    {"client": 0, "title": "Residential 5 kWp", "status": ProjectStatus.COMPLETED, "power_kwp": 5.4, "project_value": 24000, "panel_count": 12, "inverter_model": InverterModel.GROWATT},
    {"client": 1, "title": "Residential 8 kWp", "status": ProjectStatus.INSTALLATION, "power_kwp": 8.1, "project_value": 36500, "panel_count": 18, "inverter_model": InverterModel.FRONIUS},
    {"client": 2, "title": "Bakery rooftop 30 kWp", "status": ProjectStatus.NEGOTIATION, "power_kwp": 30.0, "project_value": 120000, "panel_count": 66, "inverter_model": InverterModel.HUAWEI},
    {"client": 0, "title": "Beach house 3 kWp", "status": ProjectStatus.LEAD, "power_kwp": 3.2, "project_value": 15500, "panel_count": 7, "inverter_model": InverterModel.SOLIS},
]


def ensure_client(store: RecordStore, data: dict) -> Client:
    for client in store.list_clients(company_id=settings.company_id):
        if client.email == data["email"]:
            return client
    return store.upsert(Client(company_id=settings.company_id, **data))


def ensure_project(store: RecordStore, client: Client, data: dict) -> Project:
    for project in store.list_projects(company_id=settings.company_id):
        if project.title == data["title"]:
            return project
    fields = {k: v for k, v in data.items() if k != "client"}
    return store.upsert(
        Project(company_id=settings.company_id, client_id=client.id, client_name=client.name, **fields)
    )


def daily_reading(project: Project, day, rng: random.Random) -> ProductionRecord:
    expected = project.power_kwp * settings.peak_sun_hours
    roll = rng.random()
    if roll < 0.03:
        status = SystemStatus.CRITICAL
        generation = expected * rng.uniform(0.0, 0.2)
    elif roll < 0.10:
        status = SystemStatus.ALERT
        generation = expected * rng.uniform(0.4, 0.8)
    else:
        status = SystemStatus.NORMAL
        generation = expected * rng.uniform(0.75, 1.1)
    consumption = expected * rng.uniform(0.5, 1.2)
    return ProductionRecord(
        project_id=project.id,
        date=day,
        generation_kwh=round(generation, 2),
        consumption_kwh=round(consumption, 2),
        savings=round(min(generation, consumption) * settings.unit_price_per_kwh, 2),
        system_status=status,
    )


def seed_demo_data(days: int = 90, seed: int = 42):
    """Seed demo clients, projects, production and alerts"""
    rng = random.Random(seed)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    store = RecordStore(db)
    try:
        clients = [ensure_client(store, data) for data in DEMO_CLIENTS]
        projects = [ensure_project(store, clients[data["client"]], data) for data in DEMO_PROJECTS]

        # Only systems that are producing get readings
        producing = [p for p in projects if p.status in (ProjectStatus.INSTALLATION, ProjectStatus.COMPLETED)]
        today = system_clock.now().date()
        records = []
        for project in producing:
            for offset in range(days):
                records.append(store.upsert(daily_reading(project, today - timedelta(days=offset), rng)))
        print(f"Created {len(records)} production records for {len(producing)} projects")

        # Alerts only for the last week so the panel stays readable
        recent = [r for r in records if r.date >= today - timedelta(days=7)]
        alerts = alert_service.raise_alerts(recent, projects)
        for alert in alerts:
            store.upsert(alert)
        print(f"Created {len(alerts)} alerts")

        store.commit()
        print("Demo data seeded successfully!")
    except Exception as e:
        store.rollback()
        print(f"Error seeding demo data: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--days", type=int, default=90)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()
    seed_demo_data(days=args.days, seed=args.seed)
