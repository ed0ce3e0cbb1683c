from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from ..config import settings
from ..db import get_db
from ..models.models import Client
from ..schemas.clients import ClientCreate, ClientResponse
from ..services.clock import Clock, get_clock
from ..services.store import RecordStore


router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(payload: ClientCreate, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    store = RecordStore(db)
    client = Client(**payload.model_dump(), company_id=settings.company_id, created_at=clock.now())
    store.upsert(client)
    store.commit()
    return client


@router.get("", response_model=List[ClientResponse])
def list_clients(db: Session = Depends(get_db)):
    return RecordStore(db).list_clients(company_id=settings.company_id)


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(client_id: str, db: Session = Depends(get_db)):
    client = RecordStore(db).get_client(client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.put("/{client_id}", response_model=ClientResponse)
def update_client(client_id: str, payload: ClientCreate, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    store = RecordStore(db)
    client = store.get_client(client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    # Projects keep their client_name snapshot; it is not refreshed here
    for key, value in payload.model_dump().items():
        setattr(client, key, value)
    client.updated_at = clock.now()
    store.commit()
    return client
