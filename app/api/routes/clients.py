# app/api/routes/clients.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import to_http
from app.db.base import get_db
from app.db.models.client import Client
from app.schemas.client import ClientCreate, ClientLookup, ClientLookupResponse, ClientResponse
from app.scheduling.errors import SchedulingError
from app.services.availability_service import get_organization
from app.services.client_service import DuplicateClient, create_client, find_or_create_client

router = APIRouter(prefix="/organizations/{organization_id}/clients", tags=["clients"])


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def add_client(organization_id: int, payload: ClientCreate, db: Session = Depends(get_db)):
    try:
        get_organization(db, organization_id)
        return create_client(db, organization_id, payload.name, phone=payload.phone, email=payload.email)
    except SchedulingError as e:
        raise to_http(e)
    except DuplicateClient as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# Used by the messaging channel: the client is known only by phone
@router.post("/find-or-create", response_model=ClientLookupResponse)
def find_or_create(organization_id: int, payload: ClientLookup, db: Session = Depends(get_db)):
    try:
        get_organization(db, organization_id)
        client, is_new = find_or_create_client(db, organization_id, payload.phone, name=payload.name)
    except SchedulingError as e:
        raise to_http(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ClientLookupResponse(client=ClientResponse.model_validate(client), is_new=is_new)


@router.get("", response_model=list[ClientResponse])
def list_clients(organization_id: int, db: Session = Depends(get_db)):
    try:
        get_organization(db, organization_id)
    except SchedulingError as e:
        raise to_http(e)
    return db.query(Client).filter(Client.organization_id == organization_id).order_by(Client.name).all()
