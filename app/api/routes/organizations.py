# app/api/routes/organizations.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import to_http
from app.db.base import get_db
from app.db.models.organization import Organization, OrganizationSettings
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    OrganizationSettingsResponse,
    OrganizationSettingsUpdate,
    OrganizationUpdate,
)
from app.scheduling.errors import SchedulingError
from app.services.availability_service import get_organization
from app.services.client_service import get_organization_by_whatsapp, normalize_phone

router = APIRouter(prefix="/organizations", tags=["organizations"])


def _whatsapp_or_400(value):
    if not value:
        return None
    normalized = normalize_phone(value)
    if normalized is None:
        raise HTTPException(status_code=400, detail=f"Invalid WhatsApp number: {value}")
    return normalized


def _commit_or_409(db: Session):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="This WhatsApp number belongs to another organization")


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
def create_organization(payload: OrganizationCreate, db: Session = Depends(get_db)):
    org = Organization(name=payload.name, whatsapp_number=_whatsapp_or_400(payload.whatsapp_number))
    db.add(org)
    _commit_or_409(db)
    db.refresh(org)
    return org


# Inbound messages arrive on the salon's WhatsApp number; this finds the tenant
@router.get("/by-whatsapp", response_model=OrganizationResponse)
def read_organization_by_whatsapp(
    whatsapp_number: str = Query(..., description="any format, e.g. (11) 99999-9999"),
    db: Session = Depends(get_db),
):
    try:
        return get_organization_by_whatsapp(db, whatsapp_number)
    except SchedulingError as e:
        raise to_http(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{organization_id}", response_model=OrganizationResponse)
def read_organization(organization_id: int, db: Session = Depends(get_db)):
    try:
        return get_organization(db, organization_id)
    except SchedulingError as e:
        raise to_http(e)


@router.patch("/{organization_id}", response_model=OrganizationResponse)
def update_organization(organization_id: int, payload: OrganizationUpdate, db: Session = Depends(get_db)):
    try:
        org = get_organization(db, organization_id)
    except SchedulingError as e:
        raise to_http(e)

    data = payload.model_dump(exclude_unset=True)
    if "whatsapp_number" in data:
        data["whatsapp_number"] = _whatsapp_or_400(data["whatsapp_number"])
    for field, value in data.items():
        setattr(org, field, value)

    _commit_or_409(db)
    db.refresh(org)
    return org


# Scheduling settings (business hours, slot interval, buffer)

@router.get("/{organization_id}/settings", response_model=OrganizationSettingsResponse)
def read_settings(organization_id: int, db: Session = Depends(get_db)):
    try:
        get_organization(db, organization_id)
    except SchedulingError as e:
        raise to_http(e)

    row = db.query(OrganizationSettings).filter(
        OrganizationSettings.organization_id == organization_id
    ).first()
    if not row:
        raise HTTPException(
            status_code=404,
            detail={"code": "CONFIGURATION_MISSING", "message": "Business hours have not been configured"}
        )
    return row


@router.put("/{organization_id}/settings", response_model=OrganizationSettingsResponse)
def save_settings(
    organization_id: int,
    payload: OrganizationSettingsUpdate,
    db: Session = Depends(get_db),
):
    try:
        get_organization(db, organization_id)
    except SchedulingError as e:
        raise to_http(e)

    data = payload.model_dump()
    # every weekday is stored, missing keys mean closed
    data["business_hours"] = {
        str(day): data["business_hours"].get(str(day)) for day in range(7)
    }

    row = db.query(OrganizationSettings).filter(
        OrganizationSettings.organization_id == organization_id
    ).first()
    if row is None:
        row = OrganizationSettings(organization_id=organization_id)
        db.add(row)

    for field, value in data.items():
        setattr(row, field, value)

    db.commit()
    db.refresh(row)
    return row
