# app/api/routes/professionals.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import to_http
from app.db.base import get_db
from app.db.models.professional import Professional
from app.schemas.availability import (
    ProfessionalAvailabilityReplace,
    ProfessionalAvailabilityResponse,
)
from app.schemas.professional import (
    ProfessionalCreate,
    ProfessionalResponse,
    ProfessionalServicesUpdate,
    ProfessionalUpdate,
)
from app.scheduling.errors import SchedulingError
from app.services.availability_service import get_organization, get_professional
from app.services.professional_service import (
    list_available_professionals,
    replace_professional_availability,
    set_professional_services,
)

router = APIRouter(prefix="/organizations/{organization_id}/professionals", tags=["professionals"])


@router.post("", response_model=ProfessionalResponse, status_code=status.HTTP_201_CREATED)
def create_professional(organization_id: int, payload: ProfessionalCreate, db: Session = Depends(get_db)):
    try:
        get_organization(db, organization_id)
    except SchedulingError as e:
        raise to_http(e)

    professional = Professional(
        organization_id=organization_id,
        name=payload.name,
        specialty=payload.specialty,
        phone=payload.phone,
    )
    db.add(professional)
    db.commit()
    db.refresh(professional)

    if payload.service_ids:
        try:
            professional = set_professional_services(db, organization_id, professional.id, payload.service_ids)
        except SchedulingError as e:
            raise to_http(e)

    return professional


@router.get("", response_model=List[ProfessionalResponse])
def list_professionals(
    organization_id: int,
    date: Optional[date] = Query(None, description="only professionals working on this date"),
    service_id: Optional[int] = Query(None, description="only professionals assigned to this service"),
    db: Session = Depends(get_db),
):
    try:
        get_organization(db, organization_id)
        return list_available_professionals(db, organization_id, target_date=date, service_id=service_id)
    except SchedulingError as e:
        raise to_http(e)


@router.patch("/{professional_id}", response_model=ProfessionalResponse)
def update_professional(
    organization_id: int,
    professional_id: int,
    payload: ProfessionalUpdate,
    db: Session = Depends(get_db),
):
    try:
        professional = get_professional(db, organization_id, professional_id)
    except SchedulingError as e:
        raise to_http(e)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(professional, field, value)

    db.commit()
    db.refresh(professional)
    return professional


@router.put("/{professional_id}/services", response_model=ProfessionalResponse)
def update_professional_services(
    organization_id: int,
    professional_id: int,
    payload: ProfessionalServicesUpdate,
    db: Session = Depends(get_db),
):
    try:
        return set_professional_services(db, organization_id, professional_id, payload.service_ids)
    except SchedulingError as e:
        raise to_http(e)


# Weekly availability

@router.put("/{professional_id}/availability", response_model=List[ProfessionalAvailabilityResponse])
def replace_availability(
    organization_id: int,
    professional_id: int,
    payload: ProfessionalAvailabilityReplace,
    db: Session = Depends(get_db),
):
    try:
        return replace_professional_availability(db, organization_id, professional_id, payload.availability)
    except SchedulingError as e:
        raise to_http(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{professional_id}/availability", response_model=List[ProfessionalAvailabilityResponse])
def list_availability(organization_id: int, professional_id: int, db: Session = Depends(get_db)):
    try:
        professional = get_professional(db, organization_id, professional_id)
    except SchedulingError as e:
        raise to_http(e)
    return sorted(professional.availabilities, key=lambda a: a.day_of_week)
