# app/api/routes/services.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import to_http
from app.db.base import get_db
from app.db.models.service import Service
from app.schemas.service import ServiceCreate, ServiceUpdate, ServiceResponse
from app.scheduling.errors import SchedulingError
from app.services.availability_service import get_organization, get_service


router = APIRouter(prefix="/organizations/{organization_id}/services", tags=["services"])


# Create service

@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
    organization_id: int,
    service_data: ServiceCreate,
    db: Session = Depends(get_db),
):
    try:
        get_organization(db, organization_id)
    except SchedulingError as e:
        raise to_http(e)

    new_service = Service(
        organization_id=organization_id,
        name=service_data.name,
        description=service_data.description,
        price=service_data.price,
        duration_minutes=service_data.duration_minutes,
        is_active=service_data.is_active,
    )

    db.add(new_service)
    db.commit()
    db.refresh(new_service)

    return new_service


# List services

@router.get("", response_model=list[ServiceResponse])
def list_services(organization_id: int, include_inactive: bool = False, db: Session = Depends(get_db)):
    try:
        get_organization(db, organization_id)
    except SchedulingError as e:
        raise to_http(e)

    query = db.query(Service).filter(Service.organization_id == organization_id)
    if not include_inactive:
        query = query.filter(Service.is_active == True)
    return query.order_by(Service.name).all()


# Update service (existing appointments keep their frozen duration and price)

@router.put("/{service_id}", response_model=ServiceResponse)
def update_service(
    organization_id: int,
    service_id: int,
    update_data: ServiceUpdate,
    db: Session = Depends(get_db),
):
    try:
        service = get_service(db, organization_id, service_id)
    except SchedulingError as e:
        raise to_http(e)

    # Update fields one-by-one
    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(service, field, value)

    db.commit()
    db.refresh(service)
    return service


# Deactivate service

@router.delete("/{service_id}")
def delete_service(organization_id: int, service_id: int, db: Session = Depends(get_db)):
    try:
        service = get_service(db, organization_id, service_id)
    except SchedulingError as e:
        raise to_http(e)

    service.is_active = False

    db.commit()
    return {"message": "Service deactivated successfully"}
