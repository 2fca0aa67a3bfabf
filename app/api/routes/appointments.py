# app/api/routes/appointments.py
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_now, to_http
from app.db.base import get_db
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentValidate,
    BookingDecisionResponse,
)
from app.scheduling.domain import AppointmentStatus
from app.scheduling.errors import SchedulingError
from app.services import appointment_service
from app.services.availability_service import get_organization, validate_booking

router = APIRouter(prefix="/organizations/{organization_id}/appointments", tags=["appointments"])


# Pre-write check, never an error for domain rejections

@router.post("/validate", response_model=BookingDecisionResponse)
def validate_appointment(
    organization_id: int,
    payload: AppointmentValidate,
    db: Session = Depends(get_db),
    now: Optional[datetime] = Depends(get_now),
):
    try:
        decision = validate_booking(
            db, organization_id, payload.professional_id, payload.service_id,
            payload.date, payload.start_time, now=now
        )
    except SchedulingError as e:
        raise to_http(e)
    return BookingDecisionResponse(**decision.model_dump())


# Create appointment

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    organization_id: int,
    payload: AppointmentCreate,
    db: Session = Depends(get_db),
    now: Optional[datetime] = Depends(get_now),
):
    try:
        return appointment_service.create_appointment(
            db,
            organization_id,
            client_id=payload.client_id,
            professional_id=payload.professional_id,
            service_id=payload.service_id,
            target_date=payload.date,
            start_time=payload.start_time,
            notes=payload.notes,
            now=now,
        )
    except SchedulingError as e:
        raise to_http(e)


# List appointments

@router.get("", response_model=list[AppointmentResponse])
def list_appointments(
    organization_id: int,
    date: Optional[date] = Query(None),
    professional_id: Optional[int] = Query(None),
    status: Optional[AppointmentStatus] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        get_organization(db, organization_id)
    except SchedulingError as e:
        raise to_http(e)
    return appointment_service.list_appointments(
        db, organization_id, target_date=date, professional_id=professional_id, status=status
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def read_appointment(organization_id: int, appointment_id: int, db: Session = Depends(get_db)):
    try:
        return appointment_service.get_appointment(db, organization_id, appointment_id)
    except SchedulingError as e:
        raise to_http(e)


# Move appointment

@router.post("/{appointment_id}/reschedule", response_model=AppointmentResponse)
def reschedule_appointment(
    organization_id: int,
    appointment_id: int,
    payload: AppointmentReschedule,
    db: Session = Depends(get_db),
    now: Optional[datetime] = Depends(get_now),
):
    try:
        return appointment_service.reschedule_appointment(
            db, organization_id, appointment_id, payload.date, payload.start_time, now=now
        )
    except SchedulingError as e:
        raise to_http(e)


# Status changes (confirm, complete, cancel, no-show)

@router.post("/{appointment_id}/status", response_model=AppointmentResponse)
def update_status(
    organization_id: int,
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
):
    try:
        return appointment_service.change_status(db, organization_id, appointment_id, payload.status)
    except SchedulingError as e:
        raise to_http(e)
