# app/api/routes/availability.py
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_now, to_http
from app.db.base import get_db
from app.db.models.availability import DateException
from app.schemas.availability import (
    DateExceptionCreate,
    DateExceptionResponse,
    SlotsResponse,
)
from app.scheduling.errors import SchedulingError
from app.services.availability_service import (
    get_offerable_slots,
    get_organization,
    organization_now,
)
from app.services.professional_service import (
    DuplicateException,
    create_date_exception,
    delete_date_exception,
)

router = APIRouter(prefix="/organizations/{organization_id}", tags=["availability"])


# Date exceptions (holidays, days off, special hours)

@router.post("/exceptions", response_model=DateExceptionResponse, status_code=status.HTTP_201_CREATED)
def add_exception(
    organization_id: int,
    payload: DateExceptionCreate,
    db: Session = Depends(get_db),
    now: Optional[datetime] = Depends(get_now),
):
    try:
        get_organization(db, organization_id)
        today = (now or organization_now(db, organization_id)).date()
        return create_date_exception(db, organization_id, payload, today)
    except SchedulingError as e:
        raise to_http(e)
    except DuplicateException as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/exceptions", response_model=List[DateExceptionResponse])
def list_exceptions(
    organization_id: int,
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    professional_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        get_organization(db, organization_id)
    except SchedulingError as e:
        raise to_http(e)

    query = db.query(DateException).filter(DateException.organization_id == organization_id)
    if from_date:
        query = query.filter(DateException.exception_date >= from_date)
    if to_date:
        query = query.filter(DateException.exception_date <= to_date)
    if professional_id is not None:
        query = query.filter(DateException.professional_id == professional_id)
    return query.order_by(DateException.exception_date).all()


@router.delete("/exceptions/{exception_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_exception(organization_id: int, exception_id: int, db: Session = Depends(get_db)):
    try:
        delete_date_exception(db, organization_id, exception_id)
    except SchedulingError as e:
        raise to_http(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Slot generation

@router.get("/professionals/{professional_id}/slots", response_model=SlotsResponse)
def get_available_slots_for_date(
    organization_id: int,
    professional_id: int,
    service_id: int = Query(..., description="service id to determine duration"),
    date: date = Query(..., description="date in YYYY-MM-DD"),
    db: Session = Depends(get_db),
    now: Optional[datetime] = Depends(get_now),
):
    """
    Returns the start times (HH:MM) that can be offered for a new appointment.
    A closed day is not an error: slots is empty and message says why.
    """
    try:
        result = get_offerable_slots(db, organization_id, professional_id, service_id, date, now=now)
    except SchedulingError as e:
        raise to_http(e)

    return SlotsResponse(
        date=date,
        professional_id=professional_id,
        service_id=service_id,
        service_duration=result.service_duration,
        slots=result.formatted,
        closed=result.closed is not None,
        message=result.message,
    )
