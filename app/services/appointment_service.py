# app/services/appointment_service.py
"""
Appointment writes.

Booking and rescheduling re-check overlaps inside the writing transaction
while holding a write lock on the professional row, so two concurrent
requests for the same professional are serialized and only one of two
overlapping bookings can commit.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from app.db.models.appointment import Appointment
from app.db.models.client import Client
from app.db.models.professional import Professional
from app.scheduling.domain import AppointmentStatus, Candidate, Reject
from app.scheduling.errors import (
    BookingConflict,
    ConfigurationMissing,
    EntityNotFound,
    InvalidStatusTransition,
    OrganizationClosed,
    ProfessionalUnavailable,
    SchedulingError,
    SlotNotOffered,
)
from app.scheduling.overlap import check_conflict
from app.scheduling.status import ACTIVE_STATUSES, ensure_transition
from app.services.availability_service import (
    appointments_between,
    get_service,
    get_slot_config,
    validate_booking,
)

logger = logging.getLogger(__name__)

_ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (ConfigurationMissing, ProfessionalUnavailable, OrganizationClosed, SlotNotOffered, BookingConflict)
}


def error_from_rejection(rejection: Reject) -> SchedulingError:
    cls = _ERRORS_BY_CODE.get(rejection.code, SchedulingError)
    return cls(rejection.message, conflicting_appointment_id=rejection.conflicting_appointment_id)


def get_appointment(db: Session, organization_id: int, appointment_id: int) -> Appointment:
    appointment = db.query(Appointment).filter(
        Appointment.id == appointment_id,
        Appointment.organization_id == organization_id
    ).first()
    if not appointment:
        raise EntityNotFound("Appointment not found")
    return appointment


def _lock_professional(db: Session, organization_id: int, professional_id: int) -> None:
    """
    Take the professional's write lock for the rest of the transaction.

    A plain SELECT ... FOR UPDATE is not emitted on SQLite, so the lock is an
    UPDATE of the professional row: a row lock on Postgres/MySQL and the
    database write lock on SQLite, both held until commit or rollback. A second
    booking for the same professional waits here and then sees the first one.
    """
    updated = db.query(Professional).filter(
        Professional.id == professional_id,
        Professional.organization_id == organization_id
    ).update(
        {Professional.booking_version: Professional.booking_version + 1},
        synchronize_session=False
    )
    if not updated:
        raise EntityNotFound("Professional not found")


def _assert_no_overlap(
    db: Session,
    organization_id: int,
    professional_id: int,
    start: datetime,
    duration_minutes: int,
    exclude_appointment_id: Optional[int] = None
) -> None:
    """Authoritative overlap check; must run after _lock_professional in the same transaction."""
    buffer_minutes = get_slot_config(db, organization_id).buffer_minutes
    # Longest plausible neighbour is a full day
    reach = timedelta(days=1, minutes=buffer_minutes)
    existing = appointments_between(
        db, professional_id, organization_id,
        start - reach, start + timedelta(minutes=duration_minutes) + reach,
        exclude_appointment_id
    )

    candidate = Candidate(professional_id=professional_id, start=start, duration_minutes=duration_minutes)
    result = check_conflict(candidate, existing, buffer_minutes)
    if isinstance(result, Reject):
        logger.warning(
            f"Booking conflict for professional {professional_id} at {start}: "
            f"overlaps appointment {result.conflicting_appointment_id}"
        )
        raise BookingConflict(conflicting_appointment_id=result.conflicting_appointment_id)


def create_appointment(
    db: Session,
    organization_id: int,
    client_id: int,
    professional_id: int,
    service_id: int,
    target_date: date,
    start_time: time,
    notes: Optional[str] = None,
    now: Optional[datetime] = None
) -> Appointment:
    client = db.query(Client).filter(
        Client.id == client_id,
        Client.organization_id == organization_id
    ).first()
    if not client:
        raise EntityNotFound("Client not found")

    decision = validate_booking(
        db, organization_id, professional_id, service_id, target_date, start_time, now=now
    )
    if isinstance(decision, Reject):
        raise error_from_rejection(decision)

    service = get_service(db, organization_id, service_id)
    start = datetime.combine(target_date, start_time)

    try:
        _lock_professional(db, organization_id, professional_id)
        _assert_no_overlap(db, organization_id, professional_id, start, service.duration_minutes)

        appointment = Appointment(
            organization_id=organization_id,
            professional_id=professional_id,
            service_id=service_id,
            client_id=client_id,
            scheduled_at=start,
            duration_minutes=service.duration_minutes,
            price=service.price,
            status=AppointmentStatus.SCHEDULED.value,
            notes=notes,
        )
        db.add(appointment)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info(
        f"Appointment {appointment.id} booked for professional {professional_id} at {start}"
    )
    return appointment


def reschedule_appointment(
    db: Session,
    organization_id: int,
    appointment_id: int,
    target_date: date,
    start_time: time,
    now: Optional[datetime] = None
) -> Appointment:
    appointment = get_appointment(db, organization_id, appointment_id)

    if AppointmentStatus(appointment.status) not in ACTIVE_STATUSES:
        raise InvalidStatusTransition(
            f"Cannot reschedule an appointment that is {appointment.status}"
        )

    # the frozen duration travels with the appointment
    decision = validate_booking(
        db, organization_id, appointment.professional_id, appointment.service_id,
        target_date, start_time, now=now,
        duration_minutes=appointment.duration_minutes,
        exclude_appointment_id=appointment.id,
    )
    if isinstance(decision, Reject):
        raise error_from_rejection(decision)

    start = datetime.combine(target_date, start_time)

    try:
        _lock_professional(db, organization_id, appointment.professional_id)
        _assert_no_overlap(
            db, organization_id, appointment.professional_id, start,
            appointment.duration_minutes, exclude_appointment_id=appointment.id
        )
        appointment.scheduled_at = start
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info(f"Appointment {appointment.id} moved to {start}")
    return appointment


def change_status(
    db: Session,
    organization_id: int,
    appointment_id: int,
    new_status: AppointmentStatus
) -> Appointment:
    appointment = get_appointment(db, organization_id, appointment_id)
    current = AppointmentStatus(appointment.status)

    ensure_transition(current, new_status)

    appointment.status = AppointmentStatus(new_status).value
    db.commit()
    db.refresh(appointment)

    logger.info(f"Appointment {appointment.id} status {current.value} -> {appointment.status}")
    return appointment


def list_appointments(
    db: Session,
    organization_id: int,
    target_date: Optional[date] = None,
    professional_id: Optional[int] = None,
    status: Optional[AppointmentStatus] = None
) -> List[Appointment]:
    query = db.query(Appointment).filter(Appointment.organization_id == organization_id)

    if target_date is not None:
        day_start = datetime.combine(target_date, time.min)
        query = query.filter(
            Appointment.scheduled_at >= day_start,
            Appointment.scheduled_at < day_start + timedelta(days=1)
        )
    if professional_id is not None:
        query = query.filter(Appointment.professional_id == professional_id)
    if status is not None:
        query = query.filter(Appointment.status == AppointmentStatus(status).value)

    return query.order_by(Appointment.scheduled_at).all()
