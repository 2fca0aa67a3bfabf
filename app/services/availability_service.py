# app/services/availability_service.py
"""
Slot availability for booking.

Fetches organization hours, professional availability, date exceptions and
existing appointments, then hands the already-loaded data to the pure
scheduling core. Nothing here holds state between calls.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

import pytz
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.models.appointment import Appointment
from app.db.models.availability import DateException, ProfessionalAvailability
from app.db.models.organization import Organization, OrganizationSettings
from app.db.models.professional import Professional
from app.db.models.service import Service
from app.scheduling.availability import closure_error, resolve_window
from app.scheduling.domain import (
    Accept,
    AppointmentRecord,
    AppointmentStatus,
    AvailabilityRecord,
    Candidate,
    Closed,
    ClosureReason,
    DateExceptionRecord,
    DayHours,
    OrganizationHours,
    Reject,
    SlotConfig,
    WindowResult,
    format_minutes,
    to_minutes,
)
from app.scheduling.errors import BookingConflict, EntityNotFound, SlotNotOffered
from app.scheduling.overlap import check_conflict
from app.scheduling.slots import generate_slots

logger = logging.getLogger(__name__)


class OfferableSlots(BaseModel):
    slots: List[int]
    # grid starts inside the booking horizon, before existing appointments are removed
    candidates: List[int] = []
    service_duration: int
    closed: Optional[Closed] = None
    message: Optional[str] = None

    @property
    def formatted(self) -> List[str]:
        return [format_minutes(s) for s in self.slots]


# --------------------------
# Entity lookups (tenant scoped)
# --------------------------
def get_organization(db: Session, organization_id: int) -> Organization:
    org = db.query(Organization).filter(Organization.id == organization_id).first()
    if not org:
        raise EntityNotFound("Organization not found")
    return org


def get_professional(db: Session, organization_id: int, professional_id: int) -> Professional:
    professional = db.query(Professional).filter(
        Professional.id == professional_id,
        Professional.organization_id == organization_id
    ).first()
    if not professional:
        raise EntityNotFound("Professional not found")
    return professional


def get_service(db: Session, organization_id: int, service_id: int) -> Service:
    service = db.query(Service).filter(
        Service.id == service_id,
        Service.organization_id == organization_id
    ).first()
    if not service:
        raise EntityNotFound("Service not found")
    return service


# --------------------------
# Collaborator reads
# --------------------------
def _settings_row(db: Session, organization_id: int) -> Optional[OrganizationSettings]:
    return db.query(OrganizationSettings).filter(
        OrganizationSettings.organization_id == organization_id
    ).first()


def get_organization_hours(db: Session, organization_id: int) -> Optional[OrganizationHours]:
    """Weekday -> DayHours map, or None when the organization never saved its hours."""
    row = _settings_row(db, organization_id)
    if row is None or row.business_hours is None:
        return None

    hours = {}
    for weekday in range(7):
        entry = row.business_hours.get(str(weekday))
        if not entry:
            hours[weekday] = None
            continue
        hours[weekday] = DayHours(open=to_minutes(entry["open"]), close=to_minutes(entry["close"]))
    return hours


def get_slot_config(db: Session, organization_id: int) -> SlotConfig:
    row = _settings_row(db, organization_id)
    if row is None:
        return SlotConfig(interval_minutes=get_settings().DEFAULT_SLOT_INTERVAL_MINUTES)
    return SlotConfig(
        interval_minutes=row.slot_interval_minutes or get_settings().DEFAULT_SLOT_INTERVAL_MINUTES,
        buffer_minutes=row.buffer_minutes or 0,
    )


def get_professional_availability(
    db: Session,
    professional_id: int,
    organization_id: int
) -> List[AvailabilityRecord]:
    # An empty result (e.g. mid-replace) just means "does not work"
    rows = db.query(ProfessionalAvailability).filter(
        ProfessionalAvailability.professional_id == professional_id,
        ProfessionalAvailability.organization_id == organization_id
    ).order_by(ProfessionalAvailability.day_of_week, ProfessionalAvailability.start_time).all()

    return [
        AvailabilityRecord(
            day_of_week=r.day_of_week,
            start=to_minutes(r.start_time),
            end=to_minutes(r.end_time),
        )
        for r in rows
    ]


def get_date_exceptions(
    db: Session,
    organization_id: int,
    target_date: date,
    professional_id: Optional[int] = None
) -> List[DateExceptionRecord]:
    """Organization-wide exceptions for the date, plus the professional's own when given."""
    scope = DateException.professional_id.is_(None)
    if professional_id is not None:
        scope = or_(scope, DateException.professional_id == professional_id)

    rows = db.query(DateException).filter(
        DateException.organization_id == organization_id,
        DateException.exception_date == target_date,
        scope
    ).all()

    return [
        DateExceptionRecord(
            exception_date=r.exception_date,
            is_closed=r.is_closed,
            special_open=to_minutes(r.special_open) if r.special_open else None,
            special_close=to_minutes(r.special_close) if r.special_close else None,
            reason=r.reason,
            professional_id=r.professional_id,
        )
        for r in rows
    ]


def appointments_between(
    db: Session,
    professional_id: int,
    organization_id: int,
    start: datetime,
    end: datetime,
    exclude_appointment_id: Optional[int] = None
) -> List[AppointmentRecord]:
    query = db.query(Appointment).filter(
        Appointment.professional_id == professional_id,
        Appointment.organization_id == organization_id,
        Appointment.scheduled_at >= start,
        Appointment.scheduled_at < end
    )
    if exclude_appointment_id is not None:
        query = query.filter(Appointment.id != exclude_appointment_id)

    return [
        AppointmentRecord(
            id=a.id,
            professional_id=a.professional_id,
            scheduled_at=a.scheduled_at,
            duration_minutes=a.duration_minutes,
            status=AppointmentStatus(a.status),
        )
        for a in query.order_by(Appointment.scheduled_at).all()
    ]


def get_appointments(
    db: Session,
    professional_id: int,
    organization_id: int,
    target_date: date,
    exclude_appointment_id: Optional[int] = None
) -> List[AppointmentRecord]:
    """Appointments of the professional on the date, any status.

    The previous day is included so a late booking that runs past midnight
    still blocks the start of the next day.
    """
    day_start = datetime.combine(target_date, time.min)
    return appointments_between(
        db, professional_id, organization_id,
        day_start - timedelta(days=1), day_start + timedelta(days=1),
        exclude_appointment_id
    )


# --------------------------
# Composition
# --------------------------
def _fallback_hours() -> Optional[DayHours]:
    settings = get_settings()
    if not settings.FALLBACK_HOURS_ENABLED:
        return None
    return DayHours(open=to_minutes(settings.FALLBACK_OPEN), close=to_minutes(settings.FALLBACK_CLOSE))


def organization_now(db: Session, organization_id: int) -> datetime:
    """Current wall-clock time in the organization's timezone, naive."""
    row = _settings_row(db, organization_id)
    tz_name = row.timezone if row and row.timezone else get_settings().DEFAULT_TIMEZONE
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.error(f"Invalid timezone '{tz_name}' for organization {organization_id}, using UTC")
        tz = pytz.UTC
    return datetime.now(tz).replace(tzinfo=None)


def resolve_window_for(
    db: Session,
    organization_id: int,
    professional_id: int,
    target_date: date
) -> WindowResult:
    return resolve_window(
        target_date,
        professional_id,
        get_organization_hours(db, organization_id),
        get_professional_availability(db, professional_id, organization_id),
        get_date_exceptions(db, organization_id, target_date, professional_id),
        fallback_hours=_fallback_hours(),
    )


def _closed_message(window: Closed) -> str:
    return closure_error(window).message


def _booking_horizon(db: Session, organization_id: int, now: datetime):
    """(earliest bookable datetime, last bookable date)"""
    row = _settings_row(db, organization_id)
    min_advance = row.min_booking_advance_hours if row else 0
    max_days = row.max_booking_advance_days if row else 30
    earliest = now + timedelta(hours=min_advance or 0)
    return earliest, now.date() + timedelta(days=max_days)


def _compute_slots(
    db: Session,
    organization_id: int,
    professional: Professional,
    target_date: date,
    duration: int,
    now: Optional[datetime],
    exclude_appointment_id: Optional[int] = None
) -> OfferableSlots:
    if not professional.is_active:
        closed = Closed(reason=ClosureReason.NOT_WORKING_DAY, detail="inactive")
        return OfferableSlots(slots=[], service_duration=duration, closed=closed, message=_closed_message(closed))

    window = resolve_window_for(db, organization_id, professional.id, target_date)
    if isinstance(window, Closed):
        logger.info(
            f"No slots for professional {professional.id} on {target_date}: {window.reason.value}"
        )
        return OfferableSlots(slots=[], service_duration=duration, closed=window, message=_closed_message(window))

    config = get_slot_config(db, organization_id)
    candidates = generate_slots(window, config.interval_minutes, duration)

    if now is None:
        now = organization_now(db, organization_id)
    earliest, last_date = _booking_horizon(db, organization_id, now)
    if target_date > last_date:
        return OfferableSlots(
            slots=[], service_duration=duration,
            message="Date is beyond the booking window"
        )

    existing = get_appointments(db, professional.id, organization_id, target_date, exclude_appointment_id)

    slots = []
    bookable = []
    day_start = datetime.combine(target_date, time.min)
    for start in candidates:
        start_dt = day_start + timedelta(minutes=start)
        if start_dt <= now or start_dt < earliest:
            continue
        bookable.append(start)

        candidate = Candidate(professional_id=professional.id, start=start_dt, duration_minutes=duration)
        if isinstance(check_conflict(candidate, existing, config.buffer_minutes), Accept):
            slots.append(start)

    logger.debug(
        f"{len(slots)} of {len(candidates)} slots offerable for professional {professional.id} on {target_date}"
    )
    return OfferableSlots(slots=slots, candidates=bookable, service_duration=duration)


def get_offerable_slots(
    db: Session,
    organization_id: int,
    professional_id: int,
    service_id: int,
    target_date: date,
    now: Optional[datetime] = None
) -> OfferableSlots:
    """
    Start times that can be offered for a new appointment.

    Closed days are not errors: they come back as an empty list with the
    closure attached. Unknown organization / professional / service raise
    EntityNotFound.
    """
    get_organization(db, organization_id)
    professional = get_professional(db, organization_id, professional_id)
    service = get_service(db, organization_id, service_id)

    if not service.is_active:
        return OfferableSlots(slots=[], service_duration=service.duration_minutes, message="Service is inactive")

    return _compute_slots(db, organization_id, professional, target_date, service.duration_minutes, now)


def validate_booking(
    db: Session,
    organization_id: int,
    professional_id: int,
    service_id: int,
    target_date: date,
    start_time: time,
    now: Optional[datetime] = None,
    duration_minutes: Optional[int] = None,
    exclude_appointment_id: Optional[int] = None
):
    """
    Pre-write guard for a booking.

    Returns Accept() or Reject(code, message). Domain rejections never raise;
    lookups of unknown entities and database failures do.
    """
    get_organization(db, organization_id)
    professional = get_professional(db, organization_id, professional_id)
    service = get_service(db, organization_id, service_id)

    if not service.is_active:
        return Reject.from_error(SlotNotOffered("Service is inactive"))

    duration = duration_minutes or service.duration_minutes
    offerable = _compute_slots(
        db, organization_id, professional, target_date, duration, now, exclude_appointment_id
    )

    if offerable.closed is not None:
        return Reject.from_error(closure_error(offerable.closed))

    start = to_minutes(start_time)
    on_grid = not (start_time.second or start_time.microsecond) and start in offerable.candidates
    if on_grid and start in offerable.slots:
        return Accept()

    error = SlotNotOffered()
    if on_grid:
        # A real slot that someone else already holds
        config = get_slot_config(db, organization_id)
        candidate = Candidate(
            professional_id=professional.id,
            start=datetime.combine(target_date, time.min) + timedelta(minutes=start),
            duration_minutes=duration,
        )
        existing = get_appointments(db, professional.id, organization_id, target_date, exclude_appointment_id)
        conflict = check_conflict(candidate, existing, config.buffer_minutes)
        if isinstance(conflict, Reject):
            error = BookingConflict(conflicting_appointment_id=conflict.conflicting_appointment_id)

    logger.info(
        f"Rejected booking for professional {professional.id} at {target_date} {start_time}: {error.message}"
    )
    return Reject.from_error(error)
