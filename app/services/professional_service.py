# app/services/professional_service.py
import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.db.models.availability import DateException, ProfessionalAvailability
from app.db.models.professional import Professional
from app.db.models.service import Service
from app.scheduling.domain import Open
from app.scheduling.errors import EntityNotFound
from app.services.availability_service import get_professional, get_service, resolve_window_for

logger = logging.getLogger(__name__)


class DuplicateException(ValueError):
    pass


def replace_professional_availability(
    db: Session,
    organization_id: int,
    professional_id: int,
    records: Iterable
) -> List[ProfessionalAvailability]:
    """Delete-all-then-insert of the weekly schedule, in one transaction."""
    professional = get_professional(db, organization_id, professional_id)
    records = list(records)

    seen = set()
    for r in records:
        if r.day_of_week in seen:
            raise ValueError(f"More than one availability record for weekday {r.day_of_week}")
        if r.start_time >= r.end_time:
            raise ValueError("start_time must be before end_time")
        seen.add(r.day_of_week)

    try:
        db.query(ProfessionalAvailability).filter(
            ProfessionalAvailability.professional_id == professional.id
        ).delete(synchronize_session=False)

        rows = [
            ProfessionalAvailability(
                professional_id=professional.id,
                organization_id=organization_id,
                day_of_week=r.day_of_week,
                start_time=r.start_time,
                end_time=r.end_time,
            )
            for r in records
        ]
        db.add_all(rows)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.expire(professional)
    logger.info(f"Replaced availability of professional {professional.id} with {len(rows)} records")
    return sorted(rows, key=lambda r: r.day_of_week)


def set_professional_services(
    db: Session,
    organization_id: int,
    professional_id: int,
    service_ids: Iterable[int]
) -> Professional:
    professional = get_professional(db, organization_id, professional_id)
    professional.services = [get_service(db, organization_id, sid) for sid in set(service_ids)]
    db.commit()
    db.refresh(professional)
    return professional


def list_available_professionals(
    db: Session,
    organization_id: int,
    target_date: Optional[date] = None,
    service_id: Optional[int] = None
) -> List[Professional]:
    """
    Active professionals of the organization, narrowed to those assigned to
    service_id and, when target_date is given, to those whose resolved window
    for that date is open.
    """
    query = db.query(Professional).filter(
        Professional.organization_id == organization_id,
        Professional.is_active == True
    )

    if service_id is not None:
        service = get_service(db, organization_id, service_id)
        query = query.filter(Professional.services.any(Service.id == service.id))

    professionals = query.order_by(Professional.name).all()

    if target_date is None:
        return professionals

    available = [
        p for p in professionals
        if isinstance(resolve_window_for(db, organization_id, p.id, target_date), Open)
    ]
    logger.debug(
        f"{len(available)} of {len(professionals)} professionals available on {target_date}"
    )
    return available


# --------------------------
# Date exceptions
# --------------------------
def create_date_exception(db: Session, organization_id: int, payload, today: date) -> DateException:
    if payload.exception_date < today:
        raise ValueError("Exceptions can only be created for today or future dates")

    if payload.professional_id is not None:
        get_professional(db, organization_id, payload.professional_id)

    # NULL professional_id escapes the unique constraint, so check here
    scope = (
        DateException.professional_id.is_(None)
        if payload.professional_id is None
        else DateException.professional_id == payload.professional_id
    )
    existing = db.query(DateException).filter(
        DateException.organization_id == organization_id,
        DateException.exception_date == payload.exception_date,
        scope
    ).first()
    if existing:
        raise DuplicateException("An exception already exists for this date")

    exception = DateException(
        organization_id=organization_id,
        professional_id=payload.professional_id,
        exception_date=payload.exception_date,
        is_closed=payload.is_closed,
        special_open=None if payload.is_closed else payload.special_open,
        special_close=None if payload.is_closed else payload.special_close,
        reason=payload.reason,
    )
    db.add(exception)
    db.commit()
    db.refresh(exception)

    logger.info(
        f"Date exception {exception.id} created for {exception.exception_date} "
        f"(professional={exception.professional_id}, closed={exception.is_closed})"
    )
    return exception


def delete_date_exception(db: Session, organization_id: int, exception_id: int) -> None:
    exception = db.query(DateException).filter(
        DateException.id == exception_id,
        DateException.organization_id == organization_id
    ).first()
    if not exception:
        raise EntityNotFound("Exception not found")

    db.delete(exception)
    db.commit()
