from datetime import date, datetime, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from app.db.init_db import init_db
from app.db.models.appointment import Appointment
from app.db.models.availability import DateException
from app.db.models.service import Service
from app.scheduling.domain import Accept, AppointmentStatus
from app.scheduling.errors import (
    BookingConflict,
    EntityNotFound,
    InvalidStatusTransition,
    OrganizationClosed,
    ProfessionalUnavailable,
    SlotNotOffered,
)
from app.services import appointment_service
from app.services.appointment_service import (
    _assert_no_overlap,
    _lock_professional,
    change_status,
    create_appointment,
    list_appointments,
    reschedule_appointment,
)

from tests.utils.dates import MONDAY, NOW, SUNDAY
from tests.utils.factories import seed_salon


def book_via_service(db, salon, start_time=time(10, 0), target_date=MONDAY):
    return create_appointment(
        db,
        salon.organization_id,
        client_id=salon.client_id,
        professional_id=salon.professional_id,
        service_id=salon.service_id,
        target_date=target_date,
        start_time=start_time,
        now=NOW,
    )


def test_create_freezes_duration_and_price(db, salon):
    appointment = book_via_service(db, salon)

    service = db.get(Service, salon.service_id)
    service.duration_minutes = 90
    service.price = 120.0
    db.commit()

    db.refresh(appointment)
    assert appointment.scheduled_at == datetime(2030, 1, 7, 10, 0)
    assert appointment.duration_minutes == 60
    assert appointment.price == 80.0
    assert appointment.status == "scheduled"


def test_second_booking_for_same_slot_is_a_conflict(db, salon):
    first = book_via_service(db, salon)
    with pytest.raises(BookingConflict) as exc:
        book_via_service(db, salon)
    assert exc.value.conflicting_appointment_id == first.id
    assert db.query(Appointment).count() == 1


def test_stale_validation_is_caught_at_write(db, salon, book, monkeypatch):
    # another request committed between validation and write
    existing = book(datetime(2030, 1, 7, 10, 30))
    monkeypatch.setattr(appointment_service, "validate_booking", lambda *args, **kwargs: Accept())

    with pytest.raises(BookingConflict) as exc:
        book_via_service(db, salon)

    assert exc.value.message == "This slot was just taken, please choose another"
    assert exc.value.conflicting_appointment_id == existing.id
    assert db.query(Appointment).count() == 1


def test_closed_day_raises_domain_error(db, salon):
    with pytest.raises(ProfessionalUnavailable):
        book_via_service(db, salon, target_date=SUNDAY)


def test_unknown_client(db, salon):
    with pytest.raises(EntityNotFound):
        create_appointment(
            db, salon.organization_id, client_id=999,
            professional_id=salon.professional_id, service_id=salon.service_id,
            target_date=MONDAY, start_time=time(10, 0), now=NOW,
        )


def test_other_tenant_cannot_see_professional(db, salon):
    with pytest.raises(EntityNotFound):
        create_appointment(
            db, salon.organization_id + 1, client_id=salon.client_id,
            professional_id=salon.professional_id, service_id=salon.service_id,
            target_date=MONDAY, start_time=time(10, 0), now=NOW,
        )


def test_cancelled_slot_can_be_rebooked(db, salon):
    first = book_via_service(db, salon)
    change_status(db, salon.organization_id, first.id, AppointmentStatus.CANCELLED)

    second = book_via_service(db, salon)
    assert second.id != first.id


def test_reschedule_moves_appointment(db, salon):
    appointment = book_via_service(db, salon)
    moved = reschedule_appointment(db, salon.organization_id, appointment.id, MONDAY, time(14, 0), now=NOW)
    assert moved.scheduled_at == datetime(2030, 1, 7, 14, 0)


def test_reschedule_may_overlap_its_own_old_time(db, salon):
    appointment = book_via_service(db, salon)
    moved = reschedule_appointment(db, salon.organization_id, appointment.id, MONDAY, time(10, 30), now=NOW)
    assert moved.scheduled_at == datetime(2030, 1, 7, 10, 30)


def test_reschedule_into_taken_slot(db, salon, book):
    book(datetime(2030, 1, 7, 14, 0))
    appointment = book_via_service(db, salon)
    with pytest.raises(BookingConflict):
        reschedule_appointment(db, salon.organization_id, appointment.id, MONDAY, time(14, 0), now=NOW)


def test_reschedule_keeps_frozen_duration(db, salon):
    appointment = book_via_service(db, salon)
    service = db.get(Service, salon.service_id)
    service.duration_minutes = 30
    db.commit()

    # 17:30 only fits a 30 minute service
    with pytest.raises(SlotNotOffered):
        reschedule_appointment(db, salon.organization_id, appointment.id, MONDAY, time(17, 30), now=NOW)


def test_cannot_reschedule_finished_appointment(db, salon):
    appointment = book_via_service(db, salon)
    change_status(db, salon.organization_id, appointment.id, AppointmentStatus.COMPLETED)
    with pytest.raises(InvalidStatusTransition):
        reschedule_appointment(db, salon.organization_id, appointment.id, MONDAY, time(14, 0), now=NOW)


def test_status_flow(db, salon):
    appointment = book_via_service(db, salon)
    appointment = change_status(db, salon.organization_id, appointment.id, AppointmentStatus.CONFIRMED)
    assert appointment.status == "confirmed"
    appointment = change_status(db, salon.organization_id, appointment.id, AppointmentStatus.COMPLETED)
    assert appointment.status == "completed"

    with pytest.raises(InvalidStatusTransition):
        change_status(db, salon.organization_id, appointment.id, AppointmentStatus.CANCELLED)


def test_list_appointments_filters(db, salon, book):
    book(datetime(2030, 1, 7, 9, 0))
    book(datetime(2030, 1, 7, 15, 0), status="cancelled")
    book(datetime(2030, 1, 8, 9, 0))

    assert len(list_appointments(db, salon.organization_id, target_date=MONDAY)) == 2
    assert len(list_appointments(db, salon.organization_id, status=AppointmentStatus.CANCELLED)) == 1
    assert len(list_appointments(db, salon.organization_id, target_date=date(2030, 1, 9))) == 0


def test_holiday_added_after_booking_blocks_new_bookings(db, salon):
    book_via_service(db, salon)
    db.add(DateException(organization_id=salon.organization_id, exception_date=MONDAY, is_closed=True))
    db.commit()

    with pytest.raises(OrganizationClosed):
        book_via_service(db, salon, start_time=time(15, 0))


def test_booking_write_holds_the_professional_lock(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'salon.db'}",
        connect_args={"check_same_thread": False, "timeout": 0.2},
    )
    init_db(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = Session()
    salon = seed_salon(setup)
    setup.close()

    holder, other = Session(), Session()
    start = datetime(2030, 1, 7, 10, 0)
    try:
        # first request: checked under the lock, not yet committed
        _lock_professional(holder, salon.organization_id, salon.professional_id)
        _assert_no_overlap(holder, salon.organization_id, salon.professional_id, start, 60)

        with pytest.raises(OperationalError):
            book_via_service(other, salon)

        holder.add(Appointment(
            organization_id=salon.organization_id,
            professional_id=salon.professional_id,
            service_id=salon.service_id,
            client_id=salon.client_id,
            scheduled_at=start,
            duration_minutes=60,
            price=80.0,
        ))
        holder.commit()

        with pytest.raises(BookingConflict):
            book_via_service(other, salon)

        assert other.query(Appointment).count() == 1
    finally:
        holder.close()
        other.close()
        engine.dispose()
