"""
Overlap Detection

Detects scheduling conflicts between a candidate booking and a professional's
existing appointments, keeping a buffer gap on both sides of every booking.
"""

from datetime import timedelta
from typing import Iterable, Union

from app.scheduling.domain import (
    Accept,
    AppointmentRecord,
    AppointmentStatus,
    Candidate,
    Reject,
)
from app.scheduling.errors import BookingConflict

# Statuses that hold the professional's time
BLOCKING_STATUSES = frozenset({
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.COMPLETED,
})


def is_blocking(status: AppointmentStatus) -> bool:
    return AppointmentStatus(status) in BLOCKING_STATUSES


def check_conflict(
    candidate: Candidate,
    existing: Iterable[AppointmentRecord],
    buffer_minutes: int = 0,
) -> Union[Accept, Reject]:
    """
    Check a candidate booking against existing appointments.

    Each blocking appointment of the same professional is widened by
    buffer_minutes on both sides; the candidate conflicts when

        candidate.start < existing.end + buffer
        AND candidate.end > existing.start - buffer

    Returns:
        Accept() or Reject carrying the first conflicting appointment id
    """
    if buffer_minutes < 0:
        raise ValueError("buffer_minutes must not be negative")

    buffer = timedelta(minutes=buffer_minutes)
    candidate_end = candidate.start + timedelta(minutes=candidate.duration_minutes)

    for appointment in existing:
        if appointment.professional_id != candidate.professional_id:
            continue
        if not is_blocking(appointment.status):
            continue

        start = appointment.scheduled_at
        end = start + timedelta(minutes=appointment.duration_minutes)

        if candidate.start < end + buffer and candidate_end > start - buffer:
            error = BookingConflict(conflicting_appointment_id=appointment.id)
            return Reject.from_error(error)

    return Accept()
