"""Appointment status transitions."""

from app.scheduling.domain import AppointmentStatus
from app.scheduling.errors import InvalidStatusTransition

S = AppointmentStatus

TRANSITIONS = {
    S.SCHEDULED: frozenset({S.CONFIRMED, S.CANCELLED, S.COMPLETED, S.NO_SHOW}),
    S.CONFIRMED: frozenset({S.COMPLETED, S.CANCELLED, S.NO_SHOW}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
    S.NO_SHOW: frozenset(),
}

ACTIVE_STATUSES = frozenset({S.SCHEDULED, S.CONFIRMED})


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return AppointmentStatus(target) in TRANSITIONS[AppointmentStatus(current)]


def ensure_transition(current: AppointmentStatus, target: AppointmentStatus) -> None:
    if not can_transition(current, target):
        raise InvalidStatusTransition(
            f"Cannot change an appointment from {AppointmentStatus(current).value} "
            f"to {AppointmentStatus(target).value}"
        )
