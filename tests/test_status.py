import pytest

from app.scheduling.domain import AppointmentStatus as S
from app.scheduling.errors import InvalidStatusTransition
from app.scheduling.status import can_transition, ensure_transition


@pytest.mark.parametrize("current,target", [
    (S.SCHEDULED, S.CONFIRMED),
    (S.SCHEDULED, S.CANCELLED),
    (S.SCHEDULED, S.COMPLETED),
    (S.SCHEDULED, S.NO_SHOW),
    (S.CONFIRMED, S.COMPLETED),
    (S.CONFIRMED, S.CANCELLED),
    (S.CONFIRMED, S.NO_SHOW),
])
def test_allowed_transitions(current, target):
    assert can_transition(current, target)
    ensure_transition(current, target)


@pytest.mark.parametrize("terminal", [S.COMPLETED, S.CANCELLED, S.NO_SHOW])
def test_terminal_statuses_are_final(terminal):
    for target in S:
        assert not can_transition(terminal, target)


def test_confirmed_cannot_go_back_to_scheduled():
    with pytest.raises(InvalidStatusTransition) as exc:
        ensure_transition(S.CONFIRMED, S.SCHEDULED)
    assert "confirmed to scheduled" in exc.value.message


def test_accepts_raw_values():
    assert can_transition("scheduled", "confirmed")
