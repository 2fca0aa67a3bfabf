import pytest

from app.scheduling.domain import Closed, ClosureReason, Open, format_minutes, to_minutes, weekday_of
from app.scheduling.slots import generate_slots


def times(slots):
    return [format_minutes(s) for s in slots]


def test_service_must_fit_before_close():
    window = Open(start=to_minutes("09:00"), end=to_minutes("18:00"))
    slots = times(generate_slots(window, 30, 60))
    assert slots[0] == "09:00"
    assert slots[-1] == "17:00"
    assert "17:30" not in slots
    assert len(slots) == 17


def test_slot_ending_exactly_at_close_is_offered():
    window = Open(start=to_minutes("09:00"), end=to_minutes("10:00"))
    assert times(generate_slots(window, 30, 60)) == ["09:00"]


def test_window_shorter_than_service():
    window = Open(start=to_minutes("09:00"), end=to_minutes("09:45"))
    assert generate_slots(window, 15, 60) == []


def test_closed_window_has_no_slots():
    assert generate_slots(Closed(reason=ClosureReason.NOT_WORKING_DAY), 30, 60) == []


def test_interval_independent_of_duration():
    window = Open(start=to_minutes("09:00"), end=to_minutes("10:00"))
    assert times(generate_slots(window, 15, 30)) == ["09:00", "09:15", "09:30"]


def test_generation_is_deterministic():
    window = Open(start=to_minutes("08:30"), end=to_minutes("17:15"))
    assert generate_slots(window, 20, 45) == generate_slots(window, 20, 45)


@pytest.mark.parametrize("interval,duration", [(0, 60), (-30, 60), (30, 0), (30, -15)])
def test_non_positive_arguments_rejected(interval, duration):
    window = Open(start=to_minutes("09:00"), end=to_minutes("18:00"))
    with pytest.raises(ValueError):
        generate_slots(window, interval, duration)


@pytest.mark.parametrize("value,expected", [
    ("09:00", 540),
    ("17:30:00", 1050),
    ("24:00", 1440),
    (615, 615),
])
def test_to_minutes(value, expected):
    assert to_minutes(value) == expected


@pytest.mark.parametrize("value", ["9", "25:00", "24:30", "10:75", "abc"])
def test_to_minutes_rejects_invalid(value):
    with pytest.raises(ValueError):
        to_minutes(value)


def test_weekday_starts_on_sunday():
    from datetime import date
    assert weekday_of(date(2030, 1, 6)) == 0
    assert weekday_of(date(2030, 1, 7)) == 1
    assert weekday_of(date(2030, 1, 12)) == 6
