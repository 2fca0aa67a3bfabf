from datetime import date
from itertools import permutations

import pytest

from app.scheduling.availability import closure_error, resolve_window
from app.scheduling.domain import (
    AvailabilityRecord,
    Closed,
    ClosureReason,
    DateExceptionRecord,
    DayHours,
    Open,
    to_minutes,
)
from app.scheduling.errors import ConfigurationMissing, OrganizationClosed, ProfessionalUnavailable

MONDAY = date(2030, 1, 7)
SUNDAY = date(2030, 1, 6)
PRO = 1


def hm(value):
    return to_minutes(value)


def org_hours(closed_sunday=True):
    hours = {d: DayHours(open=hm("09:00"), close=hm("18:00")) for d in range(7)}
    if closed_sunday:
        hours[0] = None
    return hours


def weekly(day=1, start="09:00", end="18:00"):
    return [AvailabilityRecord(day_of_week=day, start=hm(start), end=hm(end))]


def test_weekly_hours_intersect_business_hours():
    result = resolve_window(MONDAY, PRO, org_hours(), weekly(start="08:00", end="16:00"), [])
    assert result == Open(start=hm("09:00"), end=hm("16:00"))


def test_disjoint_windows_are_closed():
    hours = org_hours()
    hours[1] = DayHours(open=hm("09:00"), close=hm("12:00"))
    result = resolve_window(MONDAY, PRO, hours, weekly(start="13:00", end="18:00"), [])
    assert result == Closed(reason=ClosureReason.NO_OVERLAP)


def test_not_working_day_without_weekly_record():
    result = resolve_window(MONDAY, PRO, org_hours(), weekly(day=2), [])
    assert result == Closed(reason=ClosureReason.NOT_WORKING_DAY)


def test_empty_availability_is_not_an_error():
    result = resolve_window(MONDAY, PRO, org_hours(), [], [])
    assert result == Closed(reason=ClosureReason.NOT_WORKING_DAY)


def test_organization_closed_weekday():
    result = resolve_window(SUNDAY, PRO, org_hours(), weekly(day=0), [])
    assert result == Closed(reason=ClosureReason.ORGANIZATION_CLOSED_DAY)


def test_missing_business_hours_fail_closed():
    result = resolve_window(MONDAY, PRO, None, weekly(), [])
    assert result == Closed(reason=ClosureReason.CONFIGURATION_MISSING)
    assert isinstance(closure_error(result), ConfigurationMissing)


def test_missing_business_hours_use_fallback_when_given():
    fallback = DayHours(open=hm("08:00"), close=hm("22:00"))
    result = resolve_window(MONDAY, PRO, None, weekly(start="07:00", end="20:00"), [], fallback_hours=fallback)
    assert result == Open(start=hm("08:00"), end=hm("20:00"))


def test_duplicate_weekday_records_use_earliest():
    availability = [
        AvailabilityRecord(day_of_week=1, start=hm("14:00"), end=hm("18:00")),
        AvailabilityRecord(day_of_week=1, start=hm("09:00"), end=hm("12:00")),
    ]
    result = resolve_window(MONDAY, PRO, org_hours(), availability, [])
    assert result == Open(start=hm("09:00"), end=hm("12:00"))


def test_exceptions_for_other_dates_are_ignored():
    other_day = DateExceptionRecord(exception_date=date(2030, 1, 8), is_closed=True)
    result = resolve_window(MONDAY, PRO, org_hours(), weekly(), [other_day])
    assert isinstance(result, Open)


def test_exceptions_for_other_professionals_are_ignored():
    someone_else = DateExceptionRecord(exception_date=MONDAY, is_closed=True, professional_id=99)
    result = resolve_window(MONDAY, PRO, org_hours(), weekly(), [someone_else])
    assert isinstance(result, Open)


def test_organization_special_hours_override_weekly_hours():
    special = DateExceptionRecord(
        exception_date=MONDAY, is_closed=False,
        special_open=hm("10:00"), special_close=hm("14:00"),
    )
    result = resolve_window(MONDAY, PRO, org_hours(), weekly(), [special])
    assert result == Open(start=hm("10:00"), end=hm("14:00"))


def test_special_hours_open_a_normally_closed_weekday():
    special = DateExceptionRecord(
        exception_date=SUNDAY, is_closed=False,
        special_open=hm("10:00"), special_close=hm("14:00"),
    )
    result = resolve_window(SUNDAY, PRO, org_hours(), [], [special])
    assert result == Open(start=hm("10:00"), end=hm("14:00"))


def test_special_hours_missing_bound_keeps_regular_bound():
    special = DateExceptionRecord(exception_date=MONDAY, is_closed=False, special_close=hm("13:00"))
    result = resolve_window(MONDAY, PRO, org_hours(), weekly(start="10:00"), [special])
    assert result == Open(start=hm("10:00"), end=hm("13:00"))


def test_inverted_special_hours_are_closed():
    special = DateExceptionRecord(
        exception_date=MONDAY, is_closed=False,
        special_open=hm("15:00"), special_close=hm("11:00"),
    )
    result = resolve_window(MONDAY, PRO, org_hours(), weekly(), [special])
    assert result.reason == ClosureReason.INVALID_SPECIAL_HOURS


def test_closed_exception_wins_within_scope():
    special = DateExceptionRecord(
        exception_date=MONDAY, is_closed=False,
        special_open=hm("10:00"), special_close=hm("14:00"),
    )
    holiday = DateExceptionRecord(exception_date=MONDAY, is_closed=True, reason="Holiday")
    for exceptions in permutations([special, holiday]):
        result = resolve_window(MONDAY, PRO, org_hours(), weekly(), list(exceptions))
        assert result == Closed(reason=ClosureReason.ORGANIZATION_EXCEPTION, detail="Holiday")


def test_priority_does_not_depend_on_input_order():
    pro_special = DateExceptionRecord(
        exception_date=MONDAY, is_closed=False, professional_id=PRO,
        special_open=hm("11:00"), special_close=hm("15:00"),
    )
    org_closed = DateExceptionRecord(exception_date=MONDAY, is_closed=True, reason="Holiday")
    org_special = DateExceptionRecord(
        exception_date=MONDAY, is_closed=False,
        special_open=hm("10:00"), special_close=hm("12:00"),
    )
    for exceptions in permutations([pro_special, org_closed, org_special]):
        result = resolve_window(MONDAY, PRO, org_hours(), weekly(), list(exceptions))
        assert result == Open(start=hm("11:00"), end=hm("15:00"))


def test_professional_day_off_beats_everything():
    day_off = DateExceptionRecord(exception_date=MONDAY, is_closed=True, professional_id=PRO, reason="Vacation")
    org_special = DateExceptionRecord(
        exception_date=MONDAY, is_closed=False,
        special_open=hm("10:00"), special_close=hm("12:00"),
    )
    for exceptions in permutations([org_special, day_off]):
        result = resolve_window(MONDAY, PRO, org_hours(), weekly(), list(exceptions))
        assert result == Closed(reason=ClosureReason.PROFESSIONAL_EXCEPTION, detail="Vacation")


@pytest.mark.parametrize("reason,error_cls", [
    (ClosureReason.PROFESSIONAL_EXCEPTION, ProfessionalUnavailable),
    (ClosureReason.NOT_WORKING_DAY, ProfessionalUnavailable),
    (ClosureReason.NO_OVERLAP, ProfessionalUnavailable),
    (ClosureReason.ORGANIZATION_EXCEPTION, OrganizationClosed),
    (ClosureReason.ORGANIZATION_CLOSED_DAY, OrganizationClosed),
    (ClosureReason.CONFIGURATION_MISSING, ConfigurationMissing),
])
def test_closure_error_kinds(reason, error_cls):
    assert isinstance(closure_error(Closed(reason=reason)), error_cls)


def test_closure_error_carries_detail():
    error = closure_error(Closed(reason=ClosureReason.ORGANIZATION_EXCEPTION, detail="Carnival"))
    assert error.message.endswith(": Carnival")
