"""
Availability Resolver

Computes the effective working window of a professional on a calendar date,
considering:
- Date exceptions scoped to the professional (days off, special hours)
- Organization-wide date exceptions (holidays, special hours)
- The professional's weekly availability
- The organization's weekly business hours
"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from app.scheduling.domain import (
    AvailabilityRecord,
    Closed,
    ClosureReason,
    DateExceptionRecord,
    DayHours,
    Open,
    OrganizationHours,
    WindowResult,
    weekday_of,
)
from app.scheduling.errors import (
    ConfigurationMissing,
    OrganizationClosed,
    ProfessionalUnavailable,
    SchedulingError,
)

logger = logging.getLogger(__name__)

_PROFESSIONAL_REASONS = {
    ClosureReason.PROFESSIONAL_EXCEPTION,
    ClosureReason.NOT_WORKING_DAY,
    ClosureReason.NO_OVERLAP,
    ClosureReason.INVALID_SPECIAL_HOURS,
}


def resolve_window(
    target_date: date,
    professional_id: int,
    organization_hours: Optional[OrganizationHours],
    availability: Iterable[AvailabilityRecord],
    exceptions: Iterable[DateExceptionRecord],
    fallback_hours: Optional[DayHours] = None,
) -> WindowResult:
    """
    Resolve the open window for a professional on a date.

    Args:
        target_date: calendar date being booked
        professional_id: professional whose window is resolved
        organization_hours: weekday -> DayHours (or None for a closed weekday);
            None when the organization never saved its hours
        availability: the professional's weekly availability records
        exceptions: date exceptions of the organization, any scope
        fallback_hours: hours used when organization_hours is None; without it
            an unconfigured organization resolves to Closed

    Returns:
        Open(start, end) or Closed(reason)

    Priority (first match wins):
        1. professional exception, closed
        2. professional exception, special hours
        3. organization exception, closed
        4. organization exception, special hours
        5. professional weekly availability intersected with business hours
    """
    day_exceptions = [e for e in exceptions if e.exception_date == target_date]
    scopes = (
        (
            [e for e in day_exceptions if e.professional_id == professional_id],
            ClosureReason.PROFESSIONAL_EXCEPTION,
        ),
        (
            [e for e in day_exceptions if e.professional_id is None],
            ClosureReason.ORGANIZATION_EXCEPTION,
        ),
    )

    availability = list(availability)

    for scoped, reason in scopes:
        if not scoped:
            continue

        # A closing exception outranks a special-hours one in the same scope
        closing = next((e for e in scoped if e.is_closed), None)
        if closing is not None:
            return Closed(reason=reason, detail=closing.reason)

        return _special_window(
            scoped[0], target_date, organization_hours, availability, fallback_hours
        )

    return _regular_window(target_date, organization_hours, availability, fallback_hours)


def closure_error(result: Closed) -> SchedulingError:
    """Map a closure to the error kind reported to booking callers."""
    if result.reason == ClosureReason.CONFIGURATION_MISSING:
        return ConfigurationMissing()
    if result.reason in _PROFESSIONAL_REASONS:
        message = ProfessionalUnavailable.default_message
        if result.detail:
            message = f"{message}: {result.detail}"
        return ProfessionalUnavailable(message)

    message = OrganizationClosed.default_message
    if result.detail:
        message = f"{message}: {result.detail}"
    return OrganizationClosed(message)


def _special_window(
    exception: DateExceptionRecord,
    target_date: date,
    organization_hours: Optional[OrganizationHours],
    availability: List[AvailabilityRecord],
    fallback_hours: Optional[DayHours],
) -> WindowResult:
    start, end = exception.special_open, exception.special_close

    # A missing bound keeps the regular bound for that day
    if start is None or end is None:
        regular = _regular_window(target_date, organization_hours, availability, fallback_hours)
        if isinstance(regular, Closed):
            return regular
        start = regular.start if start is None else start
        end = regular.end if end is None else end

    if start >= end:
        return Closed(reason=ClosureReason.INVALID_SPECIAL_HOURS, detail=exception.reason)

    return Open(start=start, end=end)


def _regular_window(
    target_date: date,
    organization_hours: Optional[OrganizationHours],
    availability: List[AvailabilityRecord],
    fallback_hours: Optional[DayHours],
) -> WindowResult:
    weekday = weekday_of(target_date)

    professional_window = _professional_window(weekday, availability)
    if professional_window is None:
        return Closed(reason=ClosureReason.NOT_WORKING_DAY)

    if organization_hours is None:
        if fallback_hours is None:
            return Closed(reason=ClosureReason.CONFIGURATION_MISSING)
        company_hours = fallback_hours
    else:
        company_hours = organization_hours.get(weekday)
        if company_hours is None:
            return Closed(reason=ClosureReason.ORGANIZATION_CLOSED_DAY)

    start = max(professional_window[0], company_hours.open)
    end = min(professional_window[1], company_hours.close)

    if start >= end:
        return Closed(reason=ClosureReason.NO_OVERLAP)

    return Open(start=start, end=end)


def _professional_window(
    weekday: int,
    availability: List[AvailabilityRecord],
) -> Optional[Tuple[int, int]]:
    records = sorted(
        (a for a in availability if a.day_of_week == weekday),
        key=lambda a: (a.start, a.end),
    )
    if not records:
        return None

    if len(records) > 1:
        # Only one record per weekday is honored; the earliest one wins
        logger.warning(
            "Found %d availability records for weekday %d, using %s-%s",
            len(records), weekday, records[0].start, records[0].end,
        )

    return records[0].start, records[0].end
