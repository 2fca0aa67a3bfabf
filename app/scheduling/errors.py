# app/scheduling/errors.py
"""
Scheduling error taxonomy.

Every error carries a stable ``code`` so callers (and the HTTP layer) can
tell the rejection kinds apart without parsing messages.
"""
from typing import Optional


class SchedulingError(Exception):
    code = "SCHEDULING_ERROR"
    default_message = "The booking could not be scheduled"

    def __init__(self, message: Optional[str] = None, conflicting_appointment_id: Optional[int] = None):
        self.message = message or self.default_message
        self.conflicting_appointment_id = conflicting_appointment_id
        super().__init__(self.message)


class ConfigurationMissing(SchedulingError):
    code = "CONFIGURATION_MISSING"
    default_message = "Business hours have not been configured for this organization"


class ProfessionalUnavailable(SchedulingError):
    code = "PROFESSIONAL_UNAVAILABLE"
    default_message = "The professional is not available on this date"


class OrganizationClosed(SchedulingError):
    code = "ORGANIZATION_CLOSED"
    default_message = "The organization is closed on this date"


class SlotNotOffered(SchedulingError):
    code = "SLOT_NOT_OFFERED"
    default_message = "The requested time is not an available slot"


class BookingConflict(SchedulingError):
    code = "BOOKING_CONFLICT"
    default_message = "This slot was just taken, please choose another"


class InvalidStatusTransition(SchedulingError):
    code = "INVALID_STATUS_TRANSITION"
    default_message = "The appointment cannot move to the requested status"


class EntityNotFound(SchedulingError):
    code = "NOT_FOUND"
    default_message = "Not found"
