# app/scheduling/domain.py
"""
Value types exchanged by the scheduling core.

Times of day are whole minutes since midnight in the organization's
timezone. Weekdays follow 0=Sunday .. 6=Saturday.
"""
from datetime import date, datetime, time
from enum import Enum
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field, model_validator

MINUTES_PER_DAY = 24 * 60


def to_minutes(value: Union[time, str, int]) -> int:
    """Convert a ``time``, "HH:MM" / "HH:MM:SS" string or minute count to minutes since midnight."""
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {type(value)} to minutes")
    if isinstance(value, int):
        return value
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) not in (2, 3):
            raise ValueError(f"Invalid time of day: {value!r}")
        hours, minutes = int(parts[0]), int(parts[1])
        if not (0 <= hours <= 24 and 0 <= minutes < 60) or hours * 60 + minutes > MINUTES_PER_DAY:
            raise ValueError(f"Invalid time of day: {value!r}")
        return hours * 60 + minutes
    raise ValueError(f"Cannot convert {type(value)} to minutes")


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_of(target_date: date) -> int:
    """Weekday with Sunday as 0."""
    return target_date.isoweekday() % 7


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class ClosureReason(str, Enum):
    PROFESSIONAL_EXCEPTION = "professional_exception"
    ORGANIZATION_EXCEPTION = "organization_exception"
    NOT_WORKING_DAY = "not_working_day"
    ORGANIZATION_CLOSED_DAY = "organization_closed_day"
    NO_OVERLAP = "no_overlap"
    CONFIGURATION_MISSING = "configuration_missing"
    INVALID_SPECIAL_HOURS = "invalid_special_hours"


class DayHours(BaseModel):
    open: int
    close: int

    @model_validator(mode="after")
    def _check_order(self):
        if self.open >= self.close:
            raise ValueError("open must be before close")
        return self

    class Config:
        frozen = True


# weekday -> hours, None meaning closed that weekday
OrganizationHours = Dict[int, Optional[DayHours]]


class SlotConfig(BaseModel):
    interval_minutes: int = Field(default=30, gt=0)
    buffer_minutes: int = Field(default=0, ge=0)

    class Config:
        frozen = True


class AvailabilityRecord(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6)
    start: int
    end: int

    class Config:
        frozen = True


class DateExceptionRecord(BaseModel):
    exception_date: date
    is_closed: bool = True
    special_open: Optional[int] = None
    special_close: Optional[int] = None
    reason: Optional[str] = None
    professional_id: Optional[int] = None

    class Config:
        frozen = True


class AppointmentRecord(BaseModel):
    id: int
    professional_id: int
    scheduled_at: datetime
    duration_minutes: int
    status: AppointmentStatus

    class Config:
        frozen = True


class Open(BaseModel):
    start: int
    end: int

    class Config:
        frozen = True


class Closed(BaseModel):
    reason: ClosureReason
    detail: Optional[str] = None

    class Config:
        frozen = True


WindowResult = Union[Open, Closed]


class Candidate(BaseModel):
    professional_id: int
    start: datetime
    duration_minutes: int = Field(..., gt=0)

    class Config:
        frozen = True


class Accept(BaseModel):
    accepted: bool = True

    class Config:
        frozen = True


class Reject(BaseModel):
    accepted: bool = False
    code: str
    message: str
    conflicting_appointment_id: Optional[int] = None

    @classmethod
    def from_error(cls, error):
        return cls(
            code=error.code,
            message=error.message,
            conflicting_appointment_id=error.conflicting_appointment_id,
        )

    class Config:
        frozen = True


BookingDecision = Union[Accept, Reject]
