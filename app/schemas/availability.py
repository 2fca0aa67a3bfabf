# app/schemas/availability.py
from pydantic import BaseModel, Field, conint, model_validator
from typing import List, Optional
from datetime import time, date, datetime


class ProfessionalAvailabilityCreate(BaseModel):
    day_of_week: conint(ge=0, le=6) = Field(..., description="0=Sun, 1=Mon, …, 6=Sat")
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def _check_range(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class ProfessionalAvailabilityReplace(BaseModel):
    # replaces the whole weekly schedule
    availability: List[ProfessionalAvailabilityCreate]


class ProfessionalAvailabilityResponse(BaseModel):
    id: int
    professional_id: int
    day_of_week: int
    start_time: time
    end_time: time

    class Config:
        from_attributes = True


class DateExceptionCreate(BaseModel):
    exception_date: date
    is_closed: bool = True
    special_open: Optional[time] = None
    special_close: Optional[time] = None
    reason: Optional[str] = None
    professional_id: Optional[int] = Field(None, description="null = whole organization")

    @model_validator(mode="after")
    def _check_special_hours(self):
        if self.is_closed:
            return self
        if self.special_open is None or self.special_close is None:
            raise ValueError("special_open and special_close are required when is_closed is false")
        if self.special_open >= self.special_close:
            raise ValueError("special_open must be before special_close")
        return self


class DateExceptionResponse(BaseModel):
    id: int
    organization_id: int
    professional_id: Optional[int]
    exception_date: date
    is_closed: bool
    special_open: Optional[time]
    special_close: Optional[time]
    reason: Optional[str]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SlotsResponse(BaseModel):
    date: date
    professional_id: int
    service_id: int
    service_duration: int
    slots: List[str]
    closed: bool = False
    message: Optional[str] = None
