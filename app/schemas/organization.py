# app/schemas/organization.py
from pydantic import BaseModel, Field, field_validator
from typing import Dict, Optional
from datetime import datetime

from app.scheduling.domain import to_minutes


class DayHoursSchema(BaseModel):
    open: str = Field(..., description="HH:MM")
    close: str = Field(..., description="HH:MM")

    @field_validator("open", "close")
    @classmethod
    def _valid_time(cls, value):
        to_minutes(value)
        return value

    @field_validator("close")
    @classmethod
    def _close_after_open(cls, value, info):
        opening = info.data.get("open")
        if opening is not None and to_minutes(value) <= to_minutes(opening):
            raise ValueError("close must be after open")
        return value


class OrganizationSettingsUpdate(BaseModel):
    # keys "0".."6", 0 = Sunday; null = closed that weekday
    business_hours: Dict[str, Optional[DayHoursSchema]]
    slot_interval_minutes: int = Field(30, gt=0, le=240)
    buffer_minutes: int = Field(0, ge=0, le=240)
    timezone: str = "America/Sao_Paulo"
    min_booking_advance_hours: int = Field(0, ge=0)
    max_booking_advance_days: int = Field(30, ge=1)

    @field_validator("business_hours")
    @classmethod
    def _weekday_keys(cls, value):
        for key in value:
            if key not in {str(d) for d in range(7)}:
                raise ValueError(f"Invalid weekday key {key!r}, use 0 (Sunday) .. 6 (Saturday)")
        return value

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value):
        import pytz

        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone {value!r}")
        return value


class OrganizationSettingsResponse(OrganizationSettingsUpdate):
    organization_id: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrganizationCreate(BaseModel):
    name: str
    whatsapp_number: Optional[str] = None


class OrganizationUpdate(BaseModel):
    name: Optional[str] = None
    whatsapp_number: Optional[str] = None


class OrganizationResponse(BaseModel):
    id: int
    name: str
    whatsapp_number: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
