# app/schemas/appointment.py
from pydantic import BaseModel
from datetime import date, time, datetime
from typing import Optional

from app.scheduling.domain import AppointmentStatus


# --- CREATE ---
class AppointmentCreate(BaseModel):
    client_id: int
    professional_id: int
    service_id: int
    date: date
    start_time: time
    notes: Optional[str] = None


class AppointmentValidate(BaseModel):
    professional_id: int
    service_id: int
    date: date
    start_time: time


# --- UPDATE ---
class AppointmentReschedule(BaseModel):
    date: date
    start_time: time


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


# --- RESPONSE ---
class AppointmentResponse(BaseModel):
    id: int
    organization_id: int
    professional_id: int
    service_id: int
    client_id: int
    scheduled_at: datetime
    duration_minutes: int
    price: float
    status: AppointmentStatus
    notes: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingDecisionResponse(BaseModel):
    accepted: bool
    code: Optional[str] = None
    message: Optional[str] = None
    conflicting_appointment_id: Optional[int] = None
