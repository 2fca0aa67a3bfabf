# app/api/deps.py
from datetime import datetime
from typing import Optional

from fastapi import HTTPException

from app.scheduling.errors import (
    BookingConflict,
    EntityNotFound,
    InvalidStatusTransition,
    SchedulingError,
)


def get_now() -> Optional[datetime]:
    """Clock override point; None means the organization's current local time."""
    return None


def to_http(error: SchedulingError) -> HTTPException:
    if isinstance(error, EntityNotFound):
        status_code = 404
    elif isinstance(error, (BookingConflict, InvalidStatusTransition)):
        status_code = 409
    else:
        status_code = 400

    detail = {"code": error.code, "message": error.message}
    if error.conflicting_appointment_id is not None:
        detail["conflicting_appointment_id"] = error.conflicting_appointment_id
    return HTTPException(status_code=status_code, detail=detail)
