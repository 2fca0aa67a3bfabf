# app/db/models/availability.py
from sqlalchemy import (
    Column, Integer, Time, Date, ForeignKey, Boolean, DateTime, String,
    CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class ProfessionalAvailability(Base):
    """
    Recurring weekly availability for a professional.
    day_of_week: 0 (Sunday) .. 6 (Saturday)
    start_time, end_time: times (HH:MM:SS)
    """
    __tablename__ = "professional_availability"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6"),
        CheckConstraint("end_time > start_time"),
        UniqueConstraint("professional_id", "day_of_week", name="uq_professional_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    professional_id = Column(Integer, ForeignKey("professionals.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    professional = relationship("Professional", back_populates="availabilities")


class DateException(Base):
    """
    One-off override of regular hours for a single date.
    professional_id NULL means organization-wide (holiday), otherwise a
    professional's day off. When is_closed is false, special_open and
    special_close replace the normal hours for that date.
    """
    __tablename__ = "date_exceptions"
    __table_args__ = (
        UniqueConstraint("organization_id", "professional_id", "exception_date", name="uq_exception_scope_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    professional_id = Column(Integer, ForeignKey("professionals.id", ondelete="CASCADE"), nullable=True)

    exception_date = Column(Date, nullable=False, index=True)
    is_closed = Column(Boolean, nullable=False, default=True)
    special_open = Column(Time, nullable=True)
    special_close = Column(Time, nullable=True)
    reason = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    professional = relationship("Professional", foreign_keys=[professional_id])
