# app/db/models/appointment.py
from sqlalchemy import Column, Integer, String, ForeignKey, Float, DateTime, CheckConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class Appointment(Base):
    """
    scheduled_at is the organization's local wall-clock time.
    duration_minutes and price are copied from the service when booked and
    never follow later changes to it.
    """
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint("duration_minutes > 0"),
        CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'completed', 'cancelled', 'no_show')",
            name="ck_appointment_status",
        ),
        Index("ix_appointments_professional_scheduled", "professional_id", "scheduled_at"),
    )

    id = Column(Integer, primary_key=True, index=True)

    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    professional_id = Column(Integer, ForeignKey("professionals.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)

    scheduled_at = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)

    status = Column(String, nullable=False, default="scheduled")
    notes = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # relationships
    professional = relationship("Professional", foreign_keys=[professional_id])
    service = relationship("Service", foreign_keys=[service_id])
    client = relationship("Client", foreign_keys=[client_id])
