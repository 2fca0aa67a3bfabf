# app/db/models/organization.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON, CheckConstraint, func
from sqlalchemy.orm import relationship
from app.db.base import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    # E.164, e.g. +5511999999999
    whatsapp_number = Column(String, nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    settings = relationship(
        "OrganizationSettings",
        back_populates="organization",
        uselist=False,
        lazy="selectin"
    )
    professionals = relationship("Professional", back_populates="organization", lazy="selectin")
    services = relationship("Service", back_populates="organization", lazy="selectin")


class OrganizationSettings(Base):
    """
    Scheduling configuration, one row per organization.
    business_hours: {"0": null, "1": {"open": "09:00", "close": "19:00"}, ...}
    keys are weekdays with 0 = Sunday, null means closed that weekday.
    """
    __tablename__ = "organization_settings"
    __table_args__ = (
        CheckConstraint("slot_interval_minutes > 0"),
        CheckConstraint("buffer_minutes >= 0"),
    )

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(
        Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    business_hours = Column(JSON, nullable=False)
    slot_interval_minutes = Column(Integer, nullable=False, default=30)
    buffer_minutes = Column(Integer, nullable=False, default=0)
    timezone = Column(String, nullable=False, default="America/Sao_Paulo")

    min_booking_advance_hours = Column(Integer, nullable=False, default=0)
    max_booking_advance_days = Column(Integer, nullable=False, default=30)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="settings")
