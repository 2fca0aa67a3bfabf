# app/db/models/service.py

from sqlalchemy import Column, DateTime, Integer, String, ForeignKey, Boolean, Float, func
from sqlalchemy.orm import relationship
from app.db.base import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)

    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    # Basic details
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    # Pricing
    price = Column(Float, nullable=False)

    # Duration (in minutes)
    duration_minutes = Column(Integer, nullable=False, default=60)

    # Status
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    organization = relationship("Organization", back_populates="services")
    professionals = relationship(
        "Professional",
        secondary="professional_services",
        back_populates="services",
        lazy="selectin"
    )
