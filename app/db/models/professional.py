# app/db/models/professional.py
from sqlalchemy import Column, Integer, String, Boolean, Table, ForeignKey
from sqlalchemy.orm import relationship
from app.db.base import Base

# which services each professional performs
professional_services = Table(
    "professional_services",
    Base.metadata,
    Column("professional_id", Integer, ForeignKey("professionals.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", Integer, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
)


class Professional(Base):
    __tablename__ = "professionals"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    specialty = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # bumped by every booking write; the UPDATE is what holds the row lock
    booking_version = Column(Integer, nullable=False, default=0, server_default="0")

    organization = relationship("Organization", back_populates="professionals")

    services = relationship(
        "Service",
        secondary=professional_services,
        back_populates="professionals",
        lazy="selectin"
    )

    availabilities = relationship(
        "ProfessionalAvailability",
        back_populates="professional",
        cascade="all, delete-orphan",
        lazy="selectin"
    )
