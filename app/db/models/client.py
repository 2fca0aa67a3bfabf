# app/db/models/client.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, func
from app.db.base import Base


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (
        # NULL phones stay unconstrained
        UniqueConstraint("organization_id", "phone", name="uq_client_organization_phone"),
    )

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    # E.164, e.g. +5511999999999
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
