# app/schemas/service.py

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


# Shared fields
class ServiceBase(BaseModel):
    name: str
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    duration_minutes: int = Field(..., gt=0)
    is_active: Optional[bool] = True


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None


# What API returns
class ServiceResponse(BaseModel):
    id: int
    organization_id: int

    name: str
    description: Optional[str]
    price: float
    duration_minutes: int
    is_active: bool

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
