# app/schemas/professional.py
from pydantic import BaseModel
from typing import List, Optional


class ProfessionalCreate(BaseModel):
    name: str
    specialty: Optional[str] = None
    phone: Optional[str] = None
    service_ids: List[int] = []


class ProfessionalUpdate(BaseModel):
    name: Optional[str] = None
    specialty: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None


class ProfessionalServicesUpdate(BaseModel):
    service_ids: List[int]


class ProfessionalResponse(BaseModel):
    id: int
    organization_id: int
    name: str
    specialty: Optional[str]
    phone: Optional[str]
    is_active: bool

    class Config:
        from_attributes = True
