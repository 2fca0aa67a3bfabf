# app/schemas/client.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ClientCreate(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None


class ClientResponse(ClientCreate):
    id: int
    organization_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- FIND OR CREATE (by phone) ---
class ClientLookup(BaseModel):
    phone: str
    name: Optional[str] = None


class ClientLookupResponse(BaseModel):
    client: ClientResponse
    is_new: bool
