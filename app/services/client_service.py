# app/services/client_service.py
"""
Clients and phone-number lookups.

Phones are stored in E.164 (+5511999999999) so the same number typed as
"(11) 99999-9999", "11999999999" or "5511999999999" finds the same client.
"""
import logging
import re
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.client import Client
from app.db.models.organization import Organization
from app.scheduling.errors import EntityNotFound

logger = logging.getLogger(__name__)

COUNTRY_CODE = "55"


class DuplicateClient(ValueError):
    pass


def normalize_phone(value: Optional[str]) -> Optional[str]:
    """
    Normalize a Brazilian phone number to E.164.

    Accepts area code + number (10 or 11 digits, an optional leading trunk 0)
    or the same prefixed with the 55 country code, with any punctuation.
    Returns None when the input is not a usable number.
    """
    if not value or not value.strip():
        return None

    digits = re.sub(r"\D", "", value)
    if digits.startswith("0"):
        digits = digits[1:]

    if len(digits) in (12, 13) and digits.startswith(COUNTRY_CODE):
        return f"+{digits}"
    if len(digits) in (10, 11):
        return f"+{COUNTRY_CODE}{digits}"
    return None


def _require_phone(value: str) -> str:
    phone = normalize_phone(value)
    if phone is None:
        raise ValueError(f"Invalid phone number: {value!r}")
    return phone


def get_client_by_phone(db: Session, organization_id: int, phone: str) -> Optional[Client]:
    return db.query(Client).filter(
        Client.organization_id == organization_id,
        Client.phone == phone
    ).first()


def create_client(
    db: Session,
    organization_id: int,
    name: str,
    phone: Optional[str] = None,
    email: Optional[str] = None
) -> Client:
    normalized = _require_phone(phone) if phone else None
    if normalized and get_client_by_phone(db, organization_id, normalized):
        raise DuplicateClient("A client with this phone already exists")

    client = Client(organization_id=organization_id, name=name, phone=normalized, email=email)
    db.add(client)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateClient("A client with this phone already exists")

    db.refresh(client)
    return client


def find_or_create_client(
    db: Session,
    organization_id: int,
    phone: str,
    name: Optional[str] = None
) -> Tuple[Client, bool]:
    """
    Return (client, is_new) for the phone number within the organization.

    A new client without a name is called "Cliente <last 4 digits>".
    """
    normalized = _require_phone(phone)

    existing = get_client_by_phone(db, organization_id, normalized)
    if existing:
        logger.debug(f"Client {existing.id} found for {normalized}")
        return existing, False

    client = Client(
        organization_id=organization_id,
        name=name or f"Cliente {normalized[-4:]}",
        phone=normalized,
    )
    db.add(client)
    try:
        db.commit()
    except IntegrityError:
        # created by a concurrent request
        db.rollback()
        existing = get_client_by_phone(db, organization_id, normalized)
        if existing is None:
            raise
        return existing, False

    db.refresh(client)
    logger.info(f"Client {client.id} created for {normalized} in organization {organization_id}")
    return client, True


def get_organization_by_whatsapp(db: Session, whatsapp_number: str) -> Organization:
    normalized = normalize_phone(whatsapp_number)
    if normalized is None:
        raise ValueError(f"Invalid WhatsApp number: {whatsapp_number!r}")

    org = db.query(Organization).filter(Organization.whatsapp_number == normalized).first()
    if not org:
        raise EntityNotFound("No organization is registered for this WhatsApp number")
    return org
