"""Request schemas for the public form, lawyer views and admin views."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from jurist.models.enums import Currency, PreferredContact, RequestStatus
from jurist.schemas.common import normalize_phone


class RequestCreate(BaseModel):
    """Public submission form."""

    description: str = Field(min_length=50, max_length=2000)
    budget: Decimal = Field(ge=0)
    currency: Currency = Currency.KZT
    contact_name: str = Field(min_length=2, max_length=100)
    phone: str
    email: Optional[EmailStr] = None
    preferred_contact: PreferredContact = PreferredContact.ANY

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: str) -> str:
        return normalize_phone(value)


class RequestSubmitted(BaseModel):
    message: str = "Request submitted successfully"
    request_number: str


class RequestPoolItem(BaseModel):
    """Pool listing row — never carries client phone or email."""

    id: uuid.UUID
    request_number: str
    description: str
    budget: Decimal
    currency: str
    contact_name: str
    preferred_contact: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class RequestDetail(RequestPoolItem):
    """Full request as seen by an approved lawyer."""

    phone: str
    email: Optional[str] = None
    assigned_lawyer_id: Optional[uuid.UUID] = None
    assigned_at: Optional[datetime] = None


class RequestAdmin(RequestDetail):
    ip_address: str
    updated_at: datetime


class RequestStatusUpdate(BaseModel):
    status: RequestStatus
