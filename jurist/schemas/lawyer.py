"""Lawyer profile schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from jurist.models.enums import LawyerType
from jurist.schemas.common import normalize_phone

REJECTION_REASON_MIN_LENGTH = 10


class LawyerRegister(BaseModel):
    email: EmailStr
    lawyer_type: LawyerType
    full_name: str = Field(min_length=2, max_length=200)
    national_id: str = Field(pattern=r"^[0-9]{12}$")
    phone: str

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: str) -> str:
        return normalize_phone(value)


class LawyerProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    phone: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: Optional[str]) -> Optional[str]:
        return normalize_phone(value) if value is not None else None


class RejectLawyer(BaseModel):
    reason: str


class LawyerSummary(BaseModel):
    id: uuid.UUID
    email: str
    lawyer_type: str
    full_name: str
    phone: str
    status: str
    email_verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class LawyerProfileOut(LawyerSummary):
    national_id: str
    photo_url: str
    diploma_url: str
    license_url: str
    rejection_reason: Optional[str] = None


class LawyerDetail(LawyerProfileOut):
    """Admin view including moderation trail."""

    external_id: str
    email_verified_at: Optional[datetime] = None
    moderated_by: Optional[uuid.UUID] = None
    moderated_at: Optional[datetime] = None
    updated_at: datetime


class ModerationResult(BaseModel):
    message: str
    lawyer: LawyerSummary
