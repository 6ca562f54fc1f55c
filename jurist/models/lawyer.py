"""Lawyer profile — marketplace participant pending or granted access."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jurist.models.base import Base, TimestampMixin, UUIDMixin
from jurist.models.enums import LawyerStatus


class LawyerProfile(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "lawyer_profiles"

    # Identity
    external_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    national_id: Mapped[str] = mapped_column(String(12), unique=True, nullable=False)

    lawyer_type: Mapped[str] = mapped_column(String(20), nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(12), nullable=False)

    # Verification documents
    photo_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    diploma_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    license_url: Mapped[str] = mapped_column(String(1000), nullable=False)

    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    email_verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Moderation
    status: Mapped[str] = mapped_column(
        String(20), default=LawyerStatus.PENDING.value, nullable=False, index=True
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    moderated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("admin_users.id"), nullable=True
    )
    moderated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    moderator = relationship("AdminUser")
    assigned_requests = relationship("Request", back_populates="assigned_lawyer")
