"""Service request submitted by a client, and its daily number counter."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jurist.models.base import Base, TimestampMixin, UUIDMixin
from jurist.models.enums import Currency, PreferredContact, RequestStatus


class Request(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "requests"

    request_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    budget: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default=Currency.KZT.value)

    # Client contacts
    contact_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(12), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    preferred_contact: Mapped[str] = mapped_column(
        String(10), default=PreferredContact.ANY.value
    )
    ip_address: Mapped[str] = mapped_column(String(45), nullable=False, index=True)

    # Assignment (assigned_lawyer_id is set iff status == IN_PROGRESS)
    status: Mapped[str] = mapped_column(
        String(20), default=RequestStatus.NEW.value, nullable=False, index=True
    )
    assigned_lawyer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("lawyer_profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    assigned_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    assigned_lawyer = relationship("LawyerProfile", back_populates="assigned_requests")


class RequestCounter(Base):
    """Per-day sequence backing request numbers."""

    __tablename__ = "request_counters"

    day: Mapped[date] = mapped_column(Date, primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
