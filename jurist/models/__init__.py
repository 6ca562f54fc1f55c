"""SQLAlchemy ORM models."""

from jurist.models.base import Base
from jurist.models.admin_user import AdminUser
from jurist.models.audit_log import AuditLog
from jurist.models.lawyer import LawyerProfile
from jurist.models.request import Request, RequestCounter

__all__ = [
    "Base",
    "AdminUser",
    "AuditLog",
    "LawyerProfile",
    "Request",
    "RequestCounter",
]
