"""Outbound notification tasks carried on the Redis queue."""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class NotificationKind(str, Enum):
    LAWYER_APPROVED = "lawyer_approved"
    LAWYER_REJECTED = "lawyer_rejected"
    REQUEST_CONFIRMATION = "request_confirmation"
    LAWYERS_NEW_REQUEST = "lawyers_new_request"
    ADMIN_NEW_REQUEST = "admin_new_request"
    ADMIN_NEW_LAWYER = "admin_new_lawyer"


class NotificationTask(BaseModel):
    kind: NotificationKind
    payload: dict[str, Any] = {}
    attempts: int = 0
