"""Audit recorder — appends AuditLog rows in the caller's transaction."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from jurist.models.audit_log import AuditLog

logger = structlog.get_logger()


class AuditRecorder:
    """Append-only writer. Rows are flushed with the transition they document."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        actor_id: uuid.UUID,
        actor_kind: str,
        action: str,
        target_type: str,
        target_id: uuid.UUID,
        detail: Optional[dict[str, Any]] = None,
        ip: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AuditLog:
        entry = AuditLog(
            actor_id=actor_id,
            actor_type=actor_kind,
            action=action,
            target_type=target_type,
            target_id=target_id,
            details=detail,
            ip_address=ip,
        )
        if now is not None:
            entry.created_at = now

        self.db.add(entry)
        await self.db.flush()

        logger.info(
            "audit_recorded",
            actor_id=str(actor_id),
            action=action,
            target_type=target_type,
            target_id=str(target_id),
        )
        return entry
