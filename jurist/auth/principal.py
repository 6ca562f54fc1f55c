"""Authenticated callers.

A principal is either a lawyer (carrying the moderation status read at
resolution time) or an administrator. Operations that need a lawyer still
re-read the status before acting.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Union

import structlog
from redis.asyncio import Redis
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jurist.auth.sessions import get_session
from jurist.exceptions import Unauthorized
from jurist.models.admin_user import AdminUser
from jurist.models.lawyer import LawyerProfile

logger = structlog.get_logger()


@dataclass(frozen=True)
class LawyerPrincipal:
    profile_id: uuid.UUID
    status: str


@dataclass(frozen=True)
class AdminPrincipal:
    admin_id: uuid.UUID
    role: str


Principal = Union[LawyerPrincipal, AdminPrincipal]


async def resolve_principal(db: AsyncSession, redis: Redis, token: str) -> Principal:
    """Turn a session token into a principal.

    Raises:
        Unauthorized: Missing/expired session or unknown subject
    """
    session = await get_session(redis, token)
    if not session:
        raise Unauthorized("Session expired or invalid")

    try:
        subject_id = uuid.UUID(str(session.get("subject_id")))
    except ValueError as e:
        raise Unauthorized("Session expired or invalid") from e

    if session["kind"] == "admin":
        result = await db.execute(
            select(AdminUser.role).where(
                AdminUser.id == subject_id,
                AdminUser.is_active == True,  # noqa: E712
            )
        )
        role = result.scalar_one_or_none()
        if role is None:
            logger.warning("session_admin_missing", admin_id=str(subject_id))
            raise Unauthorized("Administrator account not found")
        return AdminPrincipal(admin_id=subject_id, role=role)

    result = await db.execute(
        select(LawyerProfile.status).where(LawyerProfile.id == subject_id)
    )
    status = result.scalar_one_or_none()
    if status is None:
        logger.warning("session_lawyer_missing", profile_id=str(subject_id))
        raise Unauthorized("Lawyer profile not found")
    return LawyerPrincipal(profile_id=subject_id, status=status)
