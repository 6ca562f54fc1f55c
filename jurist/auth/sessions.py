"""Redis session management for lawyers and administrators."""

from __future__ import annotations

import json
import secrets
from typing import Optional

import structlog
from redis.asyncio import Redis

from jurist.config import settings

logger = structlog.get_logger()

SESSION_PREFIX = "session:"
SESSION_KINDS = ("lawyer", "admin")


async def create_session(
    redis: Redis,
    kind: str,
    subject_id: str,
    ttl: Optional[int] = None,
) -> str:
    """Create a session in Redis.

    Args:
        redis: Redis client
        kind: "lawyer" or "admin"
        subject_id: UUID of the lawyer profile or admin user
        ttl: Lifetime in seconds (defaults to settings.session_ttl_seconds)

    Returns:
        Session token (random string)
    """
    if kind not in SESSION_KINDS:
        raise ValueError(f"Unknown session kind: {kind}")

    token = secrets.token_urlsafe(32)
    session_data = json.dumps({"kind": kind, "subject_id": str(subject_id)})

    await redis.setex(
        f"{SESSION_PREFIX}{token}",
        ttl or settings.session_ttl_seconds,
        session_data,
    )

    logger.info("session_created", kind=kind, subject_id=str(subject_id))
    return token


async def get_session(redis: Redis, token: str) -> Optional[dict]:
    """Get session data from Redis.

    Returns:
        Session dict with kind and subject_id, or None
    """
    if not token:
        return None

    data = await redis.get(f"{SESSION_PREFIX}{token}")
    if not data:
        return None

    try:
        session = json.loads(data)
    except (json.JSONDecodeError, TypeError):
        return None

    if not isinstance(session, dict) or session.get("kind") not in SESSION_KINDS:
        return None
    return session


async def delete_session(redis: Redis, token: str) -> None:
    """Delete a session from Redis."""
    await redis.delete(f"{SESSION_PREFIX}{token}")
