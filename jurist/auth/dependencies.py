"""FastAPI dependencies for authentication and service construction."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from jurist.auth.principal import AdminPrincipal, LawyerPrincipal, Principal, resolve_principal
from jurist.database import get_db
from jurist.exceptions import Forbidden, Unauthorized
from jurist.lifecycle.engine import RequestLifecycle
from jurist.moderation.engine import ModerationEngine
from jurist.notifications.dispatcher import NotificationDispatcher
from jurist.redis_client import get_redis
from jurist.storage.documents import DocumentStore, get_document_store


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthorized("Authorization header is missing")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Expected a Bearer token")
    return token.strip()


async def get_principal(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis),
) -> Principal:
    return await resolve_principal(db, redis, _bearer_token(authorization))


async def require_lawyer(principal: Principal = Depends(get_principal)) -> LawyerPrincipal:
    if not isinstance(principal, LawyerPrincipal):
        raise Forbidden("Lawyer account required")
    return principal


async def require_admin(principal: Principal = Depends(get_principal)) -> AdminPrincipal:
    if not isinstance(principal, AdminPrincipal):
        raise Forbidden("Administrator account required")
    return principal


async def get_dispatcher(redis: Redis = Depends(get_redis)) -> NotificationDispatcher:
    return NotificationDispatcher(redis)


async def get_documents() -> DocumentStore:
    return get_document_store()


async def get_lifecycle(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_dispatcher),
) -> RequestLifecycle:
    return RequestLifecycle(db, notifier)


async def get_moderation(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_dispatcher),
    documents: DocumentStore = Depends(get_documents),
) -> ModerationEngine:
    return ModerationEngine(db, notifier, documents)
