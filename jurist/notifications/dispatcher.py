"""Notification dispatcher — publishes outbound tasks after a commit.

Lifecycle and moderation operations call these methods once their own
changes are persisted. Publishing only enqueues a task on Redis; the
NotificationWorker delivers it. Nothing here ever raises to the caller.
"""

from __future__ import annotations

from typing import Any, Optional

import redis.asyncio as redis
import structlog

from jurist.config import settings
from jurist.notifications.email import SES_MAX_RECIPIENTS
from jurist.schemas.notification import NotificationKind, NotificationTask

logger = structlog.get_logger()


class NotificationDispatcher:
    """Fire-and-forget publisher onto the outbound notification queue."""

    def __init__(self, redis_client: redis.Redis, queue_key: Optional[str] = None):
        self.redis = redis_client
        self.queue_key = queue_key or settings.notification_queue_key

    async def publish(self, task: NotificationTask) -> bool:
        """Push a task onto the queue.

        Returns:
            True if the task was enqueued
        """
        try:
            await self.redis.lpush(self.queue_key, task.model_dump_json())
            logger.debug("notification_enqueued", kind=task.kind.value)
            return True
        except Exception as e:
            logger.error(
                "notification_enqueue_failed",
                kind=task.kind.value,
                error=str(e),
            )
            return False

    async def _publish(self, kind: NotificationKind, **payload: Any) -> bool:
        return await self.publish(NotificationTask(kind=kind, payload=payload))

    async def send_approval(self, email: str, name: str) -> bool:
        return await self._publish(NotificationKind.LAWYER_APPROVED, email=email, name=name)

    async def send_rejection(self, email: str, name: str, reason: str) -> bool:
        return await self._publish(
            NotificationKind.LAWYER_REJECTED, email=email, name=name, reason=reason
        )

    async def send_request_confirmation(
        self, email: str, name: str, request_number: str
    ) -> bool:
        return await self._publish(
            NotificationKind.REQUEST_CONFIRMATION,
            email=email,
            name=name,
            request_number=request_number,
        )

    async def notify_lawyers_of_new_request(
        self,
        emails: list[str],
        request_number: str,
        description: str,
        budget_label: str,
    ) -> bool:
        """Queue the broadcast as one task per SES-sized batch of recipients.

        Each batch is retried on its own, so a failure never resends mail to
        lawyers whose batch already went out.
        """
        if not emails:
            return False

        published = True
        for start in range(0, len(emails), SES_MAX_RECIPIENTS):
            published = await self._publish(
                NotificationKind.LAWYERS_NEW_REQUEST,
                emails=emails[start:start + SES_MAX_RECIPIENTS],
                request_number=request_number,
                description=description,
                budget_label=budget_label,
            ) and published
        return published

    async def notify_admin_of_new_request(
        self,
        request_number: str,
        description: str,
        contact_name: str,
        phone: str,
        budget_label: str,
    ) -> bool:
        return await self._publish(
            NotificationKind.ADMIN_NEW_REQUEST,
            request_number=request_number,
            description=description,
            contact_name=contact_name,
            phone=phone,
            budget_label=budget_label,
        )

    async def notify_admin_of_new_lawyer(
        self,
        lawyer_id: str,
        email: str,
        full_name: str,
        lawyer_type: str,
    ) -> bool:
        return await self._publish(
            NotificationKind.ADMIN_NEW_LAWYER,
            lawyer_id=lawyer_id,
            email=email,
            full_name=full_name,
            lawyer_type=lawyer_type,
        )
