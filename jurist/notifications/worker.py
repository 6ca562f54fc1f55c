"""Notification worker — drains the outbound queue and delivers tasks.

Runs as a background task inside the API process. Each task is delivered
through its channel sender; a failed delivery is re-queued until it has been
attempted notification_max_attempts times, then dropped with a log entry.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import redis.asyncio as redis
import structlog
from pydantic import ValidationError as PydanticValidationError

from jurist.config import settings
from jurist.notifications.email import EmailSender, get_email_sender
from jurist.notifications.telegram import TelegramNotifier, get_telegram_notifier
from jurist.schemas.notification import NotificationKind, NotificationTask

logger = structlog.get_logger()

ADMIN_NEW_REQUEST_SUBJECT = "Новая заявка {request_number}"
ADMIN_NEW_LAWYER_SUBJECT = "Новый юрист на модерации: {full_name}"


class NotificationWorker:
    """Consumes NotificationTask items from Redis and delivers them."""

    def __init__(
        self,
        redis_client: redis.Redis,
        email: Optional[EmailSender] = None,
        telegram: Optional[TelegramNotifier] = None,
        queue_key: Optional[str] = None,
        max_attempts: Optional[int] = None,
        poll_timeout: Optional[int] = None,
    ):
        self.redis = redis_client
        self.email = email
        self.telegram = telegram
        self.queue_key = queue_key or settings.notification_queue_key
        self.max_attempts = max_attempts or settings.notification_max_attempts
        self.poll_timeout = poll_timeout or settings.notification_poll_timeout
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, redis_client: redis.Redis) -> "NotificationWorker":
        return cls(
            redis_client,
            email=get_email_sender(),
            telegram=get_telegram_notifier(),
        )

    # ─── Lifecycle ───────────────────────────────────────────────────

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
            logger.info("notification_worker_started", queue=self.queue_key)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("notification_worker_stopped")

    async def run(self) -> None:
        """Process tasks until cancelled."""
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Redis outage: back off and keep the worker alive
                logger.error("notification_worker_error", error=str(e))
                await asyncio.sleep(self.poll_timeout)

    async def run_once(self) -> bool:
        """Pop and process one task.

        Returns:
            True if a task was taken off the queue
        """
        item = await self.redis.brpop(self.queue_key, timeout=self.poll_timeout)
        if not item:
            return False

        _, raw = item
        try:
            task = NotificationTask.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.error("notification_malformed", error=str(e))
            return True

        await self.process(task)
        return True

    async def process(self, task: NotificationTask) -> None:
        """Deliver a task, re-queueing it on failure."""
        try:
            delivered = await self.deliver(task)
        except Exception as e:
            logger.error("notification_delivery_error", kind=task.kind.value, error=str(e))
            delivered = False

        if delivered:
            return

        task.attempts += 1
        if task.attempts >= self.max_attempts:
            logger.error(
                "notification_dropped",
                kind=task.kind.value,
                attempts=task.attempts,
            )
            return

        try:
            await self.redis.lpush(self.queue_key, task.model_dump_json())
        except Exception as e:
            logger.error(
                "notification_lost",
                kind=task.kind.value,
                attempts=task.attempts,
                payload=task.payload,
                error=str(e),
            )
            return

        logger.warning(
            "notification_requeued",
            kind=task.kind.value,
            attempts=task.attempts,
        )

    # ─── Routing ─────────────────────────────────────────────────────

    async def deliver(self, task: NotificationTask) -> bool:
        p = task.payload
        kind = task.kind

        if kind in (NotificationKind.ADMIN_NEW_REQUEST, NotificationKind.ADMIN_NEW_LAWYER):
            return await self._deliver_to_admin(task)

        if self.email is None:
            logger.info("notification_skipped", kind=kind.value, reason="email_not_configured")
            return True

        if kind == NotificationKind.LAWYER_APPROVED:
            return await self.email.send_approval(p["email"], p["name"])
        if kind == NotificationKind.LAWYER_REJECTED:
            return await self.email.send_rejection(p["email"], p["name"], p["reason"])
        if kind == NotificationKind.REQUEST_CONFIRMATION:
            return await self.email.send_request_confirmation(
                p["email"], p["name"], p["request_number"]
            )
        if kind == NotificationKind.LAWYERS_NEW_REQUEST:
            return await self.email.send_new_request(
                p["emails"], p["request_number"], p["description"], p["budget_label"]
            )

        logger.warning("notification_unknown_kind", kind=kind.value)
        return True

    async def _deliver_to_admin(self, task: NotificationTask) -> bool:
        """Admin chat on Telegram; falls back to the admin mailbox."""
        p = task.payload
        is_request = task.kind == NotificationKind.ADMIN_NEW_REQUEST

        if self.telegram is not None:
            if is_request:
                return await self.telegram.send_new_request(
                    p["request_number"],
                    p["description"],
                    p["contact_name"],
                    p["phone"],
                    p["budget_label"],
                )
            return await self.telegram.send_new_lawyer(
                p["lawyer_id"], p["email"], p["full_name"], p["lawyer_type"]
            )

        if self.email is not None and settings.admin_email:
            if is_request:
                subject = ADMIN_NEW_REQUEST_SUBJECT.format(request_number=p["request_number"])
                body = (
                    f"{p['contact_name']}, {p['phone']}\n"
                    f"Бюджет: {p['budget_label']}\n\n{p['description']}"
                )
            else:
                subject = ADMIN_NEW_LAWYER_SUBJECT.format(full_name=p["full_name"])
                body = f"{p['full_name']} <{p['email']}>, {p['lawyer_type']}\nID: {p['lawyer_id']}"
            return await self.email.send([settings.admin_email], subject, body)

        logger.info("notification_skipped", kind=task.kind.value, reason="admin_channel_not_configured")
        return True
