"""Email sender — plain-text messages through AWS SES."""

from __future__ import annotations

import asyncio
from typing import Optional

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from jurist.config import settings

logger = structlog.get_logger()

APPROVAL_SUBJECT = "Ваш профиль одобрен"
APPROVAL_BODY = """Здравствуйте, {name}!

Ваш профиль юриста прошёл модерацию. Теперь вам доступны заявки клиентов:
{frontend_url}/ru/dashboard"""

REJECTION_SUBJECT = "Профиль не прошёл модерацию"
REJECTION_BODY = """Здравствуйте, {name}!

К сожалению, ваш профиль не прошёл модерацию.
Причина: {reason}

Вы можете загрузить документы повторно в личном кабинете — профиль
будет отправлен на повторную проверку."""

CONFIRMATION_SUBJECT = "Заявка {request_number} принята"
CONFIRMATION_BODY = """Здравствуйте, {name}!

Ваша заявка {request_number} принята. Юрист свяжется с вами в ближайшее время."""

# SES rejects messages with more recipients than this
SES_MAX_RECIPIENTS = 50

NEW_REQUEST_SUBJECT = "Новая заявка {request_number}"
NEW_REQUEST_BODY = """Поступила новая заявка {request_number}.

Бюджет: {budget_label}

{description}

Открыть заявки: {frontend_url}/ru/dashboard"""


class EmailSender:
    """Async wrapper around the synchronous boto3 SES client."""

    def __init__(self, region: str, from_email: str):
        self.ses = boto3.client("ses", region_name=region)
        self.from_email = from_email

    async def send(self, to: list[str], subject: str, body: str) -> bool:
        """Send one plain-text email.

        Args:
            to: Recipient addresses (sent as BCC when more than one)
            subject: Message subject
            body: Plain-text body

        Returns:
            True if SES accepted the message
        """
        destination = {"ToAddresses": to} if len(to) == 1 else {"BccAddresses": to}
        try:
            # boto3 is synchronous — run in thread pool
            await asyncio.to_thread(
                self.ses.send_email,
                Source=self.from_email,
                Destination=destination,
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Text": {"Data": body, "Charset": "UTF-8"}},
                },
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("email_send_failed", recipients=len(to), subject=subject, error=str(e))
            return False

        logger.info("email_sent", recipients=len(to), subject=subject)
        return True

    async def send_approval(self, email: str, name: str) -> bool:
        body = APPROVAL_BODY.format(name=name, frontend_url=settings.frontend_url)
        return await self.send([email], APPROVAL_SUBJECT, body)

    async def send_rejection(self, email: str, name: str, reason: str) -> bool:
        body = REJECTION_BODY.format(name=name, reason=reason)
        return await self.send([email], REJECTION_SUBJECT, body)

    async def send_request_confirmation(
        self, email: str, name: str, request_number: str
    ) -> bool:
        subject = CONFIRMATION_SUBJECT.format(request_number=request_number)
        body = CONFIRMATION_BODY.format(name=name, request_number=request_number)
        return await self.send([email], subject, body)

    async def send_new_request(
        self,
        emails: list[str],
        request_number: str,
        description: str,
        budget_label: str,
    ) -> bool:
        subject = NEW_REQUEST_SUBJECT.format(request_number=request_number)
        body = NEW_REQUEST_BODY.format(
            request_number=request_number,
            description=description,
            budget_label=budget_label,
            frontend_url=settings.frontend_url,
        )
        delivered = True
        for start in range(0, len(emails), SES_MAX_RECIPIENTS):
            batch = emails[start:start + SES_MAX_RECIPIENTS]
            delivered = await self.send(batch, subject, body) and delivered
        return delivered


_sender: Optional[EmailSender] = None


def get_email_sender() -> Optional[EmailSender]:
    """Get or create the singleton sender.

    Returns None if SES is not configured.
    """
    global _sender

    if _sender is not None:
        return _sender

    if not settings.ses_region:
        logger.debug("email_sender_not_configured")
        return None

    _sender = EmailSender(region=settings.ses_region, from_email=settings.email_from)
    logger.info("email_sender_initialized", region=settings.ses_region)
    return _sender
