"""Telegram notifier — posts new request / new lawyer cards to the admin chat."""

from __future__ import annotations

from html import escape
from typing import Optional

import structlog
from aiogram import Bot

from jurist.config import settings

logger = structlog.get_logger()

NEW_REQUEST_TEMPLATE = """🔔 <b>Новая заявка {request_number}</b>

👤 <b>Клиент:</b> {contact_name}
📞 <b>Телефон:</b> {phone}
💰 <b>Бюджет:</b> {budget_label}

{description}"""

NEW_LAWYER_TEMPLATE = """⚖️ <b>Новый юрист на модерации</b>

👤 <b>ФИО:</b> {full_name}
✉️ <b>Email:</b> {email}
📋 <b>Тип:</b> {lawyer_type}

<i>Профиль #{lawyer_id}</i>"""

LAWYER_TYPE_LABELS = {
    "ADVOCATE": "Адвокат",
    "CONSULTANT": "Юридический консультант",
}

DESCRIPTION_PREVIEW_CHARS = 500


class TelegramNotifier:
    """Sends formatted admin notifications via Telegram."""

    def __init__(self, bot: Bot, chat_id: int):
        self.bot = bot
        self.chat_id = chat_id

    async def _send(self, text: str, event: str) -> bool:
        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=text,
                parse_mode="HTML",
            )
            logger.info(event, chat_id=self.chat_id)
            return True

        except Exception as e:
            logger.error(
                "admin_telegram_failed",
                error=str(e),
                chat_id=self.chat_id,
            )
            return False

    async def send_new_request(
        self,
        request_number: str,
        description: str,
        contact_name: str,
        phone: str,
        budget_label: str,
    ) -> bool:
        preview = description
        if len(preview) > DESCRIPTION_PREVIEW_CHARS:
            preview = preview[:DESCRIPTION_PREVIEW_CHARS] + "…"

        text = NEW_REQUEST_TEMPLATE.format(
            request_number=request_number,
            contact_name=escape(contact_name),
            phone=phone,
            budget_label=budget_label,
            description=escape(preview),
        )
        return await self._send(text, "admin_request_notification_sent")

    async def send_new_lawyer(
        self,
        lawyer_id: str,
        email: str,
        full_name: str,
        lawyer_type: str,
    ) -> bool:
        text = NEW_LAWYER_TEMPLATE.format(
            full_name=escape(full_name),
            email=escape(email),
            lawyer_type=LAWYER_TYPE_LABELS.get(lawyer_type, lawyer_type),
            lawyer_id=lawyer_id[:8],
        )
        return await self._send(text, "admin_lawyer_notification_sent")


_notifier: Optional[TelegramNotifier] = None


def get_telegram_notifier() -> Optional[TelegramNotifier]:
    """Get or create the admin chat notifier.

    Returns None if the admin bot token or chat is not configured.
    """
    global _notifier

    if _notifier is not None:
        return _notifier

    if not settings.admin_telegram_bot_token or not settings.admin_telegram_chat_id:
        logger.debug("admin_telegram_not_configured")
        return None

    _notifier = TelegramNotifier(
        bot=Bot(token=settings.admin_telegram_bot_token),
        chat_id=int(settings.admin_telegram_chat_id),
    )
    return _notifier
