"""Request lifecycle — submission, the lawyer pool, claim/release, overrides.

State machine:

    NEW ──claim──▶ IN_PROGRESS ──(admin)──▶ CLOSED
     ▲  ◀─release──┘
     └──(admin)── SPAM ◀──(admin)── NEW

Lawyers only ever move a request between NEW and IN_PROGRESS and only
through conditional UPDATEs. Administrators may set any status; every
override and deletion is audited in the same transaction.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from jurist.config import settings
from jurist.exceptions import Conflict, Forbidden, NotFound, RateLimited, ValidationError
from jurist.lifecycle.numbering import generate_request_number, local_midnight_utc
from jurist.models.base import utcnow
from jurist.models.enums import LawyerStatus, RequestStatus
from jurist.models.request import Request
from jurist.notifications.dispatcher import NotificationDispatcher
from jurist.repositories.audit import AuditRecorder
from jurist.repositories.lawyer import LawyerRepository
from jurist.repositories.request import HIDDEN_FROM_LAWYERS, RequestRepository
from jurist.schemas.common import Page, clamp_page, parse_input
from jurist.schemas.request import (
    RequestAdmin,
    RequestCreate,
    RequestDetail,
    RequestPoolItem,
)

logger = structlog.get_logger()

ACTOR_ADMIN = "admin"
TARGET_REQUEST = "Request"


def budget_label(budget: Decimal, currency: str) -> str:
    return f"{budget:,.0f} {currency}".replace(",", " ")


class RequestLifecycle:
    """Operations on service requests for clients, lawyers and admins."""

    def __init__(
        self,
        db: AsyncSession,
        notifier: NotificationDispatcher,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.notifier = notifier
        self.clock = clock
        self.requests = RequestRepository(db)
        self.lawyers = LawyerRepository(db)
        self.audit = AuditRecorder(db)

    # ─── Public submission ───────────────────────────────────────────

    async def submit(self, data: RequestCreate | dict[str, Any], source_ip: str) -> str:
        """Persist a new request and fan out notifications.

        The IP limit is a sliding window over creation timestamps. The
        count and the insert are not serialized, so a simultaneous burst
        from one IP can overshoot the limit slightly.

        Returns:
            The generated request number
        """
        form = parse_input(RequestCreate, data)
        now = self.clock()

        window_start = now - timedelta(minutes=settings.request_rate_window_minutes)
        recent = await self.requests.count_from_ip_since(source_ip, window_start)
        if recent >= settings.request_rate_limit:
            logger.warning("request_rate_limited", ip=source_ip, recent=recent)
            raise RateLimited(
                "Too many requests. Please try again later.",
                {"retry_after_minutes": settings.request_rate_window_minutes},
            )

        request_number = await generate_request_number(self.requests, now)

        request = Request(
            request_number=request_number,
            description=form.description,
            budget=form.budget,
            currency=form.currency.value,
            contact_name=form.contact_name,
            phone=form.phone,
            email=form.email,
            preferred_contact=form.preferred_contact.value,
            ip_address=source_ip,
            status=RequestStatus.NEW.value,
            created_at=now,
            updated_at=now,
        )
        await self.requests.add(request)
        await self.db.commit()

        logger.info(
            "request_submitted",
            request_id=str(request.id),
            request_number=request_number,
            ip=source_ip,
        )

        await self._notify_new_request(request)
        return request_number

    async def _publish(self, event: str, send, *args) -> None:
        """Run one notifier call; the request is already committed."""
        try:
            await send(*args)
        except Exception as e:
            logger.error("notification_publish_failed", notification=event, error=str(e))

    async def _notify_new_request(self, request: Request) -> None:
        label = budget_label(request.budget, request.currency)

        if request.email:
            await self._publish(
                "request_confirmation",
                self.notifier.send_request_confirmation,
                request.email,
                request.contact_name,
                request.request_number,
            )

        try:
            emails = await self.lawyers.approved_emails()
        except Exception as e:
            logger.error("approved_lawyers_lookup_failed", error=str(e))
            emails = []
        await self._publish(
            "lawyers_new_request",
            self.notifier.notify_lawyers_of_new_request,
            emails,
            request.request_number,
            request.description,
            label,
        )

        await self._publish(
            "admin_new_request",
            self.notifier.notify_admin_of_new_request,
            request.request_number,
            request.description,
            request.contact_name,
            request.phone,
            label,
        )

    # ─── Lawyer pool ─────────────────────────────────────────────────

    async def _require_approved(self, lawyer_id: uuid.UUID) -> None:
        """Re-read the lawyer's status; moderation may have changed it."""
        status = await self.lawyers.get_status(lawyer_id)
        if status != LawyerStatus.APPROVED.value:
            raise Forbidden(
                "You must be approved to access requests",
                {"lawyer_status": status},
            )

    async def list_available(
        self,
        lawyer_id: uuid.UUID,
        status: Optional[RequestStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[RequestPoolItem]:
        """Unassigned requests in the pool, newest first, without contacts."""
        await self._require_approved(lawyer_id)
        page, limit = clamp_page(page, limit)
        status = RequestStatus(status) if status else RequestStatus.NEW

        rows, total = await self.requests.list_available(
            status, offset=(page - 1) * limit, limit=limit
        )
        items = [RequestPoolItem.model_validate(r) for r in rows]
        return Page[RequestPoolItem].build(items, total, page, limit)

    async def request_details(
        self, request_id: uuid.UUID, lawyer_id: uuid.UUID
    ) -> RequestDetail:
        await self._require_approved(lawyer_id)

        request = await self.requests.get(request_id)
        if request is None:
            raise NotFound("Request not found", {"request_id": str(request_id)})

        if request.status in HIDDEN_FROM_LAWYERS:
            raise Forbidden("This request is no longer available", {"status": request.status})

        return RequestDetail.model_validate(request)

    async def my_requests(
        self, lawyer_id: uuid.UUID, page: int = 1, limit: int = 20
    ) -> Page[RequestDetail]:
        await self._require_approved(lawyer_id)
        page, limit = clamp_page(page, limit)

        rows, total = await self.requests.list_assigned_to(
            lawyer_id, offset=(page - 1) * limit, limit=limit
        )
        items = [RequestDetail.model_validate(r) for r in rows]
        return Page[RequestDetail].build(items, total, page, limit)

    async def claim(self, request_id: uuid.UUID, lawyer_id: uuid.UUID) -> Request:
        """Take an unassigned NEW request.

        The assignment is one conditional UPDATE; when several lawyers race
        for the same request exactly one sees a row updated, the others get
        Conflict.
        """
        await self._require_approved(lawyer_id)
        now = self.clock()

        won = await self.requests.claim(request_id, lawyer_id, now)
        if not won:
            await self.db.rollback()
            request = await self.requests.get(request_id)
            if request is None:
                raise NotFound("Request not found", {"request_id": str(request_id)})
            await self._require_approved(lawyer_id)
            if request.assigned_lawyer_id is not None:
                raise Conflict(
                    "This request is already taken by another lawyer",
                    {"reason": "already_taken"},
                )
            raise Conflict(
                "This request is not available for taking",
                {"reason": "not_available", "status": request.status},
            )

        await self.db.commit()
        request = await self.requests.get(request_id)

        logger.info("request_claimed", request_id=str(request_id), lawyer_id=str(lawyer_id))
        return request

    async def release(self, request_id: uuid.UUID, lawyer_id: uuid.UUID) -> Request:
        """Give a request back to the pool. Only the assignee may do this."""
        await self._require_approved(lawyer_id)
        now = self.clock()

        released = await self.requests.release(request_id, lawyer_id, now)
        if not released:
            await self.db.rollback()
            request = await self.requests.get(request_id)
            if request is None:
                raise NotFound("Request not found", {"request_id": str(request_id)})
            raise Forbidden("You can only release requests assigned to you")

        await self.db.commit()
        request = await self.requests.get(request_id)

        logger.info("request_released", request_id=str(request_id), lawyer_id=str(lawyer_id))
        return request

    # ─── Administrator ───────────────────────────────────────────────

    async def admin_list(
        self,
        status: Optional[RequestStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[RequestAdmin]:
        page, limit = clamp_page(page, limit)
        conditions = [Request.status == status.value] if status else []

        rows, total = await self.requests.list_page(
            *conditions, offset=(page - 1) * limit, limit=limit
        )
        items = [RequestAdmin.model_validate(r) for r in rows]
        return Page[RequestAdmin].build(items, total, page, limit)

    async def admin_get(self, request_id: uuid.UUID) -> Request:
        request = await self.requests.get(request_id)
        if request is None:
            raise NotFound("Request not found", {"request_id": str(request_id)})
        return request

    async def admin_set_status(
        self,
        request_id: uuid.UUID,
        new_status: RequestStatus,
        admin_id: uuid.UUID,
        ip: Optional[str] = None,
    ) -> Request:
        """Override a request's status; always audited."""
        new_status = RequestStatus(new_status)
        request = await self.admin_get(request_id)
        previous = request.status
        now = self.clock()

        if new_status == RequestStatus.IN_PROGRESS and request.assigned_lawyer_id is None:
            raise ValidationError(
                "A request can only be IN_PROGRESS while assigned to a lawyer",
                field="status",
            )

        await self.audit.record(
            actor_id=admin_id,
            actor_kind=ACTOR_ADMIN,
            action="update_request_status",
            target_type=TARGET_REQUEST,
            target_id=request_id,
            detail={"previous_status": previous, "new_status": new_status.value},
            ip=ip,
            now=now,
        )

        updated = await self.requests.set_status(request_id, new_status, now)
        if not updated:
            await self.db.rollback()
            if await self.requests.get(request_id) is None:
                raise NotFound("Request not found", {"request_id": str(request_id)})
            raise Conflict("The request was released while being updated")

        await self.db.commit()

        logger.info(
            "request_status_overridden",
            request_id=str(request_id),
            admin_id=str(admin_id),
            previous_status=previous,
            new_status=new_status.value,
        )
        return await self.requests.get(request_id)

    async def admin_delete(
        self,
        request_id: uuid.UUID,
        admin_id: uuid.UUID,
        ip: Optional[str] = None,
    ) -> None:
        """Delete a request. The audit entry is written first."""
        request = await self.admin_get(request_id)

        await self.audit.record(
            actor_id=admin_id,
            actor_kind=ACTOR_ADMIN,
            action="delete_request",
            target_type=TARGET_REQUEST,
            target_id=request_id,
            detail={"request_number": request.request_number},
            ip=ip,
            now=self.clock(),
        )

        if not await self.requests.delete(request_id):
            await self.db.rollback()
            raise NotFound("Request not found", {"request_id": str(request_id)})

        await self.db.commit()

        logger.info("request_deleted", request_id=str(request_id), admin_id=str(admin_id))

    async def stats(self) -> dict[str, Any]:
        """Totals for the admin dashboard."""
        now = self.clock()
        today_start = local_midnight_utc(now)
        week_ago = now - timedelta(days=7)

        return {
            "total": await self.requests.count(),
            "today": await self.requests.count(Request.created_at >= today_start),
            "this_week": await self.requests.count(Request.created_at >= week_ago),
            "by_status": await self.requests.count_by_status(),
        }
