"""Moderation — lawyer onboarding and the profile status machine.

    PENDING ──approve──▶ APPROVED
       │  ▲                 │
    reject└─resubmit─┐   reject
       ▼             │      ▼
    REJECTED ────────┴── REJECTED ──approve──▶ APPROVED

Only APPROVED profiles may act on the request pool. Approval and
rejection commit first; their emails are queued afterwards.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jurist.exceptions import Conflict, DependencyFailure, NotFound, ValidationError
from jurist.identity.validator import is_valid_national_id
from jurist.models.enums import LawyerStatus, LawyerType
from jurist.models.base import utcnow
from jurist.models.lawyer import LawyerProfile
from jurist.notifications.dispatcher import NotificationDispatcher
from jurist.repositories.audit import AuditRecorder
from jurist.repositories.lawyer import DOCUMENT_FIELDS, LawyerRepository
from jurist.schemas.common import Page, clamp_page, parse_input
from jurist.schemas.lawyer import (
    REJECTION_REASON_MIN_LENGTH,
    LawyerDetail,
    LawyerProfileUpdate,
    LawyerRegister,
    LawyerSummary,
)
from jurist.storage.documents import DocumentStore

logger = structlog.get_logger()

ACTOR_ADMIN = "admin"
TARGET_LAWYER = "LawyerProfile"

# document field -> storage folder
DOCUMENT_FOLDERS = {
    "photo_url": "photos",
    "diploma_url": "diplomas",
    "license_url": "licenses",
}


@dataclass
class UploadedDocument:
    data: bytes
    mime_type: str


class ModerationEngine:
    """Lawyer registration, moderation decisions and document resubmission."""

    def __init__(
        self,
        db: AsyncSession,
        notifier: NotificationDispatcher,
        documents: Optional[DocumentStore] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.notifier = notifier
        self.documents = documents
        self.clock = clock
        self.lawyers = LawyerRepository(db)
        self.audit = AuditRecorder(db)

    async def _get_or_404(self, profile_id: uuid.UUID) -> LawyerProfile:
        profile = await self.lawyers.get(profile_id)
        if profile is None:
            raise NotFound("Lawyer not found", {"profile_id": str(profile_id)})
        return profile

    # ─── Onboarding ──────────────────────────────────────────────────

    async def register(
        self,
        data: LawyerRegister | dict[str, Any],
        documents: dict[str, UploadedDocument],
        external_id: str,
    ) -> LawyerProfile:
        """Create a PENDING profile with its three verification documents.

        Args:
            data: Registration form
            documents: photo_url / diploma_url / license_url uploads
            external_id: Identity-provider reference of the new account

        Returns:
            The persisted profile
        """
        form = parse_input(LawyerRegister, data)

        if not is_valid_national_id(form.national_id):
            raise ValidationError("Invalid national ID", field="national_id")

        missing = [f for f in DOCUMENT_FIELDS if f not in documents]
        if missing:
            raise ValidationError("All three documents are required", field=missing[0])

        if await self.lawyers.get_by_email(form.email) is not None:
            raise Conflict("Email already registered", {"field": "email"})

        urls = await self._store_documents(documents)

        profile = LawyerProfile(
            external_id=external_id,
            email=form.email,
            national_id=form.national_id,
            lawyer_type=LawyerType(form.lawyer_type).value,
            full_name=form.full_name,
            phone=form.phone,
            status=LawyerStatus.PENDING.value,
            email_verified=False,
            **urls,
        )
        try:
            await self.lawyers.add(profile)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            await self._discard_documents(list(urls.values()))
            raise Conflict(
                "A lawyer with this email, national ID or account already exists"
            ) from e

        logger.info(
            "lawyer_registered",
            profile_id=str(profile.id),
            lawyer_type=profile.lawyer_type,
        )

        await self.notifier.notify_admin_of_new_lawyer(
            str(profile.id), profile.email, profile.full_name, profile.lawyer_type
        )
        return profile

    async def _store_documents(self, documents: dict[str, UploadedDocument]) -> dict[str, str]:
        """Upload each document; on any failure remove the ones already stored."""
        if self.documents is None:
            raise DependencyFailure("Document store is not configured")

        for doc in documents.values():
            self.documents.validate(doc.data, doc.mime_type)

        urls: dict[str, str] = {}
        try:
            for field, doc in documents.items():
                urls[field] = await self.documents.store(
                    doc.data, doc.mime_type, DOCUMENT_FOLDERS[field]
                )
        except Exception:
            await self._discard_documents(list(urls.values()))
            raise
        return urls

    async def _discard_documents(self, urls: list[str]) -> None:
        if self.documents is None:
            return
        for url in urls:
            try:
                await self.documents.delete(url)
            except Exception as e:
                logger.warning("document_cleanup_failed", url=url, error=str(e))

    async def mark_email_verified(
        self, profile_id: uuid.UUID, verified_at: Optional[datetime] = None
    ) -> LawyerProfile:
        profile = await self._get_or_404(profile_id)
        if profile.email_verified:
            return profile

        await self.lawyers.update_fields(
            profile_id,
            email_verified=True,
            email_verified_at=verified_at or self.clock(),
        )
        await self.db.commit()
        logger.info("lawyer_email_verified", profile_id=str(profile_id))
        return await self._get_or_404(profile_id)

    # ─── Lawyer self-service ─────────────────────────────────────────

    async def get_profile(self, profile_id: uuid.UUID) -> LawyerProfile:
        return await self._get_or_404(profile_id)

    async def update_profile(
        self, profile_id: uuid.UUID, data: LawyerProfileUpdate | dict[str, Any]
    ) -> LawyerProfile:
        form = parse_input(LawyerProfileUpdate, data)
        values = form.model_dump(exclude_none=True)

        await self._get_or_404(profile_id)
        if values:
            await self.lawyers.update_fields(profile_id, updated_at=self.clock(), **values)
            await self.db.commit()
        return await self._get_or_404(profile_id)

    async def resubmit_documents(
        self, profile_id: uuid.UUID, new_refs: dict[str, str]
    ) -> LawyerProfile:
        """Replace document references.

        A REJECTED profile goes back to PENDING with its rejection reason
        cleared; other statuses are left alone.
        """
        unknown = set(new_refs) - set(DOCUMENT_FIELDS)
        if unknown:
            raise ValidationError("Unknown document field", field=sorted(unknown)[0])
        if not new_refs:
            raise ValidationError("At least one document is required", field="documents")

        await self._get_or_404(profile_id)
        await self.lawyers.replace_documents(profile_id, new_refs, self.clock())
        await self.db.commit()

        profile = await self._get_or_404(profile_id)
        logger.info(
            "lawyer_documents_resubmitted",
            profile_id=str(profile_id),
            fields=sorted(new_refs),
            status=profile.status,
        )
        return profile

    async def upload_documents(
        self, profile_id: uuid.UUID, files: dict[str, UploadedDocument]
    ) -> LawyerProfile:
        """Store new files, swap the references, then drop the old files."""
        profile = await self._get_or_404(profile_id)
        old_urls = [getattr(profile, field) for field in files]

        new_urls = await self._store_documents(files)
        try:
            profile = await self.resubmit_documents(profile_id, new_urls)
        except Exception:
            await self._discard_documents(list(new_urls.values()))
            raise

        await self._discard_documents(old_urls)
        return profile

    # ─── Administrator decisions ─────────────────────────────────────

    async def approve(
        self,
        profile_id: uuid.UUID,
        moderator_id: uuid.UUID,
        ip: Optional[str] = None,
    ) -> LawyerProfile:
        """Approve a PENDING or REJECTED profile.

        Approving an already APPROVED profile is a no-op, so retries do not
        produce duplicate audit entries or emails.
        """
        profile = await self._get_or_404(profile_id)
        if profile.status == LawyerStatus.APPROVED.value:
            logger.info("lawyer_already_approved", profile_id=str(profile_id))
            return profile

        now = self.clock()
        await self.audit.record(
            actor_id=moderator_id,
            actor_kind=ACTOR_ADMIN,
            action="approve_lawyer",
            target_type=TARGET_LAWYER,
            target_id=profile_id,
            detail={"previous_status": profile.status},
            ip=ip,
            now=now,
        )
        changed = await self.lawyers.set_moderation(
            profile_id,
            LawyerStatus.APPROVED,
            moderator_id,
            now,
            from_statuses=(LawyerStatus.PENDING, LawyerStatus.REJECTED),
        )
        if not changed:
            # Approved or deleted concurrently, nothing to record
            await self.db.rollback()
            return await self._get_or_404(profile_id)

        await self.db.commit()
        profile = await self._get_or_404(profile_id)

        logger.info("lawyer_approved", profile_id=str(profile_id), moderator_id=str(moderator_id))
        await self.notifier.send_approval(profile.email, profile.full_name)
        return profile

    async def reject(
        self,
        profile_id: uuid.UUID,
        moderator_id: uuid.UUID,
        reason: str,
        ip: Optional[str] = None,
    ) -> LawyerProfile:
        """Reject a profile with a reason of at least 10 characters."""
        if (
            not isinstance(reason, str)
            or not reason.strip()
            or len(reason) < REJECTION_REASON_MIN_LENGTH
        ):
            raise ValidationError(
                f"Reason must be at least {REJECTION_REASON_MIN_LENGTH} characters long",
                field="reason",
            )

        profile = await self._get_or_404(profile_id)
        now = self.clock()

        await self.audit.record(
            actor_id=moderator_id,
            actor_kind=ACTOR_ADMIN,
            action="reject_lawyer",
            target_type=TARGET_LAWYER,
            target_id=profile_id,
            detail={"reason": reason, "previous_status": profile.status},
            ip=ip,
            now=now,
        )
        if not await self.lawyers.set_moderation(
            profile_id, LawyerStatus.REJECTED, moderator_id, now, reason=reason
        ):
            await self.db.rollback()
            raise NotFound("Lawyer not found", {"profile_id": str(profile_id)})

        await self.db.commit()
        profile = await self._get_or_404(profile_id)

        logger.info("lawyer_rejected", profile_id=str(profile_id), moderator_id=str(moderator_id))
        await self.notifier.send_rejection(profile.email, profile.full_name, reason)
        return profile

    # ─── Administrator reads ─────────────────────────────────────────

    async def list_lawyers(
        self,
        status: Optional[LawyerStatus] = None,
        lawyer_type: Optional[LawyerType] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[LawyerSummary]:
        page, limit = clamp_page(page, limit)
        rows, total = await self.lawyers.list_page(
            status=status,
            lawyer_type=lawyer_type.value if lawyer_type else None,
            search=search.strip() if search else None,
            offset=(page - 1) * limit,
            limit=limit,
        )
        items = [LawyerSummary.model_validate(r) for r in rows]
        return Page[LawyerSummary].build(items, total, page, limit)

    async def lawyer_details(self, profile_id: uuid.UUID) -> LawyerDetail:
        profile = await self._get_or_404(profile_id)
        return LawyerDetail.model_validate(profile)

    async def stats(self) -> dict[str, int]:
        counts = await self.lawyers.count_by_status()
        return {
            "total": sum(counts.values()),
            "pending": counts.get(LawyerStatus.PENDING.value, 0),
            "approved": counts.get(LawyerStatus.APPROVED.value, 0),
            "rejected": counts.get(LawyerStatus.REJECTED.value, 0),
        }
