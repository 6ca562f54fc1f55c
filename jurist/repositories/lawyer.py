"""Lawyer profile repository."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import case, func, or_, select
from sqlalchemy import update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession

from jurist.models.enums import LawyerStatus
from jurist.models.lawyer import LawyerProfile


DOCUMENT_FIELDS = ("photo_url", "diploma_url", "license_url")


class LawyerRepository:
    """Reads and writes LawyerProfile rows. Never commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, profile_id: uuid.UUID) -> Optional[LawyerProfile]:
        result = await self.db.execute(
            select(LawyerProfile)
            .where(LawyerProfile.id == profile_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_status(self, profile_id: uuid.UUID) -> Optional[str]:
        """Current moderation status, read straight from the table."""
        result = await self.db.execute(
            select(LawyerProfile.status).where(LawyerProfile.id == profile_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[LawyerProfile]:
        result = await self.db.execute(
            select(LawyerProfile).where(func.lower(LawyerProfile.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def add(self, profile: LawyerProfile) -> LawyerProfile:
        self.db.add(profile)
        await self.db.flush()
        return profile

    async def update_fields(self, profile_id: uuid.UUID, **values) -> bool:
        result = await self.db.execute(
            sa_update(LawyerProfile)
            .where(LawyerProfile.id == profile_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_moderation(
        self,
        profile_id: uuid.UUID,
        status: LawyerStatus,
        moderator_id: uuid.UUID,
        now: datetime,
        reason: Optional[str] = None,
        from_statuses: Optional[tuple[LawyerStatus, ...]] = None,
    ) -> bool:
        """Write a moderation decision, optionally only from given statuses."""
        stmt = sa_update(LawyerProfile).where(LawyerProfile.id == profile_id)
        if from_statuses:
            stmt = stmt.where(LawyerProfile.status.in_([s.value for s in from_statuses]))
        stmt = stmt.values(
            status=status.value,
            rejection_reason=reason,
            moderated_by=moderator_id,
            moderated_at=now,
            updated_at=now,
        ).execution_options(synchronize_session=False)
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def replace_documents(
        self, profile_id: uuid.UUID, refs: dict[str, str], now: datetime
    ) -> bool:
        """Swap document URLs; a REJECTED profile drops back to PENDING.

        The status reset is evaluated inside the same UPDATE so a concurrent
        moderation decision cannot interleave with it.
        """
        was_rejected = LawyerProfile.status == LawyerStatus.REJECTED.value
        stmt = (
            sa_update(LawyerProfile)
            .where(LawyerProfile.id == profile_id)
            .values(
                **refs,
                status=case(
                    (was_rejected, LawyerStatus.PENDING.value),
                    else_=LawyerProfile.status,
                ),
                rejection_reason=case(
                    (was_rejected, None),
                    else_=LawyerProfile.rejection_reason,
                ),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def approved_emails(self) -> list[str]:
        result = await self.db.execute(
            select(LawyerProfile.email).where(
                LawyerProfile.status == LawyerStatus.APPROVED.value
            )
        )
        return list(result.scalars().all())

    async def list_page(
        self,
        status: Optional[LawyerStatus] = None,
        lawyer_type: Optional[str] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[LawyerProfile], int]:
        stmt = select(LawyerProfile)

        if status:
            stmt = stmt.where(LawyerProfile.status == status.value)
        if lawyer_type:
            stmt = stmt.where(LawyerProfile.lawyer_type == lawyer_type)
        if search:
            search_filter = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(LawyerProfile.full_name).like(search_filter),
                    func.lower(LawyerProfile.email).like(search_filter),
                    LawyerProfile.national_id.like(f"%{search}%"),
                )
            )

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = stmt.order_by(LawyerProfile.created_at.desc()).offset(offset).limit(limit)
        result = await self.db.execute(stmt)
        return result.scalars().all(), total

    async def count_by_status(self) -> dict[str, int]:
        result = await self.db.execute(
            select(LawyerProfile.status, func.count()).group_by(LawyerProfile.status)
        )
        return {status: count for status, count in result}
