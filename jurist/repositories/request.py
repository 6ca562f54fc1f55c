"""Request repository — persistence and conditional updates for requests."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy import update as sa_update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from jurist.models.enums import LawyerStatus, RequestStatus
from jurist.models.lawyer import LawyerProfile
from jurist.models.request import Request, RequestCounter


HIDDEN_FROM_LAWYERS = (RequestStatus.SPAM.value, RequestStatus.CLOSED.value)


class RequestRepository:
    """Reads and writes Request rows. Never commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, request_id: uuid.UUID) -> Optional[Request]:
        """Fetch a request, always re-reading current column values."""
        result = await self.db.execute(
            select(Request)
            .where(Request.id == request_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def count_from_ip_since(self, ip_address: str, since: datetime) -> int:
        stmt = select(func.count()).select_from(Request).where(
            Request.ip_address == ip_address,
            Request.created_at >= since,
        )
        return (await self.db.execute(stmt)).scalar_one()

    async def next_sequence(self, day: date) -> int:
        """Atomically increment and return the counter for a day.

        A single INSERT .. ON CONFLICT DO UPDATE .. RETURNING statement, so
        two concurrent submissions can never read the same value.
        """
        dialect = self.db.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert

        stmt = insert(RequestCounter).values(day=day, last_value=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[RequestCounter.day],
            set_={"last_value": RequestCounter.last_value + 1},
        ).returning(RequestCounter.last_value)

        return (await self.db.execute(stmt)).scalar_one()

    async def add(self, request: Request) -> Request:
        self.db.add(request)
        await self.db.flush()
        return request

    async def claim(
        self, request_id: uuid.UUID, lawyer_id: uuid.UUID, now: datetime
    ) -> bool:
        """Assign a NEW, unassigned request to an approved lawyer.

        Returns:
            True if this call won the request (exactly one row updated)
        """
        lawyer_is_approved = (
            select(LawyerProfile.id)
            .where(
                LawyerProfile.id == lawyer_id,
                LawyerProfile.status == LawyerStatus.APPROVED.value,
            )
            .exists()
        )
        stmt = (
            sa_update(Request)
            .where(
                Request.id == request_id,
                Request.status == RequestStatus.NEW.value,
                Request.assigned_lawyer_id.is_(None),
                lawyer_is_approved,
            )
            .values(
                status=RequestStatus.IN_PROGRESS.value,
                assigned_lawyer_id=lawyer_id,
                assigned_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def release(
        self, request_id: uuid.UUID, lawyer_id: uuid.UUID, now: datetime
    ) -> bool:
        """Return a request held by lawyer_id to the pool. created_at is kept."""
        stmt = (
            sa_update(Request)
            .where(
                Request.id == request_id,
                Request.status == RequestStatus.IN_PROGRESS.value,
                Request.assigned_lawyer_id == lawyer_id,
            )
            .values(
                status=RequestStatus.NEW.value,
                assigned_lawyer_id=None,
                assigned_at=None,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def set_status(
        self, request_id: uuid.UUID, status: RequestStatus, now: datetime
    ) -> bool:
        """Administrator override.

        Any status other than IN_PROGRESS drops the assignee. IN_PROGRESS is
        only written while an assignee exists.
        """
        stmt = sa_update(Request).where(Request.id == request_id)
        if status == RequestStatus.IN_PROGRESS:
            stmt = stmt.where(Request.assigned_lawyer_id.is_not(None)).values(
                status=status.value, updated_at=now
            )
        else:
            stmt = stmt.values(
                status=status.value,
                assigned_lawyer_id=None,
                assigned_at=None,
                updated_at=now,
            )
        result = await self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount == 1

    async def delete(self, request_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            delete(Request)
            .where(Request.id == request_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_page(
        self,
        *conditions,
        offset: int,
        limit: int,
        order_by=None,
    ) -> tuple[Sequence[Request], int]:
        """Fetch one page matching conditions plus the total count."""
        stmt = select(Request).where(*conditions)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.db.execute(count_stmt)).scalar_one()

        order = order_by if order_by is not None else Request.created_at.desc()
        stmt = stmt.order_by(order).offset(offset).limit(limit)
        result = await self.db.execute(stmt)
        return result.scalars().all(), total

    async def list_available(
        self, status: RequestStatus, offset: int, limit: int
    ) -> tuple[Sequence[Request], int]:
        return await self.list_page(
            Request.status == status.value,
            Request.status.not_in(HIDDEN_FROM_LAWYERS),
            Request.assigned_lawyer_id.is_(None),
            offset=offset,
            limit=limit,
        )

    async def list_assigned_to(
        self, lawyer_id: uuid.UUID, offset: int, limit: int
    ) -> tuple[Sequence[Request], int]:
        return await self.list_page(
            Request.assigned_lawyer_id == lawyer_id,
            offset=offset,
            limit=limit,
            order_by=Request.assigned_at.desc(),
        )

    async def count(self, *conditions) -> int:
        stmt = select(func.count()).select_from(Request).where(*conditions)
        return (await self.db.execute(stmt)).scalar_one()

    async def count_by_status(self) -> dict[str, int]:
        result = await self.db.execute(
            select(Request.status, func.count()).group_by(Request.status)
        )
        return {status: count for status, count in result}
