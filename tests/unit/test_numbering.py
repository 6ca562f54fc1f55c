"""Tests for request number generation."""

from datetime import date, datetime, timezone

import pytest

from jurist.lifecycle.numbering import (
    format_request_number,
    generate_request_number,
    local_day,
    local_midnight_utc,
)
from jurist.repositories.request import RequestRepository


class TestFormatting:
    def test_format(self):
        assert format_request_number(date(2026, 3, 10), 1) == "REQ-20260310-0001"
        assert format_request_number(date(2026, 3, 10), 42) == "REQ-20260310-0042"
        assert format_request_number(date(2026, 12, 31), 9999) == "REQ-20261231-9999"

    def test_local_day_crosses_utc_midnight(self):
        # 20:00 UTC is already the next day in Almaty (UTC+5)
        moment = datetime(2026, 3, 10, 20, 0, tzinfo=timezone.utc)
        assert local_day(moment) == date(2026, 3, 11)

    def test_local_midnight_utc(self):
        moment = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)
        assert local_midnight_utc(moment) == datetime(2026, 3, 9, 19, 0, tzinfo=timezone.utc)


class TestSequence:
    @pytest.mark.asyncio
    async def test_sequence_increments_per_day(self, db):
        repo = RequestRepository(db)
        now = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)

        first = await generate_request_number(repo, now)
        second = await generate_request_number(repo, now)
        await db.commit()

        assert first == "REQ-20260310-0001"
        assert second == "REQ-20260310-0002"

    @pytest.mark.asyncio
    async def test_sequence_resets_next_day(self, db):
        repo = RequestRepository(db)
        day1 = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)
        day2 = datetime(2026, 3, 11, 9, 0, tzinfo=timezone.utc)

        await generate_request_number(repo, day1)
        await generate_request_number(repo, day1)
        assert await generate_request_number(repo, day2) == "REQ-20260311-0001"

    @pytest.mark.asyncio
    async def test_rolled_back_number_is_reused(self, db):
        repo = RequestRepository(db)
        now = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)

        await generate_request_number(repo, now)
        await db.rollback()

        assert await generate_request_number(repo, now) == "REQ-20260310-0001"
