"""Request number generator — REQ-YYYYMMDD-NNNN with a per-day sequence."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from jurist.config import settings
from jurist.repositories.request import RequestRepository

REQUEST_NUMBER_PREFIX = "REQ"


def local_zone() -> ZoneInfo:
    return ZoneInfo(settings.local_timezone)


def local_day(moment: datetime) -> date:
    """Calendar day of an aware UTC moment in the configured local timezone."""
    return moment.astimezone(local_zone()).date()


def local_midnight_utc(moment: datetime) -> datetime:
    """Start of the local day containing moment, expressed in UTC."""
    start = datetime.combine(local_day(moment), time.min, tzinfo=local_zone())
    return start.astimezone(timezone.utc)


def format_request_number(day: date, sequence: int) -> str:
    return f"{REQUEST_NUMBER_PREFIX}-{day:%Y%m%d}-{sequence:04d}"


async def generate_request_number(repo: RequestRepository, now: datetime) -> str:
    """Reserve the next number for the local day of now.

    The day's counter row is incremented atomically in the caller's
    transaction; a rolled-back submission gives its number back.
    """
    day = local_day(now)
    sequence = await repo.next_sequence(day)
    return format_request_number(day, sequence)
