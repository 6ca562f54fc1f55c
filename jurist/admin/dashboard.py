"""Admin dashboard — request and lawyer counters."""

from typing import Any

from jurist.lifecycle.engine import RequestLifecycle
from jurist.moderation.engine import ModerationEngine


async def dashboard_stats(
    lifecycle: RequestLifecycle, moderation: ModerationEngine
) -> dict[str, Any]:
    """Combined counters for the admin landing page.

    Returns:
        {"requests": {total, today, this_week, by_status},
         "lawyers": {total, pending, approved, rejected}}
    """
    return {
        "requests": await lifecycle.stats(),
        "lawyers": await moderation.stats(),
    }
