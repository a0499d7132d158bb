"""
Timezone-aware datetime helpers.

All timestamps stored by the application are UTC. Calendar helpers
(current month/year) are what import rows and payments default to.
"""

from datetime import datetime, timezone, date
from typing import Optional


def utc_now() -> datetime:
    """
    Get the current UTC time as a timezone-aware datetime object.

    Returns:
        datetime: Current UTC time with timezone information
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Current calendar date in UTC."""
    return utc_now().date()


def current_month_code(now: Optional[datetime] = None) -> str:
    """Two-digit code ("01".."12") of the current month."""
    now = now or utc_now()
    return f"{now.month:02d}"


def current_year(now: Optional[datetime] = None) -> str:
    now = now or utc_now()
    return str(now.year)
