"""
Date helpers for day-based progression

Streaks and heatmaps count calendar days, cut at local midnight in the
configured progression timezone. Stored dates are date-only (no time of day).
"""

import logging
from datetime import date, datetime
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from progression_engine.config import PROGRESSION_TIMEZONE

logger = logging.getLogger(__name__)


def get_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    """Get the ZoneInfo used for day boundaries"""
    return ZoneInfo(tz_name or PROGRESSION_TIMEZONE)


def today_local(tz_name: Optional[str] = None) -> date:
    """
    Get today's calendar date in the progression timezone

    Args:
        tz_name: Override for PROGRESSION_TIMEZONE

    Returns:
        Date for the current local day
    """
    return datetime.now(get_timezone(tz_name)).date()


def days_between(earlier: date, later: date) -> int:
    """
    Whole calendar days from `earlier` to `later`

    Negative when `later` precedes `earlier`.
    """
    if isinstance(earlier, datetime):
        earlier = earlier.date()
    if isinstance(later, datetime):
        later = later.date()
    return (later - earlier).days


def year_bounds(year: int, tz_name: Optional[str] = None) -> Tuple[datetime, datetime]:
    """
    Get the [start, end) instants of a calendar year

    Returns:
        (Jan 1 00:00 of `year`, Jan 1 00:00 of `year + 1`), both timezone-aware
    """
    tz = get_timezone(tz_name)
    return datetime(year, 1, 1, tzinfo=tz), datetime(year + 1, 1, 1, tzinfo=tz)
