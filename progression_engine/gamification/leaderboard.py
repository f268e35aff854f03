"""Leaderboard and completion heatmap readers (read-only)"""

from datetime import MAXYEAR, MINYEAR
from typing import Dict, List, Optional
import logging

from progression_engine.config import LEADERBOARD_DEFAULT_LIMIT, PROGRESSION_TIMEZONE
from progression_engine.db import queries
from progression_engine.exceptions import ValidationError
from progression_engine.gamification.levels import level_of
from progression_engine.models import LeaderboardEntry
from progression_engine.utils.datetime_helpers import today_local, year_bounds

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("xp", "streak")


async def get_leaderboard(sort_by: str = "xp", limit: Optional[int] = None) -> List[LeaderboardEntry]:
    """
    Get users ranked by XP or current streak

    Args:
        sort_by: 'xp' or 'streak'
        limit: Maximum entries (defaults to LEADERBOARD_DEFAULT_LIMIT)

    Returns:
        Entries in descending order, ties broken by user_id
    """
    if sort_by not in SORT_OPTIONS:
        raise ValidationError(
            f"sort_by must be one of {', '.join(SORT_OPTIONS)}",
            field="sort_by",
            value=sort_by,
            operation="get_leaderboard"
        )

    if limit is None:
        limit = LEADERBOARD_DEFAULT_LIMIT
    if limit < 1:
        raise ValidationError(
            "limit must be positive",
            field="limit",
            value=limit,
            operation="get_leaderboard"
        )

    rows = await queries.get_leaderboard(sort_by, limit)

    return [
        LeaderboardEntry(
            rank=rank,
            user_id=row["user_id"],
            xp=row["xp"],
            level=row["level"],
            current_streak=row["current_streak"],
            level_info=level_of(row["xp"]),
        )
        for rank, row in enumerate(rows, start=1)
    ]


async def get_completion_heatmap(user_id: str, year: Optional[int] = None) -> Dict[str, int]:
    """
    Count a user's completed challenges per day of a calendar year

    Days are cut by completion time (not record creation) in the
    progression timezone.

    Args:
        user_id: User ID
        year: Calendar year (defaults to the current year)

    Returns:
        {'YYYY-MM-DD': count} for days with at least one completion
    """
    if year is None:
        year = today_local().year
    if not MINYEAR <= year < MAXYEAR:
        raise ValidationError(
            f"year must be between {MINYEAR} and {MAXYEAR - 1}",
            field="year",
            value=year,
            user_id=user_id,
            operation="get_completion_heatmap"
        )

    start, end = year_bounds(year, PROGRESSION_TIMEZONE)
    rows = await queries.get_daily_completion_counts(user_id, start, end, PROGRESSION_TIMEZONE)

    heatmap = {row["day"].isoformat(): row["count"] for row in rows}

    logger.debug(f"Heatmap for user {user_id} in {year}: {len(heatmap)} active days")
    return heatmap
