"""
XP Ledger

Manages XP awards and the cached level on each user's stats row.

- XP is added with a single atomic upsert, so concurrent awards for the
  same user never lose increments.
- The stored level is a display cache. level_of(xp) is the ground truth;
  the cache is only ever raised, with a conditional update, so exactly
  one concurrent caller observes a given level-up.
- Completion XP is an award_xp call. Achievement rewards are paid by
  pay_achievement_rewards, which claims unpaid unlocks and adds their XP
  in one transaction.
"""

import logging
from typing import Optional, Tuple

from progression_engine.db import queries
from progression_engine.exceptions import ValidationError
from progression_engine.gamification.levels import level_of, progress_to_next_level
from progression_engine.models import UserStatsView, XPAwardResult
from progression_engine.observability.metrics import (
    progression_level_ups_total,
    progression_xp_awarded_total,
)

logger = logging.getLogger(__name__)


async def award_xp(user_id: str, amount: int) -> XPAwardResult:
    """
    Award XP to user and check for level up

    Args:
        user_id: User ID
        amount: Non-negative XP amount

    Returns:
        XPAwardResult with post-award xp, level, leveled_up and the new Level

    Raises:
        ValidationError: amount is negative
        StorageError: the increment or level update failed
    """
    if amount < 0:
        raise ValidationError(
            "XP amount must not be negative",
            field="amount",
            value=amount,
            user_id=user_id,
            operation="award_xp"
        )

    row = await queries.increment_user_xp(user_id, amount)
    return await _record_award(user_id, amount, row)


async def pay_achievement_rewards(user_id: str) -> Tuple[int, Optional[XPAwardResult]]:
    """
    Pay the XP for every unlock whose reward has not been paid yet

    Claiming the unlocks and adding their XP commit together, so a reward
    is paid exactly once even when an earlier payment attempt failed or
    several triggers run at once.

    Returns:
        (amount paid, XPAwardResult), or (0, None) if nothing was owed

    Raises:
        StorageError: the claim failed; the rewards stay owed
    """
    row = await queries.claim_achievement_rewards(user_id)
    if row is None:
        return 0, None

    logger.info(f"Paid achievement rewards to user {user_id}: {', '.join(row['slugs'])}")
    return row["amount"], await _record_award(user_id, row["amount"], row)


async def _record_award(user_id: str, amount: int, row: dict) -> XPAwardResult:
    """Raise the cached level if the new total crossed a threshold and report the award"""
    new_xp = row["xp"]
    stored_level = row["level"]

    level_info = level_of(new_xp)
    leveled_up = False
    if level_info.level > stored_level:
        leveled_up = await queries.raise_user_level(user_id, level_info.level)

    progression_xp_awarded_total.inc(amount)

    logger.info(f"Awarded {amount} XP to user {user_id}. Total: {new_xp} XP, Level: {level_info.level}")

    if leveled_up:
        progression_level_ups_total.labels(level=str(level_info.level)).inc()
        logger.info(f"User {user_id} leveled up from {stored_level} to {level_info.level}!")

    return XPAwardResult(
        xp=new_xp,
        level=level_info.level,
        leveled_up=leveled_up,
        new_level=level_info,
    )


async def get_user_stats(user_id: str) -> UserStatsView:
    """
    Get user's stats with level information derived from XP

    A user without a stats row gets zeroed stats at tier 1; no row is created.
    """
    stats = await queries.get_user_stats(user_id)

    if not stats:
        return UserStatsView(
            user_id=user_id,
            level_info=level_of(0),
            progress=progress_to_next_level(0),
        )

    return UserStatsView(
        user_id=user_id,
        xp=stats["xp"],
        level=stats["level"],
        current_streak=stats["current_streak"],
        longest_streak=stats["longest_streak"],
        last_active_date=stats["last_active_date"],
        level_info=level_of(stats["xp"]),
        progress=progress_to_next_level(stats["xp"]),
    )
