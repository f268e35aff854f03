"""
Streak Tracking System

Counts consecutive calendar days with at least one completion.

Transitions, by whole days since last_active_date:
- never active: streak starts at 1
- 0 days: already counted today, no change
- 1 day: streak continues, best streak follows it up
- 2+ days: streak restarts at 1, best streak is kept
- negative (clock skew): no change

Call once per completion event, before streak-based achievements are
checked. The read-then-write runs under a row lock per user.
"""

from datetime import date
from typing import Dict, Optional
import logging

from progression_engine.db import queries
from progression_engine.models import StreakState, StreakUpdate
from progression_engine.observability.metrics import progression_streak_updates_total
from progression_engine.utils.datetime_helpers import days_between, today_local

logger = logging.getLogger(__name__)


def classify_transition(state: StreakState, today: date) -> str:
    """Name the transition update_streak would apply: started/same_day/continued/reset/clock_skew"""
    if state.last_active_date is None:
        return "started"

    diff_days = days_between(state.last_active_date, today)
    if diff_days == 0:
        return "same_day"
    if diff_days == 1:
        return "continued"
    if diff_days >= 2:
        return "reset"
    return "clock_skew"


def next_streak_state(state: StreakState, today: date) -> Optional[StreakState]:
    """
    Compute the streak state after activity on `today`

    Returns:
        The new state, or None when nothing changes
    """
    transition = classify_transition(state, today)

    if transition == "started":
        return StreakState(
            current_streak=1,
            longest_streak=max(1, state.longest_streak),
            last_active_date=today,
        )

    if transition == "continued":
        new_streak = state.current_streak + 1
        return StreakState(
            current_streak=new_streak,
            longest_streak=max(new_streak, state.longest_streak),
            last_active_date=today,
        )

    if transition == "reset":
        return StreakState(
            current_streak=1,
            longest_streak=state.longest_streak,
            last_active_date=today,
        )

    return None


async def update_streak(user_id: str, today: Optional[date] = None) -> StreakUpdate:
    """
    Update the user's streak for activity today

    Args:
        user_id: User ID
        today: Activity date (defaults to today in the progression timezone)

    Returns:
        StreakUpdate with the resulting counters and whether anything changed
    """
    if today is None:
        today = today_local()

    transitions: Dict[str, str] = {}

    def compute_next(row: dict) -> Optional[dict]:
        state = StreakState(**row)
        transitions["name"] = classify_transition(state, today)
        new_state = next_streak_state(state, today)
        return new_state.model_dump() if new_state else None

    previous, updated = await queries.update_user_streak(user_id, compute_next)

    transition = transitions["name"]
    progression_streak_updates_total.labels(transition=transition).inc()

    if transition == "clock_skew":
        logger.warning(
            f"Streak for user {user_id} left unchanged: last active "
            f"{previous['last_active_date']} is after today {today}"
        )
    elif transition == "reset":
        logger.info(
            f"User {user_id} streak broken. Was {previous['current_streak']}, "
            f"last active {previous['last_active_date']}"
        )

    result = updated or previous

    logger.info(
        f"Updated streak for user {user_id}: "
        f"{previous['current_streak']} → {result['current_streak']} days ({transition})"
    )

    return StreakUpdate(
        current_streak=result["current_streak"],
        longest_streak=result["longest_streak"],
        last_active_date=result["last_active_date"],
        previous_streak=previous["current_streak"],
        changed=updated is not None,
    )
