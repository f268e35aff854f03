"""User stats queries: XP ledger, streaks, leaderboard"""
import logging
from typing import Callable, Optional

from progression_engine.db.connection import db, storage_operation

logger = logging.getLogger(__name__)

STATS_COLUMNS = "user_id, xp, level, current_streak, longest_streak, last_active_date"

INCREMENT_XP_SQL = """
    INSERT INTO user_stats (user_id, xp, level)
    VALUES (%s, %s, 1)
    ON CONFLICT (user_id) DO UPDATE
    SET xp = user_stats.xp + EXCLUDED.xp,
        updated_at = CURRENT_TIMESTAMP
    RETURNING xp, level
"""

LEADERBOARD_QUERIES = {
    "xp": f"""
        SELECT {STATS_COLUMNS}
        FROM user_stats
        ORDER BY xp DESC, user_id ASC
        LIMIT %s
    """,
    "streak": f"""
        SELECT {STATS_COLUMNS}
        FROM user_stats
        ORDER BY current_streak DESC, user_id ASC
        LIMIT %s
    """,
}


# ==========================================
# XP Ledger
# ==========================================

@storage_operation("increment_user_xp")
async def increment_user_xp(user_id: str, amount: int) -> dict:
    """
    Atomically add XP, creating the stats row on first award

    The add happens inside a single upsert so concurrent awards for the
    same user never lose increments.

    Returns:
        {'xp': int, 'level': int}  post-add XP and the stored (cached) level
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(INCREMENT_XP_SQL, (user_id, amount))
            row = await cur.fetchone()
            await conn.commit()
            return dict(row)


@storage_operation("raise_user_level")
async def raise_user_level(user_id: str, level: int) -> bool:
    """
    Raise the cached level if it is below `level`

    Returns:
        True if this call moved the stored level, False if it was already there
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                UPDATE user_stats
                SET level = %s,
                    updated_at = CURRENT_TIMESTAMP
                WHERE user_id = %s AND level < %s
                RETURNING level
                """,
                (level, user_id, level)
            )
            row = await cur.fetchone()
            await conn.commit()
            return row is not None


@storage_operation("get_user_stats")
async def get_user_stats(user_id: str) -> Optional[dict]:
    """Get the stats row for a user, or None if they have never been awarded anything"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {STATS_COLUMNS}
                FROM user_stats
                WHERE user_id = %s
                """,
                (user_id,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


# ==========================================
# Streaks
# ==========================================

@storage_operation("update_user_streak")
async def update_user_streak(
    user_id: str,
    compute_next: Callable[[dict], Optional[dict]]
) -> tuple[dict, Optional[dict]]:
    """
    Read-modify-write the streak columns under a row lock

    The row is created with zeroed counters if missing, then locked with
    SELECT ... FOR UPDATE so concurrent updates for one user serialize.

    Args:
        user_id: User ID
        compute_next: Receives the locked row (current_streak, longest_streak,
            last_active_date) and returns the new values, or None to leave it

    Returns:
        (previous row, written values or None)
    """
    async with db.connection() as conn:
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO user_stats (user_id)
                    VALUES (%s)
                    ON CONFLICT (user_id) DO NOTHING
                    """,
                    (user_id,)
                )
                await cur.execute(
                    """
                    SELECT current_streak, longest_streak, last_active_date
                    FROM user_stats
                    WHERE user_id = %s
                    FOR UPDATE
                    """,
                    (user_id,)
                )
                previous = dict(await cur.fetchone())

                updated = compute_next(previous)
                if updated is not None:
                    await cur.execute(
                        """
                        UPDATE user_stats
                        SET current_streak = %s,
                            longest_streak = %s,
                            last_active_date = %s,
                            updated_at = CURRENT_TIMESTAMP
                        WHERE user_id = %s
                        """,
                        (
                            updated['current_streak'],
                            updated['longest_streak'],
                            updated['last_active_date'],
                            user_id
                        )
                    )

    return previous, updated


# ==========================================
# Leaderboard
# ==========================================

@storage_operation("get_leaderboard")
async def get_leaderboard(sort_by: str, limit: int) -> list[dict]:
    """
    Get top user stats rows

    Args:
        sort_by: 'xp' or 'streak'
        limit: Maximum rows

    Returns:
        Rows ordered descending by the sort column, ties by user_id
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(LEADERBOARD_QUERIES[sort_by], (limit,))
            rows = await cur.fetchall()
            return [dict(row) for row in rows]
