"""
Read-only queries against the challenge catalog tables

These tables belong to the challenge catalog; achievement conditions and
the completion heatmap only read from them.
"""
import logging
from datetime import datetime
from typing import Optional

from progression_engine.db.connection import db, storage_operation

logger = logging.getLogger(__name__)

COMPLETED = "COMPLETED"


@storage_operation("count_completions")
async def count_completions(user_id: str, difficulty: Optional[str] = None) -> int:
    """
    Count completed challenges, optionally for a single difficulty

    Args:
        user_id: User ID
        difficulty: 'BEGINNER', 'INTERMEDIATE', 'ADVANCED', 'EXPERT' or None for all
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            if difficulty is not None:
                await cur.execute(
                    """
                    SELECT COUNT(*) AS count
                    FROM challenge_completions cc
                    JOIN challenges c ON c.id = cc.challenge_id
                    WHERE cc.user_id = %s
                    AND cc.status = %s
                    AND c.difficulty = %s
                    """,
                    (user_id, COMPLETED, difficulty)
                )
            else:
                await cur.execute(
                    """
                    SELECT COUNT(*) AS count
                    FROM challenge_completions
                    WHERE user_id = %s
                    AND status = %s
                    """,
                    (user_id, COMPLETED)
                )

            return (await cur.fetchone())['count']


@storage_operation("get_completed_difficulties")
async def get_completed_difficulties(user_id: str) -> set[str]:
    """Get the distinct difficulties of challenges the user has completed"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT DISTINCT c.difficulty
                FROM challenge_completions cc
                JOIN challenges c ON c.id = cc.challenge_id
                WHERE cc.user_id = %s
                AND cc.status = %s
                """,
                (user_id, COMPLETED)
            )
            rows = await cur.fetchall()
            return {row['difficulty'] for row in rows}


@storage_operation("get_learning_path_progress")
async def get_learning_path_progress(user_id: str) -> list[dict]:
    """
    Get per-path completion counts for paths that contain challenges

    Returns:
        [{'path_id': str, 'total': int, 'completed': int}, ...]
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT lpc.path_id,
                       COUNT(*) AS total,
                       COUNT(cc.challenge_id) AS completed
                FROM learning_path_challenges lpc
                LEFT JOIN challenge_completions cc
                    ON cc.challenge_id = lpc.challenge_id
                    AND cc.user_id = %s
                    AND cc.status = %s
                GROUP BY lpc.path_id
                ORDER BY lpc.path_id
                """,
                (user_id, COMPLETED)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


@storage_operation("count_authored_challenges")
async def count_authored_challenges(user_id: str) -> int:
    """Count community (non-official) challenges authored by the user"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT COUNT(*) AS count
                FROM challenges
                WHERE author_id = %s
                AND is_official = false
                """,
                (user_id,)
            )

            return (await cur.fetchone())['count']


@storage_operation("count_likes_received")
async def count_likes_received(user_id: str) -> int:
    """Count likes across every challenge the user authored"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT COUNT(*) AS count
                FROM challenge_likes cl
                JOIN challenges c ON c.id = cl.challenge_id
                WHERE c.author_id = %s
                """,
                (user_id,)
            )

            return (await cur.fetchone())['count']


@storage_operation("count_forks_received")
async def count_forks_received(user_id: str) -> int:
    """Count challenges forked from ones the user authored"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT COUNT(*) AS count
                FROM challenges fork
                JOIN challenges origin ON origin.id = fork.forked_from_id
                WHERE origin.author_id = %s
                """,
                (user_id,)
            )

            return (await cur.fetchone())['count']


@storage_operation("get_daily_completion_counts")
async def get_daily_completion_counts(
    user_id: str,
    start: datetime,
    end: datetime,
    timezone_name: str
) -> list[dict]:
    """
    Count completions per calendar day of completed_at

    Args:
        user_id: User ID
        start: Inclusive lower bound (timezone-aware)
        end: Exclusive upper bound (timezone-aware)
        timezone_name: IANA zone used to cut days

    Returns:
        [{'day': date, 'count': int}, ...] ordered by day
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT (completed_at AT TIME ZONE %s)::date AS day,
                       COUNT(*) AS count
                FROM challenge_completions
                WHERE user_id = %s
                AND status = %s
                AND completed_at >= %s
                AND completed_at < %s
                GROUP BY day
                ORDER BY day
                """,
                (timezone_name, user_id, COMPLETED, start, end)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]
