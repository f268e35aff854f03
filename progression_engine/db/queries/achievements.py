"""Achievement catalog and unlock queries"""
import logging
from typing import Optional

from progression_engine.db.connection import db, storage_operation
from progression_engine.db.queries.stats import INCREMENT_XP_SQL

logger = logging.getLogger(__name__)

ACHIEVEMENT_COLUMNS = "id, slug, name, description, icon, xp_reward, rarity, trigger, sort_order"


@storage_operation("get_all_achievements")
async def get_all_achievements() -> list[dict]:
    """
    Get all achievement definitions

    Returns:
        List of achievements in catalog order
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {ACHIEVEMENT_COLUMNS}
                FROM achievements
                ORDER BY sort_order, created_at
                """
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


@storage_operation("get_achievement_by_slug")
async def get_achievement_by_slug(slug: str) -> Optional[dict]:
    """
    Get achievement by slug

    Args:
        slug: Achievement slug (e.g., 'first-step')

    Returns:
        Achievement dict or None
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {ACHIEVEMENT_COLUMNS}
                FROM achievements
                WHERE slug = %s
                """,
                (slug,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


@storage_operation("upsert_achievement")
async def upsert_achievement(definition: dict, sort_order: int) -> None:
    """
    Insert or refresh a catalog entry by slug

    Args:
        definition: slug, name, description, icon, xp_reward, rarity, trigger
        sort_order: Position in the catalog
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO achievements (slug, name, description, icon, xp_reward, rarity, trigger, sort_order)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (slug) DO UPDATE
                SET name = EXCLUDED.name,
                    description = EXCLUDED.description,
                    icon = EXCLUDED.icon,
                    xp_reward = EXCLUDED.xp_reward,
                    rarity = EXCLUDED.rarity,
                    trigger = EXCLUDED.trigger,
                    sort_order = EXCLUDED.sort_order
                """,
                (
                    definition['slug'],
                    definition['name'],
                    definition['description'],
                    definition['icon'],
                    definition['xp_reward'],
                    definition['rarity'],
                    definition['trigger'],
                    sort_order
                )
            )
            await conn.commit()


@storage_operation("get_unlocked_slugs")
async def get_unlocked_slugs(user_id: str) -> set[str]:
    """Get slugs of every achievement the user has unlocked"""
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT a.slug
                FROM user_achievements ua
                JOIN achievements a ON a.id = ua.achievement_id
                WHERE ua.user_id = %s
                """,
                (user_id,)
            )
            rows = await cur.fetchall()
            return {row['slug'] for row in rows}


@storage_operation("get_user_achievement_unlocks")
async def get_user_achievement_unlocks(user_id: str) -> list[dict]:
    """
    Get user's unlock records

    Returns:
        List of {'achievement_id', 'unlocked_at'} ordered by unlocked_at DESC
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT achievement_id, unlocked_at
                FROM user_achievements
                WHERE user_id = %s
                ORDER BY unlocked_at DESC
                """,
                (user_id,)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


@storage_operation("unlock_achievement")
async def unlock_achievement(user_id: str, achievement_id) -> bool:
    """
    Record an unlock, relying on the (user_id, achievement_id) unique constraint

    Returns:
        True if inserted by this call, False if it already existed
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO user_achievements (user_id, achievement_id)
                VALUES (%s, %s)
                ON CONFLICT (user_id, achievement_id) DO NOTHING
                RETURNING id
                """,
                (user_id, achievement_id)
            )
            result = await cur.fetchone()
            await conn.commit()

            return result is not None


@storage_operation("claim_achievement_rewards")
async def claim_achievement_rewards(user_id: str) -> Optional[dict]:
    """
    Mark every unpaid unlock as paid and credit its XP in one transaction

    The claim is a conditional update on reward_paid, so concurrent callers
    never pay the same unlock twice; if the XP write fails the claim rolls
    back and the unlock stays owed.

    Returns:
        {'slugs': list, 'amount': int, 'xp': int, 'level': int}, or None if
        nothing was owed
    """
    async with db.connection() as conn:
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    UPDATE user_achievements ua
                    SET reward_paid = true
                    FROM achievements a
                    WHERE a.id = ua.achievement_id
                    AND ua.user_id = %s
                    AND NOT ua.reward_paid
                    RETURNING a.slug, a.xp_reward
                    """,
                    (user_id,)
                )
                claimed = await cur.fetchall()
                if not claimed:
                    return None

                amount = sum(row['xp_reward'] for row in claimed)
                await cur.execute(INCREMENT_XP_SQL, (user_id, amount))
                stats = await cur.fetchone()

    return {
        "slugs": [row['slug'] for row in claimed],
        "amount": amount,
        "xp": stats['xp'],
        "level": stats['level'],
    }
