"""Database schema definitions."""
import logging

from progression_engine.db.connection import db, storage_operation

logger = logging.getLogger(__name__)

# Tables owned by the progression engine
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS user_stats (
    user_id TEXT PRIMARY KEY,
    xp INTEGER NOT NULL DEFAULT 0 CHECK (xp >= 0),
    level INTEGER NOT NULL DEFAULT 1,
    current_streak INTEGER NOT NULL DEFAULT 0,
    longest_streak INTEGER NOT NULL DEFAULT 0,
    last_active_date DATE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CHECK (current_streak <= longest_streak)
);

CREATE INDEX IF NOT EXISTS idx_user_stats_xp ON user_stats (xp DESC, user_id);
CREATE INDEX IF NOT EXISTS idx_user_stats_streak ON user_stats (current_streak DESC, user_id);

CREATE TABLE IF NOT EXISTS achievements (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    slug TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    description TEXT NOT NULL,
    icon TEXT NOT NULL,
    xp_reward INTEGER NOT NULL DEFAULT 0,
    rarity TEXT NOT NULL CHECK (rarity IN ('COMMON', 'RARE', 'EPIC', 'LEGENDARY')),
    trigger TEXT NOT NULL,
    sort_order INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS user_achievements (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id TEXT NOT NULL,
    achievement_id UUID NOT NULL REFERENCES achievements (id),
    unlocked_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    reward_paid BOOLEAN NOT NULL DEFAULT false,
    UNIQUE (user_id, achievement_id)
);

-- Unlocks recorded before reward_paid existed were paid when they were unlocked
ALTER TABLE user_achievements ADD COLUMN IF NOT EXISTS reward_paid BOOLEAN NOT NULL DEFAULT true;
ALTER TABLE user_achievements ALTER COLUMN reward_paid SET DEFAULT false;

CREATE INDEX IF NOT EXISTS idx_user_achievements_unpaid
    ON user_achievements (user_id) WHERE NOT reward_paid;
"""

# Tables owned by the challenge catalog; created here only for local databases
CATALOG_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS challenges (
    id TEXT PRIMARY KEY,
    author_id TEXT,
    difficulty TEXT NOT NULL CHECK (difficulty IN ('BEGINNER', 'INTERMEDIATE', 'ADVANCED', 'EXPERT')),
    is_official BOOLEAN NOT NULL DEFAULT false,
    forked_from_id TEXT REFERENCES challenges (id)
);

CREATE TABLE IF NOT EXISTS challenge_completions (
    user_id TEXT NOT NULL,
    challenge_id TEXT NOT NULL REFERENCES challenges (id),
    status TEXT NOT NULL,
    completed_at TIMESTAMPTZ,
    PRIMARY KEY (user_id, challenge_id)
);

CREATE TABLE IF NOT EXISTS challenge_likes (
    user_id TEXT NOT NULL,
    challenge_id TEXT NOT NULL REFERENCES challenges (id),
    PRIMARY KEY (user_id, challenge_id)
);

CREATE TABLE IF NOT EXISTS learning_paths (
    id TEXT PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS learning_path_challenges (
    path_id TEXT NOT NULL REFERENCES learning_paths (id),
    challenge_id TEXT NOT NULL REFERENCES challenges (id),
    PRIMARY KEY (path_id, challenge_id)
);
"""


@storage_operation("create_schema")
async def create_schema(include_catalog: bool = False) -> None:
    """
    Create progression tables if they do not exist

    Args:
        include_catalog: Also create the catalog tables the achievement
            conditions read from (development and test databases only)
    """
    async with db.connection() as conn:
        await conn.execute(SCHEMA_SQL)
        if include_catalog:
            await conn.execute(CATALOG_SCHEMA_SQL)
        await conn.commit()

    logger.info(f"Schema ready (catalog tables: {include_catalog})")
