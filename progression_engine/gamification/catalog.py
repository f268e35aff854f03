"""
Achievement Catalog

Static definitions seeded into the achievements table. The evaluator
reads the seeded rows; this list is the source the seed step upserts from.
"""

import logging
from typing import Dict, List

from progression_engine.db import queries
from progression_engine.models import AchievementDefinition, AchievementRarity, AchievementTrigger

logger = logging.getLogger(__name__)

_COMPLETE = AchievementTrigger.CHALLENGE_COMPLETE

ACHIEVEMENT_DEFINITIONS: List[AchievementDefinition] = [
    # Completion count
    AchievementDefinition(
        slug="first-step", name="First Step", description="Complete your first challenge",
        icon="🎯", xp_reward=10, rarity=AchievementRarity.COMMON, trigger=_COMPLETE,
    ),
    AchievementDefinition(
        slug="ten-complete", name="Perfect Ten", description="Complete 10 challenges",
        icon="🔟", xp_reward=50, rarity=AchievementRarity.RARE, trigger=_COMPLETE,
    ),
    AchievementDefinition(
        slug="hundred-complete", name="Forged in Fire", description="Complete 100 challenges",
        icon="💯", xp_reward=200, rarity=AchievementRarity.LEGENDARY, trigger=_COMPLETE,
    ),
    AchievementDefinition(
        slug="all-difficulties", name="All-Round AI", description="Complete one challenge of each difficulty",
        icon="🧠", xp_reward=100, rarity=AchievementRarity.EPIC, trigger=_COMPLETE,
    ),
    # Difficulty
    AchievementDefinition(
        slug="green-belt", name="Green Belt", description="Complete 5 BEGINNER challenges",
        icon="🟢", xp_reward=20, rarity=AchievementRarity.COMMON, trigger=_COMPLETE,
    ),
    AchievementDefinition(
        slug="blue-belt", name="Blue Belt", description="Complete 5 INTERMEDIATE challenges",
        icon="🔵", xp_reward=30, rarity=AchievementRarity.RARE, trigger=_COMPLETE,
    ),
    AchievementDefinition(
        slug="red-belt", name="Red Belt", description="Complete 5 ADVANCED challenges",
        icon="🔴", xp_reward=50, rarity=AchievementRarity.EPIC, trigger=_COMPLETE,
    ),
    AchievementDefinition(
        slug="black-belt", name="Black Belt", description="Complete 1 EXPERT challenge",
        icon="⚫", xp_reward=50, rarity=AchievementRarity.EPIC, trigger=_COMPLETE,
    ),
    # Streak
    AchievementDefinition(
        slug="streak-3", name="Three-Day Spark", description="Complete challenges 3 days in a row",
        icon="🔥", xp_reward=15, rarity=AchievementRarity.COMMON, trigger=_COMPLETE,
    ),
    AchievementDefinition(
        slug="streak-7", name="Week Warrior", description="Complete challenges 7 days in a row",
        icon="🔥🔥", xp_reward=50, rarity=AchievementRarity.RARE, trigger=_COMPLETE,
    ),
    AchievementDefinition(
        slug="streak-30", name="Unstoppable Month", description="Complete challenges 30 days in a row",
        icon="🔥🔥🔥", xp_reward=200, rarity=AchievementRarity.LEGENDARY, trigger=_COMPLETE,
    ),
    # Social
    AchievementDefinition(
        slug="creator", name="Creator", description="Publish your first challenge",
        icon="✍️", xp_reward=20, rarity=AchievementRarity.COMMON,
        trigger=AchievementTrigger.CHALLENGE_PUBLISH,
    ),
    AchievementDefinition(
        slug="popular", name="Crowd Favorite", description="Receive 10 likes on your challenges",
        icon="🌟", xp_reward=50, rarity=AchievementRarity.RARE,
        trigger=AchievementTrigger.LIKE_RECEIVED,
    ),
    AchievementDefinition(
        slug="influencer", name="Influencer", description="Have your challenges forked 5 times",
        icon="🤝", xp_reward=50, rarity=AchievementRarity.RARE,
        trigger=AchievementTrigger.FORK_RECEIVED,
    ),
    # Learning paths
    AchievementDefinition(
        slug="path-pioneer", name="Path Pioneer", description="Complete your first learning path",
        icon="🗺️", xp_reward=100, rarity=AchievementRarity.EPIC, trigger=_COMPLETE,
    ),
    AchievementDefinition(
        slug="path-master", name="Path Master", description="Complete every learning path",
        icon="🏆", xp_reward=500, rarity=AchievementRarity.LEGENDARY, trigger=_COMPLETE,
    ),
]

DEFINITIONS_BY_SLUG: Dict[str, AchievementDefinition] = {d.slug: d for d in ACHIEVEMENT_DEFINITIONS}


async def seed_achievements() -> int:
    """
    Upsert every catalog definition into the achievements table by slug

    Returns:
        Number of definitions written
    """
    for sort_order, definition in enumerate(ACHIEVEMENT_DEFINITIONS):
        await queries.upsert_achievement(definition.model_dump(mode="json"), sort_order)

    logger.info(f"Seeded {len(ACHIEVEMENT_DEFINITIONS)} achievements")
    return len(ACHIEVEMENT_DEFINITIONS)
