"""Achievement models for gamification"""
from enum import Enum
from typing import Optional
from datetime import datetime

from pydantic import BaseModel


class Difficulty(str, Enum):
    """Challenge difficulty levels"""
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"


class AchievementRarity(str, Enum):
    """Achievement rarity, from most to least common"""
    COMMON = "COMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"


class AchievementTrigger(str, Enum):
    """User actions that cause a subset of achievements to be re-evaluated"""
    CHALLENGE_COMPLETE = "challenge_complete"
    CHALLENGE_PUBLISH = "challenge_publish"
    LIKE_RECEIVED = "like_received"
    FORK_RECEIVED = "fork_received"


class AchievementDefinition(BaseModel):
    """Catalog entry as seeded into the achievements table"""
    slug: str
    name: str
    description: str
    icon: str
    xp_reward: int
    rarity: AchievementRarity
    trigger: AchievementTrigger

    model_config = {"frozen": True}


class UnlockedAchievement(BaseModel):
    """Achievement newly unlocked by an evaluation pass"""
    slug: str
    name: str
    description: str
    icon: str
    xp_reward: int
    rarity: AchievementRarity


class UserAchievementStatus(BaseModel):
    """Catalog entry annotated with a user's unlock state"""
    slug: str
    name: str
    description: str
    icon: str
    xp_reward: int
    rarity: AchievementRarity
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None
