"""XP, level, streak and leaderboard models"""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from progression_engine.models.achievement import UnlockedAchievement


class Level(BaseModel):
    """Static level tier"""
    level: int
    xp_required: int
    title: str
    color: str  # hex, e.g. "#9CA3AF"

    model_config = {"frozen": True}


class LevelProgress(BaseModel):
    """Progress through the current tier"""
    current: int  # XP earned inside the current tier
    needed: int  # XP span of the current tier, 0 at the top tier
    percent: int


class XPAwardResult(BaseModel):
    """Outcome of a single award_xp call"""
    xp: int
    level: int
    leveled_up: bool
    new_level: Level


class StreakState(BaseModel):
    """Streak columns of a user_stats row"""
    current_streak: int = 0
    longest_streak: int = 0
    last_active_date: Optional[date] = None


class StreakUpdate(BaseModel):
    """Outcome of update_streak"""
    current_streak: int
    longest_streak: int
    last_active_date: Optional[date]
    previous_streak: int
    changed: bool


class UserStatsView(BaseModel):
    """User stats with the level derived from XP"""
    user_id: str
    xp: int = 0
    level: int = 1
    current_streak: int = 0
    longest_streak: int = 0
    last_active_date: Optional[date] = None
    level_info: Level
    progress: LevelProgress


class LeaderboardEntry(BaseModel):
    """Ranked leaderboard row"""
    rank: int
    user_id: str
    xp: int
    level: int
    current_streak: int
    level_info: Level


class CompletionResult(BaseModel):
    """Combined outcome of one progression event"""
    xp_gained: int = 0
    leveled_up: bool = False
    level: Optional[int] = None
    current_streak: Optional[int] = None
    achievements: List[UnlockedAchievement] = Field(default_factory=list)
    achievements_deferred: bool = False
