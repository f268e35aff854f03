"""Pydantic models for the progression engine"""
from progression_engine.models.achievement import (
    AchievementDefinition,
    AchievementRarity,
    AchievementTrigger,
    Difficulty,
    UnlockedAchievement,
    UserAchievementStatus,
)
from progression_engine.models.progression import (
    CompletionResult,
    LeaderboardEntry,
    Level,
    LevelProgress,
    StreakState,
    StreakUpdate,
    UserStatsView,
    XPAwardResult,
)

__all__ = [
    "AchievementDefinition",
    "AchievementRarity",
    "AchievementTrigger",
    "Difficulty",
    "UnlockedAchievement",
    "UserAchievementStatus",
    "CompletionResult",
    "LeaderboardEntry",
    "Level",
    "LevelProgress",
    "StreakState",
    "StreakUpdate",
    "UserStatsView",
    "XPAwardResult",
]
