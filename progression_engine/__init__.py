"""
Progression engine for a challenge-learning platform

XP and levels, daily streaks, one-time achievements, leaderboard and
heatmap projections. Consumed as a library by request handlers.
"""

from progression_engine.gamification import (
    award_xp,
    check_and_award_achievements,
    get_completion_heatmap,
    get_leaderboard,
    get_user_achievements,
    get_user_stats,
    level_of,
    progress_to_next_level,
    seed_achievements,
    update_streak,
    xp_for_difficulty,
    xp_for_next_level,
)
from progression_engine.services import ProgressionService

__version__ = "0.1.0"

__all__ = [
    "award_xp",
    "check_and_award_achievements",
    "get_completion_heatmap",
    "get_leaderboard",
    "get_user_achievements",
    "get_user_stats",
    "level_of",
    "progress_to_next_level",
    "seed_achievements",
    "update_streak",
    "xp_for_difficulty",
    "xp_for_next_level",
    "ProgressionService",
]
