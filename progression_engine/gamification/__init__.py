"""
Gamification engine for challenge progression

- Level table and XP ledger
- Day-based streak tracking
- Achievement catalog and evaluator
- Leaderboard and completion heatmap readers
"""

from progression_engine.gamification.levels import (
    level_of,
    xp_for_next_level,
    progress_to_next_level,
    xp_for_difficulty,
)
from progression_engine.gamification.xp_system import award_xp, get_user_stats, pay_achievement_rewards
from progression_engine.gamification.streak_system import update_streak
from progression_engine.gamification.achievement_system import (
    check_and_award_achievements,
    get_user_achievements,
)
from progression_engine.gamification.catalog import seed_achievements
from progression_engine.gamification.leaderboard import get_leaderboard, get_completion_heatmap

__all__ = [
    "level_of",
    "xp_for_next_level",
    "progress_to_next_level",
    "xp_for_difficulty",
    "award_xp",
    "get_user_stats",
    "pay_achievement_rewards",
    "update_streak",
    "check_and_award_achievements",
    "get_user_achievements",
    "seed_achievements",
    "get_leaderboard",
    "get_completion_heatmap",
]
