"""
Database queries - re-export all functions under one namespace.

Module organization:
- stats.py: XP ledger, streak row locking, leaderboard
- achievements.py: Achievement catalog and unlock records
- completions.py: Read-only challenge catalog lookups (conditions, heatmap)
"""

# XP, streak and leaderboard operations
from progression_engine.db.queries.stats import (
    increment_user_xp,
    raise_user_level,
    get_user_stats,
    update_user_streak,
    get_leaderboard,
)

# Achievement operations
from progression_engine.db.queries.achievements import (
    get_all_achievements,
    get_achievement_by_slug,
    upsert_achievement,
    get_unlocked_slugs,
    get_user_achievement_unlocks,
    unlock_achievement,
    claim_achievement_rewards,
)

# Challenge catalog reads
from progression_engine.db.queries.completions import (
    count_completions,
    get_completed_difficulties,
    get_learning_path_progress,
    count_authored_challenges,
    count_likes_received,
    count_forks_received,
    get_daily_completion_counts,
)

__all__ = [
    "increment_user_xp",
    "raise_user_level",
    "get_user_stats",
    "update_user_streak",
    "get_leaderboard",
    "get_all_achievements",
    "get_achievement_by_slug",
    "upsert_achievement",
    "get_unlocked_slugs",
    "get_user_achievement_unlocks",
    "unlock_achievement",
    "claim_achievement_rewards",
    "count_completions",
    "get_completed_difficulties",
    "get_learning_path_progress",
    "count_authored_challenges",
    "count_likes_received",
    "count_forks_received",
    "get_daily_completion_counts",
]
