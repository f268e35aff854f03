"""
Prometheus metrics for the progression engine.

Metrics are registered on the default prometheus_client registry; the
hosting application exposes them on its own /metrics endpoint.
"""

import logging
from prometheus_client import Counter

logger = logging.getLogger(__name__)

# =============================================================================
# XP Ledger
# =============================================================================

progression_xp_awarded_total = Counter(
    "progression_xp_awarded_total",
    "Total XP awarded",
)

progression_level_ups_total = Counter(
    "progression_level_ups_total",
    "Total level-ups",
    ["level"],
)

# =============================================================================
# Streaks
# =============================================================================

progression_streak_updates_total = Counter(
    "progression_streak_updates_total",
    "Streak state transitions",
    ["transition"],  # started/same_day/continued/reset/clock_skew
)

# =============================================================================
# Achievements
# =============================================================================

progression_achievement_evaluations_total = Counter(
    "progression_achievement_evaluations_total",
    "Achievement evaluation passes",
    ["trigger", "status"],  # status: success/error
)

progression_achievements_unlocked_total = Counter(
    "progression_achievements_unlocked_total",
    "Total achievements unlocked",
    ["slug", "rarity"],
)

progression_unlock_conflicts_total = Counter(
    "progression_unlock_conflicts_total",
    "Unlocks already recorded by a concurrent evaluation",
    ["slug"],
)
