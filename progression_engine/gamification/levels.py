"""
Level Table

Twenty static tiers keyed by cumulative XP. Tier 1 starts at 0 XP so every
non-negative XP total maps to a tier; there is no progression past tier 20.

Completion XP by difficulty:
- BEGINNER: 10 XP
- INTERMEDIATE: 25 XP
- ADVANCED: 50 XP
- EXPERT: 100 XP
"""

from bisect import bisect_right
from typing import Dict, List, Union

from progression_engine.exceptions import ValidationError
from progression_engine.models import Difficulty, Level, LevelProgress

XP_BY_DIFFICULTY: Dict[Difficulty, int] = {
    Difficulty.BEGINNER: 10,
    Difficulty.INTERMEDIATE: 25,
    Difficulty.ADVANCED: 50,
    Difficulty.EXPERT: 100,
}

LEVELS: List[Level] = [
    Level(level=1, xp_required=0, title="AI Novice", color="#9CA3AF"),
    Level(level=2, xp_required=50, title="AI Explorer", color="#6EE7B7"),
    Level(level=3, xp_required=150, title="AI Practitioner", color="#34D399"),
    Level(level=4, xp_required=300, title="Prompt Engineer", color="#60A5FA"),
    Level(level=5, xp_required=500, title="AI Builder", color="#3B82F6"),
    Level(level=6, xp_required=800, title="Full-Stack AI Engineer", color="#818CF8"),
    Level(level=7, xp_required=1200, title="AI Product Creator", color="#A78BFA"),
    Level(level=8, xp_required=1800, title="AI Application Expert", color="#C084FC"),
    Level(level=9, xp_required=2600, title="AI Architect", color="#F472B6"),
    Level(level=10, xp_required=3500, title="AI Master", color="#FB923C"),
    Level(level=11, xp_required=4500, title="Legendary AI Leader I", color="#F59E0B"),
    Level(level=12, xp_required=5700, title="Legendary AI Leader II", color="#F59E0B"),
    Level(level=13, xp_required=7000, title="Legendary AI Leader III", color="#EAB308"),
    Level(level=14, xp_required=8500, title="Legendary AI Leader IV", color="#EAB308"),
    Level(level=15, xp_required=10000, title="Legendary AI Leader V", color="#FACC15"),
    Level(level=16, xp_required=12000, title="Mythic AI Pioneer I", color="#EF4444"),
    Level(level=17, xp_required=14500, title="Mythic AI Pioneer II", color="#DC2626"),
    Level(level=18, xp_required=17500, title="Mythic AI Pioneer III", color="#B91C1C"),
    Level(level=19, xp_required=21000, title="Mythic AI Pioneer IV", color="#991B1B"),
    Level(level=20, xp_required=25000, title="Mythic AI Pioneer V", color="#7F1D1D"),
]

MAX_LEVEL = LEVELS[-1].level

_THRESHOLDS = [lvl.xp_required for lvl in LEVELS]


def level_of(xp: int) -> Level:
    """
    Get the tier for a cumulative XP total

    Returns the tier with the largest xp_required <= xp. Negative totals
    map to tier 1.
    """
    index = bisect_right(_THRESHOLDS, xp) - 1
    return LEVELS[max(index, 0)]


def xp_for_next_level(level: int) -> int:
    """
    XP threshold of the tier after `level`

    At the top tier this is the top tier's own threshold.
    """
    if level >= MAX_LEVEL:
        return LEVELS[-1].xp_required
    return LEVELS[max(level, 0)].xp_required


def progress_to_next_level(xp: int) -> LevelProgress:
    """
    Calculate progress through the current tier

    Returns:
        LevelProgress with XP into the tier, the tier span, and a percentage
        capped at 100 (always 100 at the top tier)
    """
    current_level = level_of(xp)
    current = xp - current_level.xp_required

    if current_level.level >= MAX_LEVEL:
        return LevelProgress(current=current, needed=0, percent=100)

    needed = xp_for_next_level(current_level.level) - current_level.xp_required
    percent = min(int(current / needed * 100 + 0.5), 100)

    return LevelProgress(current=current, needed=needed, percent=percent)


def xp_for_difficulty(difficulty: Union[Difficulty, str]) -> int:
    """Base XP for completing a challenge of the given difficulty"""
    try:
        return XP_BY_DIFFICULTY[Difficulty(difficulty)]
    except ValueError:
        raise ValidationError(
            f"Unknown difficulty '{difficulty}'",
            field="difficulty",
            value=difficulty,
            operation="xp_for_difficulty"
        )
