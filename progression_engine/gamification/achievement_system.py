"""
Achievement System

Rules are registered per trigger category in a registry; each rule is a
slug plus an async condition over the user's current state. Evaluation:

1. load the slugs the user already unlocked
2. run the conditions registered for the trigger, skipping unlocked slugs
3. record every newly true condition with an insert-if-absent on
   (user_id, achievement_id)
4. return what this call unlocked

The evaluator never awards XP. It reports xp_reward per unlock and the
caller pays it through award_xp. Each unlock commits on its own, so a
storage failure part way through keeps earlier unlocks; evaluation is
stateless and safe to re-run.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Union
import logging

from progression_engine.db import queries
from progression_engine.exceptions import AchievementEvaluationError, StorageError, ValidationError
from progression_engine.models import (
    AchievementRarity,
    AchievementTrigger,
    Difficulty,
    UnlockedAchievement,
    UserAchievementStatus,
)
from progression_engine.observability.metrics import (
    progression_achievement_evaluations_total,
    progression_achievements_unlocked_total,
    progression_unlock_conflicts_total,
)

logger = logging.getLogger(__name__)

Condition = Callable[[str], Awaitable[bool]]


@dataclass(frozen=True)
class AchievementCheck:
    """A registered unlock rule"""
    slug: str
    condition: Condition


_REGISTRY: Dict[AchievementTrigger, List[AchievementCheck]] = {trigger: [] for trigger in AchievementTrigger}


def register_check(trigger: AchievementTrigger, slug: str, condition: Condition) -> None:
    """Register a condition for a trigger; checks run in registration order"""
    if any(check.slug == slug for check in _REGISTRY[trigger]):
        raise ValueError(f"Achievement check '{slug}' already registered for {trigger.value}")
    _REGISTRY[trigger].append(AchievementCheck(slug=slug, condition=condition))


def achievement_check(trigger: AchievementTrigger, slug: str) -> Callable[[Condition], Condition]:
    """Decorator form of register_check"""

    def decorator(condition: Condition) -> Condition:
        register_check(trigger, slug, condition)
        return condition

    return decorator


def get_checks_for_trigger(trigger: Union[AchievementTrigger, str]) -> List[AchievementCheck]:
    """Get the checks registered for a trigger, in evaluation order"""
    return list(_REGISTRY[parse_trigger(trigger)])


def parse_trigger(trigger: Union[AchievementTrigger, str]) -> AchievementTrigger:
    """Coerce a trigger name, rejecting anything outside the closed set"""
    try:
        return AchievementTrigger(trigger)
    except ValueError:
        raise ValidationError(
            f"Unknown achievement trigger '{trigger}'",
            field="trigger",
            value=trigger,
            operation="check_and_award_achievements"
        )


async def check_and_award_achievements(
    user_id: str,
    trigger: Union[AchievementTrigger, str]
) -> List[UnlockedAchievement]:
    """
    Check if user unlocked any achievements for the triggering action

    Args:
        user_id: User ID
        trigger: 'challenge_complete', 'challenge_publish', 'like_received' or 'fork_received'

    Returns:
        Achievements unlocked by this call (empty if none)

    Raises:
        ValidationError: unknown trigger
        AchievementEvaluationError: a condition or unlock query failed; remaining
            checks are skipped and earlier unlocks are carried on the error
    """
    trigger = parse_trigger(trigger)
    newly_unlocked: List[UnlockedAchievement] = []

    try:
        unlocked_slugs = await queries.get_unlocked_slugs(user_id)

        for check in _REGISTRY[trigger]:
            if check.slug in unlocked_slugs:
                continue

            if not await check.condition(user_id):
                continue

            achievement = await queries.get_achievement_by_slug(check.slug)
            if not achievement:
                logger.warning(f"Achievement '{check.slug}' is not in the seeded catalog, skipping")
                continue

            if not await queries.unlock_achievement(user_id, achievement['id']):
                # A concurrent evaluation recorded it first and reports the reward
                progression_unlock_conflicts_total.labels(slug=check.slug).inc()
                logger.debug(f"Achievement {check.slug} already unlocked for user {user_id}")
                continue

            unlocked = UnlockedAchievement(
                slug=achievement['slug'],
                name=achievement['name'],
                description=achievement['description'],
                icon=achievement['icon'],
                xp_reward=achievement['xp_reward'],
                rarity=AchievementRarity(achievement['rarity']),
            )
            newly_unlocked.append(unlocked)

            progression_achievements_unlocked_total.labels(slug=unlocked.slug, rarity=unlocked.rarity.value).inc()
            logger.info(
                f"User {user_id} unlocked achievement: {unlocked.slug} "
                f"({unlocked.name}) +{unlocked.xp_reward} XP"
            )

    except StorageError as e:
        progression_achievement_evaluations_total.labels(trigger=trigger.value, status="error").inc()
        raise AchievementEvaluationError(
            f"Achievement evaluation ({trigger.value}) aborted after {len(newly_unlocked)} unlock(s)",
            unlocked=newly_unlocked,
            user_id=user_id,
            operation="check_and_award_achievements",
            context={"trigger": trigger.value},
            cause=e
        ) from e

    progression_achievement_evaluations_total.labels(trigger=trigger.value, status="success").inc()
    return newly_unlocked


async def get_user_achievements(user_id: str) -> List[UserAchievementStatus]:
    """
    Get the full catalog annotated with the user's unlock state

    Returns:
        Catalog entries in catalog order with unlocked / unlocked_at filled in
    """
    all_achievements = await queries.get_all_achievements()
    unlocks = await queries.get_user_achievement_unlocks(user_id)
    unlocked_at = {unlock['achievement_id']: unlock['unlocked_at'] for unlock in unlocks}

    return [
        UserAchievementStatus(
            slug=achievement['slug'],
            name=achievement['name'],
            description=achievement['description'],
            icon=achievement['icon'],
            xp_reward=achievement['xp_reward'],
            rarity=AchievementRarity(achievement['rarity']),
            unlocked=achievement['id'] in unlocked_at,
            unlocked_at=unlocked_at.get(achievement['id']),
        )
        for achievement in all_achievements
    ]


# ============================================
# Conditions
# ============================================

def _completions_at_least(threshold: int, difficulty: Optional[Difficulty] = None) -> Condition:
    async def condition(user_id: str) -> bool:
        difficulty_value = difficulty.value if difficulty else None
        return await queries.count_completions(user_id, difficulty_value) >= threshold

    return condition


def _longest_streak_at_least(threshold: int) -> Condition:
    async def condition(user_id: str) -> bool:
        stats = await queries.get_user_stats(user_id)
        return (stats['longest_streak'] if stats else 0) >= threshold

    return condition


_COMPLETE = AchievementTrigger.CHALLENGE_COMPLETE

# Completion count
register_check(_COMPLETE, "first-step", _completions_at_least(1))
register_check(_COMPLETE, "ten-complete", _completions_at_least(10))
register_check(_COMPLETE, "hundred-complete", _completions_at_least(100))


@achievement_check(_COMPLETE, "all-difficulties")
async def _all_difficulties_completed(user_id: str) -> bool:
    completed = await queries.get_completed_difficulties(user_id)
    return {d.value for d in Difficulty} <= completed


# Difficulty
register_check(_COMPLETE, "green-belt", _completions_at_least(5, Difficulty.BEGINNER))
register_check(_COMPLETE, "blue-belt", _completions_at_least(5, Difficulty.INTERMEDIATE))
register_check(_COMPLETE, "red-belt", _completions_at_least(5, Difficulty.ADVANCED))
register_check(_COMPLETE, "black-belt", _completions_at_least(1, Difficulty.EXPERT))

# Streak (reads longest_streak, so update_streak must run first)
register_check(_COMPLETE, "streak-3", _longest_streak_at_least(3))
register_check(_COMPLETE, "streak-7", _longest_streak_at_least(7))
register_check(_COMPLETE, "streak-30", _longest_streak_at_least(30))


# Learning paths
@achievement_check(_COMPLETE, "path-pioneer")
async def _any_path_completed(user_id: str) -> bool:
    paths = await queries.get_learning_path_progress(user_id)
    return any(p['total'] > 0 and p['completed'] >= p['total'] for p in paths)


@achievement_check(_COMPLETE, "path-master")
async def _all_paths_completed(user_id: str) -> bool:
    paths = [p for p in await queries.get_learning_path_progress(user_id) if p['total'] > 0]
    if not paths:
        return False
    return all(p['completed'] >= p['total'] for p in paths)


# Social
@achievement_check(AchievementTrigger.CHALLENGE_PUBLISH, "creator")
async def _published_challenge(user_id: str) -> bool:
    return await queries.count_authored_challenges(user_id) >= 1


@achievement_check(AchievementTrigger.LIKE_RECEIVED, "popular")
async def _likes_received(user_id: str) -> bool:
    return await queries.count_likes_received(user_id) >= 10


@achievement_check(AchievementTrigger.FORK_RECEIVED, "influencer")
async def _forks_received(user_id: str) -> bool:
    return await queries.count_forks_received(user_id) >= 5
