"""
ProgressionService - Progression Business Logic

Runs the gamification steps for each user action in order:
XP award, streak update, achievement evaluation, achievement bonus XP.
"""

import logging
from typing import List, Union

from progression_engine.exceptions import AchievementEvaluationError, StorageError
from progression_engine.gamification import (
    award_xp,
    update_streak,
    check_and_award_achievements,
    pay_achievement_rewards,
    xp_for_difficulty,
)
from progression_engine.models import (
    AchievementTrigger,
    CompletionResult,
    Difficulty,
    UnlockedAchievement,
    XPAwardResult,
)

logger = logging.getLogger(__name__)


class ProgressionService:
    """
    Service for progression events.

    Responsibilities:
    - Base XP for challenge completions
    - One streak update per completion event
    - Achievement evaluation per trigger
    - Paying achievement bonuses through the XP ledger
    """

    async def process_challenge_completion(
        self,
        user_id: str,
        difficulty: Union[Difficulty, str],
        already_completed: bool = False
    ) -> CompletionResult:
        """
        Process progression for a challenge completion.

        Base XP and the streak update only apply to a first completion;
        achievements are evaluated either way.

        Args:
            user_id: User ID
            difficulty: Difficulty of the completed challenge
            already_completed: The user had completed this challenge before

        Returns:
            CompletionResult with total XP gained, streak and unlocked achievements
        """
        result = CompletionResult()

        if not already_completed:
            base_xp = xp_for_difficulty(difficulty)
            xp_result = await award_xp(user_id, base_xp)
            self._apply_award(result, base_xp, xp_result)

            streak_result = await update_streak(user_id)
            result.current_streak = streak_result.current_streak

        await self._process_achievements(user_id, AchievementTrigger.CHALLENGE_COMPLETE, result)

        logger.info(
            f"Progression processed for challenge completion: user={user_id}, "
            f"xp={result.xp_gained}, streak={result.current_streak}, "
            f"achievements={len(result.achievements)}"
        )

        return result

    async def process_challenge_published(self, user_id: str) -> CompletionResult:
        """Process progression after the user publishes a challenge."""
        return await self._process_trigger(user_id, AchievementTrigger.CHALLENGE_PUBLISH)

    async def process_like_received(self, author_id: str) -> CompletionResult:
        """Process progression for the author of a liked challenge."""
        return await self._process_trigger(author_id, AchievementTrigger.LIKE_RECEIVED)

    async def process_fork_received(self, author_id: str) -> CompletionResult:
        """Process progression for the author of a forked challenge."""
        return await self._process_trigger(author_id, AchievementTrigger.FORK_RECEIVED)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _process_trigger(self, user_id: str, trigger: AchievementTrigger) -> CompletionResult:
        result = CompletionResult()
        await self._process_achievements(user_id, trigger, result)

        logger.info(
            f"Progression processed for {trigger.value}: user={user_id}, "
            f"xp={result.xp_gained}, achievements={len(result.achievements)}"
        )
        return result

    async def _process_achievements(
        self,
        user_id: str,
        trigger: AchievementTrigger,
        result: CompletionResult
    ) -> None:
        """
        Evaluate achievements, then pay every reward still owed to the user.

        A storage failure during evaluation defers the remaining checks: XP
        already awarded stands, achievements committed before the failure
        are still paid, and the next trigger re-detects the rest. A failed
        payment leaves the unlocks marked unpaid; the next trigger pays them.
        """
        try:
            unlocked: List[UnlockedAchievement] = await check_and_award_achievements(user_id, trigger)
        except AchievementEvaluationError as e:
            logger.warning(
                f"Achievements deferred for user {user_id} ({trigger.value}): {e.message}"
            )
            result.achievements_deferred = True
            unlocked = e.unlocked

        result.achievements = unlocked

        try:
            bonus_xp, xp_result = await pay_achievement_rewards(user_id)
        except StorageError as e:
            logger.warning(
                f"Achievement rewards for user {user_id} left owed until the next trigger: {e.message}"
            )
            result.achievements_deferred = True
            return

        if xp_result:
            self._apply_award(result, bonus_xp, xp_result)

    @staticmethod
    def _apply_award(result: CompletionResult, amount: int, xp_result: XPAwardResult) -> None:
        result.xp_gained += amount
        result.leveled_up = result.leveled_up or xp_result.leveled_up
        result.level = xp_result.level
