"""Unit tests for the XP Ledger (progression_engine/gamification/xp_system.py)"""
import asyncio

import pytest
from unittest.mock import AsyncMock, patch

from progression_engine.exceptions import StorageError, ValidationError
from progression_engine.gamification.xp_system import award_xp, get_user_stats, pay_achievement_rewards


# ============================================================================
# award_xp
# ============================================================================

@pytest.mark.asyncio
async def test_award_xp_level_up():
    """Test crossing a threshold raises the cached level and reports it"""
    user_id = "user_123456789"

    with patch('progression_engine.gamification.xp_system.queries.increment_user_xp',
               AsyncMock(return_value={"xp": 60, "level": 1})) as mock_increment:
        with patch('progression_engine.gamification.xp_system.queries.raise_user_level',
                   AsyncMock(return_value=True)) as mock_raise:
            result = await award_xp(user_id, 25)

            mock_increment.assert_awaited_once_with(user_id, 25)
            mock_raise.assert_awaited_once_with(user_id, 2)
            assert result.xp == 60
            assert result.level == 2
            assert result.leveled_up is True
            assert result.new_level.level == 2
            assert result.new_level.xp_required == 50


@pytest.mark.asyncio
async def test_award_xp_no_level_up():
    """Test the level cache is left alone when the tier does not change"""
    with patch('progression_engine.gamification.xp_system.queries.increment_user_xp',
               AsyncMock(return_value={"xp": 120, "level": 2})):
        with patch('progression_engine.gamification.xp_system.queries.raise_user_level',
                   AsyncMock()) as mock_raise:
            result = await award_xp("user_123456789", 10)

            mock_raise.assert_not_awaited()
            assert result.xp == 120
            assert result.level == 2
            assert result.leveled_up is False


@pytest.mark.asyncio
async def test_award_xp_concurrent_level_up_already_recorded():
    """Test a caller that loses the level-cache race does not report a level-up"""
    with patch('progression_engine.gamification.xp_system.queries.increment_user_xp',
               AsyncMock(return_value={"xp": 160, "level": 2})):
        with patch('progression_engine.gamification.xp_system.queries.raise_user_level',
                   AsyncMock(return_value=False)):
            result = await award_xp("user_123456789", 10)

            assert result.level == 3
            assert result.leveled_up is False


@pytest.mark.asyncio
async def test_award_xp_negative_amount_rejected():
    with patch('progression_engine.gamification.xp_system.queries.increment_user_xp',
               AsyncMock()) as mock_increment:
        with pytest.raises(ValidationError) as exc_info:
            await award_xp("user_123456789", -5)

        mock_increment.assert_not_awaited()
        assert exc_info.value.field == "amount"


@pytest.mark.asyncio
async def test_award_xp_zero_amount(fake_store, test_user_id):
    fake_store.set_stats(test_user_id, xp=70, level=2)

    result = await award_xp(test_user_id, 0)

    assert result.xp == 70
    assert result.leveled_up is False


@pytest.mark.asyncio
async def test_award_xp_first_award_creates_row(fake_store, test_user_id):
    """Test a first award creates the row at level 1 and promotes it immediately"""
    result = await award_xp(test_user_id, 100)

    assert result.xp == 100
    assert result.level == 2
    assert result.leveled_up is True
    assert fake_store.stats[test_user_id]["level"] == 2


@pytest.mark.asyncio
async def test_award_xp_sequential_amounts(fake_store, test_user_id):
    """Test completion XP plus achievement bonus as two independent awards"""
    first = await award_xp(test_user_id, 100)
    second = await award_xp(test_user_id, 60)

    assert first.xp == 100
    assert second.xp == 160
    assert second.level == 3
    assert fake_store.stats[test_user_id]["xp"] == 160


# ============================================================================
# Concurrency
# ============================================================================

@pytest.mark.asyncio
async def test_award_xp_concurrent_no_lost_increments(fake_store, test_user_id):
    """Test many concurrent awards sum exactly"""
    fake_store.set_stats(test_user_id, xp=5, level=1)
    amounts = [7, 13, 25, 100, 1] * 10

    await asyncio.gather(*(award_xp(test_user_id, amount) for amount in amounts))

    assert fake_store.stats[test_user_id]["xp"] == 5 + sum(amounts)
    assert fake_store.stats[test_user_id]["level"] == 7  # 1465 XP


@pytest.mark.asyncio
async def test_award_xp_concurrent_first_awards(fake_store, test_user_id):
    """Test racing first awards for a user without a row"""
    await asyncio.gather(award_xp(test_user_id, 30), award_xp(test_user_id, 40))

    assert fake_store.stats[test_user_id]["xp"] == 70
    assert fake_store.stats[test_user_id]["level"] == 2


@pytest.mark.asyncio
async def test_award_xp_concurrent_level_up_reported_once(fake_store, test_user_id):
    """Test only one of several concurrent callers observes a given level-up"""
    fake_store.set_stats(test_user_id, xp=40, level=1)

    results = await asyncio.gather(*(award_xp(test_user_id, 20) for _ in range(5)))

    assert sum(1 for r in results if r.leveled_up) == 1
    assert fake_store.stats[test_user_id]["xp"] == 140
    assert fake_store.stats[test_user_id]["level"] == 2


# ============================================================================
# get_user_stats
# ============================================================================

@pytest.mark.asyncio
async def test_get_user_stats_unknown_user(fake_store):
    """Test a user with no row gets zeroed stats and no row is created"""
    stats = await get_user_stats("nobody")

    assert stats.xp == 0
    assert stats.level == 1
    assert stats.current_streak == 0
    assert stats.longest_streak == 0
    assert stats.last_active_date is None
    assert stats.level_info.level == 1
    assert stats.progress.needed == 50
    assert "nobody" not in fake_store.stats


@pytest.mark.asyncio
async def test_get_user_stats_derives_level_from_xp(fake_store, test_user_id):
    """Test level_info comes from XP even when the cached level lags"""
    fake_store.set_stats(test_user_id, xp=600, level=1, current_streak=2, longest_streak=4)

    stats = await get_user_stats(test_user_id)

    assert stats.level == 1
    assert stats.level_info.level == 5
    assert stats.progress.current == 100
    assert stats.progress.needed == 300
    assert stats.current_streak == 2
    assert stats.longest_streak == 4


# ============================================================================
# pay_achievement_rewards
# ============================================================================

@pytest.mark.asyncio
async def test_pay_achievement_rewards_nothing_owed(seeded_store, test_user_id):
    amount, result = await pay_achievement_rewards(test_user_id)

    assert amount == 0
    assert result is None
    assert test_user_id not in seeded_store.stats


@pytest.mark.asyncio
async def test_pay_achievement_rewards_pays_once(seeded_store, test_user_id):
    seeded_store.set_stats(test_user_id, xp=100, level=2)
    for slug in ("first-step", "black-belt"):
        await seeded_store.unlock_achievement(test_user_id, seeded_store.achievements[slug]["id"])

    amount, result = await pay_achievement_rewards(test_user_id)
    again = await pay_achievement_rewards(test_user_id)

    assert amount == 60
    assert result.xp == 160
    assert result.level == 3
    assert result.leveled_up is True
    assert again == (0, None)
    assert seeded_store.stats[test_user_id]["level"] == 3


@pytest.mark.asyncio
async def test_pay_achievement_rewards_failure_keeps_rewards_owed(seeded_store, test_user_id):
    await seeded_store.unlock_achievement(test_user_id, seeded_store.achievements["creator"]["id"])
    seeded_store.failing.add("claim_achievement_rewards")

    with pytest.raises(StorageError):
        await pay_achievement_rewards(test_user_id)

    assert seeded_store.unpaid_slugs(test_user_id) == {"creator"}


@pytest.mark.asyncio
async def test_pay_achievement_rewards_concurrent(seeded_store, test_user_id):
    for slug in ("first-step", "black-belt", "creator"):
        await seeded_store.unlock_achievement(test_user_id, seeded_store.achievements[slug]["id"])

    results = await asyncio.gather(*(pay_achievement_rewards(test_user_id) for _ in range(4)))

    assert sum(amount for amount, _ in results) == 80
    assert seeded_store.stats[test_user_id]["xp"] == 80
