"""Global test fixtures and utilities for progression engine tests"""
import asyncio
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from progression_engine.db import queries
from progression_engine.exceptions import QueryError
from progression_engine.gamification.catalog import ACHIEVEMENT_DEFINITIONS


# ============================================================================
# In-memory query layer
# ============================================================================

class FakeProgressionStore:
    """
    In-memory stand-in for progression_engine.db.queries

    Each query yields to the event loop before touching state so concurrent
    callers interleave the way separate database round-trips would. Steps
    that are a single SQL statement in the real query layer stay a single
    uninterrupted step here.
    """

    def __init__(self):
        self.stats: Dict[str, dict] = {}
        self.achievements: Dict[str, dict] = {}
        self.unlocks: Dict[tuple, dict] = {}
        self.challenges: Dict[str, dict] = {}
        self.completions: List[dict] = []
        self.likes: List[tuple] = []
        self.paths: Dict[str, List[str]] = {}
        self.failing: set = set()
        self.calls: Dict[str, int] = defaultdict(int)
        self._row_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def _enter(self, name: str) -> None:
        self.calls[name] += 1
        await asyncio.sleep(0)
        if name in self.failing:
            raise QueryError(f"{name} failed", operation=name)

    # ---------------- seeding helpers ----------------

    def seed_catalog(self) -> None:
        for sort_order, definition in enumerate(ACHIEVEMENT_DEFINITIONS):
            row = definition.model_dump(mode="json")
            row["id"] = uuid4()
            row["sort_order"] = sort_order
            self.achievements[definition.slug] = row

    def set_stats(self, user_id: str, **values) -> None:
        row = {
            "user_id": user_id,
            "xp": 0,
            "level": 1,
            "current_streak": 0,
            "longest_streak": 0,
            "last_active_date": None,
        }
        row.update(values)
        self.stats[user_id] = row

    def add_challenge(
        self,
        challenge_id: str,
        difficulty: str = "BEGINNER",
        author_id: Optional[str] = None,
        is_official: bool = True,
        forked_from_id: Optional[str] = None,
    ) -> None:
        self.challenges[challenge_id] = {
            "id": challenge_id,
            "difficulty": difficulty,
            "author_id": author_id,
            "is_official": is_official,
            "forked_from_id": forked_from_id,
        }

    def complete(self, user_id: str, challenge_id: str, completed_at: Optional[datetime] = None, status: str = "COMPLETED") -> None:
        self.completions.append({
            "user_id": user_id,
            "challenge_id": challenge_id,
            "status": status,
            "completed_at": completed_at or datetime.now(timezone.utc),
        })

    def unlocked_slugs(self, user_id: str) -> set:
        ids = {aid for (uid, aid) in self.unlocks if uid == user_id}
        return {slug for slug, row in self.achievements.items() if row["id"] in ids}

    # ---------------- stats ----------------

    async def increment_user_xp(self, user_id: str, amount: int) -> dict:
        await self._enter("increment_user_xp")
        row = self.stats.get(user_id)
        if row is None:
            self.set_stats(user_id, xp=amount, level=1)
        else:
            row["xp"] += amount
        row = self.stats[user_id]
        return {"xp": row["xp"], "level": row["level"]}

    async def raise_user_level(self, user_id: str, level: int) -> bool:
        await self._enter("raise_user_level")
        row = self.stats[user_id]
        if row["level"] < level:
            row["level"] = level
            return True
        return False

    async def get_user_stats(self, user_id: str) -> Optional[dict]:
        await self._enter("get_user_stats")
        row = self.stats.get(user_id)
        return dict(row) if row else None

    async def update_user_streak(self, user_id: str, compute_next: Callable) -> tuple:
        await self._enter("update_user_streak")
        async with self._row_locks[user_id]:
            if user_id not in self.stats:
                self.set_stats(user_id)
            row = self.stats[user_id]
            previous = {
                "current_streak": row["current_streak"],
                "longest_streak": row["longest_streak"],
                "last_active_date": row["last_active_date"],
            }
            await asyncio.sleep(0)
            updated = compute_next(previous)
            if updated is not None:
                row.update(updated)
        return previous, updated

    async def get_leaderboard(self, sort_by: str, limit: int) -> List[dict]:
        await self._enter("get_leaderboard")
        column = "xp" if sort_by == "xp" else "current_streak"
        rows = sorted(self.stats.values(), key=lambda r: (-r[column], r["user_id"]))
        return [dict(r) for r in rows[:limit]]

    # ---------------- achievements ----------------

    async def get_all_achievements(self) -> List[dict]:
        await self._enter("get_all_achievements")
        return sorted((dict(r) for r in self.achievements.values()), key=lambda r: r["sort_order"])

    async def get_achievement_by_slug(self, slug: str) -> Optional[dict]:
        await self._enter("get_achievement_by_slug")
        row = self.achievements.get(slug)
        return dict(row) if row else None

    async def upsert_achievement(self, definition: dict, sort_order: int) -> None:
        await self._enter("upsert_achievement")
        existing = self.achievements.get(definition["slug"])
        row = dict(definition, sort_order=sort_order, id=existing["id"] if existing else uuid4())
        self.achievements[definition["slug"]] = row

    async def get_unlocked_slugs(self, user_id: str) -> set:
        await self._enter("get_unlocked_slugs")
        return self.unlocked_slugs(user_id)

    async def get_user_achievement_unlocks(self, user_id: str) -> List[dict]:
        await self._enter("get_user_achievement_unlocks")
        return [
            {"achievement_id": aid, "unlocked_at": unlock["unlocked_at"]}
            for (uid, aid), unlock in self.unlocks.items()
            if uid == user_id
        ]

    async def unlock_achievement(self, user_id: str, achievement_id) -> bool:
        await self._enter("unlock_achievement")
        key = (user_id, achievement_id)
        if key in self.unlocks:
            return False
        self.unlocks[key] = {"unlocked_at": datetime.now(timezone.utc), "reward_paid": False}
        return True

    async def claim_achievement_rewards(self, user_id: str) -> Optional[dict]:
        await self._enter("claim_achievement_rewards")
        by_id = {row["id"]: row for row in self.achievements.values()}
        claimed = [
            by_id[aid] for (uid, aid), unlock in self.unlocks.items()
            if uid == user_id and not unlock["reward_paid"]
        ]
        if not claimed:
            return None
        for (uid, aid), unlock in self.unlocks.items():
            if uid == user_id:
                unlock["reward_paid"] = True
        amount = sum(row["xp_reward"] for row in claimed)
        if user_id in self.stats:
            self.stats[user_id]["xp"] += amount
        else:
            self.set_stats(user_id, xp=amount, level=1)
        row = self.stats[user_id]
        return {
            "slugs": [a["slug"] for a in claimed],
            "amount": amount,
            "xp": row["xp"],
            "level": row["level"],
        }

    def unpaid_slugs(self, user_id: str) -> set:
        by_id = {row["id"]: row["slug"] for row in self.achievements.values()}
        return {
            by_id[aid] for (uid, aid), unlock in self.unlocks.items()
            if uid == user_id and not unlock["reward_paid"]
        }

    # ---------------- challenge catalog ----------------

    def _completed(self, user_id: str) -> List[dict]:
        return [c for c in self.completions if c["user_id"] == user_id and c["status"] == "COMPLETED"]

    async def count_completions(self, user_id: str, difficulty: Optional[str] = None) -> int:
        await self._enter("count_completions")
        return sum(
            1 for c in self._completed(user_id)
            if difficulty is None or self.challenges[c["challenge_id"]]["difficulty"] == difficulty
        )

    async def get_completed_difficulties(self, user_id: str) -> set:
        await self._enter("get_completed_difficulties")
        return {self.challenges[c["challenge_id"]]["difficulty"] for c in self._completed(user_id)}

    async def get_learning_path_progress(self, user_id: str) -> List[dict]:
        await self._enter("get_learning_path_progress")
        done = {c["challenge_id"] for c in self._completed(user_id)}
        return [
            {"path_id": path_id, "total": len(ids), "completed": len(done.intersection(ids))}
            for path_id, ids in sorted(self.paths.items())
            if ids
        ]

    async def count_authored_challenges(self, user_id: str) -> int:
        await self._enter("count_authored_challenges")
        return sum(
            1 for c in self.challenges.values()
            if c["author_id"] == user_id and not c["is_official"]
        )

    async def count_likes_received(self, user_id: str) -> int:
        await self._enter("count_likes_received")
        return sum(1 for _, cid in self.likes if self.challenges[cid]["author_id"] == user_id)

    async def count_forks_received(self, user_id: str) -> int:
        await self._enter("count_forks_received")
        return sum(
            1 for c in self.challenges.values()
            if c["forked_from_id"] and self.challenges[c["forked_from_id"]]["author_id"] == user_id
        )

    async def get_daily_completion_counts(self, user_id: str, start: datetime, end: datetime, timezone_name: str) -> List[dict]:
        await self._enter("get_daily_completion_counts")
        tz = ZoneInfo(timezone_name)
        counts: Dict[date, int] = defaultdict(int)
        for c in self._completed(user_id):
            if c["completed_at"] is None or not (start <= c["completed_at"] < end):
                continue
            counts[c["completed_at"].astimezone(tz).date()] += 1
        return [{"day": day, "count": count} for day, count in sorted(counts.items())]


QUERY_NAMES = [name for name in queries.__all__]


@pytest.fixture
def fake_store(monkeypatch) -> FakeProgressionStore:
    """Replace every query function with the in-memory store"""
    store = FakeProgressionStore()
    for name in QUERY_NAMES:
        monkeypatch.setattr(queries, name, getattr(store, name))
    return store


@pytest.fixture
def seeded_store(fake_store) -> FakeProgressionStore:
    """In-memory store with the achievement catalog seeded"""
    fake_store.seed_catalog()
    return fake_store


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def test_user_id() -> str:
    """Standard test user ID"""
    return "user_123456789"


@pytest.fixture
def today() -> date:
    """Fixed 'today' for streak tests"""
    return date(2024, 3, 15)
