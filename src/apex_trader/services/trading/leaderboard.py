"""Leaderboard ranking and serialized leaderboard updates."""

import asyncio
from dataclasses import replace
from typing import Callable, List, Sequence

from ...config.logging import get_logger
from ...ormdb.repositories import LeaderboardRepository
from .models import LeaderboardEntry

logger = get_logger(__name__)

DEFAULT_LEADERBOARD_SIZE = 100


def upsert_entry(
    entries: Sequence[LeaderboardEntry],
    user_id: str,
    username: str,
    portfolio_value: float,
    limit: int = DEFAULT_LEADERBOARD_SIZE,
) -> List[LeaderboardEntry]:
    """
    Insert or replace a user's entry and re-rank the board.

    Ties keep their merged order (prior entries first, the new entry last)
    because the sort is stable and has no secondary key.
    """
    merged = [entry for entry in entries if entry.user_id != user_id]
    merged.append(
        LeaderboardEntry(
            user_id=user_id, username=username, portfolio_value=portfolio_value
        )
    )
    merged.sort(key=lambda entry: entry.portfolio_value, reverse=True)

    return [
        replace(entry, rank=index + 1) for index, entry in enumerate(merged[:limit])
    ]


def remove_entry(
    entries: Sequence[LeaderboardEntry], user_id: str
) -> List[LeaderboardEntry]:
    """Drop a user's entry. Remaining ranks are left as they were."""
    return [entry for entry in entries if entry.user_id != user_id]


class LeaderboardManager:
    """Manages the global leaderboard with one read-modify-write at a time."""

    def __init__(
        self,
        repository_factory: Callable[[], LeaderboardRepository] = LeaderboardRepository,
        size: int = DEFAULT_LEADERBOARD_SIZE,
    ):
        self.logger = logger.bind(component="leaderboard_manager")
        self.repository_factory = repository_factory
        self.size = size
        self._lock = asyncio.Lock()

    async def get_leaderboard(self) -> List[LeaderboardEntry]:
        """
        Get the current ranked entries.

        Returns:
            Entries in stored order
        """
        return await asyncio.to_thread(self._load)

    async def upsert(
        self, user_id: str, username: str, portfolio_value: float
    ) -> List[LeaderboardEntry]:
        """
        Record a user's portfolio value and re-rank.

        Args:
            user_id: User identifier
            username: Display name
            portfolio_value: Value to rank by

        Returns:
            The re-ranked leaderboard
        """
        async with self._lock:
            entries = await asyncio.to_thread(self._load)
            ranked = upsert_entry(
                entries, user_id, username, portfolio_value, limit=self.size
            )
            await asyncio.to_thread(self._store, ranked)

        self.logger.info(
            "Updated leaderboard entry",
            user_id=user_id,
            portfolio_value=portfolio_value,
            entries=len(ranked),
        )
        return ranked

    async def remove(self, user_id: str) -> List[LeaderboardEntry]:
        """Remove a user from the leaderboard."""
        async with self._lock:
            entries = await asyncio.to_thread(self._load)
            remaining = remove_entry(entries, user_id)
            await asyncio.to_thread(self._store, remaining)

        self.logger.info("Removed leaderboard entry", user_id=user_id)
        return remaining

    def _load(self) -> List[LeaderboardEntry]:
        with self.repository_factory() as repo:
            return [
                LeaderboardEntry(
                    user_id=record.user_id,
                    username=record.username,
                    portfolio_value=record.portfolio_value,
                    rank=record.rank,
                )
                for record in repo.get_entries()
            ]

    def _store(self, entries: List[LeaderboardEntry]) -> None:
        with self.repository_factory() as repo:
            repo.replace_entries(entries)
