"""Repository classes for database operations using SQLAlchemy ORM."""

from .base import BaseRepository
from .leaderboard import LeaderboardRepository
from .portfolio import PortfolioRepository

__all__ = [
    "BaseRepository",
    "LeaderboardRepository",
    "PortfolioRepository",
]
