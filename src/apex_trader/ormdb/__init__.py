"""Database module for SQLAlchemy ORM integration."""

from .database import (
    Base,
    check_database_health,
    create_tables,
    get_engine,
    get_session,
    get_session_factory,
    get_session_sync,
)
from .models import (
    AchievementUnlockRecord,
    LeaderboardEntryRecord,
    PortfolioRecord,
    PositionRecord,
    TradeRecord,
)
from .repositories import LeaderboardRepository, PortfolioRepository

__all__ = [
    # Database components
    "Base",
    "check_database_health",
    "create_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    "get_session_sync",
    # Models
    "AchievementUnlockRecord",
    "LeaderboardEntryRecord",
    "PortfolioRecord",
    "PositionRecord",
    "TradeRecord",
    # Repositories
    "LeaderboardRepository",
    "PortfolioRepository",
]
