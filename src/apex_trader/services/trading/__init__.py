"""Paper trading, achievements, leaderboard and performance service module."""

from .achievements import ACHIEVEMENT_CATALOG, AchievementEngine
from .errors import (
    InsufficientFunds,
    InsufficientProceeds,
    InsufficientShares,
    InvalidRequest,
    PersistenceFailure,
    QuoteUnavailable,
    TradeError,
)
from .leaderboard import LeaderboardManager, remove_entry, upsert_entry
from .ledger import Ledger
from .models import (
    Achievement,
    LeaderboardEntry,
    OrderType,
    Portfolio,
    PortfolioHistoryPoint,
    Position,
    Trade,
    TradeOutcome,
    TradeRequest,
    TradeSide,
)
from .performance_analyzer import PerformanceAnalyzer, reconstruct, summarize
from .portfolio_manager import PortfolioManager
from .service import TradingService
from .trade_executor import TradeExecutor

__all__ = [
    "TradingService",
    "TradeExecutor",
    "PortfolioManager",
    "PerformanceAnalyzer",
    "LeaderboardManager",
    "AchievementEngine",
    "ACHIEVEMENT_CATALOG",
    "Ledger",
    "reconstruct",
    "summarize",
    "upsert_entry",
    "remove_entry",
    "Achievement",
    "LeaderboardEntry",
    "OrderType",
    "Portfolio",
    "PortfolioHistoryPoint",
    "Position",
    "Trade",
    "TradeOutcome",
    "TradeRequest",
    "TradeSide",
    "TradeError",
    "InvalidRequest",
    "InsufficientFunds",
    "InsufficientShares",
    "InsufficientProceeds",
    "QuoteUnavailable",
    "PersistenceFailure",
]
