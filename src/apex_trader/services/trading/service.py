"""Main trading service orchestration."""

from typing import List, Optional, Tuple

from ...config.logging import get_logger, log_audit_event
from ...config.settings import Settings, get_settings
from ...core.market_data import MarketDataError, MarketDataService
from .achievements import AchievementEngine
from .errors import QuoteUnavailable
from .leaderboard import LeaderboardManager
from .models import (
    Achievement,
    LeaderboardEntry,
    Portfolio,
    PortfolioHistoryPoint,
    TradeOutcome,
    TradeRequest,
)
from .performance_analyzer import PerformanceAnalyzer
from .portfolio_manager import PortfolioManager
from .trade_executor import TradeExecutor

logger = get_logger(__name__)


class TradingService:
    """Service for paper trading, analytics and the leaderboard."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        market_data: Optional[MarketDataService] = None,
        portfolio_manager: Optional[PortfolioManager] = None,
        leaderboard_manager: Optional[LeaderboardManager] = None,
    ):
        self.logger = logger.bind(service="trading_service")
        self.settings = settings or get_settings()
        self.market_data = market_data or MarketDataService()

        # Initialize component managers
        self.achievement_engine = AchievementEngine(
            baller_threshold=self.settings.baller_threshold
        )
        self.trade_executor = TradeExecutor(
            self.settings.transaction_fee, self.achievement_engine
        )
        self.portfolio_manager = portfolio_manager or PortfolioManager(
            self.settings.starting_cash
        )
        self.leaderboard_manager = leaderboard_manager or LeaderboardManager(
            size=self.settings.leaderboard_size
        )
        self.performance_analyzer = PerformanceAnalyzer(
            self.market_data,
            initial_cash=self.settings.starting_cash,
            transaction_fee=self.settings.transaction_fee,
            benchmark_symbol=self.settings.benchmark_symbol,
            history_period=self.settings.history_period,
        )

    async def get_portfolio(self, portfolio_id: str) -> Portfolio:
        """Get a portfolio, creating it with starting cash on first access."""
        return await self.portfolio_manager.get_portfolio(portfolio_id)

    async def execute_trade(
        self,
        portfolio_id: str,
        trade_request: TradeRequest,
        username: Optional[str] = None,
    ) -> TradeOutcome:
        """
        Execute a paper trade at the current market price.

        The new state is published optimistically, then saved. A failed save
        restores the pre-trade snapshot.

        Args:
            portfolio_id: Portfolio to trade in
            trade_request: Trade request details
            username: Display name for the leaderboard

        Returns:
            TradeOutcome with the saved portfolio, trade and unlocked achievements

        Raises:
            TradeError: If the trade was rejected or could not be saved
        """
        trade_request = self.trade_executor.validate_request(trade_request)

        async with self.portfolio_manager.lock_for(portfolio_id):
            current = await self.portfolio_manager.get_portfolio(portfolio_id)

            try:
                quote = await self.market_data.get_quote(trade_request.symbol)
            except MarketDataError as e:
                raise QuoteUnavailable(trade_request.symbol, str(e)) from e

            outcome = self.trade_executor.apply_trade(
                current, trade_request, quote.price
            )
            saved = await self.portfolio_manager.commit(current, outcome.portfolio)

        log_audit_event(
            "trade_executed",
            user_id=portfolio_id,
            trade_id=outcome.trade.id,
            symbol=outcome.trade.symbol,
            side=outcome.trade.side.value,
            quantity=outcome.trade.quantity,
            price=outcome.trade.price,
            fee=self.settings.transaction_fee,
        )

        await self._update_leaderboard(saved, username)

        return TradeOutcome(
            portfolio=saved,
            trade=outcome.trade,
            unlocked_achievements=outcome.unlocked_achievements,
        )

    async def reset_portfolio(
        self, portfolio_id: str, username: Optional[str] = None
    ) -> Portfolio:
        """Reset a portfolio to starting cash and re-rank it."""
        async with self.portfolio_manager.lock_for(portfolio_id):
            portfolio = await self.portfolio_manager.reset_portfolio(portfolio_id)

        log_audit_event("portfolio_reset", user_id=portfolio_id)
        await self._update_leaderboard(portfolio, username)
        return portfolio

    async def get_analytics(self, portfolio_id: str) -> List[PortfolioHistoryPoint]:
        """Reconstruct daily performance against the benchmark."""
        portfolio = await self.portfolio_manager.get_portfolio(portfolio_id)
        return await self.performance_analyzer.get_analytics(portfolio)

    async def get_leaderboard(self) -> List[LeaderboardEntry]:
        return await self.leaderboard_manager.get_leaderboard()

    async def list_achievements(
        self, portfolio_id: str
    ) -> List[Tuple[Achievement, bool]]:
        """Achievement catalog paired with whether the portfolio unlocked each."""
        portfolio = await self.portfolio_manager.get_portfolio(portfolio_id)
        unlocked = set(portfolio.achievements)
        return [
            (achievement, achievement.id in unlocked)
            for achievement in self.achievement_engine.catalog
        ]

    async def _update_leaderboard(
        self, portfolio: Portfolio, username: Optional[str]
    ) -> None:
        """Re-rank a saved portfolio. Failures are logged, not raised."""
        try:
            await self.leaderboard_manager.upsert(
                portfolio.id,
                username or self.settings.default_username,
                portfolio.cost_basis_value(),
            )
        except Exception as e:
            self.logger.error(
                "Failed to update leaderboard",
                portfolio_id=portfolio.id,
                error=str(e),
                exc_info=True,
            )
