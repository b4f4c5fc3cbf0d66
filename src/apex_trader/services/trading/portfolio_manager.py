"""Portfolio loading, persistence and per-portfolio serialization."""

import asyncio
from typing import Callable, Dict

from sqlalchemy.exc import IntegrityError

from ...config.logging import get_logger
from ...ormdb.models import PortfolioRecord
from ...ormdb.repositories import PortfolioRepository
from .errors import PersistenceFailure
from .models import OrderType, Portfolio, Position, Trade, TradeSide

logger = get_logger(__name__)


def portfolio_from_record(record: PortfolioRecord) -> Portfolio:
    """Convert a stored portfolio into a domain snapshot."""
    return Portfolio(
        id=record.id,
        cash=record.cash,
        positions=[
            Position(
                symbol=position.symbol,
                quantity=position.quantity,
                average_price=position.average_price,
            )
            for position in record.positions
        ],
        trade_history=[
            Trade(
                id=trade.trade_id,
                symbol=trade.symbol,
                quantity=trade.quantity,
                price=trade.price,
                side=TradeSide(trade.side),
                order_type=OrderType(trade.order_type),
                limit_price=trade.limit_price,
                stop_price=trade.stop_price,
                timestamp=trade.timestamp,
            )
            for trade in record.trades
        ],
        achievements=[unlock.achievement_id for unlock in record.achievements],
    )


class PortfolioManager:
    """
    Keeps the last known-good snapshot of each portfolio and persists changes.

    All mutations of one portfolio must run under ``lock_for(portfolio_id)``
    so a second trade never builds on a snapshot that is not yet saved.
    """

    def __init__(
        self,
        starting_cash: float,
        repository_factory: Callable[[], PortfolioRepository] = PortfolioRepository,
    ):
        self.logger = logger.bind(component="portfolio_manager")
        self.starting_cash = starting_cash
        self.repository_factory = repository_factory
        self._snapshots: Dict[str, Portfolio] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._load_lock = asyncio.Lock()

    def lock_for(self, portfolio_id: str) -> asyncio.Lock:
        lock = self._locks.get(portfolio_id)
        if lock is None:
            lock = self._locks[portfolio_id] = asyncio.Lock()
        return lock

    async def get_portfolio(self, portfolio_id: str) -> Portfolio:
        """
        Get the current snapshot, creating an empty portfolio on first access.

        Args:
            portfolio_id: Portfolio identifier

        Returns:
            Last committed Portfolio snapshot
        """
        snapshot = self._snapshots.get(portfolio_id)
        if snapshot is not None:
            return snapshot

        async with self._load_lock:
            snapshot = self._snapshots.get(portfolio_id)
            if snapshot is None:
                snapshot = await asyncio.to_thread(self._load_or_create, portfolio_id)
                self._snapshots[portfolio_id] = snapshot
        return snapshot

    async def commit(self, previous: Portfolio, provisional: Portfolio) -> Portfolio:
        """
        Make ``provisional`` current and persist it.

        The provisional snapshot is published immediately. If saving fails it
        is discarded and ``previous`` becomes current again.

        Returns:
            The authoritative state read back after saving

        Raises:
            PersistenceFailure: If the save failed and the snapshot was rolled back
        """
        portfolio_id = provisional.id
        self._snapshots[portfolio_id] = provisional

        try:
            saved = await asyncio.to_thread(self._save, provisional)
        except Exception as e:
            self._snapshots[portfolio_id] = previous
            self.logger.error(
                "Failed to save portfolio, reverting",
                portfolio_id=portfolio_id,
                error=str(e),
                exc_info=True,
            )
            raise PersistenceFailure(portfolio_id, str(e)) from e

        self._snapshots[portfolio_id] = saved
        return saved

    async def reset_portfolio(self, portfolio_id: str) -> Portfolio:
        """Reinitialize a portfolio to starting cash with no trades."""
        try:
            portfolio = await asyncio.to_thread(self._reset, portfolio_id)
        except Exception as e:
            self.logger.error(
                "Failed to reset portfolio", portfolio_id=portfolio_id, error=str(e)
            )
            raise PersistenceFailure(portfolio_id, str(e)) from e

        self._snapshots[portfolio_id] = portfolio
        self.logger.info(
            "Reset portfolio", portfolio_id=portfolio_id, cash=self.starting_cash
        )
        return portfolio

    def _load_or_create(self, portfolio_id: str) -> Portfolio:
        with self.repository_factory() as repo:
            record = repo.get_portfolio(portfolio_id)
            if record is not None:
                return portfolio_from_record(record)
            try:
                record = repo.create_portfolio(portfolio_id, self.starting_cash)
            except IntegrityError:
                self.logger.info(
                    "Portfolio created concurrently, re-reading",
                    portfolio_id=portfolio_id,
                )
            else:
                self.logger.info(
                    "Created portfolio",
                    portfolio_id=portfolio_id,
                    starting_cash=self.starting_cash,
                )
                return portfolio_from_record(record)

        with self.repository_factory() as repo:
            return portfolio_from_record(repo.get_portfolio(portfolio_id))

    def _save(self, portfolio: Portfolio) -> Portfolio:
        with self.repository_factory() as repo:
            return portfolio_from_record(repo.save_portfolio(portfolio))

    def _reset(self, portfolio_id: str) -> Portfolio:
        with self.repository_factory() as repo:
            return portfolio_from_record(
                repo.reset_portfolio(portfolio_id, self.starting_cash)
            )
