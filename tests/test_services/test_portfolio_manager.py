"""Tests for portfolio snapshots, persistence and rollback."""

import asyncio
import sys
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

sys.path.append("src")

from apex_trader.ormdb.models import PortfolioRecord
from apex_trader.ormdb.repositories import PortfolioRepository
from apex_trader.services.trading.errors import PersistenceFailure
from apex_trader.services.trading.models import Position, TradeRequest, TradeSide
from apex_trader.services.trading.portfolio_manager import PortfolioManager
from apex_trader.services.trading.trade_executor import TradeExecutor


@pytest.fixture
def manager(mock_db_session):
    return PortfolioManager(starting_cash=100000.0)


@pytest.fixture
def executor():
    return TradeExecutor(transaction_fee=1.0)


class TestPortfolioManager:
    """Test loading, committing and resetting portfolios."""

    @pytest.mark.asyncio
    async def test_get_creates_default_portfolio(self, manager):
        """Test first access creates a portfolio with starting cash."""
        portfolio = await manager.get_portfolio("user-1")

        assert portfolio.id == "user-1"
        assert portfolio.cash == 100000.0
        assert portfolio.positions == []
        assert portfolio.trade_history == []
        assert portfolio.achievements == []

    @pytest.mark.asyncio
    async def test_commit_persists(self, manager, executor, mock_db_session):
        """Test a committed trade is stored and read back."""
        current = await manager.get_portfolio("user-1")
        outcome = executor.apply_trade(
            current, TradeRequest("AAPL", 100, TradeSide.BUY), 50.0
        )

        saved = await manager.commit(current, outcome.portfolio)

        assert saved.cash == 94999.0
        assert saved.positions == [Position("AAPL", 100, 50.0)]
        assert [t.id for t in saved.trade_history] == [outcome.trade.id]
        assert saved.achievements == ["first_trade"]

        # A fresh manager reads the same state from the database
        reloaded = await PortfolioManager(100000.0).get_portfolio("user-1")
        assert reloaded == saved

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self, manager, executor):
        """Test a failed save restores the pre-trade snapshot."""
        current = await manager.get_portfolio("user-1")
        outcome = executor.apply_trade(
            current, TradeRequest("AAPL", 100, TradeSide.BUY), 50.0
        )

        with patch.object(
            PortfolioRepository,
            "save_portfolio",
            side_effect=OperationalError("INSERT", {}, Exception("disk I/O error")),
        ):
            with pytest.raises(PersistenceFailure) as exc_info:
                await manager.commit(current, outcome.portfolio)

        assert exc_info.value.retryable is True
        after = await manager.get_portfolio("user-1")
        assert after is current
        assert after.cash == 100000.0
        assert after.trade_history == []

    @pytest.mark.asyncio
    async def test_reset(self, manager, executor):
        """Test reset clears positions, trades and achievements."""
        current = await manager.get_portfolio("user-1")
        outcome = executor.apply_trade(
            current, TradeRequest("AAPL", 10, TradeSide.BUY), 50.0
        )
        await manager.commit(current, outcome.portfolio)

        portfolio = await manager.reset_portfolio("user-1")

        assert portfolio.cash == 100000.0
        assert portfolio.positions == []
        assert portfolio.trade_history == []
        assert portfolio.achievements == []
        assert await manager.get_portfolio("user-1") == portfolio

    @pytest.mark.asyncio
    async def test_reset_failure(self, manager):
        """Test a failed reset surfaces as a persistence failure."""
        with patch.object(
            PortfolioRepository,
            "reset_portfolio",
            side_effect=OperationalError("UPDATE", {}, Exception("locked")),
        ):
            with pytest.raises(PersistenceFailure):
                await manager.reset_portfolio("user-1")

    def test_lock_per_portfolio(self, manager):
        """Test the same lock is returned for the same portfolio."""
        assert manager.lock_for("a") is manager.lock_for("a")
        assert manager.lock_for("a") is not manager.lock_for("b")

    @pytest.mark.asyncio
    async def test_concurrent_first_access_creates_once(self, manager, mock_db_session):
        """Test simultaneous first reads of a new id share one created portfolio."""
        with patch.object(
            PortfolioRepository,
            "create_portfolio",
            autospec=True,
            side_effect=PortfolioRepository.create_portfolio,
        ) as create:
            first, second = await asyncio.gather(
                manager.get_portfolio("user-1"), manager.get_portfolio("user-1")
            )

        assert first is second
        assert create.call_count == 1
        assert mock_db_session.query(PortfolioRecord).count() == 1

    @pytest.mark.asyncio
    async def test_create_conflict_rereads(self, manager):
        """Test a portfolio inserted elsewhere between read and create is re-read."""
        original_create = PortfolioRepository.create_portfolio

        def create_elsewhere_then_conflict(repo, portfolio_id, starting_cash):
            with PortfolioRepository() as other:
                original_create(other, portfolio_id, 5000.0)
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        with patch.object(
            PortfolioRepository,
            "create_portfolio",
            autospec=True,
            side_effect=create_elsewhere_then_conflict,
        ):
            portfolio = await manager.get_portfolio("user-1")

        assert portfolio.id == "user-1"
        assert portfolio.cash == 5000.0
