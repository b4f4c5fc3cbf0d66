"""Tests for portfolio and leaderboard repositories."""

import sys

sys.path.append("src")

from apex_trader.ormdb.models import PositionRecord, TradeRecord
from apex_trader.ormdb.repositories import LeaderboardRepository, PortfolioRepository
from apex_trader.services.trading.models import LeaderboardEntry, Portfolio, Position


class TestPortfolioRepository:
    """Test portfolio persistence with an isolated database."""

    def test_get_missing_portfolio(self, mock_db_session):
        """Test an unknown id returns None."""
        with PortfolioRepository() as repo:
            assert repo.get_portfolio("nobody") is None

    def test_create_portfolio(self, mock_db_session):
        """Test creating an empty portfolio."""
        with PortfolioRepository() as repo:
            record = repo.create_portfolio("user-1", 100000.0)

            assert record.id == "user-1"
            assert record.cash == 100000.0
            assert record.positions == []
            assert record.trades == []

    def test_save_appends_trades_and_syncs_positions(self, mock_db_session, make_trade):
        """Test save keeps old trades, adds new ones and replaces positions."""
        buy_aapl = make_trade("AAPL", 10, 100.0)
        buy_msft = make_trade("MSFT", 5, 200.0)

        with PortfolioRepository() as repo:
            repo.save_portfolio(
                Portfolio(
                    id="user-1",
                    cash=98999.0,
                    positions=[Position("AAPL", 10, 100.0)],
                    trade_history=[buy_aapl],
                    achievements=["first_trade"],
                )
            )

        sell_aapl = make_trade("AAPL", 10, 110.0, side="SELL")
        with PortfolioRepository() as repo:
            record = repo.save_portfolio(
                Portfolio(
                    id="user-1",
                    cash=98999.0 + 1099.0 - 1001.0,
                    positions=[Position("MSFT", 5, 200.0)],
                    trade_history=[buy_aapl, buy_msft, sell_aapl],
                    achievements=["first_trade", "profit_maker"],
                )
            )

            assert [t.trade_id for t in record.trades] == [
                buy_aapl.id,
                buy_msft.id,
                sell_aapl.id,
            ]
            assert [(p.symbol, p.quantity) for p in record.positions] == [("MSFT", 5)]
            assert [a.achievement_id for a in record.achievements] == [
                "first_trade",
                "profit_maker",
            ]

        assert mock_db_session.query(PositionRecord).count() == 1
        assert mock_db_session.query(TradeRecord).count() == 3

    def test_save_updates_existing_position(self, mock_db_session, make_trade):
        """Test saving a changed quantity updates the row in place."""
        first = make_trade("AAPL", 10, 100.0)
        second = make_trade("AAPL", 10, 200.0)

        with PortfolioRepository() as repo:
            repo.save_portfolio(
                Portfolio(
                    id="user-1",
                    cash=98999.0,
                    positions=[Position("AAPL", 10, 100.0)],
                    trade_history=[first],
                )
            )
            record = repo.save_portfolio(
                Portfolio(
                    id="user-1",
                    cash=96998.0,
                    positions=[Position("AAPL", 20, 150.0)],
                    trade_history=[first, second],
                )
            )

            assert len(record.positions) == 1
            assert record.positions[0].quantity == 20
            assert record.positions[0].average_price == 150.0

    def test_reset_portfolio(self, mock_db_session, make_trade):
        """Test reset clears collections and restores cash."""
        with PortfolioRepository() as repo:
            repo.save_portfolio(
                Portfolio(
                    id="user-1",
                    cash=98999.0,
                    positions=[Position("AAPL", 10, 100.0)],
                    trade_history=[make_trade("AAPL", 10, 100.0)],
                    achievements=["first_trade"],
                )
            )
            record = repo.reset_portfolio("user-1", 100000.0)

            assert record.cash == 100000.0
            assert record.positions == []
            assert record.trades == []
            assert record.achievements == []

        assert mock_db_session.query(TradeRecord).count() == 0

    def test_reset_unknown_portfolio_creates_it(self, mock_db_session):
        """Test resetting a portfolio that does not exist yet."""
        with PortfolioRepository() as repo:
            record = repo.reset_portfolio("new-user", 100000.0)
            assert record.id == "new-user"
            assert record.cash == 100000.0


class TestLeaderboardRepository:
    """Test leaderboard persistence."""

    def test_replace_and_get_entries(self, mock_db_session):
        """Test stored entries come back in list order."""
        entries = [
            LeaderboardEntry("b", "B", 900.0, rank=1),
            LeaderboardEntry("c", "C", 900.0, rank=2),
            LeaderboardEntry("a", "A", 500.0, rank=3),
        ]

        with LeaderboardRepository() as repo:
            repo.replace_entries(entries)

        with LeaderboardRepository() as repo:
            stored = repo.get_entries()
            assert [(e.user_id, e.rank) for e in stored] == [
                ("b", 1),
                ("c", 2),
                ("a", 3),
            ]

    def test_replace_overwrites(self, mock_db_session):
        """Test replacing drops entries not in the new list."""
        with LeaderboardRepository() as repo:
            repo.replace_entries([LeaderboardEntry("a", "A", 500.0, rank=1)])
            repo.replace_entries([LeaderboardEntry("b", "B", 700.0, rank=1)])

            assert [e.user_id for e in repo.get_entries()] == ["b"]

    def test_empty(self, mock_db_session):
        """Test an empty leaderboard."""
        with LeaderboardRepository() as repo:
            assert repo.get_entries() == []
