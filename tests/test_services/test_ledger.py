"""Tests for the shared cash and position arithmetic."""

import sys

import pytest

sys.path.append("src")

from apex_trader.services.trading.errors import (
    InsufficientFunds,
    InsufficientProceeds,
    InsufficientShares,
)
from apex_trader.services.trading.ledger import Ledger
from apex_trader.services.trading.models import Position


class TestLedgerBuy:
    """Test BUY arithmetic."""

    def test_buy_charges_cost_plus_fee(self):
        """Test that a buy deducts quantity times price and the fee."""
        ledger = Ledger(100000.0, 1.0)
        ledger.buy("AAPL", 100, 50.0)

        assert ledger.cash == 94999.0
        assert ledger.holdings["AAPL"].quantity == 100
        assert ledger.holdings["AAPL"].average_price == 50.0

    def test_buy_weighted_average_price(self):
        """Test average price is the quantity-weighted mean of lots."""
        ledger = Ledger(100000.0, 1.0)
        ledger.buy("AAPL", 10, 100.0)
        ledger.buy("AAPL", 30, 200.0)

        holding = ledger.holdings["AAPL"]
        assert holding.quantity == 40
        assert holding.average_price == pytest.approx(175.0)

    def test_check_buy_exact_cash_is_allowed(self):
        """Test cash equal to cost plus fee passes."""
        ledger = Ledger(1001.0, 1.0)
        ledger.check_buy(10, 100.0)

    def test_check_buy_insufficient_funds(self):
        """Test cash below cost plus fee is rejected."""
        ledger = Ledger(1000.0, 1.0)

        with pytest.raises(InsufficientFunds) as exc_info:
            ledger.check_buy(10, 100.0)

        assert exc_info.value.details["required"] == 1001.0
        assert exc_info.value.details["available"] == 1000.0


class TestLedgerSell:
    """Test SELL arithmetic."""

    @pytest.fixture
    def ledger(self):
        return Ledger.from_positions(
            1000.0, [Position(symbol="AAPL", quantity=10, average_price=100.0)], 1.0
        )

    def test_sell_credits_proceeds_minus_fee(self, ledger):
        """Test that a partial sell credits cash and keeps the average price."""
        ledger.sell("AAPL", 4, 120.0)

        assert ledger.cash == 1000.0 + 480.0 - 1.0
        assert ledger.holdings["AAPL"].quantity == 6
        assert ledger.holdings["AAPL"].average_price == 100.0

    def test_sell_all_removes_holding(self, ledger):
        """Test that a position reaching zero is removed."""
        ledger.sell("AAPL", 10, 90.0)

        assert "AAPL" not in ledger.holdings
        assert ledger.positions() == []

    def test_check_sell_without_position(self, ledger):
        """Test selling a symbol that is not held."""
        with pytest.raises(InsufficientShares) as exc_info:
            ledger.check_sell("MSFT", 1, 10.0)

        assert exc_info.value.details["held"] == 0

    def test_check_sell_more_than_held(self, ledger):
        """Test selling more shares than held."""
        with pytest.raises(InsufficientShares):
            ledger.check_sell("AAPL", 11, 100.0)

    def test_check_sell_insufficient_proceeds(self):
        """Test a sale whose proceeds and cash cannot cover the fee."""
        ledger = Ledger.from_positions(
            0.0, [Position(symbol="PENNY", quantity=1, average_price=0.5)], 1.0
        )

        with pytest.raises(InsufficientProceeds):
            ledger.check_sell("PENNY", 1, 0.5)


class TestLedgerPositions:
    """Test position listing."""

    def test_positions_keep_first_bought_order(self):
        """Test positions come back in the order symbols were first bought."""
        ledger = Ledger(100000.0, 1.0)
        ledger.buy("MSFT", 1, 10.0)
        ledger.buy("AAPL", 1, 10.0)
        ledger.buy("MSFT", 1, 20.0)

        assert [p.symbol for p in ledger.positions()] == ["MSFT", "AAPL"]


class TestLedgerOrdering:
    """Test average cost does not depend on the order of buys."""

    LOTS = [("AAPL", 7, 120.0), ("AAPL", 3, 120.0), ("AAPL", 25, 120.0)]

    @pytest.mark.parametrize("order", [(0, 1, 2), (2, 1, 0), (1, 2, 0)])
    def test_equal_price_buys_any_order(self, order):
        """Test equal-price lots give the same quantity, average and cash."""
        ledger = Ledger(100000.0, 1.0)
        for index in order:
            ledger.buy(*self.LOTS[index])

        holding = ledger.holdings["AAPL"]
        assert holding.quantity == 35
        assert holding.average_price == pytest.approx(120.0)
        assert ledger.cash == pytest.approx(100000.0 - 35 * 120.0 - 3.0)

    def test_mixed_price_buys_reordered(self):
        """Test reordering lots at different prices keeps the weighted mean."""
        forward = Ledger(100000.0, 1.0)
        forward.buy("AAPL", 10, 100.0)
        forward.buy("AAPL", 30, 200.0)

        backward = Ledger(100000.0, 1.0)
        backward.buy("AAPL", 30, 200.0)
        backward.buy("AAPL", 10, 100.0)

        assert forward.holdings["AAPL"].quantity == backward.holdings["AAPL"].quantity
        assert forward.holdings["AAPL"].average_price == pytest.approx(
            backward.holdings["AAPL"].average_price
        )
