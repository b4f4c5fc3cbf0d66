"""Tests for trade validation and execution."""

import copy
import sys

import pytest

sys.path.append("src")

from apex_trader.services.trading.errors import (
    InsufficientFunds,
    InsufficientShares,
    InvalidRequest,
)
from apex_trader.services.trading.models import (
    OrderType,
    Portfolio,
    Position,
    TradeRequest,
    TradeSide,
)
from apex_trader.services.trading.trade_executor import TradeExecutor, normalize_symbol


@pytest.fixture
def executor():
    return TradeExecutor(
        transaction_fee=1.0, clock=lambda: 1704207600000, id_factory=lambda: "t-1"
    )


class TestNormalizeSymbol:
    """Test symbol normalization."""

    @pytest.mark.parametrize(
        "raw,expected", [("aapl", "AAPL"), (" brk.b ", "BRK.B"), ("BF-B", "BF-B")]
    )
    def test_valid_symbols(self, raw, expected):
        """Test symbols are stripped and upper-cased."""
        assert normalize_symbol(raw) == expected

    @pytest.mark.parametrize("raw", ["", "1ABC", "TOOLONGSYMBOL", "AB$C", None])
    def test_invalid_symbols(self, raw):
        """Test malformed symbols are rejected."""
        with pytest.raises(InvalidRequest):
            normalize_symbol(raw)


class TestApplyTrade:
    """Test applying trades to portfolio snapshots."""

    def test_buy_on_fresh_portfolio(self, executor, fresh_portfolio):
        """Test BUY 100 AAPL @ 50 leaves 94999 cash and unlocks first_trade."""
        outcome = executor.apply_trade(
            fresh_portfolio, TradeRequest("AAPL", 100, TradeSide.BUY), 50.0
        )

        portfolio = outcome.portfolio
        assert portfolio.cash == 94999.0
        assert portfolio.positions == [Position("AAPL", 100, 50.0)]
        assert outcome.unlocked_achievements == ["first_trade"]
        assert portfolio.achievements == ["first_trade"]

        trade = outcome.trade
        assert trade.id == "t-1"
        assert trade.timestamp == 1704207600000
        assert trade.side == TradeSide.BUY
        assert portfolio.trade_history == [trade]

    def test_input_portfolio_not_mutated(self, executor, fresh_portfolio):
        """Test the input snapshot is untouched after a successful trade."""
        before = copy.deepcopy(fresh_portfolio)

        executor.apply_trade(
            fresh_portfolio, TradeRequest("AAPL", 100, TradeSide.BUY), 50.0
        )

        assert fresh_portfolio == before

    def test_sell_more_than_held_leaves_portfolio_unchanged(
        self, executor, fresh_portfolio
    ):
        """Test SELL 150 AAPL on a fresh portfolio raises InsufficientShares."""
        before = copy.deepcopy(fresh_portfolio)

        with pytest.raises(InsufficientShares):
            executor.apply_trade(
                fresh_portfolio, TradeRequest("AAPL", 150, TradeSide.SELL), 50.0
            )

        assert fresh_portfolio == before

    def test_buy_insufficient_funds(self, executor):
        """Test a buy that cash plus fee cannot cover."""
        portfolio = Portfolio(id="u", cash=5000.0)

        with pytest.raises(InsufficientFunds):
            executor.apply_trade(portfolio, TradeRequest("AAPL", 100, "BUY"), 50.0)

        assert portfolio.cash == 5000.0
        assert portfolio.trade_history == []

    def test_sell_closes_position(self, executor, make_trade):
        """Test selling the full quantity removes the position."""
        buy = make_trade("AAPL", 10, 100.0)
        portfolio = Portfolio(
            id="u",
            cash=98999.0,
            positions=[Position("AAPL", 10, 100.0)],
            trade_history=[buy],
            achievements=["first_trade"],
        )

        outcome = executor.apply_trade(
            portfolio, TradeRequest("AAPL", 10, TradeSide.SELL), 120.0
        )

        assert outcome.portfolio.cash == 98999.0 + 1200.0 - 1.0
        assert outcome.portfolio.positions == []
        assert outcome.unlocked_achievements == ["profit_maker"]
        assert outcome.portfolio.achievements == ["first_trade", "profit_maker"]

    def test_order_type_recorded_but_filled_at_market(self, executor, fresh_portfolio):
        """Test limit fields are kept for audit and do not change the fill."""
        request = TradeRequest(
            "AAPL", 10, TradeSide.BUY, order_type=OrderType.LIMIT, limit_price=40.0
        )

        outcome = executor.apply_trade(fresh_portfolio, request, 50.0)

        assert outcome.trade.price == 50.0
        assert outcome.trade.order_type == OrderType.LIMIT
        assert outcome.trade.limit_price == 40.0

    def test_symbol_normalized(self, executor, fresh_portfolio):
        """Test lower-case symbols are stored upper-cased."""
        outcome = executor.apply_trade(
            fresh_portfolio, TradeRequest(" aapl", 1, TradeSide.BUY), 50.0
        )

        assert outcome.trade.symbol == "AAPL"

    @pytest.mark.parametrize("quantity", [0, -5, 1.5, True, "10"])
    def test_invalid_quantity(self, executor, fresh_portfolio, quantity):
        """Test quantity must be a positive integer."""
        with pytest.raises(InvalidRequest):
            executor.apply_trade(
                fresh_portfolio, TradeRequest("AAPL", quantity, TradeSide.BUY), 50.0
            )

    @pytest.mark.parametrize("price", [0, -1.0, float("nan"), float("inf")])
    def test_invalid_execution_price(self, executor, fresh_portfolio, price):
        """Test execution price must be positive and finite."""
        with pytest.raises(InvalidRequest):
            executor.apply_trade(
                fresh_portfolio, TradeRequest("AAPL", 1, TradeSide.BUY), price
            )

    def test_invalid_side(self, executor, fresh_portfolio):
        """Test side must be BUY or SELL."""
        with pytest.raises(InvalidRequest):
            executor.apply_trade(fresh_portfolio, TradeRequest("AAPL", 1, "HOLD"), 50.0)

    def test_order_type_string_accepted(self, executor, fresh_portfolio):
        """Test a plain string order type is coerced to OrderType."""
        outcome = executor.apply_trade(
            fresh_portfolio,
            TradeRequest("AAPL", 1, "BUY", order_type="LIMIT", limit_price=45.0),
            50.0,
        )

        assert outcome.trade.order_type is OrderType.LIMIT
        assert outcome.trade.side is TradeSide.BUY

    def test_invalid_order_type(self, executor, fresh_portfolio):
        """Test an unknown order type is rejected before any change."""
        with pytest.raises(InvalidRequest) as exc_info:
            executor.apply_trade(
                fresh_portfolio,
                TradeRequest("AAPL", 1, TradeSide.BUY, order_type="BOGUS"),
                50.0,
            )

        assert exc_info.value.details["field"] == "order_type"
        assert fresh_portfolio.trade_history == []

    def test_achievements_never_removed(self, executor, make_trade):
        """Test previously unlocked achievements survive a losing trade."""
        portfolio = Portfolio(
            id="u",
            cash=200000.0,
            positions=[Position("AAPL", 10, 100.0)],
            trade_history=[make_trade("AAPL", 10, 100.0)],
            achievements=["first_trade", "baller"],
        )

        outcome = executor.apply_trade(
            portfolio, TradeRequest("AAPL", 10, TradeSide.SELL), 1.0
        )

        assert outcome.portfolio.achievements[:2] == ["first_trade", "baller"]
        assert "paper_hands" in outcome.portfolio.achievements
