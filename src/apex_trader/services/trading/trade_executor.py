"""Trade execution logic for buy and sell operations."""

import math
import re
import time
import uuid
from typing import Callable, Optional

from ...config.logging import get_logger
from .achievements import AchievementEngine
from .errors import InvalidRequest
from .ledger import Ledger
from .models import (
    OrderType,
    Portfolio,
    Trade,
    TradeOutcome,
    TradeRequest,
    TradeSide,
)

logger = get_logger(__name__)

SYMBOL_PATTERN = re.compile(r"^[A-Z][A-Z0-9.\-]{0,9}$")


def _now_millis() -> int:
    return int(time.time() * 1000)


def normalize_symbol(symbol: str) -> str:
    """Upper-case and validate a ticker symbol."""
    if not isinstance(symbol, str):
        raise InvalidRequest("Symbol must be a string", field="symbol")

    normalized = symbol.strip().upper()
    if not SYMBOL_PATTERN.match(normalized):
        raise InvalidRequest(f"Invalid symbol format: {symbol!r}", field="symbol")
    return normalized


class TradeExecutor:
    """Validates and applies paper trades to portfolio snapshots."""

    def __init__(
        self,
        transaction_fee: float,
        achievement_engine: Optional[AchievementEngine] = None,
        clock: Callable[[], int] = _now_millis,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.logger = logger.bind(component="trade_executor")
        self.transaction_fee = transaction_fee
        self.achievement_engine = achievement_engine or AchievementEngine()
        self.clock = clock
        self.id_factory = id_factory

    def validate_request(self, trade_request: TradeRequest) -> TradeRequest:
        """
        Check the parts of a request that do not depend on price or state.

        Returns:
            The request with a normalized symbol

        Raises:
            InvalidRequest: On a bad symbol, side, order type or quantity
        """
        symbol = normalize_symbol(trade_request.symbol)

        quantity = trade_request.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidRequest("Quantity must be a positive integer", field="quantity")

        try:
            side = TradeSide(trade_request.side)
        except ValueError:
            raise InvalidRequest(
                f"Invalid side: {trade_request.side}", field="side"
            ) from None

        try:
            order_type = OrderType(trade_request.order_type)
        except ValueError:
            raise InvalidRequest(
                f"Invalid order type: {trade_request.order_type}", field="order_type"
            ) from None

        return TradeRequest(
            symbol=symbol,
            quantity=quantity,
            side=side,
            order_type=order_type,
            limit_price=trade_request.limit_price,
            stop_price=trade_request.stop_price,
        )

    def apply_trade(
        self,
        portfolio: Portfolio,
        trade_request: TradeRequest,
        execution_price: float,
    ) -> TradeOutcome:
        """
        Apply a trade at the current market price.

        The input portfolio is never modified: a new snapshot is built and
        returned only when every check passes.

        Args:
            portfolio: Current committed portfolio
            trade_request: Trade request details
            execution_price: Current quote price for the symbol

        Returns:
            TradeOutcome with the new snapshot, the trade and unlocked achievements

        Raises:
            TradeError: When the request is invalid or cannot be covered
        """
        trade_request = self.validate_request(trade_request)
        if (
            isinstance(execution_price, bool)
            or not isinstance(execution_price, (int, float))
            or not math.isfinite(execution_price)
            or execution_price <= 0
        ):
            raise InvalidRequest("Execution price must be positive", field="price")

        symbol = trade_request.symbol
        quantity = trade_request.quantity
        price = float(execution_price)

        ledger = Ledger.from_positions(
            portfolio.cash, portfolio.positions, self.transaction_fee
        )
        if trade_request.side == TradeSide.BUY:
            ledger.check_buy(quantity, price)
            ledger.buy(symbol, quantity, price)
        else:
            ledger.check_sell(symbol, quantity, price)
            ledger.sell(symbol, quantity, price)

        trade = Trade(
            id=self.id_factory(),
            symbol=symbol,
            quantity=quantity,
            price=price,
            side=trade_request.side,
            order_type=trade_request.order_type,
            limit_price=trade_request.limit_price,
            stop_price=trade_request.stop_price,
            timestamp=self.clock(),
        )

        next_portfolio = Portfolio(
            id=portfolio.id,
            cash=ledger.cash,
            positions=ledger.positions(),
            trade_history=[*portfolio.trade_history, trade],
            achievements=list(portfolio.achievements),
        )

        unlocked = self.achievement_engine.evaluate(next_portfolio, trade)
        next_portfolio.achievements.extend(unlocked)

        self.logger.info(
            "Applied paper trade",
            portfolio_id=portfolio.id,
            symbol=symbol,
            side=trade.side.value,
            quantity=quantity,
            price=price,
            cash=next_portfolio.cash,
            unlocked=unlocked,
        )

        return TradeOutcome(
            portfolio=next_portfolio, trade=trade, unlocked_achievements=unlocked
        )
