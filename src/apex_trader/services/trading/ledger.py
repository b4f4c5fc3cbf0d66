"""Cash and position arithmetic shared by trade execution and history replay."""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from .errors import InsufficientFunds, InsufficientProceeds, InsufficientShares
from .models import Position, Trade, TradeSide


@dataclass
class Holding:
    """Mutable position state while a ledger is being worked on."""

    quantity: int
    average_price: float


class Ledger:
    """
    Cash balance plus symbol holdings with flat-commission BUY/SELL rules.

    The trade executor and the performance reconstruction both run every fill
    through ``buy``/``sell``. Validation lives in ``check_buy``/``check_sell``
    and is skipped when replaying history.
    """

    def __init__(self, cash: float, transaction_fee: float):
        self.cash = cash
        self.transaction_fee = transaction_fee
        self.holdings: Dict[str, Holding] = {}

    @classmethod
    def from_positions(
        cls, cash: float, positions: Iterable[Position], transaction_fee: float
    ) -> "Ledger":
        ledger = cls(cash, transaction_fee)
        for position in positions:
            ledger.holdings[position.symbol] = Holding(
                quantity=position.quantity, average_price=position.average_price
            )
        return ledger

    def check_buy(self, quantity: int, price: float) -> None:
        required = quantity * price + self.transaction_fee
        if self.cash < required:
            raise InsufficientFunds(required=required, available=self.cash)

    def check_sell(self, symbol: str, quantity: int, price: float) -> None:
        holding = self.holdings.get(symbol)
        held = holding.quantity if holding else 0
        if held < quantity:
            raise InsufficientShares(symbol, requested=quantity, held=held)

        proceeds = quantity * price
        if self.cash + proceeds < self.transaction_fee:
            raise InsufficientProceeds(
                proceeds=proceeds, fee=self.transaction_fee, available=self.cash
            )

    def buy(self, symbol: str, quantity: int, price: float) -> None:
        cost = quantity * price
        self.cash -= cost + self.transaction_fee

        holding = self.holdings.get(symbol)
        if holding:
            total_cost = holding.average_price * holding.quantity + cost
            holding.quantity += quantity
            holding.average_price = total_cost / holding.quantity
        else:
            self.holdings[symbol] = Holding(quantity=quantity, average_price=price)

    def sell(self, symbol: str, quantity: int, price: float) -> None:
        self.cash += quantity * price - self.transaction_fee

        holding = self.holdings.get(symbol)
        if holding is None:
            return
        holding.quantity -= quantity
        if holding.quantity <= 0:
            del self.holdings[symbol]

    def apply(self, trade: Trade) -> None:
        """Apply an already validated trade."""
        if trade.side == TradeSide.BUY:
            self.buy(trade.symbol, trade.quantity, trade.price)
        else:
            self.sell(trade.symbol, trade.quantity, trade.price)

    def positions(self) -> List[Position]:
        """Open positions in first-bought order."""
        return [
            Position(
                symbol=symbol,
                quantity=holding.quantity,
                average_price=holding.average_price,
            )
            for symbol, holding in self.holdings.items()
        ]
