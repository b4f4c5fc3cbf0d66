"""Data models for paper trading, achievements and performance history."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional


class TradeSide(str, Enum):
    """Direction of a trade."""

    BUY = "BUY"
    SELL = "SELL"


class OrderType(str, Enum):
    """Order type recorded on a trade for audit purposes."""

    MARKET = "MARKET"
    LIMIT = "LIMIT"
    STOP = "STOP"


@dataclass(frozen=True)
class Position:
    """Open holding of a single symbol."""

    symbol: str
    quantity: int
    average_price: float

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.average_price


@dataclass(frozen=True)
class Trade:
    """Executed trade. Never mutated once appended to a trade history."""

    id: str
    symbol: str
    quantity: int
    price: float
    side: TradeSide
    order_type: OrderType
    timestamp: int  # epoch milliseconds, UTC
    limit_price: Optional[float] = None
    stop_price: Optional[float] = None

    @property
    def trade_date(self) -> date:
        """UTC calendar date the trade was executed on."""
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc).date()


@dataclass
class Portfolio:
    """Cash, open positions, trade history and unlocked achievements of a user."""

    id: str
    cash: float
    positions: List[Position] = field(default_factory=list)
    trade_history: List[Trade] = field(default_factory=list)
    achievements: List[str] = field(default_factory=list)

    def find_position(self, symbol: str) -> Optional[Position]:
        for position in self.positions:
            if position.symbol == symbol:
                return position
        return None

    def cost_basis_value(self) -> float:
        """Cash plus holdings valued at their average purchase price."""
        return self.cash + sum(position.cost_basis for position in self.positions)


@dataclass
class TradeRequest:
    """Request for executing a paper trade."""

    symbol: str
    quantity: int
    side: TradeSide
    order_type: OrderType = OrderType.MARKET
    limit_price: Optional[float] = None
    stop_price: Optional[float] = None


@dataclass
class TradeOutcome:
    """Result of a successfully applied trade."""

    portfolio: Portfolio
    trade: Trade
    unlocked_achievements: List[str]


@dataclass(frozen=True)
class Achievement:
    """Static achievement catalog entry."""

    id: str
    name: str
    description: str
    icon: str


@dataclass(frozen=True)
class LeaderboardEntry:
    """Ranked leaderboard row."""

    user_id: str
    username: str
    portfolio_value: float
    rank: int = 0


@dataclass(frozen=True)
class PortfolioHistoryPoint:
    """One day of reconstructed portfolio value against the benchmark."""

    date: date
    value: float
    benchmark_value: float
    initial_portfolio_value: float
    initial_benchmark_value: float
