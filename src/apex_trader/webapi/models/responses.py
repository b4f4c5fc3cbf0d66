"""Response models for the Apex Trader API."""

from datetime import date, datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ...core.market_data import PricePoint, Quote, SymbolMatch
from ...services.trading.models import (
    Achievement,
    LeaderboardEntry,
    Portfolio,
    PortfolioHistoryPoint,
    Position,
    Trade,
)

# Generic type for data responses
T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseResponse(BaseModel):
    """Base response model for all API responses."""

    success: bool = Field(..., description="Whether the request was successful")
    timestamp: datetime = Field(
        default_factory=_utcnow, description="Response timestamp"
    )
    request_id: Optional[str] = Field(
        None, description="Unique request identifier for tracking"
    )

    model_config = ConfigDict(
        use_enum_values=True,
        arbitrary_types_allowed=True,
    )

    @field_serializer("timestamp")
    def serialize_timestamp(self, dt: datetime) -> str:
        """Serialize datetime to ISO format with Z suffix."""
        return dt.replace(tzinfo=None).isoformat() + "Z"


class SuccessResponse(BaseResponse, Generic[T]):
    """Generic success response with typed data."""

    success: bool = Field(True, description="Always true for success responses")
    data: T = Field(..., description="Response data")
    message: Optional[str] = Field(None, description="Optional success message")


class ErrorResponse(BaseResponse):
    """Error response model."""

    success: bool = Field(False, description="Always false for error responses")
    error: Dict[str, Any] = Field(..., description="Error details")


class HealthStatus(BaseModel):
    """Health status model."""

    status: str = Field(
        ..., description="Overall health status: healthy, degraded, unhealthy"
    )
    services: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict, description="Individual service statuses"
    )
    uptime_seconds: float = Field(..., description="Application uptime in seconds")
    version: Optional[str] = Field(None, description="Application version")


class HealthResponse(BaseResponse):
    """Health check response."""

    success: bool = Field(True, description="Always true for health responses")
    health: HealthStatus = Field(..., description="Detailed health information")


class StatusResponse(SuccessResponse[Dict[str, Any]]):
    """Generic status response."""

    data: Dict[str, Any] = Field(..., description="Status data")

    @classmethod
    def create(
        cls,
        data: Dict[str, Any],
        message: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> "StatusResponse":
        """Create a status response."""
        return cls(success=True, data=data, message=message, request_id=request_id)


class PositionData(BaseModel):
    """An open position."""

    symbol: str = Field(..., description="Stock symbol")
    quantity: int = Field(..., description="Shares held")
    average_price: float = Field(..., description="Weighted average cost per share")
    cost_basis: float = Field(..., description="Quantity times average price")

    @classmethod
    def from_domain(cls, position: Position) -> "PositionData":
        return cls(
            symbol=position.symbol,
            quantity=position.quantity,
            average_price=position.average_price,
            cost_basis=position.cost_basis,
        )


class TradeData(BaseModel):
    """An executed trade."""

    id: str = Field(..., description="Unique trade identifier")
    symbol: str = Field(..., description="Stock symbol")
    quantity: int = Field(..., description="Shares traded")
    price: float = Field(..., description="Execution price per share")
    side: str = Field(..., description="BUY or SELL")
    order_type: str = Field(..., description="MARKET, LIMIT or STOP")
    limit_price: Optional[float] = Field(None, description="Recorded limit price")
    stop_price: Optional[float] = Field(None, description="Recorded stop price")
    timestamp: int = Field(..., description="Execution time in epoch milliseconds")

    @classmethod
    def from_domain(cls, trade: Trade) -> "TradeData":
        return cls(
            id=trade.id,
            symbol=trade.symbol,
            quantity=trade.quantity,
            price=trade.price,
            side=trade.side.value,
            order_type=trade.order_type.value,
            limit_price=trade.limit_price,
            stop_price=trade.stop_price,
            timestamp=trade.timestamp,
        )


class PortfolioData(BaseModel):
    """Full portfolio state."""

    id: str = Field(..., description="Portfolio identifier")
    cash: float = Field(..., description="Available cash")
    positions: List[PositionData] = Field(default_factory=list)
    trade_history: List[TradeData] = Field(default_factory=list)
    achievements: List[str] = Field(
        default_factory=list, description="Unlocked achievement ids"
    )
    cost_basis_value: float = Field(
        ..., description="Cash plus positions valued at cost basis"
    )

    @classmethod
    def from_domain(cls, portfolio: Portfolio) -> "PortfolioData":
        return cls(
            id=portfolio.id,
            cash=portfolio.cash,
            positions=[PositionData.from_domain(p) for p in portfolio.positions],
            trade_history=[TradeData.from_domain(t) for t in portfolio.trade_history],
            achievements=list(portfolio.achievements),
            cost_basis_value=portfolio.cost_basis_value(),
        )


class AchievementData(BaseModel):
    """Achievement catalog entry."""

    id: str
    name: str
    description: str
    icon: str
    unlocked: bool = False

    @classmethod
    def from_domain(
        cls, achievement: Achievement, unlocked: bool = False
    ) -> "AchievementData":
        return cls(
            id=achievement.id,
            name=achievement.name,
            description=achievement.description,
            icon=achievement.icon,
            unlocked=unlocked,
        )


class TradeResultData(BaseModel):
    """Result of an executed trade."""

    portfolio: PortfolioData
    trade: TradeData
    unlocked_achievements: List[AchievementData] = Field(default_factory=list)


class LeaderboardEntryData(BaseModel):
    """Ranked leaderboard entry."""

    rank: int
    user_id: str
    username: str
    portfolio_value: float

    @classmethod
    def from_domain(cls, entry: LeaderboardEntry) -> "LeaderboardEntryData":
        return cls(
            rank=entry.rank,
            user_id=entry.user_id,
            username=entry.username,
            portfolio_value=round(entry.portfolio_value, 2),
        )


class HistoryPointData(BaseModel):
    """One day of reconstructed performance."""

    date: date
    value: float
    benchmark_value: float
    initial_portfolio_value: float
    initial_benchmark_value: float

    @classmethod
    def from_domain(cls, point: PortfolioHistoryPoint) -> "HistoryPointData":
        return cls(
            date=point.date,
            value=round(point.value, 2),
            benchmark_value=round(point.benchmark_value, 2),
            initial_portfolio_value=round(point.initial_portfolio_value, 2),
            initial_benchmark_value=round(point.initial_benchmark_value, 2),
        )


class PerformanceSummary(BaseModel):
    """Total return of the portfolio and the benchmark over the history."""

    portfolio_return_pct: Optional[float] = None
    benchmark_return_pct: Optional[float] = None
    start_value: Optional[float] = None
    end_value: Optional[float] = None


class AnalyticsData(BaseModel):
    """Performance history with its summary."""

    benchmark_symbol: str
    history: List[HistoryPointData] = Field(default_factory=list)
    summary: PerformanceSummary


class PortfolioResponse(SuccessResponse[PortfolioData]):
    """Response model for portfolio state."""

    data: PortfolioData = Field(..., description="Portfolio data")


class TradeResponse(SuccessResponse[TradeResultData]):
    """Response model for an executed trade."""

    data: TradeResultData = Field(..., description="Trade result")


class AnalyticsResponse(SuccessResponse[AnalyticsData]):
    """Response model for performance analytics."""

    data: AnalyticsData = Field(..., description="Analytics data")


class LeaderboardResponse(SuccessResponse[List[LeaderboardEntryData]]):
    """Response model for the leaderboard."""

    data: List[LeaderboardEntryData] = Field(..., description="Ranked entries")


class AchievementListResponse(SuccessResponse[List[AchievementData]]):
    """Response model for the achievement catalog."""

    data: List[AchievementData] = Field(..., description="Achievements")


class QuoteResponse(SuccessResponse[Quote]):
    """Response model for a stock quote."""

    data: Quote = Field(..., description="Quote data")


class PriceHistoryResponse(SuccessResponse[List[PricePoint]]):
    """Response model for daily price history."""

    data: List[PricePoint] = Field(..., description="Daily bars, oldest first")


class SymbolSearchResponse(SuccessResponse[List[SymbolMatch]]):
    """Response model for symbol search."""

    data: List[SymbolMatch] = Field(..., description="Matching symbols")
