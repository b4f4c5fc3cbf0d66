"""Request models for the Apex Trader API."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...services.trading.models import OrderType, TradeRequest, TradeSide


class TradeOrderRequest(BaseModel):
    """Request model for placing a paper trade."""

    symbol: str = Field(
        ..., description="Stock symbol (e.g., AAPL, BRK.B)", min_length=1, max_length=10
    )
    quantity: int = Field(..., description="Number of shares", gt=0)
    side: TradeSide = Field(..., description="BUY or SELL")
    order_type: OrderType = Field(
        OrderType.MARKET, description="Recorded order type, always filled at market"
    )
    limit_price: Optional[float] = Field(None, description="Recorded limit price", gt=0)
    stop_price: Optional[float] = Field(None, description="Recorded stop price", gt=0)
    username: Optional[str] = Field(
        None, description="Display name for the leaderboard", max_length=50
    )

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v):
        """Normalize stock symbol."""
        return v.strip().upper()

    @field_validator("side", "order_type", mode="before")
    @classmethod
    def normalize_enum(cls, v):
        """Accept lower-case side and order type."""
        if isinstance(v, str):
            return v.upper()
        return v

    def to_trade_request(self) -> TradeRequest:
        """Convert to the service-layer request."""
        return TradeRequest(
            symbol=self.symbol,
            quantity=self.quantity,
            side=self.side,
            order_type=self.order_type,
            limit_price=self.limit_price,
            stop_price=self.stop_price,
        )


class ResetPortfolioRequest(BaseModel):
    """Request model for resetting a portfolio."""

    username: Optional[str] = Field(
        None, description="Display name for the leaderboard", max_length=50
    )
