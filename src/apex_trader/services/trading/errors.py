"""Typed failures raised while executing trades."""

from typing import Any, Dict, Optional


class TradeError(Exception):
    """Base class for trade failures. The portfolio is left unchanged."""

    code = "trade_error"
    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidRequest(TradeError):
    """Malformed trade request (bad symbol, non-positive quantity or price)."""

    code = "invalid_request"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)


class InsufficientFunds(TradeError):
    """Cash does not cover the purchase plus commission."""

    code = "insufficient_funds"

    def __init__(self, required: float, available: float):
        super().__init__(
            "Not enough cash for purchase and commission",
            details={"required": required, "available": available},
        )


class InsufficientShares(TradeError):
    """No open position, or fewer shares held than requested."""

    code = "insufficient_shares"

    def __init__(self, symbol: str, requested: int, held: int):
        super().__init__(
            f"Not enough shares to sell (have {held}, want to sell {requested})",
            details={"symbol": symbol, "requested": requested, "held": held},
        )


class InsufficientProceeds(TradeError):
    """Sale proceeds plus cash cannot cover the commission."""

    code = "insufficient_proceeds"

    def __init__(self, proceeds: float, fee: float, available: float):
        super().__init__(
            "Not enough proceeds to cover commission",
            details={"proceeds": proceeds, "fee": fee, "available": available},
        )


class QuoteUnavailable(TradeError):
    """Current price could not be fetched; nothing was attempted."""

    code = "quote_unavailable"

    def __init__(self, symbol: str, reason: Optional[str] = None):
        super().__init__(
            f"Could not fetch latest price for {symbol}. Trade cancelled.",
            details={"symbol": symbol, "reason": reason},
        )


class PersistenceFailure(TradeError):
    """Saving the new portfolio state failed and the trade was rolled back."""

    code = "persistence_failure"
    retryable = True

    def __init__(self, portfolio_id: str, reason: Optional[str] = None):
        super().__init__(
            "Failed to sync trade with server. Reverted.",
            details={"portfolio_id": portfolio_id, "reason": reason},
        )
