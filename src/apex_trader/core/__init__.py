"""Market data access."""

from .market_data import (
    MarketDataError,
    MarketDataService,
    PricePoint,
    Quote,
    SymbolMatch,
    get_daily_history,
    get_quote,
    search_symbols,
)

__all__ = [
    "MarketDataError",
    "MarketDataService",
    "PricePoint",
    "Quote",
    "SymbolMatch",
    "get_daily_history",
    "get_quote",
    "search_symbols",
]
