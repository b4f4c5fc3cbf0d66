"""Stock quote and daily price history retrieval."""

import asyncio
from datetime import date
from typing import List, Optional

import pandas as pd
import yfinance as yf
from pydantic import BaseModel

from ..config.logging import get_logger

logger = get_logger(__name__)


class MarketDataError(Exception):
    """Raised when the market data provider cannot answer a request."""

    def __init__(self, symbol: str, message: str):
        super().__init__(f"{symbol}: {message}")
        self.symbol = symbol


class Quote(BaseModel):
    """Latest price information for a symbol."""

    symbol: str
    price: float
    previous_close: float
    change: float
    change_percent: float


class PricePoint(BaseModel):
    """One trading day of OHLCV data."""

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: int


class SymbolMatch(BaseModel):
    """A symbol search hit."""

    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    quote_type: Optional[str] = None


def get_quote(symbol: str) -> Quote:
    """
    Get the current price and previous close for a symbol.

    Args:
        symbol: Stock symbol (e.g., 'AAPL', 'SPY')

    Returns:
        Quote with current price and change from the previous close

    Raises:
        MarketDataError: If no price could be fetched
    """
    stock = yf.Ticker(symbol)
    try:
        data = stock.history(period="5d")
    except Exception as e:
        raise MarketDataError(symbol, str(e)) from e

    if data.empty:
        raise MarketDataError(symbol, "no recent prices")

    closes = data["Close"].dropna()
    if closes.empty:
        raise MarketDataError(symbol, "no recent prices")

    price = float(closes.iloc[-1])
    previous_close = float(closes.iloc[-2]) if len(closes) > 1 else price
    change = price - previous_close
    change_percent = (change / previous_close * 100) if previous_close else 0.0

    return Quote(
        symbol=symbol,
        price=price,
        previous_close=previous_close,
        change=change,
        change_percent=change_percent,
    )


def get_daily_history(symbol: str, period: str = "1y") -> List[PricePoint]:
    """
    Get daily OHLCV bars for a symbol, oldest first.

    Days without a close are skipped.

    Args:
        symbol: Stock or index ETF symbol
        period: yfinance period string ("1mo", "6mo", "1y", "max", ...)

    Returns:
        List of PricePoint ordered by date

    Raises:
        MarketDataError: If the provider request fails
    """
    stock = yf.Ticker(symbol)
    try:
        data = stock.history(period=period, interval="1d")
    except Exception as e:
        raise MarketDataError(symbol, str(e)) from e

    points = []
    for timestamp, row in data.iterrows():
        if pd.isna(row["Close"]):
            continue
        points.append(
            PricePoint(
                date=timestamp.date(),
                open=float(row["Open"]),
                high=float(row["High"]),
                low=float(row["Low"]),
                close=float(row["Close"]),
                volume=int(row["Volume"]) if not pd.isna(row["Volume"]) else 0,
            )
        )

    points.sort(key=lambda point: point.date)
    return points


def search_symbols(query: str, limit: int = 10) -> List[SymbolMatch]:
    """
    Search listed symbols by ticker or company name.

    Args:
        query: Free-text search keywords
        limit: Maximum number of matches

    Returns:
        Matches in provider relevance order, empty for a blank query

    Raises:
        MarketDataError: If the provider request fails
    """
    query = query.strip()
    if not query:
        return []

    try:
        results = yf.Search(query, max_results=limit, news_count=0).quotes
    except Exception as e:
        raise MarketDataError(query, str(e)) from e

    matches = []
    for item in results or []:
        symbol = item.get("symbol")
        if not symbol:
            continue
        matches.append(
            SymbolMatch(
                symbol=symbol,
                name=item.get("longname") or item.get("shortname"),
                exchange=item.get("exchange"),
                quote_type=item.get("quoteType"),
            )
        )
    return matches[:limit]


class MarketDataService:
    """Async facade over the blocking yfinance calls."""

    def __init__(self):
        self.logger = logger.bind(service="market_data")

    async def get_quote(self, symbol: str) -> Quote:
        self.logger.info("Fetching quote", symbol=symbol)
        try:
            return await asyncio.to_thread(get_quote, symbol)
        except MarketDataError as e:
            self.logger.warning("Quote unavailable", symbol=symbol, error=str(e))
            raise

    async def get_daily_history(self, symbol: str, period: str = "1y") -> List[PricePoint]:
        self.logger.debug("Fetching daily history", symbol=symbol, period=period)
        return await asyncio.to_thread(get_daily_history, symbol, period)

    async def search_symbols(self, query: str, limit: int = 10) -> List[SymbolMatch]:
        self.logger.debug("Searching symbols", query=query, limit=limit)
        return await asyncio.to_thread(search_symbols, query, limit)
