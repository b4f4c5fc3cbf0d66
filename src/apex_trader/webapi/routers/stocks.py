"""Stock quote and price history endpoints."""

from fastapi import APIRouter, Depends, Query, Request

from ...config.logging import get_logger
from ...core.market_data import MarketDataError
from ...services.trading import TradingService
from ...services.trading.trade_executor import normalize_symbol
from ..dependencies import get_trading_service
from ..exceptions import ExternalServiceError, NotFoundError, ValidationException
from ..models.responses import (
    PriceHistoryResponse,
    QuoteResponse,
    SymbolSearchResponse,
)

logger = get_logger(__name__)

router = APIRouter()

VALID_PERIODS = ["1mo", "3mo", "6mo", "1y", "2y", "5y", "ytd", "max"]


@router.get(
    "/search",
    response_model=SymbolSearchResponse,
    summary="Search Symbols",
    description="Find tradable symbols by ticker or company name",
)
async def search_symbols(
    request: Request,
    q: str = Query(..., min_length=1, max_length=50, description="Search keywords"),
    limit: int = Query(10, ge=1, le=25, description="Maximum matches"),
    trading_service: TradingService = Depends(get_trading_service),
):
    """Search symbols. Matches carry no price; fetch a quote separately."""
    request_id = getattr(request.state, "request_id", None)

    logger.info("Symbol search requested", query=q, request_id=request_id)

    try:
        matches = await trading_service.market_data.search_symbols(q, limit)
    except MarketDataError as e:
        raise ExternalServiceError("market_data", "search_symbols", str(e), request_id)

    return SymbolSearchResponse(data=matches, request_id=request_id)


@router.get(
    "/{symbol}/quote",
    response_model=QuoteResponse,
    summary="Get Stock Quote",
    description="Current price and change from the previous close",
)
async def get_quote(
    symbol: str,
    request: Request,
    trading_service: TradingService = Depends(get_trading_service),
):
    """Get the latest quote for a symbol."""
    request_id = getattr(request.state, "request_id", None)
    symbol = normalize_symbol(symbol)

    logger.info("Quote requested", symbol=symbol, request_id=request_id)

    try:
        quote = await trading_service.market_data.get_quote(symbol)
    except MarketDataError as e:
        raise ExternalServiceError("market_data", "get_quote", str(e), request_id)

    return QuoteResponse(data=quote, request_id=request_id)


@router.get(
    "/{symbol}/history",
    response_model=PriceHistoryResponse,
    summary="Get Price History",
    description="Daily OHLCV bars, oldest first",
)
async def get_price_history(
    symbol: str,
    request: Request,
    period: str = Query("1y", description="History window (1mo, 6mo, 1y, max, ...)"),
    trading_service: TradingService = Depends(get_trading_service),
):
    """
    Get daily price history for a symbol.

    Args:
        symbol: Stock symbol
        period: yfinance period string
    """
    request_id = getattr(request.state, "request_id", None)
    symbol = normalize_symbol(symbol)

    if period not in VALID_PERIODS:
        raise ValidationException(
            message=f"Period must be one of: {', '.join(VALID_PERIODS)}",
            field_errors={"period": f"unsupported value {period!r}"},
            request_id=request_id,
        )

    logger.info("Price history requested", symbol=symbol, period=period)

    try:
        points = await trading_service.market_data.get_daily_history(symbol, period)
    except MarketDataError as e:
        raise ExternalServiceError(
            "market_data", "get_daily_history", str(e), request_id
        )

    if not points:
        raise NotFoundError("Price history", symbol, request_id)

    return PriceHistoryResponse(data=points, request_id=request_id)
