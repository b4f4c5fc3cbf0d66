"""Portfolio, trading and performance endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from ...config.logging import get_logger
from ...services.trading import TradeError, TradingService, summarize
from ..dependencies import get_portfolio_id, get_trading_service
from ..exceptions import DatabaseError
from ..models.requests import ResetPortfolioRequest, TradeOrderRequest
from ..models.responses import (
    AchievementData,
    AnalyticsData,
    AnalyticsResponse,
    HistoryPointData,
    PerformanceSummary,
    PortfolioData,
    PortfolioResponse,
    TradeData,
    TradeResponse,
    TradeResultData,
)

logger = get_logger(__name__)

# Create router for portfolio operations
router = APIRouter()


@router.get(
    "",
    response_model=PortfolioResponse,
    summary="Get Portfolio",
    description="Get the current portfolio, creating it with starting cash if new",
)
async def get_portfolio(
    request: Request,
    portfolio_id: str = Depends(get_portfolio_id),
    trading_service: TradingService = Depends(get_trading_service),
):
    """Get the current portfolio state."""
    request_id = getattr(request.state, "request_id", None)

    logger.info("Portfolio requested", portfolio_id=portfolio_id, request_id=request_id)

    try:
        portfolio = await trading_service.get_portfolio(portfolio_id)
        return PortfolioResponse(
            data=PortfolioData.from_domain(portfolio), request_id=request_id
        )

    except TradeError:
        raise
    except SQLAlchemyError as e:
        logger.error("Database read failed", error=str(e), exc_info=True)
        raise DatabaseError("read", str(e), request_id) from e
    except Exception as e:
        logger.error("Failed to get portfolio", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get portfolio: {str(e)}")


@router.post(
    "/trades",
    response_model=TradeResponse,
    summary="Execute Trade",
    description="Buy or sell shares at the current market price",
)
async def execute_trade(
    order: TradeOrderRequest,
    request: Request,
    portfolio_id: str = Depends(get_portfolio_id),
    trading_service: TradingService = Depends(get_trading_service),
):
    """
    Execute a paper trade.

    Rejected trades return 409 (insufficient funds or shares), 422 (invalid
    request) or 503 (quote unavailable or save failed, portfolio unchanged).
    """
    request_id = getattr(request.state, "request_id", None)

    logger.info(
        "Trade requested",
        portfolio_id=portfolio_id,
        symbol=order.symbol,
        side=order.side.value,
        quantity=order.quantity,
        request_id=request_id,
    )

    outcome = await trading_service.execute_trade(
        portfolio_id, order.to_trade_request(), username=order.username
    )

    unlocked = [
        AchievementData.from_domain(achievement, unlocked=True)
        for achievement in (
            trading_service.achievement_engine.get(achievement_id)
            for achievement_id in outcome.unlocked_achievements
        )
        if achievement is not None
    ]

    trade = outcome.trade
    message = (
        f"{trade.side.value} {trade.quantity} {trade.symbol} @ {trade.price:.2f} "
        f"(fee {trading_service.settings.transaction_fee:.2f})"
    )

    return TradeResponse(
        data=TradeResultData(
            portfolio=PortfolioData.from_domain(outcome.portfolio),
            trade=TradeData.from_domain(trade),
            unlocked_achievements=unlocked,
        ),
        message=message,
        request_id=request_id,
    )


@router.post(
    "/reset",
    response_model=PortfolioResponse,
    summary="Reset Portfolio",
    description="Reset the portfolio to starting cash with no positions or trades",
)
async def reset_portfolio(
    request: Request,
    reset_request: Optional[ResetPortfolioRequest] = None,
    portfolio_id: str = Depends(get_portfolio_id),
    trading_service: TradingService = Depends(get_trading_service),
):
    """Reset the portfolio and re-rank it on the leaderboard."""
    request_id = getattr(request.state, "request_id", None)
    username = reset_request.username if reset_request else None

    logger.info("Portfolio reset requested", portfolio_id=portfolio_id)

    portfolio = await trading_service.reset_portfolio(portfolio_id, username=username)
    return PortfolioResponse(
        data=PortfolioData.from_domain(portfolio),
        message="Portfolio reset",
        request_id=request_id,
    )


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Get Performance Analytics",
    description="Daily portfolio value against the normalized benchmark",
)
async def get_analytics(
    request: Request,
    portfolio_id: str = Depends(get_portfolio_id),
    trading_service: TradingService = Depends(get_trading_service),
):
    """
    Reconstruct portfolio performance since the first trade.

    Returns an empty history when the portfolio has no trades or no benchmark
    data is available.
    """
    request_id = getattr(request.state, "request_id", None)

    logger.info("Analytics requested", portfolio_id=portfolio_id, request_id=request_id)

    try:
        history = await trading_service.get_analytics(portfolio_id)

        summary = {
            key: (round(value, 2) if value is not None else None)
            for key, value in summarize(history).items()
        }

        return AnalyticsResponse(
            data=AnalyticsData(
                benchmark_symbol=trading_service.settings.benchmark_symbol,
                history=[HistoryPointData.from_domain(point) for point in history],
                summary=PerformanceSummary(**summary),
            ),
            request_id=request_id,
        )

    except TradeError:
        raise
    except SQLAlchemyError as e:
        logger.error("Database read failed", error=str(e), exc_info=True)
        raise DatabaseError("read", str(e), request_id) from e
    except Exception as e:
        logger.error("Failed to get analytics", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get analytics: {str(e)}")
