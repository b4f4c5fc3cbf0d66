"""Leaderboard and achievement endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from ...config.logging import get_logger
from ...services.trading import TradeError, TradingService
from ..dependencies import get_portfolio_id, get_trading_service
from ..exceptions import DatabaseError
from ..models.responses import (
    AchievementData,
    AchievementListResponse,
    LeaderboardEntryData,
    LeaderboardResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/leaderboard",
    response_model=LeaderboardResponse,
    summary="Get Leaderboard",
    description="Top portfolios ranked by value",
)
async def get_leaderboard(
    request: Request,
    trading_service: TradingService = Depends(get_trading_service),
):
    """Get the ranked leaderboard."""
    request_id = getattr(request.state, "request_id", None)

    try:
        entries = await trading_service.get_leaderboard()
        return LeaderboardResponse(
            data=[LeaderboardEntryData.from_domain(entry) for entry in entries],
            request_id=request_id,
        )

    except SQLAlchemyError as e:
        logger.error("Database read failed", error=str(e), exc_info=True)
        raise DatabaseError("read", str(e), request_id) from e
    except Exception as e:
        logger.error("Failed to get leaderboard", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Failed to get leaderboard: {str(e)}"
        )


@router.get(
    "/achievements",
    response_model=AchievementListResponse,
    summary="List Achievements",
    description="Achievement catalog with the portfolio's unlocked flags",
)
async def list_achievements(
    request: Request,
    portfolio_id: str = Depends(get_portfolio_id),
    trading_service: TradingService = Depends(get_trading_service),
):
    request_id = getattr(request.state, "request_id", None)

    try:
        achievements = await trading_service.list_achievements(portfolio_id)
        return AchievementListResponse(
            data=[
                AchievementData.from_domain(achievement, unlocked=unlocked)
                for achievement, unlocked in achievements
            ],
            request_id=request_id,
        )

    except TradeError:
        raise
    except SQLAlchemyError as e:
        logger.error("Database read failed", error=str(e), exc_info=True)
        raise DatabaseError("read", str(e), request_id) from e
    except Exception as e:
        logger.error("Failed to list achievements", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Failed to list achievements: {str(e)}"
        )
