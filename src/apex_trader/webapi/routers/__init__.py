"""API routers for Apex Trader."""

from .leaderboard import router as leaderboard_router
from .portfolio import router as portfolio_router
from .stocks import router as stocks_router

__all__ = ["portfolio_router", "leaderboard_router", "stocks_router"]
