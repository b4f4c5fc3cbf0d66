"""API Models package for request/response schemas."""

from .requests import ResetPortfolioRequest, TradeOrderRequest
from .responses import (
    AchievementData,
    AchievementListResponse,
    AnalyticsData,
    AnalyticsResponse,
    BaseResponse,
    ErrorResponse,
    HealthResponse,
    HealthStatus,
    HistoryPointData,
    LeaderboardEntryData,
    LeaderboardResponse,
    PerformanceSummary,
    PortfolioData,
    PortfolioResponse,
    PriceHistoryResponse,
    QuoteResponse,
    StatusResponse,
    SuccessResponse,
    SymbolSearchResponse,
    TradeData,
    TradeResponse,
    TradeResultData,
)

__all__ = [
    # Response models
    "BaseResponse",
    "SuccessResponse",
    "ErrorResponse",
    "HealthResponse",
    "HealthStatus",
    "StatusResponse",
    "PortfolioData",
    "PortfolioResponse",
    "TradeData",
    "TradeResultData",
    "TradeResponse",
    "AchievementData",
    "AchievementListResponse",
    "LeaderboardEntryData",
    "LeaderboardResponse",
    "HistoryPointData",
    "PerformanceSummary",
    "AnalyticsData",
    "AnalyticsResponse",
    "QuoteResponse",
    "PriceHistoryResponse",
    "SymbolSearchResponse",
    # Request models
    "TradeOrderRequest",
    "ResetPortfolioRequest",
]
