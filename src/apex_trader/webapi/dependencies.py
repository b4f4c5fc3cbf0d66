"""Shared FastAPI dependencies."""

import re
from functools import lru_cache
from typing import Optional

from fastapi import Header

from ..config.settings import get_settings
from ..services.trading import TradingService
from .exceptions import ValidationException

PORTFOLIO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]{1,64}$")


@lru_cache()
def get_trading_service() -> TradingService:
    """Get the process-wide trading service instance."""
    return TradingService()


def get_portfolio_id(x_portfolio_id: Optional[str] = Header(None)) -> str:
    """Portfolio to operate on, from the X-Portfolio-ID header."""
    if not x_portfolio_id or not x_portfolio_id.strip():
        return get_settings().default_portfolio_id

    portfolio_id = x_portfolio_id.strip()
    if not PORTFOLIO_ID_PATTERN.match(portfolio_id):
        raise ValidationException(
            message="Invalid X-Portfolio-ID header",
            field_errors={
                "X-Portfolio-ID": "1-64 letters, digits, '.', '_' or '-'"
            },
        )
    return portfolio_id
