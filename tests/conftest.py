"""Shared test configuration and fixtures."""

import os
import sys
import tempfile
from datetime import date, datetime, time, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

sys.path.append("src")


@pytest.fixture
def isolated_db():
    """Create an isolated database for testing."""
    # Create a temporary database file
    temp_fd, temp_path = tempfile.mkstemp(suffix=".db")
    db_url = f"sqlite:///{temp_path}"

    try:
        engine = create_engine(db_url, connect_args={"check_same_thread": False})
        SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
        )

        from apex_trader.ormdb import Base

        Base.metadata.create_all(bind=engine)

        yield {
            "engine": engine,
            "session_factory": SessionLocal,
            "db_url": db_url,
            "db_path": temp_path,
        }

        engine.dispose()

    finally:
        try:
            os.close(temp_fd)
            os.unlink(temp_path)
        except OSError:
            pass


@pytest.fixture
def mock_db_session(isolated_db):
    """Point the application's session factory at the isolated test database."""
    with patch(
        "apex_trader.ormdb.database.get_session_factory",
        lambda: isolated_db["session_factory"],
    ):
        with patch(
            "apex_trader.ormdb.database.get_engine", lambda: isolated_db["engine"]
        ):
            session = isolated_db["session_factory"]()
            try:
                yield session
            finally:
                session.close()


@pytest.fixture(autouse=True)
def test_env_vars():
    """Keep tests away from the real data directory and log file."""
    with patch.dict(
        os.environ,
        {
            "ENVIRONMENT": "testing",
            "LOG_FILE_ENABLED": "false",
            "DATABASE_URL": "sqlite:///:memory:",
        },
    ):
        yield


@pytest.fixture(autouse=True)
def clean_lru_cache():
    """Clear LRU caches between tests to avoid state pollution."""
    from apex_trader.config.settings import get_settings
    from apex_trader.webapi.dependencies import get_trading_service

    get_settings.cache_clear()
    get_trading_service.cache_clear()

    yield

    get_settings.cache_clear()
    get_trading_service.cache_clear()


def _millis(day: date, hour: int = 15) -> int:
    moment = datetime.combine(day, time(hour=hour), tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


@pytest.fixture
def make_trade():
    """Factory for executed trades on a given UTC day."""
    from apex_trader.services.trading.models import OrderType, Trade, TradeSide

    counter = {"n": 0}

    def _make(symbol, quantity, price, side="BUY", day=date(2024, 1, 2), hour=15):
        counter["n"] += 1
        return Trade(
            id=f"trade-{counter['n']}",
            symbol=symbol,
            quantity=quantity,
            price=price,
            side=TradeSide(side),
            order_type=OrderType.MARKET,
            timestamp=_millis(day, hour),
        )

    return _make


@pytest.fixture
def make_price_series():
    """Factory for daily price points from a {date: close} mapping."""
    from apex_trader.core.market_data import PricePoint

    def _make(closes):
        return [
            PricePoint(
                date=day, open=close, high=close, low=close, close=close, volume=1000
            )
            for day, close in sorted(closes.items())
        ]

    return _make


@pytest.fixture
def fresh_portfolio():
    """Empty portfolio with the default starting cash."""
    from apex_trader.services.trading.models import Portfolio

    return Portfolio(id="default-user", cash=100000.0)


@pytest.fixture
def mock_market_data():
    """Market data service returning fixed quotes and no history."""
    from apex_trader.core.market_data import Quote

    market_data = AsyncMock()

    async def _quote(symbol):
        return Quote(
            symbol=symbol,
            price=50.0,
            previous_close=49.0,
            change=1.0,
            change_percent=2.04,
        )

    market_data.get_quote.side_effect = _quote
    market_data.get_daily_history.return_value = []
    market_data.search_symbols.return_value = []
    return market_data
