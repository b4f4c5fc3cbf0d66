"""Portfolio performance reconstruction against a benchmark index."""

import asyncio
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence

from ...config.logging import get_logger
from ...core.market_data import MarketDataService, PricePoint
from .ledger import Ledger
from .models import Portfolio, PortfolioHistoryPoint, Trade

logger = get_logger(__name__)


def replay_to_date(
    trades: Sequence[Trade], day: date, initial_cash: float, transaction_fee: float
) -> Ledger:
    """Rebuild cash and holdings from scratch using every trade on or before ``day``."""
    ledger = Ledger(initial_cash, transaction_fee)
    for trade in trades:
        if trade.trade_date <= day:
            ledger.apply(trade)
    return ledger


def reconstruct(
    trade_history: Sequence[Trade],
    benchmark_series: Sequence[PricePoint],
    symbol_series: Mapping[str, Sequence[PricePoint]],
    initial_cash: float,
    transaction_fee: float,
) -> List[PortfolioHistoryPoint]:
    """
    Build a daily portfolio value series and a benchmark series scaled to match.

    One point is emitted per benchmark trading day from the first trade date
    onward. Each day is replayed from ``initial_cash`` independently. A symbol
    without a close on that exact day contributes nothing to holdings.

    Args:
        trade_history: Executed trades, any order
        benchmark_series: Benchmark daily bars, oldest first
        symbol_series: Daily bars per traded symbol
        initial_cash: Starting cash the history is replayed from
        transaction_fee: Flat commission charged per trade

    Returns:
        List of PortfolioHistoryPoint, empty if there is nothing to show
    """
    if not trade_history:
        return []

    trades = tuple(trade_history)
    first_trade_date = min(trade.trade_date for trade in trades)

    relevant_benchmark = [
        point for point in benchmark_series if point.date >= first_trade_date
    ]
    if not relevant_benchmark:
        return []

    closes: Dict[str, Dict[date, float]] = {
        symbol: {point.date: point.close for point in series}
        for symbol, series in symbol_series.items()
    }

    initial_benchmark_value = relevant_benchmark[0].close
    history = []

    for day in relevant_benchmark:
        ledger = replay_to_date(trades, day.date, initial_cash, transaction_fee)

        holdings_value = 0.0
        for symbol, holding in ledger.holdings.items():
            close = closes.get(symbol, {}).get(day.date, 0.0)
            holdings_value += holding.quantity * close

        if initial_benchmark_value:
            benchmark_value = day.close / initial_benchmark_value * initial_cash
        else:
            benchmark_value = 0.0

        history.append(
            PortfolioHistoryPoint(
                date=day.date,
                value=ledger.cash + holdings_value,
                benchmark_value=benchmark_value,
                initial_portfolio_value=initial_cash,
                initial_benchmark_value=initial_benchmark_value,
            )
        )

    return history


def summarize(history: Sequence[PortfolioHistoryPoint]) -> Dict[str, Optional[float]]:
    """Total return percentages over the reconstructed window."""
    if len(history) < 2:
        return {
            "portfolio_return_pct": None,
            "benchmark_return_pct": None,
            "start_value": None,
            "end_value": None,
        }

    first, last = history[0], history[-1]
    start = first.initial_portfolio_value

    return {
        "portfolio_return_pct": (last.value / start - 1) * 100 if start else None,
        "benchmark_return_pct": (
            (last.benchmark_value / start - 1) * 100 if start else None
        ),
        "start_value": first.value,
        "end_value": last.value,
    }


class PerformanceAnalyzer:
    """Fetches price history and reconstructs portfolio performance."""

    def __init__(
        self,
        market_data: MarketDataService,
        initial_cash: float,
        transaction_fee: float,
        benchmark_symbol: str = "SPY",
        history_period: str = "1y",
    ):
        self.logger = logger.bind(component="performance_analyzer")
        self.market_data = market_data
        self.initial_cash = initial_cash
        self.transaction_fee = transaction_fee
        self.benchmark_symbol = benchmark_symbol
        self.history_period = history_period

    async def get_analytics(self, portfolio: Portfolio) -> List[PortfolioHistoryPoint]:
        """
        Reconstruct daily performance for a portfolio.

        Args:
            portfolio: Snapshot whose trade history is replayed

        Returns:
            Daily history points, empty when there are no trades or prices
        """
        trades = tuple(portfolio.trade_history)
        if not trades:
            return []

        symbols = sorted({trade.symbol for trade in trades})
        series = await asyncio.gather(
            self._fetch_series(self.benchmark_symbol),
            *(self._fetch_series(symbol) for symbol in symbols),
        )
        benchmark_series = series[0]
        symbol_series = dict(zip(symbols, series[1:]))

        history = reconstruct(
            trades,
            benchmark_series,
            symbol_series,
            self.initial_cash,
            self.transaction_fee,
        )

        self.logger.info(
            "Reconstructed portfolio history",
            portfolio_id=portfolio.id,
            trades=len(trades),
            symbols=symbols,
            points=len(history),
        )
        return history

    async def _fetch_series(self, symbol: str) -> List[PricePoint]:
        try:
            return await self.market_data.get_daily_history(
                symbol, self.history_period
            )
        except Exception as e:
            self.logger.warning(
                "Price history unavailable, treating as empty",
                symbol=symbol,
                error=str(e),
            )
            return []
