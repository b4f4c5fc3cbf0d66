"""Repository for portfolio persistence."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy.exc import SQLAlchemyError

from ...config.logging import get_logger
from ..models import (
    AchievementUnlockRecord,
    PortfolioRecord,
    PositionRecord,
    TradeRecord,
)
from .base import BaseRepository

if TYPE_CHECKING:
    from ...services.trading.models import Portfolio

logger = get_logger(__name__)


class PortfolioRepository(BaseRepository):
    """Repository for portfolio operations."""

    def get_portfolio(self, portfolio_id: str) -> Optional[PortfolioRecord]:
        """Get a portfolio by id, or None if it has never been created."""
        return (
            self.session.query(PortfolioRecord)
            .filter(PortfolioRecord.id == portfolio_id)
            .first()
        )

    def create_portfolio(self, portfolio_id: str, starting_cash: float) -> PortfolioRecord:
        """Create an empty portfolio."""
        record = PortfolioRecord(id=portfolio_id, cash=starting_cash)
        self.session.add(record)
        self._commit("create", portfolio_id)
        self.session.refresh(record)
        return record

    def save_portfolio(self, portfolio: "Portfolio") -> PortfolioRecord:
        """
        Persist a portfolio snapshot in one transaction.

        Positions are synced to the snapshot. Trades and achievements are
        append-only: ids already stored are left alone and new ones inserted.

        Returns:
            The stored record, reloaded after commit
        """
        record = self.get_portfolio(portfolio.id)
        if record is None:
            record = PortfolioRecord(id=portfolio.id, cash=portfolio.cash)
            self.session.add(record)

        record.cash = portfolio.cash

        existing_positions = {position.symbol: position for position in record.positions}
        for index, position in enumerate(portfolio.positions):
            stored = existing_positions.pop(position.symbol, None)
            if stored is None:
                record.positions.append(
                    PositionRecord(
                        symbol=position.symbol,
                        quantity=position.quantity,
                        average_price=position.average_price,
                        sort_order=index,
                    )
                )
            else:
                stored.quantity = position.quantity
                stored.average_price = position.average_price
                stored.sort_order = index
        for closed in existing_positions.values():
            record.positions.remove(closed)

        stored_trade_ids = {trade.trade_id for trade in record.trades}
        for trade in portfolio.trade_history:
            if trade.id in stored_trade_ids:
                continue
            record.trades.append(
                TradeRecord(
                    trade_id=trade.id,
                    symbol=trade.symbol,
                    side=trade.side.value,
                    quantity=trade.quantity,
                    price=trade.price,
                    order_type=trade.order_type.value,
                    limit_price=trade.limit_price,
                    stop_price=trade.stop_price,
                    timestamp=trade.timestamp,
                )
            )

        stored_achievements = {unlock.achievement_id for unlock in record.achievements}
        for achievement_id in portfolio.achievements:
            if achievement_id not in stored_achievements:
                record.achievements.append(
                    AchievementUnlockRecord(achievement_id=achievement_id)
                )

        self._commit("save", portfolio.id)
        self.session.refresh(record)
        return record

    def reset_portfolio(self, portfolio_id: str, starting_cash: float) -> PortfolioRecord:
        """Reinitialize a portfolio to starting cash with empty collections."""
        record = self.get_portfolio(portfolio_id)
        if record is None:
            return self.create_portfolio(portfolio_id, starting_cash)

        record.cash = starting_cash
        record.positions.clear()
        record.trades.clear()
        record.achievements.clear()

        self._commit("reset", portfolio_id)
        self.session.refresh(record)
        return record

    def _commit(self, operation: str, portfolio_id: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                "Portfolio write rolled back",
                operation=operation,
                portfolio_id=portfolio_id,
                error=str(e),
            )
            raise
