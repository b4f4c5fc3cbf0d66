"""SQLAlchemy ORM models for Apex Trader."""

import datetime

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class PortfolioRecord(Base):
    """Paper trading portfolio, one per user."""

    __tablename__ = "portfolios"

    id = Column(String, primary_key=True, index=True)
    cash = Column(Float, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    last_updated = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    positions = relationship(
        "PositionRecord",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="PositionRecord.sort_order",
    )
    trades = relationship(
        "TradeRecord",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="TradeRecord.seq",
    )
    achievements = relationship(
        "AchievementUnlockRecord",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="AchievementUnlockRecord.seq",
    )

    def __repr__(self):
        return f"<PortfolioRecord(id='{self.id}', cash={self.cash})>"


class PositionRecord(Base):
    """Open position within a portfolio."""

    __tablename__ = "positions"
    __table_args__ = (UniqueConstraint("portfolio_id", "symbol"),)

    id = Column(Integer, primary_key=True, index=True)
    portfolio_id = Column(
        String, ForeignKey("portfolios.id"), nullable=False, index=True
    )
    symbol = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    average_price = Column(Float, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    portfolio = relationship("PortfolioRecord", back_populates="positions")

    def __repr__(self):
        return f"<PositionRecord(symbol='{self.symbol}', quantity={self.quantity})>"


class TradeRecord(Base):
    """Executed trade. Rows are only ever inserted."""

    __tablename__ = "trades"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    trade_id = Column(String, unique=True, nullable=False, index=True)
    portfolio_id = Column(
        String, ForeignKey("portfolios.id"), nullable=False, index=True
    )
    symbol = Column(String, nullable=False, index=True)
    side = Column(String, nullable=False)  # "BUY" or "SELL"
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    order_type = Column(String, nullable=False, default="MARKET")
    limit_price = Column(Float, nullable=True)
    stop_price = Column(Float, nullable=True)
    timestamp = Column(BigInteger, nullable=False)  # epoch milliseconds

    portfolio = relationship("PortfolioRecord", back_populates="trades")

    def __repr__(self):
        return f"<TradeRecord(trade_id='{self.trade_id}', side='{self.side}', symbol='{self.symbol}')>"


class AchievementUnlockRecord(Base):
    """Achievement unlocked by a portfolio."""

    __tablename__ = "portfolio_achievements"
    __table_args__ = (UniqueConstraint("portfolio_id", "achievement_id"),)

    seq = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(
        String, ForeignKey("portfolios.id"), nullable=False, index=True
    )
    achievement_id = Column(String, nullable=False)
    unlocked_at = Column(DateTime, default=_utcnow, nullable=False)

    portfolio = relationship("PortfolioRecord", back_populates="achievements")


class LeaderboardEntryRecord(Base):
    """Stored leaderboard row. ``sort_order`` preserves list order."""

    __tablename__ = "leaderboard_entries"

    user_id = Column(String, primary_key=True)
    username = Column(String, nullable=False)
    portfolio_value = Column(Float, nullable=False)
    rank = Column(Integer, nullable=False)
    sort_order = Column(Integer, nullable=False, index=True)
