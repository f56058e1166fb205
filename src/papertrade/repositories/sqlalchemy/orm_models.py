"""SQLAlchemy ORM model definitions."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    DateTime,
    Integer,
    ForeignKey,
    Numeric,
    Index,
    UniqueConstraint,
    Enum as SqlEnum,
)
from sqlalchemy.orm import relationship

from papertrade.repositories.sqlalchemy.database import Base
from papertrade.domain.models.enums import TransactionType


class PortfolioORM(Base):
    """SQLAlchemy model for Portfolio (one row per user)."""

    __tablename__ = "portfolios"

    user_id = Column(String(64), primary_key=True)
    balance = Column(Numeric(precision=18, scale=4), nullable=False)
    total_invested = Column(Numeric(precision=18, scale=4), nullable=False, default=Decimal("0"))
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True)

    holdings = relationship(
        "HoldingORM",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="HoldingORM.symbol",
    )

    # UPDATE ... WHERE version = :loaded_version; StaleDataError on mismatch
    __mapper_args__ = {"version_id_col": version}


class HoldingORM(Base):
    """SQLAlchemy model for Holding (never stored with zero quantity)."""

    __tablename__ = "holdings"

    user_id = Column(String(64), ForeignKey("portfolios.user_id"), primary_key=True)
    symbol = Column(String(20), primary_key=True)
    quantity = Column(Integer, nullable=False)
    average_price = Column(Numeric(precision=18, scale=8), nullable=False)

    portfolio = relationship("PortfolioORM", back_populates="holdings")


class TransactionORM(Base):
    """SQLAlchemy model for Transaction (append-only ledger entry)."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    txn_id = Column(String(36), unique=True, nullable=False)
    user_id = Column(String(64), nullable=False)
    symbol = Column(String(20), nullable=False)
    txn_type = Column(SqlEnum(TransactionType), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(precision=18, scale=4), nullable=False)
    total_amount = Column(Numeric(precision=18, scale=4), nullable=False)
    date = Column(DateTime, nullable=False)

    __table_args__ = (Index("ix_transactions_user_date", "user_id", "date"),)


class WatchlistORM(Base):
    """SQLAlchemy model for WatchlistItem (one row per user and symbol)."""

    __tablename__ = "watchlist"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    symbol = Column(String(20), nullable=False)
    company = Column(String(255), nullable=False)
    added_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "symbol", name="uq_watchlist_user_symbol"),
        Index("ix_watchlist_user_added", "user_id", "added_at"),
    )
