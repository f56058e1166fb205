"""SQLAlchemy implementation of PortfolioRepository."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from papertrade.core.exceptions import (
    ConcurrentModificationError,
    PersistenceError,
    PortfolioNotFoundError,
)
from papertrade.core.timezone import now_eastern, to_eastern
from papertrade.domain.models import Portfolio, Holding
from papertrade.repositories.sqlalchemy.orm_models import PortfolioORM, HoldingORM


def _naive_eastern(dt: Optional[datetime]) -> datetime:
    """Store wall-clock Eastern time; the DateTime columns are tz-naive."""
    dt = dt or now_eastern()
    return to_eastern(dt).replace(tzinfo=None)


class SqlAlchemyPortfolioRepository:
    """SQLAlchemy-backed portfolio repository. Writes flush; the unit of work commits."""

    def __init__(self, db: Session):
        self._db = db

    def load(self, user_id: str) -> Optional[Portfolio]:
        """Retrieve a user's portfolio with its holdings."""
        try:
            orm_portfolio = self._db.get(PortfolioORM, user_id)
            return self._to_domain(orm_portfolio) if orm_portfolio else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load portfolio {user_id}") from e

    def create(self, portfolio: Portfolio) -> Portfolio:
        """Persist a new portfolio."""
        orm_portfolio = PortfolioORM(
            user_id=portfolio.user_id,
            balance=portfolio.balance,
            total_invested=portfolio.total_invested,
            created_at=_naive_eastern(portfolio.created_at),
            updated_at=_naive_eastern(portfolio.updated_at),
            holdings=[
                HoldingORM(
                    symbol=h.symbol,
                    quantity=h.quantity,
                    average_price=h.average_price,
                )
                for h in portfolio.holdings
            ],
        )
        self._db.add(orm_portfolio)
        try:
            self._db.flush()
        except IntegrityError as e:
            # Another writer provisioned the same user first
            raise ConcurrentModificationError(portfolio.user_id, 0) from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to create portfolio {portfolio.user_id}") from e
        return self._to_domain(orm_portfolio)

    def save(self, portfolio: Portfolio) -> Portfolio:
        """Persist balance, totals and holdings with a version compare-and-set."""
        try:
            orm_portfolio = self._db.get(PortfolioORM, portfolio.user_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load portfolio {portfolio.user_id}") from e
        if orm_portfolio is None:
            raise PortfolioNotFoundError(portfolio.user_id)
        if orm_portfolio.version != portfolio.version:
            raise ConcurrentModificationError(portfolio.user_id, portfolio.version)

        orm_portfolio.balance = portfolio.balance
        orm_portfolio.total_invested = portfolio.total_invested
        orm_portfolio.updated_at = _naive_eastern(None)
        self._sync_holdings(orm_portfolio, portfolio.holdings)

        try:
            self._db.flush()
        except StaleDataError as e:
            raise ConcurrentModificationError(portfolio.user_id, portfolio.version) from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save portfolio {portfolio.user_id}") from e
        return self._to_domain(orm_portfolio)

    @staticmethod
    def _sync_holdings(orm_portfolio: PortfolioORM, holdings: list[Holding]) -> None:
        """Update, insert and delete holding rows to match the domain holdings."""
        wanted = {h.symbol: h for h in holdings}
        for orm_holding in list(orm_portfolio.holdings):
            holding = wanted.pop(orm_holding.symbol, None)
            if holding is None:
                orm_portfolio.holdings.remove(orm_holding)
            else:
                orm_holding.quantity = holding.quantity
                orm_holding.average_price = holding.average_price
        for holding in wanted.values():
            orm_portfolio.holdings.append(
                HoldingORM(
                    symbol=holding.symbol,
                    quantity=holding.quantity,
                    average_price=holding.average_price,
                )
            )

    @staticmethod
    def _to_domain(orm: PortfolioORM) -> Portfolio:
        """Convert ORM model to domain model."""
        return Portfolio(
            user_id=orm.user_id,
            balance=Decimal(str(orm.balance)),
            total_invested=Decimal(str(orm.total_invested)) if orm.total_invested else Decimal("0"),
            holdings=[
                Holding(
                    symbol=h.symbol,
                    quantity=int(h.quantity),
                    average_price=Decimal(str(h.average_price)),
                )
                for h in sorted(orm.holdings, key=lambda h: h.symbol)
            ],
            version=orm.version,
            created_at=to_eastern(orm.created_at) if orm.created_at else None,
            updated_at=to_eastern(orm.updated_at) if orm.updated_at else None,
        )
