"""SQLAlchemy unit of work: one session, one commit per trade."""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from papertrade.core.exceptions import PersistenceError
from papertrade.repositories.sqlalchemy.portfolio_repo import SqlAlchemyPortfolioRepository
from papertrade.repositories.sqlalchemy.transaction_repo import SqlAlchemyTransactionRepository
from papertrade.repositories.sqlalchemy.watchlist_repo import SqlAlchemyWatchlistRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """
    Opens a session on enter and exposes repositories bound to it.

    Nothing is visible to other sessions until commit(); leaving the block
    without committing, or with an exception, rolls everything back.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._session: Optional[Session] = None
        self.portfolios: Optional[SqlAlchemyPortfolioRepository] = None
        self.transactions: Optional[SqlAlchemyTransactionRepository] = None
        self.watchlist: Optional[SqlAlchemyWatchlistRepository] = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self._session = self._session_factory()
        self.portfolios = SqlAlchemyPortfolioRepository(self._session)
        self.transactions = SqlAlchemyTransactionRepository(self._session)
        self.watchlist = SqlAlchemyWatchlistRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            if self._session is not None:
                self._session.close()
            self._session = None

    def commit(self) -> None:
        """Commit all pending writes atomically."""
        if self._session is None:
            raise RuntimeError("Unit of work is not active")
        try:
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise PersistenceError("Failed to commit ledger changes") from e

    def rollback(self) -> None:
        """Discard pending writes (no-op after commit)."""
        if self._session is None:
            return
        try:
            self._session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed")
