"""SQLAlchemy repository implementations."""

from papertrade.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    init_db,
    init_db_with_path,
    reset_database,
    Base,
)
from papertrade.repositories.sqlalchemy.portfolio_repo import SqlAlchemyPortfolioRepository
from papertrade.repositories.sqlalchemy.transaction_repo import SqlAlchemyTransactionRepository
from papertrade.repositories.sqlalchemy.watchlist_repo import SqlAlchemyWatchlistRepository
from papertrade.repositories.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    "get_engine",
    "get_session_factory",
    "init_db",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyPortfolioRepository",
    "SqlAlchemyTransactionRepository",
    "SqlAlchemyWatchlistRepository",
    "SqlAlchemyUnitOfWork",
]
