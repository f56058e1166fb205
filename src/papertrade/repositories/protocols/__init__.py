"""Repository protocol definitions (interfaces)."""

from papertrade.repositories.protocols.portfolio_repo import PortfolioRepository
from papertrade.repositories.protocols.transaction_repo import TransactionRepository
from papertrade.repositories.protocols.unit_of_work import UnitOfWork
from papertrade.repositories.protocols.cache_repo import AnalysisCacheStore
from papertrade.repositories.protocols.watchlist_repo import WatchlistRepository

__all__ = [
    "PortfolioRepository",
    "TransactionRepository",
    "UnitOfWork",
    "AnalysisCacheStore",
    "WatchlistRepository",
]
