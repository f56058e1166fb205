"""Repository layer - data access abstractions and implementations."""

from papertrade.repositories.protocols import (
    PortfolioRepository,
    TransactionRepository,
    UnitOfWork,
    AnalysisCacheStore,
    WatchlistRepository,
)

__all__ = [
    "PortfolioRepository",
    "TransactionRepository",
    "UnitOfWork",
    "AnalysisCacheStore",
    "WatchlistRepository",
]
