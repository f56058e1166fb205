"""Unit of work protocol grouping ledger writes into one commit."""

from typing import Protocol

from papertrade.repositories.protocols.portfolio_repo import PortfolioRepository
from papertrade.repositories.protocols.transaction_repo import TransactionRepository
from papertrade.repositories.protocols.watchlist_repo import WatchlistRepository


class UnitOfWork(Protocol):
    """
    Scope in which portfolio saves and transaction appends are all-or-nothing.

    Used as a context manager; leaving the block without commit() rolls back.
    """

    portfolios: PortfolioRepository
    transactions: TransactionRepository
    watchlist: WatchlistRepository

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(self, exc_type, exc, tb) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...
