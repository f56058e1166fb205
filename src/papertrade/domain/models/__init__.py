"""Domain models package."""

from papertrade.domain.models.enums import TransactionType, TradeState
from papertrade.domain.models.portfolio import Portfolio, Holding
from papertrade.domain.models.transaction import Transaction
from papertrade.domain.models.watchlist import WatchlistItem

__all__ = [
    "TransactionType",
    "TradeState",
    "Portfolio",
    "Holding",
    "Transaction",
    "WatchlistItem",
]
