"""Domain layer - business models and service output views."""

from papertrade.domain.models import (
    Portfolio,
    Holding,
    Transaction,
    TransactionType,
    TradeState,
)

__all__ = [
    "Portfolio",
    "Holding",
    "Transaction",
    "TransactionType",
    "TradeState",
]
