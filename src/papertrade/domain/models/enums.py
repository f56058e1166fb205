"""Enumerations for domain models."""

from enum import Enum


class TransactionType(str, Enum):
    """Types of ledger transactions."""

    BUY = "BUY"
    SELL = "SELL"


class TradeState(str, Enum):
    """Lifecycle of a single trade request."""

    REQUESTED = "REQUESTED"
    VALIDATED = "VALIDATED"
    APPLIED = "APPLIED"
    LOGGED = "LOGGED"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
