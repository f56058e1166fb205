"""View models for watchlist and symbol search outputs."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class WatchlistEntry:
    """
    A watchlist item blended with its live quote.

    When no quote could be fetched the price fields are None and
    quote_available is False; the stored item is shown as is.
    """

    symbol: str
    company: str
    added_at: Optional[datetime] = None
    current_price: Optional[Decimal] = None
    change_percent: Optional[Decimal] = None
    quote_available: bool = False


@dataclass
class WatchlistResult:
    """Structured add/remove result returned to callers."""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


@dataclass
class StockSearchResult:
    """One symbol lookup match."""

    symbol: str
    description: str
