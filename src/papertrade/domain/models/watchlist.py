"""Watchlist domain model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from papertrade.core.exceptions import ValidationError


@dataclass
class WatchlistItem:
    """
    A symbol a user follows without holding it.

    At most one item per (user_id, symbol).
    """

    user_id: str
    symbol: str
    company: str
    added_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValidationError("Watchlist item requires a user_id")
        if not self.symbol or not self.symbol.strip():
            raise ValidationError("Watchlist item requires a symbol")
        self.symbol = self.symbol.strip().upper()
        self.company = (self.company or "").strip() or self.symbol
