"""Watchlist repository protocol."""

from typing import Protocol

from papertrade.domain.models import WatchlistItem


class WatchlistRepository(Protocol):
    """Interface for per-user watchlists."""

    def add(self, item: WatchlistItem) -> WatchlistItem:
        """Persist a new item; raises DuplicateWatchlistItemError if the symbol is already listed."""
        ...

    def remove(self, user_id: str, symbol: str) -> bool:
        """Delete an item. Returns False when it was not listed."""
        ...

    def list_by_user(self, user_id: str) -> list[WatchlistItem]:
        """List a user's items, most recently added first."""
        ...
