"""Symbol search provider protocol."""

from typing import Protocol

from papertrade.domain.views import StockSearchResult


class SymbolSearchProvider(Protocol):
    """
    Protocol for symbol lookup.

    Returns matches for a free-text query (ticker or company name).
    Failures raise a QuoteError subclass.
    """

    def search(self, query: str) -> list[StockSearchResult]:
        ...
