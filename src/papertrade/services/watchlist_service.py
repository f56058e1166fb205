"""Watchlist service: symbols a user follows, plus symbol lookup."""

import logging
from typing import Callable

from papertrade.core.exceptions import AppError, PersistenceError, QuoteError, ValidationError
from papertrade.core.money import quantize_cents
from papertrade.domain.models import WatchlistItem
from papertrade.domain.views import StockSearchResult, WatchlistEntry, WatchlistResult
from papertrade.providers.search_provider import SymbolSearchProvider
from papertrade.repositories.protocols import UnitOfWork
from papertrade.services.valuation_engine import ValuationEngine

logger = logging.getLogger(__name__)


class WatchlistService:
    """
    Add, remove and list watched symbols; list them with live quotes.

    Watchlists are independent of portfolios: touching a watchlist never
    provisions a portfolio. Add/remove failures come back as
    WatchlistResult(success=False) rather than exceptions.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        valuation_engine: ValuationEngine,
        search_provider: SymbolSearchProvider,
    ):
        self._uow_factory = uow_factory
        self._valuation_engine = valuation_engine
        self._search_provider = search_provider

    def add(self, user_id: str, symbol: str, company: str = "") -> WatchlistResult:
        try:
            item = WatchlistItem(user_id=self._require_user(user_id), symbol=symbol, company=company)
            with self._uow_factory() as uow:
                uow.watchlist.add(item)
                uow.commit()
        except PersistenceError as e:
            logger.exception(f"Watchlist add for {user_id} failed: {e.message}")
            return WatchlistResult(
                success=False, error=e.code, message="Failed to add stock to watchlist"
            )
        except AppError as e:
            return WatchlistResult(success=False, error=e.code, message=e.message)

        logger.info(f"{user_id} is watching {item.symbol}")
        return WatchlistResult(success=True, message="Stock added to watchlist")

    def remove(self, user_id: str, symbol: str) -> WatchlistResult:
        """Removing a symbol that is not listed still succeeds."""
        try:
            user_id = self._require_user(user_id)
            symbol = (symbol or "").strip().upper()
            if not symbol:
                raise ValidationError("symbol is required")
            with self._uow_factory() as uow:
                removed = uow.watchlist.remove(user_id, symbol)
                uow.commit()
        except PersistenceError as e:
            logger.exception(f"Watchlist remove for {user_id} failed: {e.message}")
            return WatchlistResult(
                success=False, error=e.code, message="Failed to remove stock from watchlist"
            )
        except AppError as e:
            return WatchlistResult(success=False, error=e.code, message=e.message)

        if removed:
            logger.info(f"{user_id} stopped watching {symbol}")
        return WatchlistResult(success=True, message="Stock removed from watchlist")

    def get_watchlist(self, user_id: str) -> list[WatchlistItem]:
        """Stored items, most recently added first."""
        user_id = self._require_user(user_id)
        with self._uow_factory() as uow:
            return uow.watchlist.list_by_user(user_id)

    def get_watchlist_with_data(self, user_id: str) -> list[WatchlistEntry]:
        """
        Stored items with their live quotes.

        A symbol whose quote is unavailable keeps its stored fields and is
        flagged with quote_available=False.
        """
        items = self.get_watchlist(user_id)
        quotes = self._valuation_engine.fetch_quotes([i.symbol for i in items])

        entries = []
        for item in items:
            quote = quotes.get(item.symbol)
            if quote is None:
                entries.append(
                    WatchlistEntry(symbol=item.symbol, company=item.company, added_at=item.added_at)
                )
                continue
            entries.append(
                WatchlistEntry(
                    symbol=item.symbol,
                    company=item.company,
                    added_at=item.added_at,
                    current_price=quantize_cents(quote.current_price),
                    change_percent=quantize_cents(quote.change_percent),
                    quote_available=True,
                )
            )
        return entries

    def search_stocks(self, query: str) -> list[StockSearchResult]:
        """Symbol lookup by ticker or company name. Provider failures give no matches."""
        query = (query or "").strip()
        if not query:
            return []
        try:
            return self._search_provider.search(query)
        except QuoteError as e:
            logger.warning(f"Symbol search for {query!r} failed: {e.message}")
            return []

    @staticmethod
    def _require_user(user_id: str) -> str:
        if not user_id or not user_id.strip():
            raise ValidationError("user_id is required")
        return user_id
