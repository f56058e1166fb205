"""
Unit tests for WatchlistService.

Tests cover:
- Add / remove results, including duplicates and idempotent removal
- Watchlist listing with live quotes and quote outages
- Watchlists stay independent of portfolios
- Symbol search, including provider outages
"""

import pytest
from decimal import Decimal

from papertrade.core.exceptions import PersistenceError, ValidationError
from papertrade.domain.views import WatchlistEntry
from papertrade.services import ValuationEngine, WatchlistService

from tests.conftest import FailingSearchProvider, load_portfolio


# =============================================================================
# ADD / REMOVE
# =============================================================================


class TestWatchlistAdd:
    """Watching a symbol."""

    def test_add_normalizes_symbol(self, watchlist_service):
        """
        GIVEN an empty watchlist
        WHEN " aapl " is added with a company name
        THEN it is stored once, uppercased, with that name
        """
        result = watchlist_service.add("alice", " aapl ", "Apple Inc")

        items = watchlist_service.get_watchlist("alice")
        assert result.success is True
        assert result.message == "Stock added to watchlist"
        assert [(i.symbol, i.company) for i in items] == [("AAPL", "Apple Inc")]

    def test_company_defaults_to_symbol(self, watchlist_service):
        watchlist_service.add("alice", "TSLA")

        assert watchlist_service.get_watchlist("alice")[0].company == "TSLA"

    def test_duplicate_is_a_failed_result(self, watchlist_service):
        """
        GIVEN AAPL is already watched
        WHEN it is added again in a different case
        THEN the result is a failure and the list still holds one AAPL
        """
        watchlist_service.add("alice", "AAPL", "Apple Inc")

        result = watchlist_service.add("alice", "aapl", "Apple")

        assert result.success is False
        assert result.error == "DuplicateWatchlistItem"
        assert result.message == "Stock already in watchlist"
        assert len(watchlist_service.get_watchlist("alice")) == 1

    @pytest.mark.parametrize("user_id,symbol", [("", "AAPL"), ("   ", "AAPL"), ("alice", "  ")])
    def test_blank_user_or_symbol_rejected(self, watchlist_service, user_id, symbol):
        result = watchlist_service.add(user_id, symbol)

        assert result.success is False
        assert result.error == "ValidationError"

    def test_storage_failure_is_a_failed_result(self, valuation_engine):
        class BrokenUnitOfWork:
            def __enter__(self):
                raise PersistenceError("database is locked")

            def __exit__(self, *exc):
                return None

        service = WatchlistService(BrokenUnitOfWork, valuation_engine, FailingSearchProvider())

        result = service.add("alice", "AAPL")

        assert result.success is False
        assert result.error == "PersistenceError"
        assert result.message == "Failed to add stock to watchlist"

    def test_watchlist_does_not_provision_portfolio(self, watchlist_service, uow_factory):
        watchlist_service.add("alice", "AAPL")

        assert load_portfolio(uow_factory, "alice") is None


class TestWatchlistRemove:
    """Unwatching a symbol."""

    def test_remove(self, watchlist_service):
        watchlist_service.add("alice", "AAPL")
        watchlist_service.add("alice", "MSFT")

        result = watchlist_service.remove("alice", "aapl")

        assert result.success is True
        assert result.message == "Stock removed from watchlist"
        assert [i.symbol for i in watchlist_service.get_watchlist("alice")] == ["MSFT"]

    def test_removing_unwatched_symbol_succeeds(self, watchlist_service):
        result = watchlist_service.remove("alice", "NVDA")

        assert result.success is True

    def test_remove_is_per_user(self, watchlist_service):
        watchlist_service.add("alice", "AAPL")
        watchlist_service.add("bob", "AAPL")

        watchlist_service.remove("alice", "AAPL")

        assert watchlist_service.get_watchlist("alice") == []
        assert [i.symbol for i in watchlist_service.get_watchlist("bob")] == ["AAPL"]

    def test_blank_symbol_rejected(self, watchlist_service):
        result = watchlist_service.remove("alice", " ")

        assert result.success is False
        assert result.error == "ValidationError"


# =============================================================================
# LISTING
# =============================================================================


class TestWatchlistWithData:
    """Watched symbols blended with live quotes."""

    def test_entries_carry_quotes(self, watchlist_service):
        """
        GIVEN AAPL and TSLA are watched and both have quotes
        WHEN the watchlist is listed with data
        THEN each entry carries its price and day change, newest first
        """
        watchlist_service.add("alice", "AAPL", "Apple Inc")
        watchlist_service.add("alice", "TSLA", "Tesla Inc")

        entries = watchlist_service.get_watchlist_with_data("alice")

        by_symbol = {e.symbol: e for e in entries}
        assert [e.symbol for e in entries] == ["TSLA", "AAPL"]
        assert by_symbol["AAPL"].current_price == Decimal("110.00")
        assert by_symbol["AAPL"].change_percent == Decimal("10.00")
        assert by_symbol["TSLA"].change_percent == Decimal("-20.00")
        assert all(e.quote_available for e in entries)

    def test_missing_quote_keeps_stored_item(self, watchlist_service):
        """
        GIVEN a watched symbol the provider does not know
        WHEN the watchlist is listed with data
        THEN the entry is returned without price fields and flagged
        """
        watchlist_service.add("alice", "ZZZZ", "Unknown Co")

        [entry] = watchlist_service.get_watchlist_with_data("alice")

        assert isinstance(entry, WatchlistEntry)
        assert entry.company == "Unknown Co"
        assert entry.current_price is None
        assert entry.change_percent is None
        assert entry.quote_available is False

    def test_provider_outage_degrades_every_entry(self, uow_factory, failing_provider):
        service = WatchlistService(
            uow_factory,
            ValuationEngine(failing_provider, timeout_seconds=2.0, max_attempts=1),
            FailingSearchProvider(),
        )
        service.add("alice", "AAPL")
        service.add("alice", "MSFT")

        entries = service.get_watchlist_with_data("alice")

        assert len(entries) == 2
        assert not any(e.quote_available for e in entries)

    def test_empty_watchlist_makes_no_quote_calls(self, watchlist_service, deterministic_provider):
        assert watchlist_service.get_watchlist_with_data("alice") == []
        assert deterministic_provider.calls == []

    def test_blank_user_raises(self, watchlist_service):
        with pytest.raises(ValidationError):
            watchlist_service.get_watchlist_with_data("  ")


# =============================================================================
# SYMBOL SEARCH
# =============================================================================


class TestSearchStocks:
    """Symbol lookup."""

    def test_matches_returned(self, watchlist_service):
        results = watchlist_service.search_stocks("apple")

        assert [(r.symbol, r.description) for r in results] == [("AAPL", "Apple Inc")]

    def test_blank_query_skips_provider(self, uow_factory, valuation_engine):
        provider = FailingSearchProvider()
        service = WatchlistService(uow_factory, valuation_engine, provider)

        assert service.search_stocks("   ") == []
        assert service.search_stocks(None) == []
        assert provider.queries == []

    def test_provider_outage_gives_no_matches(self, uow_factory, valuation_engine):
        """
        GIVEN the search backend is failing
        WHEN a query is searched
        THEN no matches come back and nothing is raised
        """
        provider = FailingSearchProvider()
        service = WatchlistService(uow_factory, valuation_engine, provider)

        assert service.search_stocks(" apple ") == []
        assert provider.queries == ["apple"]
