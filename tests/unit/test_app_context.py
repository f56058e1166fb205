"""
Unit tests for AppContext.

Tests cover:
- Services are built once, on initialize()
- Access before initialize() or after close() fails
- Symbol search falls back to the offline list
"""

import threading

import pytest

from papertrade.app_context import AppContext
from papertrade.providers import StubQuoteProvider


class TestAppContextServices:
    """Service lifecycle."""

    def test_services_unavailable_before_initialize(self, app_context):
        with pytest.raises(RuntimeError):
            app_context.portfolio_service
        with pytest.raises(RuntimeError):
            app_context.watchlist_service

    def test_initialize_builds_services_once(self, app_context):
        """
        GIVEN an initialized context
        WHEN the services are read repeatedly
        THEN the instances built during initialize() are returned every time
        """
        app_context.initialize()
        built = app_context._portfolio_service

        assert built is not None
        assert app_context.portfolio_service is built
        assert app_context.portfolio_service is built
        assert app_context.watchlist_service is app_context.watchlist_service

    def test_concurrent_readers_share_one_service(self, app_context):
        """
        GIVEN an initialized context
        WHEN many threads read the portfolio service at once
        THEN they all receive the same instance
        """
        app_context.initialize()
        seen = []
        start = threading.Barrier(8)

        def read():
            start.wait(timeout=5)
            seen.append(app_context.portfolio_service)

        threads = [threading.Thread(target=read) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert len(seen) == 8
        assert all(service is seen[0] for service in seen)

    def test_initialize_is_idempotent(self, app_context):
        app_context.initialize()
        first = app_context.portfolio_service

        app_context.initialize()

        assert app_context.portfolio_service is first

    def test_close_releases_services(self, app_context):
        app_context.initialize()

        app_context.close()

        with pytest.raises(RuntimeError):
            app_context.portfolio_service


class TestSearchProviderSelection:
    """Which provider answers symbol lookups."""

    def test_quote_provider_without_search_uses_offline_list(self, app_context):
        app_context.initialize()

        results = app_context.watchlist_service.search_stocks("microsoft")

        assert [r.symbol for r in results] == ["MSFT"]

    def test_quote_provider_with_search_is_reused(self):
        provider = StubQuoteProvider()

        assert AppContext._build_search_provider(provider) is provider
