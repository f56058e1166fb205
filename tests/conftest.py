"""
Pytest configuration and fixtures for paper-trading tests.

This module provides:
- In-memory SQLite database and unit-of-work fixtures
- Deterministic, failing, flaky and blocking quote providers
- Fake insight generators and cache stores
- Service fixtures wired like the application context
- FastAPI test client with the test database
"""

import json
import threading
from datetime import datetime
from decimal import Decimal
from functools import partial
from typing import Callable, Optional, Union

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from papertrade.main import app
from papertrade.app_context import AppContext
from papertrade.config.settings import Settings, set_settings, reset_settings
from papertrade.repositories.sqlalchemy.database import Base, reset_database
# Import ORM models to register them with Base before creating tables
from papertrade.repositories.sqlalchemy import orm_models  # noqa: F401
from papertrade.repositories.sqlalchemy import SqlAlchemyUnitOfWork
from papertrade.repositories.cache import InMemoryCacheStore
from papertrade.services import (
    AnalysisCache,
    EventDispatcher,
    PortfolioService,
    TradeEngine,
    UserLockRegistry,
    ValuationEngine,
    WatchlistService,
)
from papertrade.providers import StubQuoteProvider
from papertrade.domain.models import Portfolio, Holding
from papertrade.domain.views import Quote, StockSearchResult
from papertrade.core.exceptions import (
    CacheUnavailableError,
    InsightGenerationError,
    QuoteError,
    QuoteNotFoundError,
    QuoteUnavailableError,
)
from papertrade.core.timezone import EASTERN_TZ


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return eastern_datetime(2024, 6, 15, 14, 30, 0)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> sessionmaker:
    """Session factory bound to the test engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=test_engine,
    )


@pytest.fixture
def uow_factory(session_factory) -> Callable[[], SqlAlchemyUnitOfWork]:
    """Provide a factory of units of work on the test database."""
    return partial(SqlAlchemyUnitOfWork, session_factory)


@pytest.fixture
def portfolio_factory(uow_factory) -> Callable[..., Portfolio]:
    """Factory for storing portfolios directly, bypassing the trade engine."""

    def _create_portfolio(
        user_id: str = "alice",
        balance: Union[Decimal, str] = Decimal("100000"),
        holdings: Optional[list[Holding]] = None,
        total_invested: Optional[Union[Decimal, str]] = None,
    ) -> Portfolio:
        holdings = holdings or []
        if total_invested is None:
            total_invested = sum((h.cost_basis for h in holdings), Decimal("0"))
        with uow_factory() as uow:
            portfolio = uow.portfolios.create(
                Portfolio(
                    user_id=user_id,
                    balance=Decimal(str(balance)),
                    total_invested=Decimal(str(total_invested)),
                    holdings=holdings,
                )
            )
            uow.commit()
        return portfolio

    return _create_portfolio


def load_portfolio(uow_factory, user_id: str) -> Optional[Portfolio]:
    """Read the stored portfolio in a fresh unit of work."""
    with uow_factory() as uow:
        return uow.portfolios.load(user_id)


def list_transactions(uow_factory, user_id: str, limit: int = 100) -> list:
    """Read the stored transactions in a fresh unit of work."""
    with uow_factory() as uow:
        return uow.transactions.list_by_user(user_id, limit)


# =============================================================================
# QUOTE PROVIDER FIXTURES
# =============================================================================


class DeterministicQuoteProvider:
    """
    Deterministic quote provider for testing.

    Serves fixed quotes; unknown symbols raise QuoteNotFoundError.
    Records every requested symbol.
    """

    FIXED_QUOTES = {
        "AAPL": (Decimal("110"), Decimal("10"), "Apple Inc"),
        "MSFT": (Decimal("400"), Decimal("0"), "Microsoft Corp"),
        "TSLA": (Decimal("200"), Decimal("-20"), "Tesla Inc"),
    }

    def __init__(self, quotes: Optional[dict] = None, as_of: Optional[datetime] = None):
        self._quotes = dict(self.FIXED_QUOTES if quotes is None else quotes)
        self._as_of = as_of or eastern_datetime(2024, 6, 15, 16, 0, 0)
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def get_quote(self, symbol: str) -> Quote:
        with self._lock:
            self.calls.append(symbol)
        entry = self._quotes.get(symbol.upper())
        if entry is None:
            raise QuoteNotFoundError(symbol)
        if isinstance(entry, QuoteError):
            raise entry
        price, change_percent, name = entry
        return Quote(
            symbol=symbol.upper(),
            current_price=price,
            change_percent=change_percent,
            company_name=name,
            as_of=self._as_of,
        )


class ScriptedQuoteProvider:
    """Returns (or raises) a scripted sequence of outcomes per symbol."""

    def __init__(self, script: dict[str, list]):
        self._script = {k: list(v) for k, v in script.items()}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def get_quote(self, symbol: str) -> Quote:
        with self._lock:
            self.calls.append(symbol)
            outcome = self._script[symbol].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class BlockingQuoteProvider(DeterministicQuoteProvider):
    """Blocks on selected symbols until released."""

    def __init__(self, blocked: set[str], quotes: Optional[dict] = None):
        super().__init__(quotes)
        self._blocked = blocked
        self.release = threading.Event()

    def get_quote(self, symbol: str) -> Quote:
        if symbol.upper() in self._blocked:
            self.release.wait(timeout=5)
        return super().get_quote(symbol)


class FailingQuoteProvider:
    """Quote provider that always raises an unexpected exception."""

    def get_quote(self, symbol: str) -> Quote:
        raise ConnectionError("Network unavailable")


@pytest.fixture
def deterministic_provider() -> DeterministicQuoteProvider:
    """Provide deterministic quote provider."""
    return DeterministicQuoteProvider()


class FailingSearchProvider:
    """Symbol search whose backend is down."""

    def __init__(self):
        self.queries: list[str] = []

    def search(self, query: str) -> list[StockSearchResult]:
        self.queries.append(query)
        raise QuoteUnavailableError(query, "HTTP 502")


@pytest.fixture
def failing_provider() -> FailingQuoteProvider:
    """Provide a quote provider that always fails."""
    return FailingQuoteProvider()


# =============================================================================
# INSIGHT GENERATOR AND CACHE FIXTURES
# =============================================================================


VALID_ANALYSIS = {
    "summary": "A concentrated technology portfolio.",
    "riskLevel": "High",
    "riskAnalysis": "Most value sits in a single sector.",
    "composition": "Mostly large-cap technology.",
    "diversification": "Low across sectors.",
    "suggestions": ["Add bonds", "Add international exposure"],
}


class FakeInsightGenerator:
    """Returns a fixed response and counts calls."""

    def __init__(self, response: Optional[str] = None):
        self.response = response if response is not None else json.dumps(VALID_ANALYSIS)
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response


class FailingInsightGenerator:
    """Insight generator whose backend is down."""

    def __init__(self):
        self.calls = 0

    def generate(self, prompt: str) -> str:
        self.calls += 1
        raise InsightGenerationError("Insight generation failed")


class FailingCacheStore:
    """Cache store whose backend is unreachable."""

    def __init__(self, fail_get: bool = True, fail_set: bool = True):
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.set_calls = 0

    def get(self, key: str) -> Optional[str]:
        if self.fail_get:
            raise CacheUnavailableError("connection refused")
        return None

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        self.set_calls += 1
        if self.fail_set:
            raise CacheUnavailableError("connection refused")


@pytest.fixture
def insight_generator() -> FakeInsightGenerator:
    return FakeInsightGenerator()


@pytest.fixture
def cache_store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def trade_engine(uow_factory) -> TradeEngine:
    """Provide test TradeEngine."""
    return TradeEngine(uow_factory, locks=UserLockRegistry(), max_conflict_retries=3)


@pytest.fixture
def valuation_engine(deterministic_provider) -> ValuationEngine:
    """Provide test ValuationEngine with deterministic provider."""
    return ValuationEngine(
        deterministic_provider,
        timeout_seconds=2.0,
        max_attempts=2,
        retry_backoff_seconds=0,
    )


@pytest.fixture
def analysis_cache(cache_store) -> AnalysisCache:
    return AnalysisCache(cache_store, ttl_seconds=86400)


@pytest.fixture
def event_dispatcher():
    dispatcher = EventDispatcher(max_workers=1)
    yield dispatcher
    dispatcher.shutdown(wait=True)


@pytest.fixture
def portfolio_service(
    uow_factory,
    trade_engine,
    valuation_engine,
    analysis_cache,
    insight_generator,
    event_dispatcher,
) -> PortfolioService:
    """Provide test PortfolioService."""
    return PortfolioService(
        uow_factory=uow_factory,
        trade_engine=trade_engine,
        valuation_engine=valuation_engine,
        analysis_cache=analysis_cache,
        insight_generator=insight_generator,
        events=event_dispatcher,
        starting_balance=Decimal("100000"),
        history_limit=50,
    )


@pytest.fixture
def watchlist_service(uow_factory, valuation_engine) -> WatchlistService:
    """Provide test WatchlistService; symbol search uses the offline list."""
    return WatchlistService(
        uow_factory=uow_factory,
        valuation_engine=valuation_engine,
        search_provider=StubQuoteProvider(),
    )


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def app_context(tmp_path, session_factory, deterministic_provider, insight_generator, cache_store):
    """AppContext wired to the test database and fakes."""
    set_settings(Settings(data_dir=tmp_path, quote_timeout_seconds=2.0))
    context = AppContext(
        session_factory=session_factory,
        quote_provider=deterministic_provider,
        insight_generator=insight_generator,
        cache_store=cache_store,
    )
    yield context
    context.close()
    reset_settings()
    reset_database()


@pytest.fixture
def client(app_context) -> TestClient:
    """Provide FastAPI test client with test database."""
    app.state.context = app_context
    with TestClient(app) as c:
        yield c
    app.state.context = None
