"""Application context: process-wide collaborators and their lifecycle.

Owns the database session factory, the cache client, the market data
providers, the insight generator and the event dispatcher. Created once at startup, closed
at shutdown, and handed to the API layer rather than reached as globals.
"""

import logging
from functools import partial
from typing import Callable, Optional

from sqlalchemy.orm import Session

from papertrade.config.settings import Settings, get_settings
from papertrade.providers import (
    FinnhubQuoteProvider,
    InsightGenerator,
    OpenAIInsightGenerator,
    QuoteProvider,
    StubInsightGenerator,
    StubQuoteProvider,
    SymbolSearchProvider,
)
from papertrade.repositories.cache import (
    InMemoryCacheStore,
    RedisCacheStore,
    close_cache_client,
    init_cache_client,
)
from papertrade.repositories.protocols import AnalysisCacheStore
from papertrade.repositories.sqlalchemy import (
    SqlAlchemyUnitOfWork,
    get_session_factory,
    init_db,
)
from papertrade.services import (
    AnalysisCache,
    EventDispatcher,
    PortfolioService,
    TradeEngine,
    UserLockRegistry,
    ValuationEngine,
    WatchlistService,
)
from papertrade.services.events import log_portfolio_created
from papertrade.services.portfolio_service import PORTFOLIO_CREATED

logger = logging.getLogger(__name__)


class AppContext:
    """
    Application context providing access to all services.

    Collaborators not passed in are built from settings on initialize(),
    together with the services, so every request shares one instance.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session_factory: Optional[Callable[[], Session]] = None,
        quote_provider: Optional[QuoteProvider] = None,
        insight_generator: Optional[InsightGenerator] = None,
        cache_store: Optional[AnalysisCacheStore] = None,
        search_provider: Optional[SymbolSearchProvider] = None,
    ):
        self._settings = settings
        self._session_factory = session_factory
        self._quote_provider = quote_provider
        self._insight_generator = insight_generator
        self._cache_store = cache_store
        self._search_provider = search_provider
        self._events: Optional[EventDispatcher] = None
        self._owns_cache_client = False
        self._initialized = False

        self._portfolio_service: Optional[PortfolioService] = None
        self._watchlist_service: Optional[WatchlistService] = None

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    def initialize(self) -> None:
        """Create the database tables and any collaborator not supplied."""
        if self._initialized:
            return
        settings = self.settings

        if self._session_factory is None:
            init_db()
            self._session_factory = get_session_factory()

        if self._cache_store is None:
            if settings.redis_url:
                client = init_cache_client(settings.redis_url, settings.cache_socket_timeout_seconds)
                self._cache_store = RedisCacheStore(client)
                self._owns_cache_client = True
            else:
                logger.info("No Redis URL configured; analysis cache is in-memory")
                self._cache_store = InMemoryCacheStore()

        if self._quote_provider is None:
            self._quote_provider = self._build_quote_provider(settings)
        if self._search_provider is None:
            self._search_provider = self._build_search_provider(self._quote_provider)
        if self._insight_generator is None:
            self._insight_generator = self._build_insight_generator(settings)

        self._events = EventDispatcher(max_workers=settings.event_max_workers)
        self._events.subscribe(PORTFOLIO_CREATED, log_portfolio_created)

        self._build_services(settings)
        self._initialized = True
        logger.info("Application context initialized")

    def close(self) -> None:
        """Release the event pool, cache client and HTTP clients."""
        if self._events is not None:
            self._events.shutdown(wait=False)
            self._events = None
        if self._owns_cache_client:
            close_cache_client()
            self._owns_cache_client = False
        close_provider = getattr(self._quote_provider, "close", None)
        if callable(close_provider):
            close_provider()
        self._portfolio_service = None
        self._watchlist_service = None
        self._initialized = False

    @property
    def events(self) -> Optional[EventDispatcher]:
        return self._events

    def uow_factory(self) -> Callable[[], SqlAlchemyUnitOfWork]:
        if self._session_factory is None:
            raise RuntimeError("AppContext is not initialized")
        return partial(SqlAlchemyUnitOfWork, self._session_factory)

    @property
    def portfolio_service(self) -> PortfolioService:
        if self._portfolio_service is None:
            raise RuntimeError("AppContext is not initialized")
        return self._portfolio_service

    @property
    def watchlist_service(self) -> WatchlistService:
        if self._watchlist_service is None:
            raise RuntimeError("AppContext is not initialized")
        return self._watchlist_service

    def _build_services(self, settings: Settings) -> None:
        uow_factory = self.uow_factory()
        valuation_engine = ValuationEngine(
            self._quote_provider,
            timeout_seconds=settings.quote_timeout_seconds,
            max_attempts=settings.quote_max_attempts,
            max_workers=settings.quote_max_workers,
        )
        self._portfolio_service = PortfolioService(
            uow_factory=uow_factory,
            trade_engine=TradeEngine(
                uow_factory,
                locks=UserLockRegistry(),
                max_conflict_retries=settings.trade_max_conflict_retries,
            ),
            valuation_engine=valuation_engine,
            analysis_cache=AnalysisCache(
                self._cache_store,
                ttl_seconds=settings.analysis_cache_ttl_seconds,
            ),
            insight_generator=self._insight_generator,
            events=self._events,
            starting_balance=settings.default_starting_balance,
            history_limit=settings.transaction_history_limit,
        )
        self._watchlist_service = WatchlistService(
            uow_factory=uow_factory,
            valuation_engine=valuation_engine,
            search_provider=self._search_provider,
        )

    @staticmethod
    def _build_quote_provider(settings: Settings) -> QuoteProvider:
        if settings.quote_provider == "finnhub":
            return FinnhubQuoteProvider(
                api_key=settings.finnhub_api_key,
                base_url=settings.finnhub_base_url,
                timeout=settings.quote_timeout_seconds,
            )
        return StubQuoteProvider()

    @staticmethod
    def _build_search_provider(quote_provider: QuoteProvider) -> SymbolSearchProvider:
        # Finnhub and the stub both answer symbol lookups
        if callable(getattr(quote_provider, "search", None)):
            return quote_provider
        logger.info("Quote provider has no symbol search; using the offline symbol list")
        return StubQuoteProvider()

    @staticmethod
    def _build_insight_generator(settings: Settings) -> InsightGenerator:
        if settings.insight_provider == "openai":
            return OpenAIInsightGenerator(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                timeout=settings.openai_timeout_seconds,
            )
        return StubInsightGenerator()
