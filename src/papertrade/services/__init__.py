"""Service layer - business logic orchestration."""

from papertrade.services.locks import UserLockRegistry
from papertrade.services.events import EventDispatcher
from papertrade.services.trade_engine import TradeEngine
from papertrade.services.valuation_engine import ValuationEngine
from papertrade.services.analysis_cache import AnalysisCache
from papertrade.services.portfolio_service import PortfolioService
from papertrade.services.watchlist_service import WatchlistService

__all__ = [
    "UserLockRegistry",
    "EventDispatcher",
    "TradeEngine",
    "ValuationEngine",
    "AnalysisCache",
    "PortfolioService",
    "WatchlistService",
]
