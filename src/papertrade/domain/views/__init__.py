"""View models for service outputs."""

from papertrade.domain.views.portfolio import (
    Quote,
    EnrichedHolding,
    EnrichedPortfolio,
    TradeReceipt,
    TradeResult,
    AnalysisResult,
)
from papertrade.domain.views.analysis import PortfolioAnalysis
from papertrade.domain.views.watchlist import (
    WatchlistEntry,
    WatchlistResult,
    StockSearchResult,
)

__all__ = [
    "Quote",
    "EnrichedHolding",
    "EnrichedPortfolio",
    "TradeReceipt",
    "TradeResult",
    "AnalysisResult",
    "PortfolioAnalysis",
    "WatchlistEntry",
    "WatchlistResult",
    "StockSearchResult",
]
