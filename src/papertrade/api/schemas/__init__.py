"""Pydantic schemas for API request/response."""

from papertrade.api.schemas.portfolio import (
    TradeRequest,
    TradeResponse,
    TransactionResponse,
    TransactionListResponse,
    HoldingResponse,
    PortfolioResponse,
    AnalysisResponse,
)
from papertrade.api.schemas.watchlist import (
    WatchlistAddRequest,
    WatchlistResultResponse,
    WatchlistEntryResponse,
    WatchlistResponse,
    StockSearchResultResponse,
    StockSearchResponse,
)

__all__ = [
    "TradeRequest",
    "TradeResponse",
    "TransactionResponse",
    "TransactionListResponse",
    "HoldingResponse",
    "PortfolioResponse",
    "AnalysisResponse",
    "WatchlistAddRequest",
    "WatchlistResultResponse",
    "WatchlistEntryResponse",
    "WatchlistResponse",
    "StockSearchResultResponse",
    "StockSearchResponse",
]
