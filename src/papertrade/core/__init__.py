"""Core utilities and shared functionality."""

from papertrade.core.timezone import now_eastern, to_eastern, EASTERN_TZ
from papertrade.core.exceptions import (
    AppError,
    ValidationError,
    PortfolioNotFoundError,
    InsufficientFundsError,
    InsufficientSharesError,
    PersistenceError,
    ConcurrentModificationError,
    QuoteError,
    QuoteNotFoundError,
    QuoteRateLimitedError,
    QuoteUnavailableError,
    CacheUnavailableError,
    InsightGenerationError,
    DuplicateWatchlistItemError,
)

__all__ = [
    "now_eastern",
    "to_eastern",
    "EASTERN_TZ",
    "AppError",
    "ValidationError",
    "PortfolioNotFoundError",
    "InsufficientFundsError",
    "InsufficientSharesError",
    "PersistenceError",
    "ConcurrentModificationError",
    "QuoteError",
    "QuoteNotFoundError",
    "QuoteRateLimitedError",
    "QuoteUnavailableError",
    "CacheUnavailableError",
    "InsightGenerationError",
    "DuplicateWatchlistItemError",
]
