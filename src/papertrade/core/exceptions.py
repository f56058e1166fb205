"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "AppError"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="ValidationError")


class PortfolioNotFoundError(AppError):
    """Raised when a user has no stored portfolio."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Portfolio not found: {user_id}", code="PortfolioNotFound")


class InsufficientFundsError(AppError):
    """Raised when a buy costs more than the available balance."""

    def __init__(self, requested: str, available: str):
        super().__init__(
            f"Insufficient funds: requested {requested}, available {available}",
            code="InsufficientFunds",
        )


class InsufficientSharesError(AppError):
    """Raised when attempting to sell more shares than owned."""

    def __init__(self, symbol: str, requested: str, available: str):
        super().__init__(
            f"Insufficient shares of {symbol}: requested {requested}, available {available}",
            code="InsufficientShares",
        )


class PersistenceError(AppError):
    """Raised when the ledger store cannot complete an operation."""

    def __init__(self, message: str):
        super().__init__(message, code="PersistenceError")


class ConcurrentModificationError(AppError):
    """Raised when a portfolio was saved by another writer since it was loaded."""

    def __init__(self, user_id: str, expected_version: int):
        self.user_id = user_id
        self.expected_version = expected_version
        super().__init__(
            f"Portfolio {user_id} changed concurrently (expected version {expected_version})",
            code="ConcurrentModification",
        )


class QuoteError(AppError):
    """Base class for quote provider failures (degradable)."""

    def __init__(self, symbol: str, message: str):
        self.symbol = symbol
        super().__init__(message, code="QuoteUnavailable")


class QuoteNotFoundError(QuoteError):
    """The provider has no quote for the symbol."""

    def __init__(self, symbol: str):
        super().__init__(symbol, f"No quote for {symbol}")


class QuoteRateLimitedError(QuoteError):
    """The provider rejected the request due to rate limiting."""

    def __init__(self, symbol: str):
        super().__init__(symbol, f"Rate limited while quoting {symbol}")


class QuoteUnavailableError(QuoteError):
    """The provider could not be reached or returned garbage."""

    def __init__(self, symbol: str, reason: str = "provider unavailable"):
        super().__init__(symbol, f"Quote unavailable for {symbol}: {reason}")


class CacheUnavailableError(AppError):
    """Raised by cache stores when the backing service is unreachable."""

    def __init__(self, message: str):
        super().__init__(message, code="CacheUnavailable")


class InsightGenerationError(AppError):
    """Raised when the insight generator fails or returns unusable output."""

    def __init__(self, message: str):
        super().__init__(message, code="InsightGenerationError")


class DuplicateWatchlistItemError(AppError):
    """Raised when a symbol is already on the user's watchlist."""

    def __init__(self, user_id: str, symbol: str):
        self.user_id = user_id
        self.symbol = symbol
        super().__init__("Stock already in watchlist", code="DuplicateWatchlistItem")
