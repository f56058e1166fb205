"""Quote provider protocol."""

from typing import Protocol

from papertrade.domain.views import Quote


class QuoteProvider(Protocol):
    """
    Protocol for market quote providers.

    Implementations return the current price, today's percent change and the
    company name for one symbol. Failures raise a QuoteError subclass:
    QuoteNotFoundError, QuoteRateLimitedError or QuoteUnavailableError.
    """

    def get_quote(self, symbol: str) -> Quote:
        """Fetch the latest quote for a symbol."""
        ...
