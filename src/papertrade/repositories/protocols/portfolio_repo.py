"""Portfolio repository protocol."""

from typing import Protocol, Optional

from papertrade.domain.models import Portfolio


class PortfolioRepository(Protocol):
    """Interface for portfolio data access."""

    def load(self, user_id: str) -> Optional[Portfolio]:
        """Retrieve a user's portfolio with its holdings."""
        ...

    def create(self, portfolio: Portfolio) -> Portfolio:
        """Persist a new portfolio."""
        ...

    def save(self, portfolio: Portfolio) -> Portfolio:
        """
        Persist balance, totals and holdings.

        Compare-and-set on portfolio.version; raises ConcurrentModificationError
        if the stored version differs. Returns the portfolio with its new version.
        """
        ...
