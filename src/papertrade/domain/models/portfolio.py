"""Portfolio and Holding domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from papertrade.core.exceptions import ValidationError


@dataclass
class Holding:
    """
    A position in a single symbol.

    Quantity is always positive; a fully sold position is removed from the
    portfolio rather than stored with zero shares.
    """

    symbol: str
    quantity: int
    average_price: Decimal

    def __post_init__(self) -> None:
        if not self.symbol or not self.symbol.strip():
            raise ValidationError("Holding requires a symbol")
        self.symbol = self.symbol.strip().upper()
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError(f"Holding quantity must be an integer: {self.quantity!r}")
        if self.quantity <= 0:
            raise ValidationError(f"Holding {self.symbol} must have quantity > 0")
        if not isinstance(self.average_price, Decimal):
            self.average_price = Decimal(str(self.average_price))
        if not self.average_price.is_finite() or self.average_price < 0:
            raise ValidationError(f"Holding {self.symbol} has invalid average price")

    @property
    def cost_basis(self) -> Decimal:
        """Amount originally paid for the currently held shares."""
        return self.average_price * self.quantity


@dataclass
class Portfolio:
    """
    Cash balance plus equity holdings for one user.

    Mutated only by the trade engine. `version` increases on every save and is
    the compare-and-set token for concurrent writers.
    """

    user_id: str
    balance: Decimal
    total_invested: Decimal = field(default_factory=lambda: Decimal("0"))
    holdings: list[Holding] = field(default_factory=list)
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValidationError("Portfolio requires a user_id")
        if self.balance < 0:
            raise ValidationError(f"Portfolio {self.user_id} has negative balance")
        symbols = [h.symbol for h in self.holdings]
        if len(symbols) != len(set(symbols)):
            raise ValidationError(f"Portfolio {self.user_id} has duplicate holdings")

    def get_holding(self, symbol: str) -> Optional[Holding]:
        """Return the holding for a symbol, if any."""
        symbol = symbol.upper()
        for holding in self.holdings:
            if holding.symbol == symbol:
                return holding
        return None
