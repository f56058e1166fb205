"""View models for portfolio valuation and trade outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from papertrade.domain.models import Portfolio, Transaction, TradeState


@dataclass
class Quote:
    """Market quote data for a symbol."""

    symbol: str
    current_price: Decimal
    change_percent: Decimal
    company_name: str
    as_of: Optional[datetime] = None


@dataclass
class EnrichedHolding:
    """A stored holding blended with its live quote."""

    symbol: str
    quantity: int
    average_price: Decimal
    current_price: Decimal
    current_value: Decimal
    cost_basis: Decimal
    unrealized_gain: Decimal
    unrealized_gain_percent: Decimal
    change_percent: Decimal
    day_change: Decimal
    name: str
    quote_available: bool = True


@dataclass
class EnrichedPortfolio:
    """Portfolio with per-holding and aggregate market metrics."""

    user_id: str
    balance: Decimal
    total_invested: Decimal
    holdings: list[EnrichedHolding] = field(default_factory=list)
    total_equity: Decimal = field(default_factory=lambda: Decimal("0"))
    total_value: Decimal = field(default_factory=lambda: Decimal("0"))
    day_change: Decimal = field(default_factory=lambda: Decimal("0"))
    day_change_percent: Decimal = field(default_factory=lambda: Decimal("0"))
    as_of: Optional[datetime] = None


@dataclass
class TradeReceipt:
    """Outcome of an accepted trade, with the states it passed through."""

    transaction: Transaction
    portfolio: Portfolio
    history: list[TradeState] = field(default_factory=list)

    @property
    def state(self) -> TradeState:
        return self.history[-1] if self.history else TradeState.REQUESTED


@dataclass
class TradeResult:
    """Structured buy/sell result returned to callers."""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    transaction: Optional[Transaction] = None


@dataclass
class AnalysisResult:
    """Structured portfolio analysis result returned to callers."""

    success: bool
    analysis: Optional[dict[str, Any]] = None
    cached: bool = False
    message: Optional[str] = None
