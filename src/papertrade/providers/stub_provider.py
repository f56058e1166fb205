"""Stub quote provider and insight generator for offline/testing use."""

import json
import random
from decimal import Decimal

from papertrade.core.timezone import now_eastern
from papertrade.domain.views import Quote, StockSearchResult


# Deterministic fake quotes for common symbols: (price, change %, name)
_STUB_QUOTES: dict[str, tuple[Decimal, Decimal, str]] = {
    "AAPL": (Decimal("185.50"), Decimal("0.68"), "Apple Inc"),
    "GOOGL": (Decimal("142.75"), Decimal("0.88"), "Alphabet Inc"),
    "MSFT": (Decimal("378.25"), Decimal("0.38"), "Microsoft Corp"),
    "AMZN": (Decimal("178.50"), Decimal("0.71"), "Amazon.com Inc"),
    "TSLA": (Decimal("248.75"), Decimal("-0.54"), "Tesla Inc"),
    "NVDA": (Decimal("485.25"), Decimal("0.57"), "NVIDIA Corp"),
    "META": (Decimal("505.50"), Decimal("0.55"), "Meta Platforms Inc"),
    "SPY": (Decimal("485.25"), Decimal("0.24"), "SPDR S&P 500 ETF Trust"),
    "QQQ": (Decimal("418.75"), Decimal("0.30"), "Invesco QQQ Trust"),
    "VTI": (Decimal("252.30"), Decimal("0.20"), "Vanguard Total Stock Market ETF"),
}


class StubQuoteProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Uses predefined quotes for common symbols; derives a stable pseudo-random
    quote from the symbol for anything else.
    """

    def get_quote(self, symbol: str) -> Quote:
        upper_symbol = symbol.strip().upper()
        if upper_symbol in _STUB_QUOTES:
            price, change_percent, name = _STUB_QUOTES[upper_symbol]
        else:
            rng = random.Random(upper_symbol)
            price = Decimal(str(50 + rng.random() * 200)).quantize(Decimal("0.01"))
            change_percent = Decimal(str((rng.random() - 0.5) * 4)).quantize(Decimal("0.01"))
            name = upper_symbol

        return Quote(
            symbol=upper_symbol,
            current_price=price,
            change_percent=change_percent,
            company_name=name,
            as_of=now_eastern(),
        )

    def search(self, query: str) -> list[StockSearchResult]:
        """Case-insensitive match on the known symbols and company names."""
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            StockSearchResult(symbol=symbol, description=name)
            for symbol, (_, _, name) in sorted(_STUB_QUOTES.items())
            if needle in symbol.lower() or needle in name.lower()
        ]


class StubInsightGenerator:
    """Returns a canned, schema-valid analysis regardless of the prompt."""

    def generate(self, prompt: str) -> str:
        return json.dumps(
            {
                "summary": "Offline analysis: the portfolio is tracked but no model is configured.",
                "riskLevel": "Medium",
                "riskAnalysis": "Risk is estimated without live model output.",
                "composition": "Holdings are listed in the prompt.",
                "diversification": "Diversification cannot be assessed offline.",
                "suggestions": [
                    "Configure an insight provider for a full analysis.",
                ],
            }
        )
