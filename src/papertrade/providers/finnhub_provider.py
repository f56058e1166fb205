"""Finnhub client for real-time quotes."""

import logging
from decimal import Decimal
from typing import Any, Optional

import httpx

from papertrade.core.exceptions import (
    QuoteNotFoundError,
    QuoteRateLimitedError,
    QuoteUnavailableError,
)
from papertrade.core.timezone import now_eastern
from papertrade.domain.views import Quote, StockSearchResult

logger = logging.getLogger(__name__)


class FinnhubQuoteProvider:
    """
    Quote provider backed by the Finnhub REST API.

    Uses /quote for price and percent change and /stock/profile2 for the
    company name. A missing profile is not an error; the symbol stands in.
    /search backs symbol lookup.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://finnhub.io/api/v1",
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.strip().upper()
        data = self._get_json("/quote", {"symbol": symbol}, symbol)

        current_price = data.get("c")
        change_percent = data.get("dp")
        # Finnhub answers unknown symbols with an all-zero quote
        if not current_price:
            raise QuoteNotFoundError(symbol)

        try:
            price = Decimal(str(current_price))
            pct = Decimal(str(change_percent)) if change_percent is not None else Decimal("0")
        except (ArithmeticError, ValueError) as e:
            raise QuoteUnavailableError(symbol, f"malformed quote: {data}") from e

        return Quote(
            symbol=symbol,
            current_price=price,
            change_percent=pct,
            company_name=self._company_name(symbol),
            as_of=now_eastern(),
        )

    def _company_name(self, symbol: str) -> str:
        try:
            profile = self._get_json("/stock/profile2", {"symbol": symbol}, symbol)
        except (QuoteNotFoundError, QuoteUnavailableError, QuoteRateLimitedError) as e:
            logger.debug(f"No profile for {symbol}: {e.message}")
            return symbol
        return (profile.get("name") or "").strip() or symbol

    def search(self, query: str) -> list[StockSearchResult]:
        query = query.strip()
        if not query:
            return []
        data = self._get_json("/search", {"q": query}, query)

        results = []
        for entry in data.get("result") or []:
            if not isinstance(entry, dict) or not entry.get("symbol"):
                continue
            results.append(
                StockSearchResult(
                    symbol=str(entry["symbol"]),
                    description=str(entry.get("description") or ""),
                )
            )
        return results

    def _get_json(self, path: str, params: dict[str, str], symbol: str) -> dict[str, Any]:
        params = {**params, "token": self.api_key}
        try:
            response = self._client.get(f"{self.base_url}{path}", params=params)
        except httpx.TimeoutException as e:
            raise QuoteUnavailableError(symbol, "timed out") from e
        except httpx.HTTPError as e:
            raise QuoteUnavailableError(symbol, str(e)) from e

        if response.status_code == 429:
            raise QuoteRateLimitedError(symbol)
        if response.status_code == 404:
            raise QuoteNotFoundError(symbol)
        if response.status_code >= 400:
            raise QuoteUnavailableError(symbol, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise QuoteUnavailableError(symbol, "invalid JSON") from e
        if not isinstance(data, dict):
            raise QuoteUnavailableError(symbol, "unexpected payload")
        return data

    def close(self) -> None:
        self._client.close()
