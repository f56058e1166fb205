"""
Valuation engine: blends stored holdings with live quotes.

Quotes are fetched concurrently with a shared deadline. A symbol whose quote
fails or misses the deadline is shown at its average price with zero
gain and zero day change rather than failing the whole valuation.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from decimal import Decimal
from typing import Optional

from papertrade.core.exceptions import (
    QuoteError,
    QuoteNotFoundError,
    QuoteRateLimitedError,
    QuoteUnavailableError,
)
from papertrade.core.money import ZERO, quantize_cents, quantize_money
from papertrade.core.timezone import now_eastern
from papertrade.domain.models import Holding, Portfolio
from papertrade.domain.views import EnrichedHolding, EnrichedPortfolio, Quote
from papertrade.providers.quote_provider import QuoteProvider

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


class ValuationEngine:
    """Computes market value, unrealized gain and day change for a portfolio."""

    def __init__(
        self,
        provider: QuoteProvider,
        timeout_seconds: float = 5.0,
        max_attempts: int = 2,
        max_workers: int = 8,
        retry_backoff_seconds: float = 0.2,
    ):
        self._provider = provider
        self._timeout = timeout_seconds
        self._max_attempts = max(1, max_attempts)
        self._max_workers = max(1, max_workers)
        self._retry_backoff = retry_backoff_seconds

    def enrich(self, portfolio: Portfolio) -> EnrichedPortfolio:
        """
        Value every holding at its live quote and aggregate the totals.

        total_value = balance + sum(current_value). day_change_percent is
        relative to the start-of-day value (total_value - day_change) and is
        0 when that value is not positive.
        """
        quotes = self.fetch_quotes([h.symbol for h in portfolio.holdings])

        enriched: list[EnrichedHolding] = []
        total_equity = ZERO
        day_change = ZERO
        for holding in portfolio.holdings:
            view, current_value, holding_day_change = self._enrich_holding(
                holding, quotes.get(holding.symbol)
            )
            enriched.append(view)
            total_equity += current_value
            day_change += holding_day_change

        total_value = portfolio.balance + total_equity
        start_of_day_value = total_value - day_change
        if start_of_day_value > 0:
            day_change_percent = day_change / start_of_day_value * HUNDRED
        else:
            day_change_percent = ZERO
        if not day_change_percent.is_finite():
            day_change_percent = ZERO

        return EnrichedPortfolio(
            user_id=portfolio.user_id,
            balance=quantize_cents(portfolio.balance),
            total_invested=quantize_cents(portfolio.total_invested),
            holdings=enriched,
            total_equity=quantize_cents(total_equity),
            total_value=quantize_cents(total_value),
            day_change=quantize_cents(day_change),
            day_change_percent=quantize_cents(day_change_percent),
            as_of=now_eastern(),
        )

    def fetch_quotes(self, symbols: list[str]) -> dict[str, Optional[Quote]]:
        """
        Fetch quotes for all symbols in parallel.

        Returns symbol -> Quote, or None for symbols that failed or missed
        the deadline. Never raises for provider failures.
        """
        if not symbols:
            return {}

        executor = ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(symbols)),
            thread_name_prefix="quote",
        )
        try:
            futures = {executor.submit(self._fetch_with_retry, s): s for s in symbols}
            _, not_done = wait(futures, timeout=self._timeout)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        results: dict[str, Optional[Quote]] = {}
        for future, symbol in futures.items():
            if future in not_done:
                future.cancel()
                logger.warning(f"Quote for {symbol} timed out after {self._timeout}s")
                results[symbol] = None
                continue
            try:
                results[symbol] = self._checked(symbol, future.result())
            except QuoteError as e:
                logger.warning(f"Quote for {symbol} failed: {e.message}")
                results[symbol] = None
            except Exception as e:
                logger.warning(f"Quote for {symbol} failed unexpectedly: {e}")
                results[symbol] = None
        return results

    def _fetch_with_retry(self, symbol: str) -> Quote:
        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._provider.get_quote(symbol)
            except QuoteNotFoundError:
                raise
            except (QuoteRateLimitedError, QuoteUnavailableError) as e:
                if attempt >= self._max_attempts:
                    raise
                logger.info(f"Retrying quote for {symbol} ({attempt}/{self._max_attempts}): {e.message}")
                if self._retry_backoff > 0:
                    time.sleep(self._retry_backoff * attempt)
        raise QuoteUnavailableError(symbol)

    @staticmethod
    def _checked(symbol: str, quote: Quote) -> Optional[Quote]:
        price = quote.current_price
        change = quote.change_percent
        if not isinstance(price, Decimal) or not price.is_finite() or price <= 0:
            logger.warning(f"Discarding quote for {symbol}: invalid price {price!r}")
            return None
        if not isinstance(change, Decimal) or not change.is_finite():
            logger.warning(f"Discarding quote for {symbol}: invalid change {change!r}")
            return None
        return quote

    def _enrich_holding(
        self,
        holding: Holding,
        quote: Optional[Quote],
    ) -> tuple[EnrichedHolding, Decimal, Decimal]:
        """Return the holding view plus its unrounded current value and day change."""
        quantity = Decimal(holding.quantity)
        cost_basis = holding.average_price * quantity

        if quote is None:
            view = EnrichedHolding(
                symbol=holding.symbol,
                quantity=holding.quantity,
                average_price=holding.average_price,
                current_price=quantize_money(holding.average_price),
                current_value=quantize_cents(cost_basis),
                cost_basis=quantize_cents(cost_basis),
                unrealized_gain=ZERO,
                unrealized_gain_percent=ZERO,
                change_percent=ZERO,
                day_change=ZERO,
                name=holding.symbol,
                quote_available=False,
            )
            return view, cost_basis, ZERO

        current_value = quote.current_price * quantity
        gain = current_value - cost_basis
        gain_percent = gain / cost_basis * HUNDRED if cost_basis > 0 else ZERO
        day_change = self._day_change(holding.symbol, quote, quantity)

        view = EnrichedHolding(
            symbol=holding.symbol,
            quantity=holding.quantity,
            average_price=holding.average_price,
            current_price=quantize_money(quote.current_price),
            current_value=quantize_cents(current_value),
            cost_basis=quantize_cents(cost_basis),
            unrealized_gain=quantize_cents(gain),
            unrealized_gain_percent=quantize_cents(gain_percent),
            change_percent=quantize_cents(quote.change_percent),
            day_change=quantize_cents(day_change),
            name=quote.company_name or holding.symbol,
        )
        return view, current_value, day_change

    @staticmethod
    def _day_change(symbol: str, quote: Quote, quantity: Decimal) -> Decimal:
        # previous close = price / (1 + pct/100); undefined at pct <= -100
        factor = 1 + quote.change_percent / HUNDRED
        if factor <= 0:
            logger.warning(f"Ignoring day change for {symbol}: change {quote.change_percent}%")
            return ZERO
        previous_price = quote.current_price / factor
        return (quote.current_price - previous_price) * quantity
