"""
Content-addressed cache for AI portfolio analyses.

The key is derived from the canonicalized holdings, so an analysis is reused
until the holdings change. Cache outages only cost a regeneration; they
never fail the request.
"""

import hashlib
import json
import logging
import re
from typing import Any, Callable, Iterable, Optional

from pydantic import ValidationError as SchemaValidationError

from papertrade.core.exceptions import CacheUnavailableError, InsightGenerationError
from papertrade.core.money import quantize_cents, quantize_price
from papertrade.domain.models import Holding, Portfolio
from papertrade.domain.views import PortfolioAnalysis
from papertrade.repositories.protocols import AnalysisCacheStore

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "portfolio-analysis"
DEFAULT_TTL_SECONDS = 86400

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)

ANALYSIS_PROMPT_TEMPLATE = """You are an expert financial advisor and portfolio analyst.
Analyze the following stock portfolio for a retail investor:

{holdings_summary}

Current Cash Balance: ${balance}
Total Invested: ${total_invested}

Provide a comprehensive analysis in strict JSON format. Do not wrap it in markdown. Reply with the raw JSON object only.

The JSON structure must be exactly:
{{
  "summary": "Brief 1-2 sentence overall summary of the portfolio status.",
  "riskLevel": "Low" | "Medium" | "High",
  "riskAnalysis": "Detailed explanation of the risk level (approx 50 words).",
  "composition": "Analysis of what they own (approx 50 words).",
  "diversification": "Analysis of sector/asset diversification (approx 50 words).",
  "suggestions": ["Suggestion 1", "Suggestion 2", "Suggestion 3"]
}}

Keep the tone professional yet encouraging.
"""


def holdings_signature(holdings: Iterable[Holding]) -> str:
    """Canonical JSON of the holdings: independent of order and float formatting."""
    entries = sorted(
        (
            {"s": h.symbol, "q": h.quantity, "p": format(quantize_price(h.average_price), "f")}
            for h in holdings
        ),
        key=lambda entry: entry["s"],
    )
    return json.dumps(entries, sort_keys=True, separators=(",", ":"))


def make_cache_key(user_id: str, holdings: Iterable[Holding]) -> str:
    digest = hashlib.sha256(holdings_signature(holdings).encode("utf-8")).hexdigest()
    return f"{CACHE_KEY_PREFIX}:{user_id}:{digest}"


def build_analysis_prompt(portfolio: Portfolio) -> str:
    holdings_summary = "\n".join(
        f"- {h.symbol}: {h.quantity} shares @ ${quantize_cents(h.average_price)}"
        for h in portfolio.holdings
    )
    return ANALYSIS_PROMPT_TEMPLATE.format(
        holdings_summary=holdings_summary,
        balance=quantize_cents(portfolio.balance),
        total_invested=quantize_cents(portfolio.total_invested),
    )


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE.sub("", text).strip()


def parse_analysis(raw_text: str) -> dict[str, Any]:
    """
    Turn generator output into a validated analysis payload.

    Raises InsightGenerationError when the text is not JSON or does not
    match the PortfolioAnalysis shape.
    """
    cleaned = strip_code_fences(raw_text or "")
    try:
        analysis = PortfolioAnalysis.model_validate_json(cleaned)
    except SchemaValidationError as e:
        logger.warning(f"Discarding malformed analysis output: {e.error_count()} error(s)")
        raise InsightGenerationError("Insight generator returned malformed analysis") from e
    return analysis.model_dump()


class AnalysisCache:
    """Memoizes analyses per (user, holdings) with a fixed TTL."""

    def __init__(self, store: AnalysisCacheStore, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self._store = store
        self._ttl = ttl_seconds

    def get_or_compute(
        self,
        user_id: str,
        holdings: Iterable[Holding],
        compute_fn: Callable[[], str],
    ) -> tuple[dict[str, Any], bool]:
        """
        Return (payload, cached).

        On a miss compute_fn() is called and its output parsed; only a valid
        payload is stored. InsightGenerationError from generation or parsing
        propagates and nothing is cached.
        """
        key = make_cache_key(user_id, holdings)

        cached = self._lookup(key)
        if cached is not None:
            logger.info(f"Analysis cache hit for {user_id}")
            return cached, True

        payload = parse_analysis(compute_fn())
        self._save(key, payload)
        return payload, False

    def _lookup(self, key: str) -> Optional[dict[str, Any]]:
        try:
            raw = self._store.get(key)
        except CacheUnavailableError as e:
            logger.warning(f"Analysis cache lookup failed, regenerating: {e.message}")
            return None
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning(f"Ignoring unreadable cache entry {key}")
            return None
        try:
            analysis = PortfolioAnalysis.model_validate(payload)
        except SchemaValidationError:
            logger.warning(f"Ignoring cache entry {key} that is not a valid analysis")
            return None
        return analysis.model_dump()

    def _save(self, key: str, payload: dict[str, Any]) -> None:
        try:
            self._store.set_with_expiry(key, json.dumps(payload), self._ttl)
        except CacheUnavailableError as e:
            logger.warning(f"Analysis cache store failed: {e.message}")
