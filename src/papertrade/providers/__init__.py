"""Market data and insight providers."""

from papertrade.providers.quote_provider import QuoteProvider
from papertrade.providers.search_provider import SymbolSearchProvider
from papertrade.providers.insight_generator import InsightGenerator
from papertrade.providers.stub_provider import StubQuoteProvider, StubInsightGenerator
from papertrade.providers.finnhub_provider import FinnhubQuoteProvider
from papertrade.providers.openai_generator import OpenAIInsightGenerator

__all__ = [
    "QuoteProvider",
    "SymbolSearchProvider",
    "InsightGenerator",
    "StubQuoteProvider",
    "StubInsightGenerator",
    "FinnhubQuoteProvider",
    "OpenAIInsightGenerator",
]
