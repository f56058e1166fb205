"""Paper trading portfolio service: ledger, valuation and cached AI analysis."""

__version__ = "0.1.0"
