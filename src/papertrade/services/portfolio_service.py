"""Portfolio service: the public operations of the paper-trading ledger."""

import logging
from decimal import Decimal
from functools import partial
from typing import Callable, Optional

from papertrade.core.exceptions import (
    AppError,
    ConcurrentModificationError,
    InsightGenerationError,
    PersistenceError,
    ValidationError,
)
from papertrade.domain.models import Portfolio, Transaction, TransactionType
from papertrade.domain.views import AnalysisResult, EnrichedPortfolio, TradeResult
from papertrade.providers.insight_generator import InsightGenerator
from papertrade.repositories.protocols import UnitOfWork
from papertrade.services.analysis_cache import AnalysisCache, build_analysis_prompt
from papertrade.services.events import EventDispatcher
from papertrade.services.trade_engine import TradeEngine
from papertrade.services.valuation_engine import ValuationEngine

logger = logging.getLogger(__name__)

PORTFOLIO_CREATED = "portfolio.created"

EMPTY_PORTFOLIO_MESSAGE = "Portfolio not found or empty. Add some stocks to get an analysis."
ANALYSIS_FAILED_MESSAGE = "Failed to generate analysis. Please try again later."


class PortfolioService:
    """
    Entry point for trading, valuation, history and analysis.

    Portfolios are provisioned lazily with the default starting balance the
    first time any operation touches a user. Trade failures come back as
    TradeResult(success=False) rather than exceptions.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        trade_engine: TradeEngine,
        valuation_engine: ValuationEngine,
        analysis_cache: AnalysisCache,
        insight_generator: InsightGenerator,
        events: Optional[EventDispatcher] = None,
        starting_balance: Decimal = Decimal("100000"),
        history_limit: int = 50,
    ):
        self._uow_factory = uow_factory
        self._trade_engine = trade_engine
        self._valuation_engine = valuation_engine
        self._analysis_cache = analysis_cache
        self._insight_generator = insight_generator
        self._events = events
        self._starting_balance = starting_balance
        self._history_limit = history_limit

    def get_portfolio(self, user_id: str) -> Portfolio:
        """Load the user's portfolio, creating it with the starting balance if absent."""
        if not user_id or not user_id.strip():
            raise ValidationError("user_id is required")

        with self._uow_factory() as uow:
            portfolio = uow.portfolios.load(user_id)
            if portfolio is not None:
                return portfolio
            try:
                portfolio = uow.portfolios.create(
                    Portfolio(user_id=user_id, balance=self._starting_balance)
                )
                uow.commit()
            except ConcurrentModificationError:
                # Another request provisioned it first
                portfolio = None

        if portfolio is None:
            with self._uow_factory() as uow:
                portfolio = uow.portfolios.load(user_id)
            if portfolio is None:
                raise PersistenceError(f"Portfolio for {user_id} could not be provisioned")
            return portfolio

        logger.info(f"Provisioned portfolio for {user_id} with {self._starting_balance}")
        if self._events is not None:
            self._events.submit(
                PORTFOLIO_CREATED,
                {"user_id": user_id, "balance": str(portfolio.balance)},
            )
        return portfolio

    def buy(self, user_id: str, symbol: str, quantity, price) -> TradeResult:
        return self._trade(TransactionType.BUY, user_id, symbol, quantity, price)

    def sell(self, user_id: str, symbol: str, quantity, price) -> TradeResult:
        return self._trade(TransactionType.SELL, user_id, symbol, quantity, price)

    def get_portfolio_with_metrics(self, user_id: str) -> EnrichedPortfolio:
        """Current portfolio valued at live quotes; degraded holdings are flagged."""
        return self._valuation_engine.enrich(self.get_portfolio(user_id))

    def get_transaction_history(self, user_id: str, limit: Optional[int] = None) -> list[Transaction]:
        """Most recent transactions first."""
        limit = self._history_limit if limit is None else limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValidationError(f"limit must be a positive integer: {limit!r}")
        self.get_portfolio(user_id)
        with self._uow_factory() as uow:
            return uow.transactions.list_by_user(user_id, limit)

    def analyze_portfolio(self, user_id: str) -> AnalysisResult:
        """
        AI analysis of the current holdings, served from cache when the
        holdings have not changed since the last analysis.
        """
        try:
            portfolio = self.get_portfolio(user_id)
        except AppError as e:
            logger.error(f"Analysis for {user_id} could not load portfolio: {e.message}")
            return AnalysisResult(success=False, message=ANALYSIS_FAILED_MESSAGE)

        if not portfolio.holdings:
            return AnalysisResult(success=False, message=EMPTY_PORTFOLIO_MESSAGE)

        prompt = build_analysis_prompt(portfolio)
        try:
            payload, cached = self._analysis_cache.get_or_compute(
                user_id,
                portfolio.holdings,
                partial(self._generate_insight, prompt),
            )
        except InsightGenerationError as e:
            logger.error(f"Analysis for {user_id} failed: {e.message}")
            return AnalysisResult(success=False, message=ANALYSIS_FAILED_MESSAGE)

        return AnalysisResult(success=True, analysis=payload, cached=cached)

    def _generate_insight(self, prompt: str) -> str:
        try:
            return self._insight_generator.generate(prompt)
        except InsightGenerationError:
            raise
        except Exception as e:
            logger.exception("Insight generator failed unexpectedly")
            raise InsightGenerationError("Insight generation failed") from e

    def _trade(
        self,
        txn_type: TransactionType,
        user_id: str,
        symbol: str,
        quantity,
        price,
    ) -> TradeResult:
        verb = "buy" if txn_type == TransactionType.BUY else "sell"
        try:
            self.get_portfolio(user_id)
            if txn_type == TransactionType.BUY:
                receipt = self._trade_engine.buy(user_id, symbol, quantity, price)
            else:
                receipt = self._trade_engine.sell(user_id, symbol, quantity, price)
        except PersistenceError as e:
            logger.exception(f"{verb} for {user_id} failed: {e.message}")
            return TradeResult(success=False, error=e.code, message=f"Failed to execute {verb} order")
        except AppError as e:
            return TradeResult(success=False, error=e.code, message=e.message)

        txn = receipt.transaction
        past = "bought" if txn_type == TransactionType.BUY else "sold"
        return TradeResult(
            success=True,
            message=f"Successfully {past} {txn.quantity} shares of {txn.symbol}",
            transaction=txn,
        )
