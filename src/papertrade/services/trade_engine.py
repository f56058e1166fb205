"""Trade engine: validates and applies buy/sell mutations to a portfolio."""

import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Optional, Union

from papertrade.core.exceptions import (
    AppError,
    ConcurrentModificationError,
    InsufficientFundsError,
    InsufficientSharesError,
    PersistenceError,
    PortfolioNotFoundError,
    ValidationError,
)
from papertrade.core.money import ZERO, quantize_money, quantize_price, to_decimal
from papertrade.core.timezone import now_eastern
from papertrade.domain.models import (
    Holding,
    Portfolio,
    Transaction,
    TransactionType,
    TradeState,
)
from papertrade.domain.views import TradeReceipt
from papertrade.repositories.protocols import UnitOfWork
from papertrade.services.locks import UserLockRegistry

logger = logging.getLogger(__name__)

QuantityInput = Union[int, Decimal, str]
PriceInput = Union[Decimal, int, float, str]


def validate_trade_request(
    symbol: str,
    quantity: QuantityInput,
    price: PriceInput,
) -> tuple[str, int, Decimal]:
    """
    Normalize trade input: uppercase symbol, whole-share quantity, price
    quantized to the money precision.
    """
    if not symbol or not str(symbol).strip():
        raise ValidationError("Trade requires a symbol")
    symbol = str(symbol).strip().upper()

    if isinstance(quantity, bool):
        raise ValidationError("Quantity must be a whole number of shares")
    try:
        qty_decimal = to_decimal(quantity)
    except ValueError as e:
        raise ValidationError(f"Invalid quantity: {quantity!r}") from e
    if not qty_decimal.is_finite() or qty_decimal != qty_decimal.to_integral_value():
        raise ValidationError("Quantity must be a whole number of shares")
    qty = int(qty_decimal)
    if qty <= 0:
        raise ValidationError("Quantity must be greater than 0")

    try:
        price_decimal = to_decimal(price)
    except ValueError as e:
        raise ValidationError(f"Invalid price: {price!r}") from e
    if not price_decimal.is_finite() or price_decimal <= 0:
        raise ValidationError("Price must be greater than 0")
    price_decimal = quantize_money(price_decimal)
    if price_decimal <= 0:
        raise ValidationError("Price must be greater than 0")

    return symbol, qty, price_decimal


def apply_buy(portfolio: Portfolio, symbol: str, quantity: int, price: Decimal) -> Portfolio:
    """
    Return the portfolio after buying `quantity` shares at `price`.

    Raises InsufficientFundsError when the cost exceeds the balance.
    An existing holding gets a quantity-weighted average price.
    """
    cost = quantize_money(price * quantity)
    if portfolio.balance < cost:
        raise InsufficientFundsError(str(cost), str(portfolio.balance))

    holdings: list[Holding] = []
    merged = False
    for holding in portfolio.holdings:
        if holding.symbol == symbol:
            total_quantity = holding.quantity + quantity
            average_price = quantize_price(
                (holding.quantity * holding.average_price + cost) / total_quantity
            )
            holdings.append(Holding(symbol, total_quantity, average_price))
            merged = True
        else:
            holdings.append(replace(holding))
    if not merged:
        holdings.append(Holding(symbol, quantity, price))

    return replace(
        portfolio,
        balance=portfolio.balance - cost,
        total_invested=portfolio.total_invested + cost,
        holdings=sorted(holdings, key=lambda h: h.symbol),
    )


def apply_sell(portfolio: Portfolio, symbol: str, quantity: int, price: Decimal) -> Portfolio:
    """
    Return the portfolio after selling `quantity` shares at `price`.

    Raises InsufficientSharesError when the holding is missing or too small.
    The average price of the remaining shares is unchanged; total_invested
    drops by the cost basis of the shares sold. Closing a position also
    releases any rounding residue booked for it: total_invested is capped
    at the cost basis of the holdings that remain.
    """
    holding = portfolio.get_holding(symbol)
    if holding is None or holding.quantity < quantity:
        available = holding.quantity if holding else 0
        raise InsufficientSharesError(symbol, str(quantity), str(available))

    proceeds = quantize_money(price * quantity)
    sold_cost_basis = quantize_money(holding.average_price * quantity)
    remaining = holding.quantity - quantity

    holdings: list[Holding] = []
    for h in portfolio.holdings:
        if h.symbol != symbol:
            holdings.append(replace(h))
        elif remaining > 0:
            holdings.append(Holding(symbol, remaining, holding.average_price))

    total_invested = max(portfolio.total_invested - sold_cost_basis, ZERO)
    if remaining == 0:
        held_cost_basis = quantize_money(sum((h.cost_basis for h in holdings), ZERO))
        total_invested = min(total_invested, held_cost_basis)

    return replace(
        portfolio,
        balance=portfolio.balance + proceeds,
        total_invested=total_invested,
        holdings=holdings,
    )


class TradeEngine:
    """
    Applies trades to the ledger store.

    Every trade runs under the user's lock inside one unit of work: the
    portfolio save and the transaction append commit together or not at all.
    A version conflict from another writer restarts the trade from a fresh
    load, up to max_conflict_retries times.

    The engine never provisions portfolios; a missing one is PortfolioNotFoundError.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        locks: Optional[UserLockRegistry] = None,
        max_conflict_retries: int = 3,
    ):
        self._uow_factory = uow_factory
        self._locks = locks if locks is not None else UserLockRegistry()
        self._max_conflict_retries = max_conflict_retries

    def buy(
        self,
        user_id: str,
        symbol: str,
        quantity: QuantityInput,
        price: PriceInput,
    ) -> TradeReceipt:
        """Buy shares, debiting the cash balance."""
        return self._execute(TransactionType.BUY, user_id, symbol, quantity, price)

    def sell(
        self,
        user_id: str,
        symbol: str,
        quantity: QuantityInput,
        price: PriceInput,
    ) -> TradeReceipt:
        """Sell shares, crediting the cash balance."""
        return self._execute(TransactionType.SELL, user_id, symbol, quantity, price)

    def _execute(
        self,
        txn_type: TransactionType,
        user_id: str,
        symbol: str,
        quantity: QuantityInput,
        price: PriceInput,
    ) -> TradeReceipt:
        label = f"{txn_type.value} {user_id}/{symbol}"
        logger.debug(f"Trade {label}: {TradeState.REQUESTED.value}")
        try:
            symbol, qty, trade_price = validate_trade_request(symbol, quantity, price)
        except ValidationError as e:
            self._log_rejection(label, e)
            raise

        with self._locks.hold(user_id):
            attempts = self._max_conflict_retries + 1
            for attempt in range(1, attempts + 1):
                try:
                    return self._attempt(txn_type, user_id, symbol, qty, trade_price)
                except ConcurrentModificationError as e:
                    logger.warning(f"Trade {label} conflict (attempt {attempt}/{attempts}): {e.message}")
                except AppError as e:
                    self._log_rejection(label, e)
                    raise

        error = PersistenceError(f"Portfolio {user_id} kept changing; trade abandoned")
        self._log_rejection(label, error)
        raise error

    def _attempt(
        self,
        txn_type: TransactionType,
        user_id: str,
        symbol: str,
        quantity: int,
        price: Decimal,
    ) -> TradeReceipt:
        history = [TradeState.REQUESTED]
        with self._uow_factory() as uow:
            portfolio = uow.portfolios.load(user_id)
            if portfolio is None:
                raise PortfolioNotFoundError(user_id)

            if txn_type == TransactionType.BUY:
                updated = apply_buy(portfolio, symbol, quantity, price)
            else:
                updated = apply_sell(portfolio, symbol, quantity, price)
            history.append(TradeState.VALIDATED)

            saved = uow.portfolios.save(updated)
            history.append(TradeState.APPLIED)

            transaction = uow.transactions.append(
                Transaction(
                    txn_id=str(uuid.uuid4()),
                    user_id=user_id,
                    symbol=symbol,
                    txn_type=txn_type,
                    quantity=quantity,
                    price=price,
                    total_amount=quantize_money(price * quantity),
                    date=now_eastern(),
                )
            )
            history.append(TradeState.LOGGED)

            uow.commit()
            history.append(TradeState.CONFIRMED)

        logger.info(
            f"Trade confirmed: {txn_type.value} {quantity} {symbol} @ {price} "
            f"for {user_id} (balance {saved.balance})"
        )
        return TradeReceipt(transaction=transaction, portfolio=saved, history=history)

    @staticmethod
    def _log_rejection(label: str, error: AppError) -> None:
        if isinstance(error, PersistenceError):
            logger.error(f"Trade {label}: {TradeState.REJECTED.value} ({error.code}: {error.message})")
        else:
            logger.info(f"Trade {label}: {TradeState.REJECTED.value} ({error.code}: {error.message})")
