"""Decimal precision helpers for money and price amounts."""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

# Balances, execution prices and trade totals
MONEY_QUANTUM = Decimal("0.0001")
# Weighted-average cost per share
PRICE_QUANTUM = Decimal("0.00000001")
# Presentation precision for valuation output
CENT = Decimal("0.01")

ZERO = Decimal("0")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without float representation noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"Not a number: {value!r}") from e


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def quantize_price(value: Decimal) -> Decimal:
    return value.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)


def quantize_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
