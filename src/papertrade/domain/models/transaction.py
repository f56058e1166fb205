"""Transaction domain model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from papertrade.domain.models.enums import TransactionType


@dataclass(frozen=True)
class Transaction:
    """
    Append-only record of an executed trade.

    Immutable once written; never updated or deleted.
    total_amount is always quantity x price.
    """

    txn_id: str
    user_id: str
    symbol: str
    txn_type: TransactionType
    quantity: int
    price: Decimal
    total_amount: Decimal
    date: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.txn_type, TransactionType):
            object.__setattr__(self, "txn_type", TransactionType(self.txn_type))
