"""Transaction repository protocol."""

from typing import Protocol

from papertrade.domain.models import Transaction


class TransactionRepository(Protocol):
    """Interface for the append-only trade ledger."""

    def append(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction."""
        ...

    def list_by_user(self, user_id: str, limit: int = 50) -> list[Transaction]:
        """List a user's transactions, most recent first."""
        ...
