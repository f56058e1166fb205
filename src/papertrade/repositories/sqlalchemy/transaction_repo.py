"""SQLAlchemy implementation of TransactionRepository."""

from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from papertrade.core.exceptions import PersistenceError
from papertrade.core.timezone import to_eastern
from papertrade.domain.models import Transaction
from papertrade.repositories.sqlalchemy.orm_models import TransactionORM


class SqlAlchemyTransactionRepository:
    """SQLAlchemy-backed append-only transaction repository."""

    def __init__(self, db: Session):
        self._db = db

    def append(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction."""
        orm_txn = self._to_orm(transaction)
        self._db.add(orm_txn)
        try:
            self._db.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to append transaction {transaction.txn_id}") from e
        return self._to_domain(orm_txn)

    def list_by_user(self, user_id: str, limit: int = 50) -> list[Transaction]:
        """List a user's transactions, most recent first."""
        try:
            orm_txns = (
                self._db.query(TransactionORM)
                .filter(TransactionORM.user_id == user_id)
                .order_by(TransactionORM.date.desc(), TransactionORM.id.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list transactions for {user_id}") from e
        return [self._to_domain(t) for t in orm_txns]

    @staticmethod
    def _to_orm(txn: Transaction) -> TransactionORM:
        """Convert domain model to ORM model."""
        return TransactionORM(
            txn_id=txn.txn_id,
            user_id=txn.user_id,
            symbol=txn.symbol,
            txn_type=txn.txn_type,
            quantity=txn.quantity,
            price=txn.price,
            total_amount=txn.total_amount,
            date=to_eastern(txn.date).replace(tzinfo=None),
        )

    @staticmethod
    def _to_domain(orm: TransactionORM) -> Transaction:
        """Convert ORM model to domain model."""
        return Transaction(
            txn_id=orm.txn_id,
            user_id=orm.user_id,
            symbol=orm.symbol,
            txn_type=orm.txn_type,
            quantity=int(orm.quantity),
            price=Decimal(str(orm.price)),
            total_amount=Decimal(str(orm.total_amount)),
            date=to_eastern(orm.date),
        )
