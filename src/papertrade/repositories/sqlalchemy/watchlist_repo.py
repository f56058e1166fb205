"""SQLAlchemy implementation of WatchlistRepository."""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from papertrade.core.exceptions import DuplicateWatchlistItemError, PersistenceError
from papertrade.core.timezone import now_eastern, to_eastern
from papertrade.domain.models import WatchlistItem
from papertrade.repositories.sqlalchemy.orm_models import WatchlistORM


class SqlAlchemyWatchlistRepository:
    """SQLAlchemy-backed watchlist repository. Writes flush; the unit of work commits."""

    def __init__(self, db: Session):
        self._db = db

    def add(self, item: WatchlistItem) -> WatchlistItem:
        """Persist a new watchlist item."""
        try:
            existing = self._find(item.user_id, item.symbol)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read watchlist for {item.user_id}") from e
        if existing is not None:
            raise DuplicateWatchlistItemError(item.user_id, item.symbol)

        orm_item = WatchlistORM(
            user_id=item.user_id,
            symbol=item.symbol,
            company=item.company,
            added_at=to_eastern(item.added_at or now_eastern()).replace(tzinfo=None),
        )
        self._db.add(orm_item)
        try:
            self._db.flush()
        except IntegrityError as e:
            # Another request added the same symbol first
            raise DuplicateWatchlistItemError(item.user_id, item.symbol) from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to add {item.symbol} to watchlist") from e
        return self._to_domain(orm_item)

    def remove(self, user_id: str, symbol: str) -> bool:
        """Delete a watchlist item if present."""
        try:
            orm_item = self._find(user_id, symbol)
            if orm_item is None:
                return False
            self._db.delete(orm_item)
            self._db.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to remove {symbol} from watchlist") from e
        return True

    def list_by_user(self, user_id: str) -> list[WatchlistItem]:
        """List a user's watchlist, most recently added first."""
        try:
            orm_items = (
                self._db.query(WatchlistORM)
                .filter(WatchlistORM.user_id == user_id)
                .order_by(WatchlistORM.added_at.desc(), WatchlistORM.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list watchlist for {user_id}") from e
        return [self._to_domain(i) for i in orm_items]

    def _find(self, user_id: str, symbol: str):
        return (
            self._db.query(WatchlistORM)
            .filter(WatchlistORM.user_id == user_id, WatchlistORM.symbol == symbol)
            .one_or_none()
        )

    @staticmethod
    def _to_domain(orm: WatchlistORM) -> WatchlistItem:
        """Convert ORM model to domain model."""
        return WatchlistItem(
            user_id=orm.user_id,
            symbol=orm.symbol,
            company=orm.company,
            added_at=to_eastern(orm.added_at),
        )
