"""
Integration tests for the SQLAlchemy repositories and unit of work.

Tests cover:
- Portfolio create/load/save round trips, including holding sync
- Version compare-and-set on save
- Transaction listing order and limits
- Watchlist add, duplicate rejection, ordering and removal
- Unit of work commit and rollback
"""

import pytest
from decimal import Decimal

from papertrade.domain.models import Holding, Portfolio, Transaction, TransactionType, WatchlistItem
from papertrade.core.exceptions import (
    ConcurrentModificationError,
    DuplicateWatchlistItemError,
    PortfolioNotFoundError,
)

from tests.conftest import eastern_datetime, list_transactions, load_portfolio


def make_transaction(txn_id: str, symbol: str = "AAPL", day: int = 1, user_id: str = "alice") -> Transaction:
    return Transaction(
        txn_id=txn_id,
        user_id=user_id,
        symbol=symbol,
        txn_type=TransactionType.BUY,
        quantity=1,
        price=Decimal("10"),
        total_amount=Decimal("10"),
        date=eastern_datetime(2024, 6, day),
    )


# =============================================================================
# PORTFOLIO REPOSITORY
# =============================================================================


class TestPortfolioRepository:
    """Portfolio persistence."""

    def test_create_and_load(self, portfolio_factory, uow_factory):
        """
        GIVEN a portfolio with two holdings
        WHEN it is stored and loaded
        THEN balances, holdings and precision survive
        """
        portfolio_factory(
            balance="98500.1234",
            holdings=[
                Holding("MSFT", 2, Decimal("300")),
                Holding("AAPL", 3, Decimal("153.33333333")),
            ],
        )

        loaded = load_portfolio(uow_factory, "alice")

        assert loaded.balance == Decimal("98500.1234")
        assert [h.symbol for h in loaded.holdings] == ["AAPL", "MSFT"]
        assert loaded.holdings[0].average_price == Decimal("153.33333333")
        assert loaded.version == 1
        assert loaded.created_at is not None

    def test_load_missing_returns_none(self, uow_factory):
        assert load_portfolio(uow_factory, "nobody") is None

    def test_duplicate_create_is_conflict(self, portfolio_factory):
        portfolio_factory()

        with pytest.raises(ConcurrentModificationError):
            portfolio_factory()

    def test_save_syncs_holdings_and_bumps_version(self, portfolio_factory, uow_factory):
        """
        GIVEN a stored portfolio holding AAPL and MSFT
        WHEN it is saved with MSFT removed, AAPL changed and TSLA added
        THEN the stored holdings match and the version increases
        """
        created = portfolio_factory(
            holdings=[Holding("AAPL", 3, Decimal("100")), Holding("MSFT", 2, Decimal("300"))]
        )
        created.balance = Decimal("90000")
        created.holdings = [Holding("AAPL", 5, Decimal("110")), Holding("TSLA", 1, Decimal("200"))]

        with uow_factory() as uow:
            saved = uow.portfolios.save(created)
            uow.commit()

        loaded = load_portfolio(uow_factory, "alice")
        assert saved.version == created.version + 1
        assert loaded.version == saved.version
        assert loaded.balance == Decimal("90000")
        assert [(h.symbol, h.quantity) for h in loaded.holdings] == [("AAPL", 5), ("TSLA", 1)]

    def test_save_with_stale_version_is_conflict(self, portfolio_factory, uow_factory):
        """
        GIVEN two copies of the same loaded portfolio
        WHEN both are saved in turn
        THEN the second save raises ConcurrentModificationError
        """
        first = portfolio_factory()
        second = load_portfolio(uow_factory, "alice")

        first.balance = Decimal("1")
        with uow_factory() as uow:
            uow.portfolios.save(first)
            uow.commit()

        second.balance = Decimal("2")
        with uow_factory() as uow:
            with pytest.raises(ConcurrentModificationError):
                uow.portfolios.save(second)

        assert load_portfolio(uow_factory, "alice").balance == Decimal("1")

    def test_save_missing_portfolio(self, uow_factory):
        with uow_factory() as uow:
            with pytest.raises(PortfolioNotFoundError):
                uow.portfolios.save(Portfolio(user_id="ghost", balance=Decimal("1"), version=1))


# =============================================================================
# TRANSACTION REPOSITORY
# =============================================================================


class TestTransactionRepository:
    """Append-only ledger."""

    def test_list_most_recent_first(self, uow_factory):
        """
        GIVEN transactions on three different days
        WHEN listed
        THEN they come back newest first
        """
        with uow_factory() as uow:
            uow.transactions.append(make_transaction("t1", day=1))
            uow.transactions.append(make_transaction("t3", day=3))
            uow.transactions.append(make_transaction("t2", day=2))
            uow.commit()

        txns = list_transactions(uow_factory, "alice")

        assert [t.txn_id for t in txns] == ["t3", "t2", "t1"]
        assert txns[0].date == eastern_datetime(2024, 6, 3)

    def test_same_timestamp_breaks_ties_by_insertion(self, uow_factory):
        with uow_factory() as uow:
            uow.transactions.append(make_transaction("first"))
            uow.transactions.append(make_transaction("second"))
            uow.commit()

        assert [t.txn_id for t in list_transactions(uow_factory, "alice")] == ["second", "first"]

    def test_limit_and_user_filter(self, uow_factory):
        with uow_factory() as uow:
            for i in range(5):
                uow.transactions.append(make_transaction(f"a{i}", day=i + 1))
            uow.transactions.append(make_transaction("b0", user_id="bob"))
            uow.commit()

        assert len(list_transactions(uow_factory, "alice", limit=3)) == 3
        assert [t.txn_id for t in list_transactions(uow_factory, "bob")] == ["b0"]


# =============================================================================
# WATCHLIST REPOSITORY
# =============================================================================


def watched(uow_factory, user_id: str = "alice") -> list:
    with uow_factory() as uow:
        return uow.watchlist.list_by_user(user_id)


class TestWatchlistRepository:
    """Per-user watched symbols."""

    def test_add_and_list_most_recent_first(self, uow_factory):
        """
        GIVEN symbols added on three different days
        WHEN the watchlist is listed
        THEN they come back newest first with their stored fields
        """
        with uow_factory() as uow:
            uow.watchlist.add(WatchlistItem("alice", "AAPL", "Apple Inc", eastern_datetime(2024, 6, 1)))
            uow.watchlist.add(WatchlistItem("alice", "TSLA", "Tesla Inc", eastern_datetime(2024, 6, 3)))
            uow.watchlist.add(WatchlistItem("alice", "MSFT", "", eastern_datetime(2024, 6, 2)))
            uow.commit()

        items = watched(uow_factory)

        assert [i.symbol for i in items] == ["TSLA", "MSFT", "AAPL"]
        assert items[1].company == "MSFT"
        assert items[0].added_at == eastern_datetime(2024, 6, 3)

    def test_duplicate_symbol_rejected(self, uow_factory):
        with uow_factory() as uow:
            uow.watchlist.add(WatchlistItem("alice", "AAPL", "Apple Inc"))
            uow.commit()

        with pytest.raises(DuplicateWatchlistItemError):
            with uow_factory() as uow:
                uow.watchlist.add(WatchlistItem("alice", "aapl", "Apple again"))

        assert [i.company for i in watched(uow_factory)] == ["Apple Inc"]

    def test_same_symbol_for_different_users(self, uow_factory):
        with uow_factory() as uow:
            uow.watchlist.add(WatchlistItem("alice", "AAPL", "Apple Inc"))
            uow.watchlist.add(WatchlistItem("bob", "AAPL", "Apple Inc"))
            uow.commit()

        assert [i.user_id for i in watched(uow_factory, "bob")] == ["bob"]

    def test_remove(self, uow_factory):
        """
        GIVEN alice and bob both watch AAPL
        WHEN alice removes it, then removes it again
        THEN the first removal reports True, the second False, and bob keeps his
        """
        with uow_factory() as uow:
            uow.watchlist.add(WatchlistItem("alice", "AAPL", "Apple Inc"))
            uow.watchlist.add(WatchlistItem("bob", "AAPL", "Apple Inc"))
            uow.commit()

        with uow_factory() as uow:
            first = uow.watchlist.remove("alice", "AAPL")
            second = uow.watchlist.remove("alice", "AAPL")
            uow.commit()

        assert (first, second) == (True, False)
        assert watched(uow_factory) == []
        assert len(watched(uow_factory, "bob")) == 1


# =============================================================================
# UNIT OF WORK
# =============================================================================


class TestUnitOfWork:
    """Atomic commit boundary."""

    def test_uncommitted_work_is_discarded(self, portfolio_factory, uow_factory):
        """
        GIVEN a save and an append inside a unit of work
        WHEN the block exits without commit
        THEN neither write is visible
        """
        created = portfolio_factory()
        created.balance = Decimal("5")

        with uow_factory() as uow:
            uow.portfolios.save(created)
            uow.transactions.append(make_transaction("t1"))

        assert load_portfolio(uow_factory, "alice").balance == Decimal("100000")
        assert list_transactions(uow_factory, "alice") == []

    def test_exception_rolls_back(self, portfolio_factory, uow_factory):
        created = portfolio_factory()
        created.balance = Decimal("5")

        with pytest.raises(RuntimeError):
            with uow_factory() as uow:
                uow.portfolios.save(created)
                raise RuntimeError("boom")

        assert load_portfolio(uow_factory, "alice").balance == Decimal("100000")

    def test_commit_outside_block_fails(self, uow_factory):
        uow = uow_factory()

        with pytest.raises(RuntimeError):
            uow.commit()
