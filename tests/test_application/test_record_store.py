"""
Tests for RecordStoreRepository: filtered, ordered, paginated, owner-scoped reads
"""
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeout

from pftrack.application.errors import StorageUnavailable, ValidationError
from pftrack.application.filters import TransactionFilter
from pftrack.infrastructure.db.models import User, Category, Transaction, Budget
from pftrack.infrastructure.recordstore.repository import RecordStoreRepository


_D = Decimal


def _add_user(db, user_id):
    db.add(User(id=user_id, email=f"user{user_id}@example.com", password_hash="x"))
    db.flush()


def _add_category(db, owner_id, category_id, name, kind="expense"):
    db.add(Category(id=category_id, owner_id=owner_id, name=name, kind=kind))
    db.flush()


def _add_tx(db, owner_id, tx_id, kind, amount, day, category_id=None):
    t = Transaction(
        id=tx_id, owner_id=owner_id, kind=kind, amount=_D(str(amount)),
        date=day, category_id=category_id, description="",
    )
    db.add(t)
    db.flush()
    return t


@pytest.fixture
def store(db_session, sample_owner_id, other_owner_id):
    """Two owners; owner 1 has food(10, expense) and salary(20, income)."""
    _add_user(db_session, sample_owner_id)
    _add_user(db_session, other_owner_id)
    _add_category(db_session, sample_owner_id, 10, "Food")
    _add_category(db_session, sample_owner_id, 20, "Salary", kind="income")
    _add_category(db_session, other_owner_id, 30, "Other food")

    # inserted out of order on purpose
    _add_tx(db_session, sample_owner_id, 5, "expense", 12, date(2025, 1, 20), 10)
    _add_tx(db_session, sample_owner_id, 3, "income", 1000, date(2025, 1, 10), 20)
    _add_tx(db_session, sample_owner_id, 4, "expense", 7, date(2025, 1, 10), None)
    _add_tx(db_session, sample_owner_id, 1, "expense", 30, date(2025, 2, 1), 10)
    _add_tx(db_session, sample_owner_id, 2, "expense", 3, date(2024, 12, 31), 10)
    _add_tx(db_session, other_owner_id, 6, "expense", 99, date(2025, 1, 15), 30)
    db_session.commit()
    return RecordStoreRepository(db_session)


class TestListTransactions:

    def test_ordered_by_date_then_id(self, store, sample_owner_id):
        rows = store.list_transactions(sample_owner_id)
        assert [t.id for t in rows] == [2, 3, 4, 5, 1]
        keys = [(t.date, t.id) for t in rows]
        assert keys == sorted(keys)

    def test_owner_isolation(self, store, sample_owner_id, other_owner_id):
        mine = store.list_transactions(sample_owner_id)
        theirs = store.list_transactions(other_owner_id)
        assert all(t.owner_id == sample_owner_id for t in mine)
        assert [t.id for t in theirs] == [6]

    def test_owner_is_required(self, store):
        with pytest.raises(ValidationError):
            store.list_transactions(None)

    def test_date_range_is_inclusive(self, store, sample_owner_id):
        flt = TransactionFilter(from_date=date(2025, 1, 10), to_date=date(2025, 1, 20))
        assert [t.id for t in store.list_transactions(sample_owner_id, flt)] == [3, 4, 5]

    def test_predicates_compose_with_and(self, store, sample_owner_id):
        flt = TransactionFilter(from_date=date(2025, 1, 1), kind="expense", category_id=10)
        assert [t.id for t in store.list_transactions(sample_owner_id, flt)] == [5, 1]

    def test_foreign_category_filter_matches_nothing(self, store, sample_owner_id):
        flt = TransactionFilter(category_id=30)
        assert store.list_transactions(sample_owner_id, flt) == []

    def test_uncategorized_rows_keep_null_category(self, store, sample_owner_id):
        row = [t for t in store.list_transactions(sample_owner_id) if t.id == 4][0]
        assert row.category_id is None

    def test_pagination_by_row_offset(self, store, sample_owner_id):
        first = store.list_transactions(sample_owner_id, TransactionFilter(limit=2))
        second = store.list_transactions(sample_owner_id, TransactionFilter(limit=2, offset=2))
        third = store.list_transactions(sample_owner_id, TransactionFilter(limit=2, offset=4))
        assert [t.id for t in first] == [2, 3]
        assert [t.id for t in second] == [4, 5]
        assert [t.id for t in third] == [1]

    def test_out_of_range_paging_is_clamped(self, store, sample_owner_id):
        flt = TransactionFilter(limit=-10, offset=-3)
        assert len(store.list_transactions(sample_owner_id, flt)) == 5

    def test_no_match_returns_empty_list(self, store, sample_owner_id):
        flt = TransactionFilter(from_date=date(2030, 1, 1))
        assert store.list_transactions(sample_owner_id, flt) == []

    def test_driver_failure_becomes_storage_unavailable(self):
        db = Mock()
        db.query.return_value.filter.return_value.order_by.return_value.limit.return_value \
            .offset.return_value.all.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(StorageUnavailable):
            RecordStoreRepository(db).list_transactions(1)
        db.rollback.assert_called_once()

    def test_absurd_paging_and_category_values_are_ignored(self, store, sample_owner_id):
        huge = "99999999999999999999"
        for params in ({"offset": huge}, {"limit": huge}, {"category_id": huge}):
            flt = TransactionFilter.from_query_params(**params)
            assert [t.id for t in store.list_transactions(sample_owner_id, flt)] == [2, 3, 4, 5, 1]


class TestCategoriesAndBudgets:

    def test_pool_timeout_becomes_storage_unavailable(self):
        db = Mock()
        db.query.return_value.filter.return_value.order_by.return_value.all.side_effect = \
            PoolTimeout("QueuePool limit of size 5 overflow 10 reached")

        with pytest.raises(StorageUnavailable):
            RecordStoreRepository(db).list_categories(1)
        db.rollback.assert_called_once()

    def test_categories_by_name(self, store, sample_owner_id):
        assert [c.name for c in store.list_categories(sample_owner_id)] == ["Food", "Salary"]

    def test_budgets_for_one_month(self, store, db_session, sample_owner_id, other_owner_id):
        db_session.add_all([
            Budget(id=1, owner_id=sample_owner_id, category_id=10, period_month=date(2025, 1, 1), limit_amount=_D("100")),
            Budget(id=2, owner_id=sample_owner_id, category_id=10, period_month=date(2025, 1, 1), limit_amount=_D("25")),
            Budget(id=3, owner_id=sample_owner_id, category_id=None, period_month=date(2025, 2, 1), limit_amount=_D("900")),
            Budget(id=4, owner_id=other_owner_id, category_id=30, period_month=date(2025, 1, 1), limit_amount=_D("5")),
        ])
        db_session.commit()

        january = store.list_budgets(sample_owner_id, date(2025, 1, 17))
        assert [b.id for b in january] == [1, 2]
        assert [b.id for b in store.list_budgets(sample_owner_id)] == [1, 2, 3]

    def test_deleting_category_uncategorizes_transactions(self, store, db_session, sample_owner_id):
        db_session.query(Category).filter(Category.id == 10).delete()
        db_session.commit()
        db_session.expire_all()

        rows = store.list_transactions(sample_owner_id, TransactionFilter(kind="expense"))
        assert [t.id for t in rows] == [2, 4, 5, 1]
        assert all(t.category_id is None for t in rows)
