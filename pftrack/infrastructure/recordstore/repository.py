"""
Record Store Repository - owner-scoped reads and writes over transactions,
categories and budgets.

Every method takes owner_id as its first argument; there is no way to query
across owners. Database failures (driver errors, pool timeouts) are logged
and re-raised as StorageUnavailable, without retries.
"""
import logging
from contextlib import contextmanager
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pftrack.application.errors import StorageUnavailable, ValidationError
from pftrack.application.filters import TransactionFilter
from pftrack.infrastructure.db.models import Transaction, Category, Budget

logger = logging.getLogger(__name__)


def _require_owner(owner_id: Optional[int]) -> int:
    if owner_id is None:
        raise ValidationError("owner_id is required")
    return owner_id


class RecordStoreRepository:
    """
    Repository for the record store tables

    Example:
        >>> repo = RecordStoreRepository(db)
        >>> repo.list_transactions(7, TransactionFilter(kind="expense", limit=50))
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _storage_errors(self, operation: str, owner_id: int):
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception("Record store %s failed for owner_id=%s", operation, owner_id)
            self.db.rollback()
            raise StorageUnavailable(f"{operation} failed") from exc

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def list_transactions(self, owner_id: int, flt: TransactionFilter | None = None) -> List[Transaction]:
        """
        Owner's transactions matching every predicate of the filter

        Ordered by date, then id. Limit/offset are clamped by the filter.

        Raises:
            ValidationError: owner_id is None
            StorageUnavailable: the database failed
        """
        owner_id = _require_owner(owner_id)
        flt = flt or TransactionFilter()

        query = self.db.query(Transaction).filter(Transaction.owner_id == owner_id)
        for predicate in flt.predicates():
            query = predicate.apply(query)
        query = (
            query.order_by(Transaction.date.asc(), Transaction.id.asc())
            .limit(flt.effective_limit)
            .offset(flt.effective_offset)
        )

        with self._storage_errors("list_transactions", owner_id):
            return query.all()

    def get_transaction(self, owner_id: int, transaction_id: int) -> Optional[Transaction]:
        owner_id = _require_owner(owner_id)
        with self._storage_errors("get_transaction", owner_id):
            return self.db.query(Transaction).filter(
                Transaction.owner_id == owner_id,
                Transaction.id == transaction_id,
            ).first()

    def add_transaction(self, transaction: Transaction) -> Transaction:
        with self._storage_errors("add_transaction", transaction.owner_id):
            self.db.add(transaction)
            self.db.commit()
            self.db.refresh(transaction)
        return transaction

    def save(self, transaction: Transaction) -> Transaction:
        with self._storage_errors("save_transaction", transaction.owner_id):
            self.db.commit()
            self.db.refresh(transaction)
        return transaction

    def delete_transaction(self, owner_id: int, transaction_id: int) -> bool:
        """Delete one of the owner's transactions. False when nothing matched."""
        owner_id = _require_owner(owner_id)
        with self._storage_errors("delete_transaction", owner_id):
            deleted = self.db.query(Transaction).filter(
                Transaction.owner_id == owner_id,
                Transaction.id == transaction_id,
            ).delete(synchronize_session=False)
            self.db.commit()
        return deleted > 0

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def list_categories(self, owner_id: int) -> List[Category]:
        owner_id = _require_owner(owner_id)
        with self._storage_errors("list_categories", owner_id):
            return (
                self.db.query(Category)
                .filter(Category.owner_id == owner_id)
                .order_by(Category.name, Category.id)
                .all()
            )

    def get_category(self, owner_id: int, category_id: int) -> Optional[Category]:
        owner_id = _require_owner(owner_id)
        with self._storage_errors("get_category", owner_id):
            return self.db.query(Category).filter(
                Category.owner_id == owner_id,
                Category.id == category_id,
            ).first()

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    def list_budgets(self, owner_id: int, month: date | None = None) -> List[Budget]:
        """
        Owner's budget rows, optionally for a single month

        Args:
            month: any day of the target month; None returns every month
        """
        owner_id = _require_owner(owner_id)
        query = self.db.query(Budget).filter(Budget.owner_id == owner_id)
        if month is not None:
            query = query.filter(Budget.period_month == month.replace(day=1))
        query = query.order_by(Budget.period_month, Budget.id)

        with self._storage_errors("list_budgets", owner_id):
            return query.all()
