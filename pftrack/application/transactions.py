"""
Transaction use cases - write side (create / replace / delete) and the JSON
shape shared by every endpoint that returns transactions
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from pftrack.application.errors import NotFoundError, ValidationError
from pftrack.domain.period import DATE_FORMAT
from pftrack.domain.transaction import normalize_kind
from pftrack.infrastructure.db.models import Transaction
from pftrack.infrastructure.recordstore.repository import RecordStoreRepository
from pftrack.utils.money import money_number
from pftrack.utils.validation import require_day, validate_and_normalize_amount

logger = logging.getLogger(__name__)


def serialize_transaction(tx: Transaction) -> Dict[str, Any]:
    return {
        "id": tx.id,
        "user_id": tx.owner_id,
        "category_id": tx.category_id,
        "amount": money_number(tx.amount),
        "type": tx.kind,
        "date": tx.date.strftime(DATE_FORMAT),
        "description": tx.description or "",
        "created_at": tx.created_at.isoformat() if tx.created_at else None,
    }


class _TransactionWriter:
    def __init__(self, db: Session):
        self.db = db
        self.repo = RecordStoreRepository(db)

    def _validate(
        self,
        owner_id: int,
        amount: Any,
        kind: str,
        day: str,
        category_id: int | None,
    ) -> tuple[Decimal, str, date]:
        """
        Validate a write payload

        Raises:
            ValidationError: bad amount, kind, date, or a category of another owner
        """
        normalized_kind = normalize_kind(kind)
        if normalized_kind is None:
            raise ValidationError("type must be income or expense")
        parsed_amount = validate_and_normalize_amount(amount)
        parsed_day = require_day(day, "date")

        if category_id is not None and self.repo.get_category(owner_id, category_id) is None:
            raise ValidationError(f"Category #{category_id} not found")

        return parsed_amount, normalized_kind, parsed_day


class CreateTransactionUseCase(_TransactionWriter):
    """Use case: record a new income or expense"""

    def execute(
        self,
        owner_id: int,
        amount: Any,
        kind: str,
        day: str,
        category_id: int | None = None,
        description: str | None = None,
    ) -> Transaction:
        parsed_amount, normalized_kind, parsed_day = self._validate(
            owner_id, amount, kind, day, category_id
        )
        tx = Transaction(
            owner_id=owner_id,
            category_id=category_id,
            amount=parsed_amount,
            kind=normalized_kind,
            date=parsed_day,
            description=description or "",
        )
        tx = self.repo.add_transaction(tx)
        logger.info("Transaction %d created for owner_id=%d", tx.id, owner_id)
        return tx


class ReplaceTransactionUseCase(_TransactionWriter):
    """Use case: full replacement of an existing transaction"""

    def execute(
        self,
        owner_id: int,
        transaction_id: int,
        amount: Any,
        kind: str,
        day: str,
        category_id: int | None = None,
        description: str | None = None,
    ) -> Transaction:
        tx = self.repo.get_transaction(owner_id, transaction_id)
        if tx is None:
            raise NotFoundError(f"Transaction #{transaction_id} not found")

        parsed_amount, normalized_kind, parsed_day = self._validate(
            owner_id, amount, kind, day, category_id
        )
        tx.category_id = category_id
        tx.amount = parsed_amount
        tx.kind = normalized_kind
        tx.date = parsed_day
        tx.description = description or ""
        return self.repo.save(tx)


class DeleteTransactionUseCase(_TransactionWriter):
    """Use case: delete a transaction"""

    def execute(self, owner_id: int, transaction_id: int) -> None:
        if not self.repo.delete_transaction(owner_id, transaction_id):
            raise NotFoundError(f"Transaction #{transaction_id} not found")
        logger.info("Transaction %d deleted for owner_id=%d", transaction_id, owner_id)
