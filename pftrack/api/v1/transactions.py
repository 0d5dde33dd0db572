"""
Transaction API endpoints
"""
from datetime import datetime
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pftrack.api.deps import get_db, get_owner_id
from pftrack.application.errors import NotFoundError, ValidationError
from pftrack.application.filters import TransactionFilter
from pftrack.application.transactions import (
    CreateTransactionUseCase, ReplaceTransactionUseCase, DeleteTransactionUseCase,
    serialize_transaction,
)
from pftrack.infrastructure.recordstore.repository import RecordStoreRepository
from pftrack.utils.validation import require_int


router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


# === Request/Response models ===

class TransactionRequest(BaseModel):
    category_id: int | None = None
    amount: Decimal
    type: str  # income / expense
    date: str  # YYYY-MM-DD
    description: str | None = None


class TransactionResponse(BaseModel):
    id: int
    user_id: int
    category_id: int | None
    amount: float
    type: str
    date: str
    description: str
    created_at: datetime | None = None


# === Endpoints ===

@router.get("", response_model=list[TransactionResponse])
def list_transactions(
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db),
    from_: str | None = Query(None, alias="from"),
    to: str | None = None,
    category_id: str | None = None,
    kind: str | None = Query(None, alias="type"),
    limit: str | None = None,
    offset: str | None = None,
):
    """
    Owner's transactions, oldest first

    Every filter is optional; malformed values are ignored. offset is a row
    count. limit defaults to 500 and is capped at 5000.
    """
    flt = TransactionFilter.from_query_params(
        from_=from_, to=to, category_id=category_id, kind=kind, limit=limit, offset=offset,
    )
    transactions = RecordStoreRepository(db).list_transactions(owner_id, flt)
    return [serialize_transaction(tx) for tx in transactions]


@router.post("", response_model=TransactionResponse, status_code=201)
def create_transaction(
    req: TransactionRequest,
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Record an income or expense"""
    try:
        tx = CreateTransactionUseCase(db).execute(
            owner_id=owner_id,
            amount=req.amount,
            kind=req.type,
            day=req.date,
            category_id=req.category_id,
            description=req.description,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return serialize_transaction(tx)


@router.put("/{transaction_id}", response_model=TransactionResponse)
def replace_transaction(
    transaction_id: str,
    req: TransactionRequest,
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Replace every field of a transaction"""
    try:
        tx = ReplaceTransactionUseCase(db).execute(
            owner_id=owner_id,
            transaction_id=require_int(transaction_id, "id"),
            amount=req.amount,
            kind=req.type,
            day=req.date,
            category_id=req.category_id,
            description=req.description,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return serialize_transaction(tx)


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: str,
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Delete a transaction"""
    try:
        DeleteTransactionUseCase(db).execute(owner_id, require_int(transaction_id, "id"))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return Response(status_code=204)
