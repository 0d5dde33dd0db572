"""
Budget API endpoints (read-only; budget CRUD is owned elsewhere)
"""
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pftrack.api.deps import get_db, get_owner_id
from pftrack.domain.period import month_token, parse_month
from pftrack.infrastructure.recordstore.repository import RecordStoreRepository
from pftrack.utils.money import money_number


router = APIRouter(prefix="/api/v1/budgets", tags=["budgets"])


class BudgetResponse(BaseModel):
    id: int
    user_id: int
    category_id: int | None
    period_month: str  # YYYY-MM
    limit_amount: float
    created_at: datetime | None = None


@router.get("", response_model=list[BudgetResponse])
def list_budgets(
    month: str | None = None,
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Owner's budget rows, all months or only ?month=YYYY-MM"""
    target = None
    if month is not None:
        try:
            target = parse_month(month)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"month must be YYYY-MM, got {month!r}")

    budgets = RecordStoreRepository(db).list_budgets(owner_id, target)
    return [
        BudgetResponse(
            id=b.id,
            user_id=b.owner_id,
            category_id=b.category_id,
            period_month=month_token(b.period_month),
            limit_amount=money_number(b.limit_amount),
            created_at=b.created_at,
        )
        for b in budgets
    ]
