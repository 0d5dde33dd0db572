"""
Dashboard API endpoints (monthly and yearly summaries)
"""
from datetime import datetime
from typing import Union
from zoneinfo import ZoneInfo
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from pftrack.api.deps import get_owner_id, get_summary_service
from pftrack.api.v1.transactions import TransactionResponse
from pftrack.application.summary import DashboardSummaryService
from pftrack.config import get_settings
from pftrack.domain.period import parse_month
from pftrack.utils.validation import parse_optional_int


router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])

MIN_YEAR = 1
MAX_YEAR = 9999


# === Response models ===

class CategoryBreakdownRow(BaseModel):
    category_id: int | None
    name: str
    expense_sum: float


class BudgetVsActualRow(BaseModel):
    category_id: int
    name: str
    budget_sum: float
    actual_sum: float


class TrendRow(BaseModel):
    month: str
    label: str
    income_sum: float
    expense_sum: float


class Gap(BaseModel):
    source: str
    reason: str


class MonthlySummaryResponse(BaseModel):
    month: str
    income_total: float
    expense_total: float
    net: float
    period_budget: float | None
    category_breakdown: list[CategoryBreakdownRow]
    budget_vs_actual: list[BudgetVsActualRow]
    transactions: list[TransactionResponse]
    complete: bool
    gaps: list[Gap]


class YearlySummaryResponse(BaseModel):
    year: int
    yearly_income: float
    yearly_expense: float
    yearly_net: float
    period_budget: float | None
    monthly_trend: list[TrendRow]
    category_breakdown: list[CategoryBreakdownRow]
    budget_vs_actual: list[BudgetVsActualRow]
    complete: bool
    gaps: list[Gap]
    incomplete_months: list[str]


# === Endpoints ===

@router.get("/summary", response_model=Union[MonthlySummaryResponse, YearlySummaryResponse])
def summary(
    month: str | None = None,
    year: str | None = None,
    owner_id: int = Depends(get_owner_id),
    service: DashboardSummaryService = Depends(get_summary_service),
):
    """
    Monthly summary (?month=YYYY-MM) or yearly summary (?year=YYYY)

    Without parameters the current month is summarized.
    """
    if month is not None and year is not None:
        raise HTTPException(status_code=400, detail="Pass either month or year, not both")

    if year is not None:
        parsed_year = parse_optional_int(year)
        if parsed_year is None or not MIN_YEAR <= parsed_year <= MAX_YEAR:
            raise HTTPException(status_code=400, detail=f"year must be YYYY, got {year!r}")
        return service.yearly_summary(owner_id, parsed_year)

    if month is None:
        today = datetime.now(ZoneInfo(get_settings().TIMEZONE)).date()
        return service.monthly_summary(owner_id, today.replace(day=1))

    try:
        first_day = parse_month(month)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"month must be YYYY-MM, got {month!r}")
    return service.monthly_summary(owner_id, first_day)
