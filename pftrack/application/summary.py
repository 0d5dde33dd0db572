"""
Dashboard summaries for a month or a year.

Fetches (transactions, categories, one budget list per month) run
concurrently, each on its own session, and are joined under one deadline
before the rollup starts. A transaction fetch failure is raised. A failed or
timed-out secondary fetch is reported in `gaps` and the parts of the result
that depend on it are left empty (or None), never filled with zeros.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from datetime import date
from typing import Any, Callable, Dict, List, Protocol, Tuple

from pftrack.application.errors import PartialAggregationGap, StorageUnavailable, ValidationError
from pftrack.application.filters import MAX_LIMIT, TransactionFilter
from pftrack.application.rollup import (
    aggregate, budget_vs_actual_rows, category_breakdown_rows, merge,
    split_by_month, totals, trend_rows,
)
from pftrack.application.transactions import serialize_transaction
from pftrack.config import get_settings
from pftrack.domain.period import PeriodWindow, month_token, month_window, months_of_year, year_window
from pftrack.infrastructure.recordstore.repository import RecordStoreRepository
from pftrack.utils.money import money_number

logger = logging.getLogger(__name__)

RECORDS = "records"
CATEGORIES = "categories"


def _budgets_key(first_day: date) -> str:
    return f"budgets:{month_token(first_day)}"


class RecordSource(Protocol):
    def list_transactions(self, owner_id: int, flt: TransactionFilter) -> List[Any]: ...

    def list_categories(self, owner_id: int) -> List[Any]: ...

    def list_budgets(self, owner_id: int, month: date) -> List[Any]: ...


class SqlRecordSource:
    """
    RecordSource over the database. Every call opens and closes its own
    session, so calls may run on different threads.
    """

    def __init__(self, session_factory: Callable):
        self.session_factory = session_factory

    def _run(self, fn):
        db = self.session_factory()
        try:
            return fn(RecordStoreRepository(db))
        finally:
            db.close()

    def list_transactions(self, owner_id: int, flt: TransactionFilter) -> List[Any]:
        return self._run(lambda repo: repo.list_transactions(owner_id, flt))

    def list_categories(self, owner_id: int) -> List[Any]:
        return self._run(lambda repo: repo.list_categories(owner_id))

    def list_budgets(self, owner_id: int, month: date) -> List[Any]:
        return self._run(lambda repo: repo.list_budgets(owner_id, month))


def fetch_window(source: RecordSource, owner_id: int, window: PeriodWindow) -> List[Any]:
    """All of the owner's transactions in the window, paging at the list ceiling."""
    records: List[Any] = []
    flt = TransactionFilter(from_date=window.start, to_date=window.end, limit=MAX_LIMIT, offset=0)
    while True:
        page = source.list_transactions(owner_id, flt)
        records.extend(page)
        if len(page) < MAX_LIMIT:
            return records
        flt = flt.page(MAX_LIMIT, flt.effective_offset + MAX_LIMIT)


class DashboardSummaryService:
    """Build monthly and yearly dashboard summaries for one owner."""

    def __init__(self, source: RecordSource, timeout: float | None = None, max_workers: int | None = None):
        settings = get_settings()
        self.source = source
        self.timeout = timeout if timeout is not None else settings.SUMMARY_FETCH_TIMEOUT_SECONDS
        self.max_workers = max_workers or settings.SUMMARY_MAX_WORKERS

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _gather(
        self, jobs: Dict[str, Callable[[], Any]], timeout: float,
    ) -> Tuple[Dict[str, Any], Dict[str, PartialAggregationGap]]:
        """
        Run jobs concurrently under a shared deadline.

        Returns (results, gaps). The transaction job is never turned into a
        gap: its failure or timeout is raised as StorageUnavailable.
        """
        results: Dict[str, Any] = {}
        gaps: Dict[str, PartialAggregationGap] = {}

        executor = ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(jobs))))
        try:
            futures = {name: executor.submit(fn) for name, fn in jobs.items()}
            deadline = time.monotonic() + timeout
            for name, future in futures.items():
                remaining = max(0.0, deadline - time.monotonic())
                try:
                    results[name] = future.result(timeout=remaining)
                except FutureTimeout:
                    future.cancel()
                    if name == RECORDS:
                        logger.error("Transaction fetch timed out after %.1fs", timeout)
                        raise StorageUnavailable("transaction fetch timed out")
                    gaps[name] = PartialAggregationGap(name, "timed out")
                except StorageUnavailable as exc:
                    if name == RECORDS:
                        raise
                    gaps[name] = PartialAggregationGap(name, str(exc))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        for gap in gaps.values():
            logger.warning("Summary built without %s (%s)", gap.source, gap.reason)
        return results, gaps

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def monthly_summary(self, owner_id: int, month: date, timeout: float | None = None) -> Dict[str, Any]:
        """
        Summary for the calendar month containing `month`

        Raises:
            ValidationError: owner_id is None
            StorageUnavailable: transactions could not be fetched
        """
        if owner_id is None:
            raise ValidationError("owner_id is required")
        first_day = month.replace(day=1)
        window = month_window(first_day.year, first_day.month)
        budgets_key = _budgets_key(first_day)

        results, gaps = self._gather(
            {
                RECORDS: lambda: fetch_window(self.source, owner_id, window),
                CATEGORIES: lambda: self.source.list_categories(owner_id),
                budgets_key: lambda: self.source.list_budgets(owner_id, first_day),
            },
            timeout if timeout is not None else self.timeout,
        )

        records = results[RECORDS]
        categories = results.get(CATEGORIES)
        budgets = results.get(budgets_key)

        breakdown = aggregate(records, budgets or [], window)
        income, expense, net = totals(breakdown)

        if categories is None:
            category_rows: List[Dict[str, Any]] = []
        else:
            category_rows = category_breakdown_rows(breakdown, categories)

        if categories is None or budgets is None:
            budget_rows: List[Dict[str, Any]] = []
        else:
            budget_rows = budget_vs_actual_rows(breakdown, categories)

        return {
            "month": month_token(first_day),
            "income_total": income,
            "expense_total": expense,
            "net": net,
            "period_budget": money_number(breakdown.period_budget) if budgets is not None else None,
            "category_breakdown": category_rows,
            "budget_vs_actual": budget_rows,
            "transactions": [serialize_transaction(t) for t in records],
            "complete": not gaps,
            "gaps": [gap.as_dict() for gap in gaps.values()],
        }

    def yearly_summary(self, owner_id: int, year: int, timeout: float | None = None) -> Dict[str, Any]:
        """
        Summary for a calendar year, with a 12-entry monthly trend

        Budgets are fetched per month. Months whose budget fetch failed are
        listed in `incomplete_months`; budget sums cover the other months.

        Raises:
            ValidationError: owner_id is None
            StorageUnavailable: transactions could not be fetched
        """
        if owner_id is None:
            raise ValidationError("owner_id is required")
        window = year_window(year)
        month_starts = months_of_year(year)

        jobs: Dict[str, Callable[[], Any]] = {
            RECORDS: lambda: fetch_window(self.source, owner_id, window),
            CATEGORIES: lambda: self.source.list_categories(owner_id),
        }
        for first_day in month_starts:
            jobs[_budgets_key(first_day)] = (lambda d=first_day: self.source.list_budgets(owner_id, d))

        results, gaps = self._gather(jobs, timeout if timeout is not None else self.timeout)

        records = results[RECORDS]
        categories = results.get(CATEGORIES)

        budgets: List[Any] = []
        incomplete_months: List[str] = []
        for first_day in month_starts:
            month_budgets = results.get(_budgets_key(first_day))
            if month_budgets is None:
                incomplete_months.append(month_token(first_day))
            else:
                budgets.extend(month_budgets)
        no_budgets_at_all = len(incomplete_months) == len(month_starts)

        per_month = split_by_month(records, budgets, month_starts)
        year_breakdown = merge(part for _, part in per_month)
        income, expense, net = totals(year_breakdown)

        if categories is None:
            category_rows: List[Dict[str, Any]] = []
        else:
            category_rows = category_breakdown_rows(year_breakdown, categories)

        if categories is None or no_budgets_at_all:
            budget_rows: List[Dict[str, Any]] = []
        else:
            budget_rows = budget_vs_actual_rows(year_breakdown, categories)

        return {
            "year": year,
            "yearly_income": income,
            "yearly_expense": expense,
            "yearly_net": net,
            "period_budget": None if no_budgets_at_all else money_number(year_breakdown.period_budget),
            "monthly_trend": trend_rows(per_month),
            "category_breakdown": category_rows,
            "budget_vs_actual": budget_rows,
            "complete": not gaps,
            "gaps": [gap.as_dict() for gap in gaps.values()],
            "incomplete_months": incomplete_months,
        }
