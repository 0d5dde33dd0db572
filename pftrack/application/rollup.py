"""
Period rollups: reduce transactions, categories and budgets into totals,
per-category breakdowns and budget-vs-actual rows.

One reduction (`aggregate`) works on any period window. The yearly rollup
runs it once per calendar month and merges the results, so monthly and
yearly figures always come from the same code. Amounts are summed as
Decimals at full precision and rounded only when emitted.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pftrack.domain.period import PeriodWindow, month_label, month_token, month_window
from pftrack.domain.transaction import (
    KIND_EXPENSE, KIND_INCOME, UNCATEGORIZED_LABEL, category_placeholder,
)
from pftrack.utils.money import ZERO, money_number, round_money, to_decimal

BUDGET_ROWS_CAP = 40


@dataclass
class Breakdown:
    """Full-precision sums for one window. Dict keys keep first-seen order."""
    income: Decimal = ZERO
    expense: Decimal = ZERO
    # category_id -> expense sum; None is the uncategorized bucket
    expense_by_category: Dict[Optional[int], Decimal] = field(default_factory=dict)
    # category_id -> summed budget limits
    budget_by_category: Dict[int, Decimal] = field(default_factory=dict)
    # limits of budgets that are not scoped to a category
    period_budget: Decimal = ZERO


def aggregate(records: Iterable[Any], budgets: Iterable[Any], window: PeriodWindow) -> Breakdown:
    """
    Reduce records and budget rows that fall inside the window.

    records: objects with kind, amount, category_id, date
    budgets: objects with category_id, period_month, limit_amount
    Records of an unknown kind contribute nothing.
    """
    result = Breakdown()

    for rec in records:
        if not window.contains(rec.date):
            continue
        amount = to_decimal(rec.amount)
        if rec.kind == KIND_INCOME:
            result.income += amount
        elif rec.kind == KIND_EXPENSE:
            result.expense += amount
            key = rec.category_id
            result.expense_by_category[key] = result.expense_by_category.get(key, ZERO) + amount

    for budget in budgets:
        if not window.contains(budget.period_month):
            continue
        limit = to_decimal(budget.limit_amount)
        if budget.category_id is None:
            result.period_budget += limit
        else:
            key = budget.category_id
            result.budget_by_category[key] = result.budget_by_category.get(key, ZERO) + limit

    return result


def merge(parts: Iterable[Breakdown]) -> Breakdown:
    """Sum breakdowns; bucket order follows the order of the parts."""
    total = Breakdown()
    for part in parts:
        total.income += part.income
        total.expense += part.expense
        total.period_budget += part.period_budget
        for key, value in part.expense_by_category.items():
            total.expense_by_category[key] = total.expense_by_category.get(key, ZERO) + value
        for key, value in part.budget_by_category.items():
            total.budget_by_category[key] = total.budget_by_category.get(key, ZERO) + value
    return total


# ----------------------------------------------------------------------
# Emission
# ----------------------------------------------------------------------

def _category_name(category_id: Optional[int], names: Dict[int, str]) -> str:
    if category_id is None:
        return UNCATEGORIZED_LABEL
    return names.get(category_id) or category_placeholder(category_id)


def category_breakdown_rows(breakdown: Breakdown, categories: Sequence[Any]) -> List[Dict[str, Any]]:
    """Expense per category, largest first; equal sums keep bucket order."""
    names = {c.id: c.name for c in categories}
    buckets = sorted(
        breakdown.expense_by_category.items(),
        key=lambda item: item[1],
        reverse=True,
    )
    return [
        {
            "category_id": category_id,
            "name": _category_name(category_id, names),
            "expense_sum": money_number(amount),
        }
        for category_id, amount in buckets
    ]


def budget_vs_actual_rows(
    breakdown: Breakdown,
    categories: Sequence[Any],
    cap: int = BUDGET_ROWS_CAP,
) -> List[Dict[str, Any]]:
    """
    One row per expense category with a budget or spending in the window.

    All-zero categories are skipped; at most `cap` rows are returned.
    """
    rows: List[Dict[str, Any]] = []
    for cat in categories:
        if cat.kind != KIND_EXPENSE:
            continue
        budget = breakdown.budget_by_category.get(cat.id, ZERO)
        actual = breakdown.expense_by_category.get(cat.id, ZERO)
        if budget <= 0 and actual <= 0:
            continue
        rows.append({
            "category_id": cat.id,
            "name": cat.name,
            "budget_sum": money_number(budget),
            "actual_sum": money_number(actual),
        })
        if len(rows) >= cap:
            break
    return rows


def totals(breakdown: Breakdown) -> Tuple[float, float, float]:
    """(income, expense, net) rounded; net is the difference of the rounded totals."""
    income = round_money(breakdown.income)
    expense = round_money(breakdown.expense)
    return float(income), float(expense), float(income - expense)


def trend_rows(months: Sequence[Tuple[date, Breakdown]]) -> List[Dict[str, Any]]:
    return [
        {
            "month": month_token(first_day),
            "label": month_label(first_day.month),
            "income_sum": money_number(part.income),
            "expense_sum": money_number(part.expense),
        }
        for first_day, part in months
    ]


def split_by_month(
    records: Sequence[Any],
    budgets: Sequence[Any],
    month_starts: Sequence[date],
) -> List[Tuple[date, Breakdown]]:
    """Run `aggregate` once per calendar month."""
    return [
        (first_day, aggregate(records, budgets, month_window(first_day.year, first_day.month)))
        for first_day in month_starts
    ]
