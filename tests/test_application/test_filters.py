"""
Tests for TransactionFilter: query parameter parsing, clamps, predicates
"""
import pytest
from datetime import date

from pftrack.application.filters import (
    DEFAULT_LIMIT, MAX_LIMIT, Predicate, TransactionFilter, clamp_limit, clamp_offset,
)


@pytest.mark.parametrize("raw, expected", [
    (None, DEFAULT_LIMIT),
    (0, DEFAULT_LIMIT),
    (-5, DEFAULT_LIMIT),
    (1, 1),
    (250, 250),
    (5000, 5000),
    (5001, MAX_LIMIT),
    (10**12, MAX_LIMIT),
])
def test_clamp_limit(raw, expected):
    assert clamp_limit(raw) == expected


@pytest.mark.parametrize("raw, expected", [(None, 0), (-1, 0), (0, 0), (30, 30)])
def test_clamp_offset(raw, expected):
    assert clamp_offset(raw) == expected


def test_from_query_params_parses_valid_values():
    flt = TransactionFilter.from_query_params(
        from_="2025-01-01", to="2025-01-31", category_id="7", kind="expense",
        limit="100", offset="20",
    )
    assert flt.from_date == date(2025, 1, 1)
    assert flt.to_date == date(2025, 1, 31)
    assert flt.category_id == 7
    assert flt.kind == "expense"
    assert flt.effective_limit == 100
    assert flt.effective_offset == 20


def test_malformed_optional_values_become_absent():
    flt = TransactionFilter.from_query_params(
        from_="2025-13-01", to="yesterday", category_id="abc", kind="transfer",
        limit="lots", offset="-",
    )
    assert flt.from_date is None
    assert flt.to_date is None
    assert flt.category_id is None
    assert flt.kind is None
    assert flt.effective_limit == DEFAULT_LIMIT
    assert flt.effective_offset == 0
    assert flt.predicates() == []


def test_unset_predicates_are_omitted():
    flt = TransactionFilter(to_date=date(2025, 6, 30), kind="income")
    assert flt.predicates() == [
        Predicate("date", "le", date(2025, 6, 30)),
        Predicate("kind", "eq", "income"),
    ]


def test_predicate_value_is_bound_not_interpolated():
    """A hostile value ends up as a bound parameter of the compiled query."""
    from sqlalchemy.orm import Query
    from pftrack.infrastructure.db.models import Transaction

    hostile = "expense' OR '1'='1"
    query = Predicate("kind", "eq", hostile).apply(Query(Transaction))
    compiled = query.statement.compile()

    assert hostile not in str(compiled)
    assert hostile in compiled.params.values()


def test_page_keeps_predicates():
    flt = TransactionFilter(from_date=date(2025, 1, 1), category_id=3)
    nxt = flt.page(limit=5000, offset=5000)
    assert nxt.predicates() == flt.predicates()
    assert nxt.effective_offset == 5000


HUGE = "99999999999999999999"


def test_out_of_range_integers_become_absent():
    flt = TransactionFilter.from_query_params(category_id=HUGE, limit=HUGE, offset=HUGE)
    assert flt.category_id is None
    assert flt.effective_limit == DEFAULT_LIMIT
    assert flt.effective_offset == 0
    assert flt.predicates() == []


@pytest.mark.parametrize("raw, expected", [
    (str(2 ** 63 - 1), 2 ** 63 - 1),
    (str(2 ** 63), None),
    (str(-(2 ** 63)), -(2 ** 63)),
    (str(-(2 ** 63) - 1), None),
])
def test_offset_bounds_follow_bigint(raw, expected):
    assert TransactionFilter.from_query_params(offset=raw).offset == expected
