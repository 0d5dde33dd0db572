"""
Tests for transaction kind normalization and display labels
"""
from pftrack.domain.transaction import (
    KIND_EXPENSE, KIND_INCOME, normalize_kind, category_placeholder,
)


def test_normalize_kind_accepts_any_case():
    assert normalize_kind("income") == KIND_INCOME
    assert normalize_kind(" Expense ") == KIND_EXPENSE


def test_normalize_kind_unknown_is_none():
    assert normalize_kind("transfer") is None
    assert normalize_kind("") is None
    assert normalize_kind(None) is None


def test_category_placeholder():
    assert category_placeholder(42) == "#42"
