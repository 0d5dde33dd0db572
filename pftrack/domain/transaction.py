"""
Transaction (money movement) kinds and the display rules shared by the
read side.
"""
from typing import Optional

# Transaction / category kinds
KIND_INCOME = "income"
KIND_EXPENSE = "expense"
KINDS = (KIND_INCOME, KIND_EXPENSE)

# Reserved bucket for records without a category
UNCATEGORIZED_LABEL = "Uncategorized"


def normalize_kind(value: Optional[str]) -> Optional[str]:
    """
    Map a loosely typed kind ("Expense", " income ") to its canonical form.

    Returns None for anything that is not a known kind.
    """
    if not isinstance(value, str):
        return None
    v = value.strip().lower()
    return v if v in KINDS else None


def category_placeholder(category_id: int) -> str:
    """Display label for a category id with no matching category row."""
    return f"#{category_id}"
