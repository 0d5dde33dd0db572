"""
Transaction list filters.

A TransactionFilter is built from loosely typed query parameters and folded
into a typed predicate list. Each predicate applies itself to a SQLAlchemy
query as a bound-parameter expression, so user input never reaches the SQL
text. Malformed optional values are dropped, never raised.
"""
import operator
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, List

from pftrack.domain.transaction import normalize_kind
from pftrack.infrastructure.db.models import Transaction
from pftrack.utils.validation import parse_optional_day, parse_optional_int

DEFAULT_LIMIT = 500
MAX_LIMIT = 5000

_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "eq": operator.eq,
    "ge": operator.ge,
    "le": operator.le,
}


def clamp_limit(limit: int | None) -> int:
    """Unset / zero / negative -> 500; above 5000 -> 5000."""
    if limit is None or limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def clamp_offset(offset: int | None) -> int:
    if offset is None or offset < 0:
        return 0
    return offset


@dataclass(frozen=True)
class Predicate:
    """field <op> value over a Transaction column"""
    field: str
    op: str
    value: Any

    def apply(self, query):
        column = getattr(Transaction, self.field)
        return query.filter(_OPERATORS[self.op](column, self.value))


@dataclass(frozen=True)
class TransactionFilter:
    from_date: date | None = None
    to_date: date | None = None
    category_id: int | None = None
    kind: str | None = None
    limit: int | None = None
    offset: int | None = None

    @classmethod
    def from_query_params(
        cls,
        from_: str | None = None,
        to: str | None = None,
        category_id: str | None = None,
        kind: str | None = None,
        limit: str | None = None,
        offset: str | None = None,
    ) -> "TransactionFilter":
        """Build a filter from raw query strings; bad values become "absent"."""
        return cls(
            from_date=parse_optional_day(from_),
            to_date=parse_optional_day(to),
            category_id=parse_optional_int(category_id),
            kind=normalize_kind(kind),
            limit=parse_optional_int(limit),
            offset=parse_optional_int(offset),
        )

    @property
    def effective_limit(self) -> int:
        return clamp_limit(self.limit)

    @property
    def effective_offset(self) -> int:
        return clamp_offset(self.offset)

    def predicates(self) -> List[Predicate]:
        preds: List[Predicate] = []
        if self.from_date is not None:
            preds.append(Predicate("date", "ge", self.from_date))
        if self.to_date is not None:
            preds.append(Predicate("date", "le", self.to_date))
        if self.category_id is not None:
            preds.append(Predicate("category_id", "eq", self.category_id))
        if self.kind is not None:
            preds.append(Predicate("kind", "eq", self.kind))
        return preds

    def page(self, limit: int, offset: int) -> "TransactionFilter":
        """Same predicates, different page."""
        return TransactionFilter(
            from_date=self.from_date,
            to_date=self.to_date,
            category_id=self.category_id,
            kind=self.kind,
            limit=limit,
            offset=offset,
        )
