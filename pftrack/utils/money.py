"""
Money rounding for emitted values.

Sums are always accumulated on full-precision Decimals; rounding happens
only when a value leaves the aggregator.

Usage:
    from pftrack.utils.money import round_money

    round_money(Decimal("10.005"))  -> Decimal("10.01")
    money_number(Decimal("80"))     -> 80.0
"""
from decimal import Decimal, ROUND_HALF_UP

ZERO = Decimal("0")
_CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce int / float / str / Decimal to Decimal (floats go through str)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_money(amount) -> Decimal:
    """Round to 2 places, half up."""
    return to_decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)


def money_number(amount) -> float:
    """Rounded amount as a JSON number."""
    return float(round_money(amount))
