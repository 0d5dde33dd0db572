"""
Validation utilities

Two families: `parse_optional_*` never raise (a malformed optional filter is
treated as absent), `require_*` raise ValidationError for required input.
"""
import re
from datetime import date
from decimal import Decimal, InvalidOperation

from pftrack.application.errors import ValidationError
from pftrack.domain.period import parse_day

# BIGINT bounds; larger values cannot be bound as query parameters
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Numeric(20, 2) leaves 18 integer digits
MAX_INTEGER_DIGITS = 18


def normalize_decimal_input(value: str) -> str:
    """
    Normalize amount input: decimal comma becomes a dot

    Example:
        >>> normalize_decimal_input("100,50")
        "100.50"
    """
    return value.replace(",", ".")


def validate_decimal_amount(value: str, max_decimal_places: int = 2) -> tuple[bool, str | None]:
    """
    Validate a non-negative money amount

    Returns:
        (is_valid, error_message)

    Example:
        >>> validate_decimal_amount("100.50")
        (True, None)
        >>> validate_decimal_amount("100.505")
        (False, "At most 2 decimal places")
    """
    normalized = normalize_decimal_input(value.strip())

    try:
        decimal_value = Decimal(normalized)
    except (InvalidOperation, ValueError):
        return False, "Invalid amount"

    if not decimal_value.is_finite():
        return False, "Invalid amount"
    if decimal_value < 0:
        return False, "Amount must not be negative"

    integer_part = normalized.split(".", 1)[0]
    if len(integer_part) > MAX_INTEGER_DIGITS:
        return False, f"Amount is too large (at most {MAX_INTEGER_DIGITS} digits before the decimal point)"

    pattern = rf"^\d{{1,{MAX_INTEGER_DIGITS}}}(\.\d{{1,{max_decimal_places}}})?$"
    if not re.match(pattern, normalized):
        return False, f"At most {max_decimal_places} decimal places"

    return True, None


def validate_and_normalize_amount(value, max_decimal_places: int = 2) -> Decimal:
    """
    Validate an amount and return it as Decimal

    Raises:
        ValidationError: amount is malformed, negative or too precise
    """
    raw = value if isinstance(value, str) else str(value)
    is_valid, error = validate_decimal_amount(raw, max_decimal_places)
    if not is_valid:
        raise ValidationError(error)

    return Decimal(normalize_decimal_input(raw.strip()))


def parse_optional_day(value: str | None) -> date | None:
    """YYYY-MM-DD or None; anything malformed is None."""
    if not value:
        return None
    try:
        return parse_day(value.strip())
    except ValueError:
        return None


def parse_optional_int(value: str | int | None) -> int | None:
    """Signed 64-bit integer or None; out-of-range values are None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        parsed = value
    else:
        try:
            parsed = int(value.strip())
        except (ValueError, AttributeError):
            return None
    if not INT64_MIN <= parsed <= INT64_MAX:
        return None
    return parsed


def require_int(value: str | int | None, field: str) -> int:
    """Parse a required integer parameter (e.g. a path id)."""
    parsed = parse_optional_int(value)
    if parsed is None:
        raise ValidationError(f"{field} must be an integer, got {value!r}")
    return parsed


def require_day(value: str | None, field: str = "date") -> date:
    try:
        return parse_day(value)
    except (ValueError, TypeError):
        raise ValidationError(f"{field} must be YYYY-MM-DD, got {value!r}")
