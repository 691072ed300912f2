"""
Permissive Input Coercion

Numbers arrive from form fields, LLM tool arguments and database rows.
Any of them can be missing, a string with a dollar sign, or garbage.

DESIGN DECISION: Amounts that cannot be read default to zero rather
than raising. Dates are stricter: a date we cannot read is an error,
because guessing one would silently change a CGT result.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Convert a loosely typed amount to Decimal.

    Accepts Decimal, int, float and strings like "$1,234.50".
    None, empty strings, booleans, NaN, infinities and unparseable
    values become `default`.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace("$", "").replace(",", "").replace(" ", "")
        if not cleaned:
            return default
        try:
            result = Decimal(cleaned)
        except InvalidOperation:
            return default
    else:
        return default

    if not result.is_finite():
        return default
    return result


def parse_date(value: Any) -> date:
    """
    Parse a date given as a date, datetime or ISO string (YYYY-MM-DD).

    Raises:
        ValueError: If the value is not a readable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")
    raise ValueError(f"Invalid date: {value!r}")
