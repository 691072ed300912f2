"""Display formatting for amounts shown to the family."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from family_accountant.validation import to_decimal


def format_aud(amount: Any) -> str:
    """Whole dollars with thousands separators: 12345.6 -> '$12,346', -1234 -> '-$1,234'."""
    value = to_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,}"


def format_percent(value: Any, decimals: int = 1) -> str:
    """16.666 -> '16.7%'."""
    quantum = Decimal(1).scaleb(-decimals)
    rounded = to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{rounded}%"
