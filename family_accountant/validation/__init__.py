"""Input coercion package."""

from family_accountant.validation.coercion import ZERO, parse_date, to_decimal

__all__ = ["ZERO", "parse_date", "to_decimal"]
