"""Shared annotated field types."""

from decimal import Decimal
from typing import Annotated

from pydantic import BeforeValidator

from family_accountant.validation.coercion import to_decimal

# Dollar amounts. Unreadable input becomes 0 (see validation.coercion).
Money = Annotated[Decimal, BeforeValidator(to_decimal)]
