"""Household transaction records used for tax summaries."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from family_accountant.models.types import Money


class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class Transaction(BaseModel):
    """
    A row of transactions.

    `category` is the joined category name, if any.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    id: Optional[str] = None
    date: dt.date
    description: str = ""
    amount: Money
    transaction_type: TransactionType
    payee: Optional[str] = None
    category: Optional[str] = None
