"""
Superannuation Rules

Smaller super calculations used alongside the cap tracker:
super guarantee rate, bring-forward eligibility, Division 293,
the low income super tax offset and preservation age.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel

from family_accountant.calculators.financial_year import parse_financial_year
from family_accountant.calculators.rates import get_rates
from family_accountant.validation import ZERO, parse_date, to_decimal

D = Decimal

# Total super balance limits for the non-concessional bring-forward rule
BRING_FORWARD_TSB_LIMIT = D("1900000")
BRING_FORWARD_TWO_YEAR_LIMIT = D("1680000")

DIVISION_293_THRESHOLD = D("250000")
DIVISION_293_RATE = D("0.15")

LISTO_INCOME_THRESHOLD = D("37000")
LISTO_RATE = D("0.15")
LISTO_MAX = D("500")


class BringForward(BaseModel):
    available: bool
    years_available: int
    max_amount: Decimal


class Division293(BaseModel):
    applies: bool
    taxable_amount: Decimal
    tax: Decimal


def super_guarantee_rate(financial_year: str) -> Decimal:
    """Employer super guarantee rate as a fraction."""
    start = parse_financial_year(financial_year)
    if start >= 2025:
        return D("0.12")
    if start >= 2024:
        return D("0.115")
    if start >= 2023:
        return D("0.11")
    if start >= 2022:
        return D("0.105")
    return D("0.10")


def expected_employer_super(annual_salary: Any, financial_year: str) -> Decimal:
    return to_decimal(annual_salary) * super_guarantee_rate(financial_year)


def bring_forward_availability(
    total_super_balance: Any,
    financial_year: Optional[str] = None,
) -> BringForward:
    """
    How much of future years' non-concessional cap can be brought forward.

    None at or above $1.9m, two years at or above $1.68m, three otherwise.
    """
    cap = get_rates(financial_year).non_concessional_cap
    balance = to_decimal(total_super_balance)

    if balance >= BRING_FORWARD_TSB_LIMIT:
        return BringForward(available=False, years_available=0, max_amount=cap)
    if balance >= BRING_FORWARD_TWO_YEAR_LIMIT:
        return BringForward(available=True, years_available=2, max_amount=cap * 2)
    return BringForward(available=True, years_available=3, max_amount=cap * 3)


def division_293(taxable_income: Any, concessional_contributions: Any) -> Division293:
    """
    Extra 15% tax on concessional contributions for high earners.

    Applies to the lesser of the amount over the threshold and the
    concessional contributions themselves.
    """
    income = to_decimal(taxable_income)
    concessional = max(to_decimal(concessional_contributions), ZERO)
    combined = income + concessional

    if combined <= DIVISION_293_THRESHOLD:
        return Division293(applies=False, taxable_amount=ZERO, tax=ZERO)

    taxable_amount = min(combined - DIVISION_293_THRESHOLD, concessional)
    return Division293(
        applies=True,
        taxable_amount=taxable_amount,
        tax=taxable_amount * DIVISION_293_RATE,
    )


def low_income_super_tax_offset(taxable_income: Any, concessional_contributions: Any) -> Decimal:
    """LISTO: 15% of concessional contributions, at most $500."""
    if to_decimal(taxable_income) > LISTO_INCOME_THRESHOLD:
        return ZERO
    concessional = max(to_decimal(concessional_contributions), ZERO)
    return min(concessional * LISTO_RATE, LISTO_MAX)


def preservation_age(date_of_birth: Any) -> int:
    """Age at which preserved super can be accessed on retirement."""
    born = parse_date(date_of_birth)
    if born.year <= 1960:
        return 55
    if born.year <= 1963:
        return 55 + (born.year - 1960)
    # Born 1 July 1964 or later
    if born < date(1964, 7, 1):
        return 59
    return 60
