"""
Income Tax Calculator

Resident individual income tax, Medicare levy and Medicare levy
surcharge for one financial year.

Brackets are applied progressively: income above a bracket's threshold
is taxed at that bracket's rate on top of the tax accumulated below it.
The levy and surcharge are flat percentages of the whole taxable income.
"""

from decimal import Decimal
from typing import Any, Optional

from family_accountant.calculators.rates import get_rates
from family_accountant.calculators.rounding import (
    HUNDRED,
    TENTH,
    percent_of,
    round_cents,
    round_dollars,
)
from family_accountant.models.tax import TaxBracket, TaxCalculation, TaxYearRates
from family_accountant.validation import ZERO, to_decimal


def applicable_bracket(income: Decimal, rates: TaxYearRates) -> TaxBracket:
    """The highest bracket whose threshold `income` exceeds (the first for 0)."""
    bracket = rates.brackets[0]
    for candidate in rates.brackets[1:]:
        if income > candidate.threshold:
            bracket = candidate
        else:
            break
    return bracket


def calculate_base_tax(taxable_income: Any, rates: Optional[TaxYearRates] = None) -> Decimal:
    """
    Unrounded income tax before levies and offsets.

    Negative or unreadable income is treated as zero.
    """
    rates = rates or get_rates()
    income = max(to_decimal(taxable_income), ZERO)
    bracket = applicable_bracket(income, rates)
    if bracket.rate == 0:
        return bracket.base_tax
    return bracket.base_tax + (income - bracket.threshold) * bracket.rate


def calculate_medicare_levy(taxable_income: Decimal, rates: TaxYearRates) -> Decimal:
    return max(taxable_income, ZERO) * rates.medicare_levy_rate


def calculate_medicare_surcharge(taxable_income: Decimal, rates: TaxYearRates) -> Decimal:
    """Surcharge for someone without private hospital cover."""
    rate = ZERO
    for tier in rates.surcharge_tiers:
        if taxable_income > tier.threshold:
            rate = tier.rate
    return taxable_income * rate


def calculate_income_tax(
    taxable_income: Any,
    financial_year: Optional[str] = None,
    include_medicare: bool = True,
    has_phi: bool = True,
    rates: Optional[TaxYearRates] = None,
) -> TaxCalculation:
    """
    Calculate income tax for a taxable income.

    Args:
        taxable_income: Taxable income in dollars. Negative or unreadable
            values are treated as zero.
        financial_year: "YYYY-YY"; the configured default year if omitted
        include_medicare: Add the Medicare levy (and surcharge if applicable)
        has_phi: Holds private health insurance (no surcharge if True)
        rates: Explicit rates, bypassing the rates table

    Returns:
        TaxCalculation with figures rounded for display
    """
    rates = rates or get_rates(financial_year)
    income = max(to_decimal(taxable_income), ZERO)

    base_tax = calculate_base_tax(income, rates)

    medicare_levy = ZERO
    surcharge = ZERO
    if include_medicare:
        medicare_levy = calculate_medicare_levy(income, rates)
        if not has_phi:
            surcharge = calculate_medicare_surcharge(income, rates)

    total_tax = base_tax + medicare_levy + surcharge
    marginal = applicable_bracket(income, rates).rate * HUNDRED

    return TaxCalculation(
        financial_year=rates.financial_year,
        taxable_income=income,
        income_tax=round_dollars(base_tax),
        medicare_levy=round_dollars(medicare_levy),
        medicare_surcharge=round_dollars(surcharge),
        total_tax=round_dollars(total_tax),
        marginal_rate=marginal.quantize(TENTH),
        effective_rate=percent_of(total_tax, income),
        take_home=round_cents(income - total_tax),
    )
