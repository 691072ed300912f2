"""
SMSF Contribution Cap Tracker

Sums a member's contributions for a financial year against the
concessional and non-concessional caps, and works out how much unused
concessional cap can be carried forward from earlier years.

Carry-forward rules:
- Only members whose total super balance is below the threshold
  ($500,000) may use it.
- Only the `carry_forward_years` (5) financial years immediately before
  the current one count, and only years flagged eligible with a
  positive unused amount. Older or later records are ignored.
"""

from decimal import Decimal
from typing import Any, Iterable, Optional

from family_accountant.calculators.financial_year import (
    parse_financial_year,
    previous_financial_years,
)
from family_accountant.calculators.rates import get_rates
from family_accountant.calculators.rounding import percent_of
from family_accountant.config import get_settings
from family_accountant.models.smsf import (
    CapUsage,
    CapWarningLevel,
    CarryForwardRecord,
    CarryForwardSummary,
    CarryForwardYear,
    ContributionCapSummary,
    ContributionLine,
    ContributionRecord,
    ContributionType,
)
from family_accountant.models.tax import TaxYearRates
from family_accountant.validation import ZERO, to_decimal


def total_by_type(
    contributions: Iterable[ContributionRecord],
    contribution_type: ContributionType,
) -> Decimal:
    return sum(
        (c.amount for c in contributions if c.contribution_type == contribution_type),
        ZERO,
    )


def cap_usage(
    contributed: Decimal,
    cap: Decimal,
    warning_percent: Optional[float] = None,
) -> CapUsage:
    """Usage of a single cap."""
    if warning_percent is None:
        warning_percent = get_settings().app.cap_warning_percent

    # Rounded percentage is for display; levels use the exact amounts.
    percentage = percent_of(contributed, cap)
    if contributed >= cap:
        level = CapWarningLevel.REACHED
    elif contributed * 100 >= cap * Decimal(str(warning_percent)):
        level = CapWarningLevel.APPROACHING
    else:
        level = CapWarningLevel.NONE

    return CapUsage(
        contributed=contributed,
        cap=cap,
        remaining=max(ZERO, cap - contributed),
        percentage_used=percentage,
        cap_exceeded=contributed > cap,
        warning_level=level,
    )


def carry_forward_summary(
    financial_year: str,
    total_super_balance: Decimal,
    records: Iterable[CarryForwardRecord],
    rates: TaxYearRates,
) -> CarryForwardSummary:
    """Unused concessional cap available from prior years."""
    eligible = total_super_balance < rates.carry_forward_balance_threshold
    window = set(previous_financial_years(financial_year, rates.carry_forward_years))

    recent = [r for r in records if r.financial_year in window]
    recent.sort(key=lambda r: r.financial_year, reverse=True)

    breakdown = [
        CarryForwardYear(financial_year=r.financial_year, amount=r.unused_amount)
        for r in recent
        if r.eligible_for_carry_forward and r.unused_amount > 0
    ]
    available = sum((b.amount for b in breakdown), ZERO) if eligible else ZERO

    return CarryForwardSummary(
        eligible=eligible,
        available=available,
        breakdown=breakdown,
    )


def _warnings(label: str, usage: CapUsage) -> list[str]:
    if usage.cap_exceeded:
        return [
            f"{label} cap exceeded by ${usage.contributed - usage.cap:,.0f} "
            f"({usage.percentage_used}% used)"
        ]
    if usage.warning_level == CapWarningLevel.REACHED:
        return [f"{label} cap fully used"]
    if usage.warning_level == CapWarningLevel.APPROACHING:
        return [
            f"Approaching {label.lower()} cap: {usage.percentage_used}% used, "
            f"${usage.remaining:,.0f} remaining"
        ]
    return []


def summarise_contributions(
    member_name: str,
    financial_year: str,
    contributions: Iterable[ContributionRecord],
    total_super_balance: Any = ZERO,
    carry_forward: Iterable[CarryForwardRecord] = (),
    rates: Optional[TaxYearRates] = None,
) -> ContributionCapSummary:
    """
    Build a member's contribution cap position for one financial year.

    Contributions recorded against other years are ignored.
    """
    parse_financial_year(financial_year)
    rates = rates or get_rates(financial_year)
    balance = to_decimal(total_super_balance)

    year_contributions = [
        c for c in contributions if c.financial_year == financial_year
    ]

    concessional = cap_usage(
        total_by_type(year_contributions, ContributionType.CONCESSIONAL),
        rates.concessional_cap,
    )
    non_concessional = cap_usage(
        total_by_type(year_contributions, ContributionType.NON_CONCESSIONAL),
        rates.non_concessional_cap,
    )
    carried = carry_forward_summary(financial_year, balance, carry_forward, rates)

    return ContributionCapSummary(
        member_name=member_name,
        financial_year=financial_year,
        total_super_balance=balance,
        concessional=concessional,
        non_concessional=non_concessional,
        carry_forward=carried,
        effective_concessional_cap=rates.concessional_cap + carried.available,
        warnings=(
            _warnings("Concessional", concessional)
            + _warnings("Non-concessional", non_concessional)
        ),
        contributions=[
            ContributionLine(
                date=c.date,
                contribution_type=c.contribution_type,
                amount=c.amount,
                description=c.description,
            )
            for c in year_contributions
        ],
    )
