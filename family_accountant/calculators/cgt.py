"""
Capital Gains Tax Calculator

Gain on a single disposal, with the 50% CGT discount for assets held
at least 12 months.

DESIGN DECISION: Discount eligibility compares the sale date with the
first anniversary of acquisition instead of subtracting month numbers.
Subtracting months counts 31 Jan -> 1 Jan next year as 12 months even
though the asset was held for 11 months and a day.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from dateutil.relativedelta import relativedelta

from family_accountant.models.tax import AssetType, CGTCalculation
from family_accountant.validation import parse_date, to_decimal

CGT_DISCOUNT = Decimal("0.5")
DISCOUNT_HOLDING_MONTHS = 12


class CGTInputError(ValueError):
    """Dates that cannot describe a disposal."""
    pass


def months_held(acquisition_date: date, sale_date: date) -> int:
    """Whole calendar months between acquisition and sale."""
    delta = relativedelta(sale_date, acquisition_date)
    return delta.years * 12 + delta.months


def is_discount_eligible(acquisition_date: date, sale_date: date) -> bool:
    """Held for at least 12 months (sold on or after the first anniversary)."""
    anniversary = acquisition_date + relativedelta(months=DISCOUNT_HOLDING_MONTHS)
    return sale_date >= anniversary


def calculate_cgt(
    cost_base: Any,
    sale_price: Any,
    acquisition_date: Any,
    sale_date: Any,
    asset_type: AssetType | str = AssetType.SHARES,
) -> CGTCalculation:
    """
    Calculate the capital gain (or loss) on an asset sale.

    Args:
        cost_base: Original cost of the asset
        sale_price: Sale proceeds
        acquisition_date: Date acquired (date or "YYYY-MM-DD")
        sale_date: Date sold (date or "YYYY-MM-DD")
        asset_type: shares, property, crypto or other

    Raises:
        CGTInputError: If a date is unreadable or the sale precedes acquisition
    """
    try:
        acquired = parse_date(acquisition_date)
        sold = parse_date(sale_date)
    except ValueError as e:
        raise CGTInputError(str(e)) from e

    if sold < acquired:
        raise CGTInputError(
            f"Sale date {sold.isoformat()} is before acquisition date {acquired.isoformat()}"
        )

    asset = AssetType(asset_type)
    cost = to_decimal(cost_base)
    price = to_decimal(sale_price)
    gain = price - cost

    if gain <= 0:
        return CGTCalculation(
            asset_type=asset,
            cost_base=cost,
            sale_price=price,
            capital_gain=gain,
            capital_loss=abs(gain),
            taxable_gain=Decimal("0"),
            note="Capital loss can be carried forward to offset future capital gains",
        )

    eligible = is_discount_eligible(acquired, sold)
    discount = CGT_DISCOUNT if eligible else Decimal("0")

    return CGTCalculation(
        asset_type=asset,
        cost_base=cost,
        sale_price=price,
        capital_gain=gain,
        months_held=months_held(acquired, sold),
        eligible_for_discount=eligible,
        discount_percent=discount * 100,
        taxable_gain=gain * (1 - discount),
        note=(
            "CGT discount of 50% applied (held at least 12 months)"
            if eligible
            else "No CGT discount (held less than 12 months)"
        ),
    )
