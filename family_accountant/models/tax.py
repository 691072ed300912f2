"""
Tax Models

Rates tables and calculation results for personal income tax and
capital gains tax.

DESIGN DECISION: Rates are data, not code. Every number that changes
when the government changes the law lives in a TaxYearRates record
keyed by financial year, so a new year is a new record rather than a
new branch in a calculator.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from family_accountant.models.types import Money


# =============================================================================
# ENUMS
# =============================================================================

class AssetType(str, Enum):
    """Asset classes accepted by the CGT calculator."""
    SHARES = "shares"
    PROPERTY = "property"
    CRYPTO = "crypto"
    OTHER = "other"


# =============================================================================
# RATES TABLE
# =============================================================================

class TaxBracket(BaseModel):
    """
    One band of the progressive schedule.

    Income above `threshold` is taxed at `rate`, on top of `base_tax`
    (the tax payable on income exactly at the threshold).
    """
    model_config = ConfigDict(frozen=True)

    threshold: Decimal = Field(..., ge=0)
    rate: Decimal = Field(..., ge=0, le=1)
    base_tax: Decimal = Field(default=Decimal("0"), ge=0)


class SurchargeTier(BaseModel):
    """Medicare levy surcharge tier: `rate` of total income above `threshold`."""
    model_config = ConfigDict(frozen=True)

    threshold: Decimal = Field(..., ge=0)
    rate: Decimal = Field(..., ge=0, le=1)


class TaxYearRates(BaseModel):
    """All legislated figures the calculators need for one financial year."""
    model_config = ConfigDict(frozen=True)

    financial_year: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    brackets: tuple[TaxBracket, ...]
    medicare_levy_rate: Decimal = Field(default=Decimal("0.02"), ge=0, le=1)
    surcharge_tiers: tuple[SurchargeTier, ...] = ()

    # Superannuation
    concessional_cap: Decimal = Field(..., gt=0)
    non_concessional_cap: Decimal = Field(..., gt=0)
    carry_forward_balance_threshold: Decimal = Field(default=Decimal("500000"), gt=0)
    carry_forward_years: int = Field(default=5, ge=0)

    @model_validator(mode='after')
    def validate_schedule(self) -> 'TaxYearRates':
        """Brackets must start at zero and rise strictly."""
        if not self.brackets:
            raise ValueError("At least one tax bracket is required")
        if self.brackets[0].threshold != 0:
            raise ValueError("First tax bracket must start at 0")

        thresholds = [b.threshold for b in self.brackets]
        if thresholds != sorted(set(thresholds)):
            raise ValueError("Tax bracket thresholds must be strictly increasing")

        tiers = [t.threshold for t in self.surcharge_tiers]
        if tiers != sorted(set(tiers)):
            raise ValueError("Surcharge tier thresholds must be strictly increasing")

        return self

    @property
    def start_year(self) -> int:
        return int(self.financial_year[:4])


# =============================================================================
# RESULTS
# =============================================================================

class TaxCalculation(BaseModel):
    """
    Result of an income tax calculation.

    Tax figures are rounded to whole dollars, percentages to one
    decimal place. Take-home pay is computed from the unrounded total.
    """

    financial_year: str
    taxable_income: Money
    income_tax: Money
    medicare_levy: Money = Decimal("0")
    medicare_surcharge: Money = Decimal("0")
    total_tax: Money
    marginal_rate: Decimal = Field(..., description="Marginal rate in percent")
    effective_rate: Decimal = Field(..., description="Total tax / income in percent")
    take_home: Money


class CGTCalculation(BaseModel):
    """Result of a capital gains calculation for a single disposal."""

    asset_type: AssetType = AssetType.SHARES
    cost_base: Money
    sale_price: Money
    capital_gain: Money = Field(
        ...,
        description="Sale price minus cost base (negative for a loss)"
    )
    capital_loss: Money = Decimal("0")
    months_held: Optional[int] = Field(
        default=None,
        description="Whole calendar months held (not computed for losses)"
    )
    eligible_for_discount: bool = False
    discount_percent: Decimal = Decimal("0")
    taxable_gain: Money
    note: str

    @property
    def is_loss(self) -> bool:
        return self.capital_gain <= 0
