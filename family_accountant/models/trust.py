"""
Family Trust Models

Stored trust records (trust, beneficiaries, income, distributions)
and the scenario models produced by the distribution modeller.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from family_accountant.models.types import Money


class TrustIncomeType(str, Enum):
    """Income types recorded against the trust."""
    DIVIDEND = "dividend"
    INTEREST = "interest"
    RENT = "rent"
    CAPITAL_GAIN = "capital_gain"
    OTHER = "other"


class InvalidSplitError(ValueError):
    """A distribution split that does not allocate exactly 100%."""
    pass


# =============================================================================
# STORED RECORDS
# =============================================================================

class Trust(BaseModel):
    """A row of trusts."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    id: str
    name: str = Field(..., min_length=1)
    trustee_name: Optional[str] = None


class TrustBeneficiary(BaseModel):
    """A row of trust_beneficiaries."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    id: str
    trust_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    beneficiary_type: str = "individual"
    is_active: bool = True


class TrustIncomeRecord(BaseModel):
    """A row of trust_income."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    trust_id: Optional[str] = None
    financial_year: str
    date: Optional[dt.date] = None
    source: Optional[str] = None
    income_type: TrustIncomeType = TrustIncomeType.OTHER
    amount: Money
    franking_credits: Money = Decimal("0")


class TrustDistributionRecord(BaseModel):
    """
    A row of trust_distributions.

    `beneficiary_name` comes from the joined trust_beneficiaries row.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    trust_id: Optional[str] = None
    beneficiary_id: Optional[str] = None
    beneficiary_name: str = "Unknown"
    financial_year: str
    date: Optional[dt.date] = None
    amount: Money
    franking_credits_streamed: Money = Decimal("0")
    distribution_type: Optional[str] = None
    is_paid: bool = False


# =============================================================================
# DISTRIBUTION MODELLER
# =============================================================================

class DistributionSplit(BaseModel):
    """
    Percentage of the distribution each beneficiary receives.

    Percentages are keyed by beneficiary name and must add up to 100.
    Order of the mapping is the display order ("60/40").
    """
    model_config = ConfigDict(frozen=True)

    percentages: dict[str, Decimal]

    @field_validator('percentages')
    @classmethod
    def validate_percentages(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        check_percentages(v)
        return v

    @property
    def label(self) -> str:
        return "/".join(_format_pct(p) for p in self.percentages.values())

    @property
    def sort_key(self) -> tuple[tuple[str, Decimal], ...]:
        """Order-independent identity: the same shares compare equal whatever the mapping order."""
        return tuple(sorted(self.percentages.items()))

    @classmethod
    def of(cls, beneficiaries: list[str], percents: list) -> 'DistributionSplit':
        """Build a split from parallel lists of names and percentages."""
        if len(beneficiaries) != len(percents):
            raise InvalidSplitError("Each beneficiary needs exactly one percentage")
        percentages = {
            name: Decimal(str(pct)) for name, pct in zip(beneficiaries, percents)
        }
        # Checked here as well so callers see InvalidSplitError rather
        # than pydantic's ValidationError wrapper
        check_percentages(percentages)
        return cls(percentages=percentages)


def check_percentages(percentages: dict[str, Decimal]) -> None:
    """
    Raises:
        InvalidSplitError: If a percentage is outside 0-100 or the total is not 100
    """
    if len(percentages) < 1:
        raise InvalidSplitError("A split needs at least one beneficiary")
    for name, pct in percentages.items():
        if pct < 0 or pct > 100:
            raise InvalidSplitError(
                f"Percentage for {name} must be between 0 and 100, got {pct}"
            )
    total = sum(percentages.values(), Decimal("0"))
    if total != 100:
        raise InvalidSplitError(f"Split must total 100%, got {_format_pct(total)}%")


def _format_pct(value: Decimal) -> str:
    """50 -> '50', 33.5 -> '33.5'."""
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return str(int(normalized))
    return format(normalized, "f")


class BeneficiaryAllocation(BaseModel):
    """What one beneficiary receives under a scenario and the tax it costs them."""

    name: str
    percentage: Decimal
    other_income: Money
    distribution: Money
    franking_credits: Money
    taxable_income: Money = Field(
        ...,
        description="Other income + distribution + franking credits (grossed up)"
    )
    tax_before_offset: Money
    tax: Money = Field(
        ...,
        description="Tax after the franking credit offset, floored at 0"
    )


class DistributionScenario(BaseModel):
    """One split and its combined tax outcome."""

    split: str
    allocations: list[BeneficiaryAllocation]
    total_tax: Money

    def allocation_for(self, name: str) -> BeneficiaryAllocation:
        for allocation in self.allocations:
            if allocation.name == name:
                return allocation
        raise KeyError(name)


class DistributionRecommendation(BaseModel):
    """The lowest-tax scenario compared against the even split."""

    optimal_split: str
    allocations: list[BeneficiaryAllocation]
    total_tax: Money
    baseline_split: str
    baseline_total_tax: Money
    tax_savings_vs_baseline: Money


class DistributionModel(BaseModel):
    """Full output of the distribution modeller."""

    financial_year: str
    distributable_amount: Money
    franking_credits: Money
    other_income: dict[str, Money]
    scenarios: list[DistributionScenario]
    recommendation: Optional[DistributionRecommendation] = None


# =============================================================================
# TRUST SUMMARIES
# =============================================================================

class BeneficiaryDistributionTotal(BaseModel):
    """Distributions made to one beneficiary so far this year."""

    name: str
    amount: Money
    franking: Money


class TrustSummary(BaseModel):
    """Year-to-date position of the family trust."""

    trust_name: str
    trustee_name: Optional[str] = None
    financial_year: str
    income_ytd: Money
    franking_credits_received: Money
    distributions_ytd: Money
    franking_credits_distributed: Money
    distributable_amount: Money = Field(
        ...,
        description="Income not yet distributed (may be negative if over-distributed)"
    )
    franking_credits_available: Money
    days_until_eofy: int
    eofy_warning: Optional[str] = None
    beneficiaries: list[str] = Field(default_factory=list)
    distributions_by_beneficiary: list[BeneficiaryDistributionTotal] = Field(default_factory=list)


class FrankingCreditBalance(BaseModel):
    """Franking credits received by the trust against those streamed out."""

    financial_year: str
    credits_received: Money
    credits_distributed: Money
    balance: Money
    streaming_note: str
