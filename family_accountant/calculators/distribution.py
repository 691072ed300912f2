"""
Trust Distribution Scenario Modeller

Compares ways of splitting a trust's distributable income between
beneficiaries and picks the split with the lowest combined tax.

For each split, every beneficiary receives their percentage of the
distributable amount and the same percentage of the franking credits.
Their taxable income is grossed up (other income + distribution +
franking credits), taxed on the resident brackets, and the franking
credits are then used as an offset. The offset cannot take tax below
zero (excess credits are not refunded here).

GUARANTEES:
- The even split is always evaluated, so the recommendation is never
  worse than it.
- Ties are broken on the split percentages, so the order scenarios are
  supplied in never changes the recommendation.
"""

from decimal import ROUND_DOWN, Decimal
from typing import Any, Optional, Sequence

import structlog

from family_accountant.calculators.income_tax import calculate_base_tax
from family_accountant.calculators.rates import get_rates
from family_accountant.models.tax import TaxYearRates
from family_accountant.models.trust import (
    BeneficiaryAllocation,
    DistributionModel,
    DistributionRecommendation,
    DistributionScenario,
    DistributionSplit,
    InvalidSplitError,
)
from family_accountant.validation import ZERO, to_decimal

logger = structlog.get_logger(__name__)

HUNDRED = Decimal("100")

# Presets offered by the modeller, as (first beneficiary %, second beneficiary %)
PRESET_SPLITS: tuple[tuple[int, int], ...] = (
    (50, 50),
    (60, 40),
    (70, 30),
    (40, 60),
    (100, 0),
    (0, 100),
)


def preset_splits(beneficiaries: Sequence[str]) -> list[DistributionSplit]:
    """The six preset splits for a pair of beneficiaries."""
    if len(beneficiaries) != 2:
        raise InvalidSplitError("Preset splits are defined for exactly two beneficiaries")
    return [DistributionSplit.of(list(beneficiaries), list(p)) for p in PRESET_SPLITS]


def even_split(beneficiaries: Sequence[str]) -> DistributionSplit:
    """Equal shares; any rounding remainder goes to the first beneficiary."""
    if not beneficiaries:
        raise InvalidSplitError("At least one beneficiary is required")
    share = (HUNDRED / len(beneficiaries)).quantize(Decimal("0.01"), rounding=ROUND_DOWN)
    shares = [share] * len(beneficiaries)
    shares[0] += HUNDRED - share * len(beneficiaries)
    return DistributionSplit.of(list(beneficiaries), shares)


def evaluate_split(
    split: DistributionSplit,
    distributable_amount: Decimal,
    franking_credits: Decimal,
    other_income: dict[str, Decimal],
    rates: TaxYearRates,
) -> DistributionScenario:
    """Tax outcome of one split."""
    if set(split.percentages) != set(other_income):
        raise InvalidSplitError(
            f"Split {split.label} names {sorted(split.percentages)} "
            f"but other income was given for {sorted(other_income)}"
        )

    allocations = []
    for name, percentage in split.percentages.items():
        fraction = percentage / HUNDRED
        distribution = distributable_amount * fraction
        franking = franking_credits * fraction
        taxable = other_income[name] + distribution + franking
        tax_before_offset = calculate_base_tax(taxable, rates)

        allocations.append(BeneficiaryAllocation(
            name=name,
            percentage=percentage,
            other_income=other_income[name],
            distribution=distribution,
            franking_credits=franking,
            taxable_income=taxable,
            tax_before_offset=tax_before_offset,
            tax=max(ZERO, tax_before_offset - franking),
        ))

    return DistributionScenario(
        split=split.label,
        allocations=allocations,
        total_tax=sum((a.tax for a in allocations), ZERO),
    )


def model_distribution(
    distributable_amount: Any,
    franking_credits: Any,
    other_income: dict[str, Any],
    splits: Optional[Sequence[DistributionSplit]] = None,
    financial_year: Optional[str] = None,
    rates: Optional[TaxYearRates] = None,
) -> DistributionModel:
    """
    Model distribution scenarios and recommend the lowest-tax split.

    Args:
        distributable_amount: Trust income still to be distributed
        franking_credits: Franking credits available to stream with it
        other_income: Each beneficiary's taxable income excluding the trust,
            keyed by name (in display order)
        splits: Splits to compare; the six presets if omitted
        financial_year: Year whose tax brackets apply
        rates: Explicit rates, bypassing the rates table

    Raises:
        InvalidSplitError: If a split names different beneficiaries
    """
    rates = rates or get_rates(financial_year)
    amount = to_decimal(distributable_amount)
    franking = to_decimal(franking_credits)
    incomes = {name: to_decimal(value) for name, value in other_income.items()}
    beneficiaries = list(incomes)

    candidates = list(splits) if splits else preset_splits(beneficiaries)
    baseline = even_split(beneficiaries)
    if not any(s.sort_key == baseline.sort_key for s in candidates):
        candidates.append(baseline)

    evaluated = [
        (split, evaluate_split(split, amount, franking, incomes, rates))
        for split in candidates
    ]

    best_split, best = min(
        evaluated,
        key=lambda pair: (pair[1].total_tax, pair[0].sort_key),
    )
    baseline_scenario = next(
        scenario for split, scenario in evaluated
        if split.sort_key == baseline.sort_key
    )

    logger.debug(
        "distribution_modelled",
        scenarios=len(evaluated),
        optimal_split=best.split,
        financial_year=rates.financial_year,
    )

    return DistributionModel(
        financial_year=rates.financial_year,
        distributable_amount=amount,
        franking_credits=franking,
        other_income=incomes,
        scenarios=[scenario for _, scenario in evaluated],
        recommendation=DistributionRecommendation(
            optimal_split=best.split,
            allocations=best.allocations,
            total_tax=best.total_tax,
            baseline_split=baseline_scenario.split,
            baseline_total_tax=baseline_scenario.total_tax,
            tax_savings_vs_baseline=baseline_scenario.total_tax - best.total_tax,
        ),
    )
