"""
Calculators Package

Pure functions over Decimal amounts. Nothing here touches storage or
the network, so the same calculations back the tools, the agent and
the Streamlit screens.
"""

from family_accountant.calculators.cgt import (
    CGTInputError,
    calculate_cgt,
    is_discount_eligible,
    months_held,
)
from family_accountant.calculators.contribution_caps import (
    cap_usage,
    carry_forward_summary,
    summarise_contributions,
)
from family_accountant.calculators.distribution import (
    PRESET_SPLITS,
    even_split,
    evaluate_split,
    model_distribution,
    preset_splits,
)
from family_accountant.calculators.financial_year import (
    InvalidFinancialYearError,
    days_until_eofy,
    financial_year_bounds,
    financial_year_for,
    parse_financial_year,
    previous_financial_years,
)
from family_accountant.calculators.income_tax import (
    calculate_base_tax,
    calculate_income_tax,
)
from family_accountant.calculators.rates import (
    RatesTable,
    default_rates_table,
    get_rates,
)
from family_accountant.calculators.super_rules import (
    bring_forward_availability,
    division_293,
    expected_employer_super,
    low_income_super_tax_offset,
    preservation_age,
    super_guarantee_rate,
)

__all__ = [
    # Tax
    "calculate_base_tax",
    "calculate_income_tax",
    "RatesTable",
    "default_rates_table",
    "get_rates",
    # CGT
    "CGTInputError",
    "calculate_cgt",
    "is_discount_eligible",
    "months_held",
    # Super
    "cap_usage",
    "carry_forward_summary",
    "summarise_contributions",
    "bring_forward_availability",
    "division_293",
    "expected_employer_super",
    "low_income_super_tax_offset",
    "preservation_age",
    "super_guarantee_rate",
    # Trust
    "PRESET_SPLITS",
    "even_split",
    "evaluate_split",
    "model_distribution",
    "preset_splits",
    # Financial year
    "InvalidFinancialYearError",
    "days_until_eofy",
    "financial_year_bounds",
    "financial_year_for",
    "parse_financial_year",
    "previous_financial_years",
]
