"""
Versioned Tax Rates Table

Every legislated figure the calculators use, keyed by financial year.

DESIGN DECISION: A year we have no record for does not fail. It uses
the nearest year we do have (newest for future years, oldest for past
years) and logs a `rates_fallback` warning, so results for a new
financial year keep working until the table is updated.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

import structlog
from pydantic import TypeAdapter

from family_accountant.calculators.financial_year import parse_financial_year
from family_accountant.config import get_settings
from family_accountant.models.tax import SurchargeTier, TaxBracket, TaxYearRates

logger = structlog.get_logger(__name__)

D = Decimal

# Resident rates. Surcharge tiers are singles thresholds.
RATES_2023_24 = TaxYearRates(
    financial_year="2023-24",
    brackets=(
        TaxBracket(threshold=D("0"), rate=D("0")),
        TaxBracket(threshold=D("18200"), rate=D("0.19")),
        TaxBracket(threshold=D("45000"), rate=D("0.325"), base_tax=D("5092")),
        TaxBracket(threshold=D("120000"), rate=D("0.37"), base_tax=D("29467")),
        TaxBracket(threshold=D("180000"), rate=D("0.45"), base_tax=D("51667")),
    ),
    medicare_levy_rate=D("0.02"),
    surcharge_tiers=(
        SurchargeTier(threshold=D("93000"), rate=D("0.01")),
        SurchargeTier(threshold=D("108000"), rate=D("0.0125")),
        SurchargeTier(threshold=D("144000"), rate=D("0.015")),
    ),
    concessional_cap=D("27500"),
    non_concessional_cap=D("110000"),
)

RATES_2024_25 = TaxYearRates(
    financial_year="2024-25",
    brackets=(
        TaxBracket(threshold=D("0"), rate=D("0")),
        TaxBracket(threshold=D("18200"), rate=D("0.16")),
        TaxBracket(threshold=D("45000"), rate=D("0.30"), base_tax=D("4288")),
        TaxBracket(threshold=D("135000"), rate=D("0.37"), base_tax=D("31288")),
        TaxBracket(threshold=D("190000"), rate=D("0.45"), base_tax=D("51638")),
    ),
    medicare_levy_rate=D("0.02"),
    surcharge_tiers=(
        SurchargeTier(threshold=D("93000"), rate=D("0.01")),
        SurchargeTier(threshold=D("108000"), rate=D("0.0125")),
        SurchargeTier(threshold=D("144000"), rate=D("0.015")),
    ),
    concessional_cap=D("30000"),
    non_concessional_cap=D("120000"),
)

BUILTIN_RATES: dict[str, TaxYearRates] = {
    rates.financial_year: rates for rates in (RATES_2023_24, RATES_2024_25)
}


class RatesTable:
    """
    Lookup of TaxYearRates by financial year.

    Usage:
        table = RatesTable(BUILTIN_RATES)
        rates = table.get("2024-25")
    """

    def __init__(self, rates: dict[str, TaxYearRates]):
        if not rates:
            raise ValueError("Rates table cannot be empty")
        for key, value in rates.items():
            if key != value.financial_year:
                raise ValueError(
                    f"Rates keyed as {key} are for {value.financial_year}"
                )
        self._rates = dict(sorted(rates.items(), key=lambda kv: kv[1].start_year))

    @property
    def financial_years(self) -> list[str]:
        return list(self._rates)

    def get(self, financial_year: str) -> TaxYearRates:
        """
        Rates for `financial_year`, or the nearest known year.

        Raises:
            InvalidFinancialYearError: If `financial_year` is malformed
        """
        if financial_year in self._rates:
            return self._rates[financial_year]

        start = parse_financial_year(financial_year)
        known = list(self._rates.values())
        if start > known[-1].start_year:
            chosen = known[-1]
        elif start < known[0].start_year:
            chosen = known[0]
        else:
            # A gap inside the table: use the latest year before it
            chosen = [r for r in known if r.start_year <= start][-1]

        logger.warning(
            "rates_fallback",
            requested=financial_year,
            using=chosen.financial_year,
        )
        return chosen

    @classmethod
    def from_json_file(cls, path: str | Path) -> 'RatesTable':
        """
        Load a table from JSON: {"2025-26": {...TaxYearRates fields...}}.

        Years in the file replace built-in years; built-in years not in
        the file are kept.
        """
        adapter = TypeAdapter(dict[str, TaxYearRates])
        loaded = adapter.validate_json(Path(path).read_text(encoding="utf-8"))
        return cls({**BUILTIN_RATES, **loaded})


@lru_cache()
def default_rates_table() -> RatesTable:
    """
    The table configured for this process (cached).

    Uses APP_RATES_FILE when set, the built-in table otherwise.
    """
    rates_file = get_settings().app.rates_file
    if rates_file:
        logger.info("rates_table_loaded", path=rates_file)
        return RatesTable.from_json_file(rates_file)
    return RatesTable(BUILTIN_RATES)


def get_rates(financial_year: Optional[str] = None) -> TaxYearRates:
    """Rates for a financial year (the configured default year if omitted)."""
    financial_year = financial_year or get_settings().app.default_financial_year
    return default_rates_table().get(financial_year)
