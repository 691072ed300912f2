"""Tests for the income tax calculator and rates table."""

import json
from decimal import Decimal

import pytest

from family_accountant.calculators import (
    InvalidFinancialYearError,
    RatesTable,
    calculate_base_tax,
    calculate_income_tax,
    default_rates_table,
    get_rates,
)
from family_accountant.calculators.rates import BUILTIN_RATES, RATES_2024_25


class TestBaseTax:
    """Bracket arithmetic for 2024-25."""

    @pytest.mark.parametrize("income,expected", [
        (0, Decimal("0")),
        (18200, Decimal("0")),
        (45000, Decimal("4288")),
        (135000, Decimal("31288")),
        (190000, Decimal("51638")),
        (100000, Decimal("20788")),
        (200000, Decimal("56138")),
    ])
    def test_bracket_boundaries(self, income, expected):
        """Thresholds match the published base tax for each bracket."""
        assert calculate_base_tax(income, RATES_2024_25) == expected

    def test_negative_income_is_zero_tax(self):
        assert calculate_base_tax(-5000, RATES_2024_25) == 0

    def test_tax_never_decreases_as_income_rises(self):
        """Progressive brackets: more income never means less tax."""
        previous = Decimal("0")
        for income in range(0, 260000, 2500):
            tax = calculate_base_tax(income, RATES_2024_25)
            assert tax >= previous
            previous = tax

    def test_previous_year_brackets(self):
        """2023-24 used the old 19% / 32.5% brackets."""
        rates = get_rates("2023-24")
        assert calculate_base_tax(100000, rates) == Decimal("22967")


class TestIncomeTax:
    """Tests for calculate_income_tax."""

    def test_middle_income(self):
        result = calculate_income_tax(100000, "2024-25")

        assert result.financial_year == "2024-25"
        assert result.income_tax == Decimal("20788")
        assert result.medicare_levy == Decimal("2000")
        assert result.medicare_surcharge == Decimal("0")
        assert result.total_tax == Decimal("22788")
        assert result.marginal_rate == Decimal("30.0")
        assert result.effective_rate == Decimal("22.8")
        assert result.take_home == Decimal("77212.00")

    def test_tax_free_threshold(self):
        result = calculate_income_tax(18200, "2024-25", include_medicare=False)
        assert result.total_tax == 0
        assert result.marginal_rate == Decimal("0.0")

    def test_surcharge_applies_without_private_cover(self):
        """$100,000 without hospital cover is in the 1% surcharge tier."""
        result = calculate_income_tax(100000, "2024-25", has_phi=False)
        assert result.medicare_surcharge == Decimal("1000")
        assert result.total_tax == Decimal("23788")

    def test_top_surcharge_tier(self):
        result = calculate_income_tax(150000, "2024-25", has_phi=False)
        assert result.medicare_surcharge == Decimal("2250")

    def test_no_surcharge_below_threshold(self):
        result = calculate_income_tax(90000, "2024-25", has_phi=False)
        assert result.medicare_surcharge == 0

    def test_exclude_medicare_ignores_surcharge(self):
        result = calculate_income_tax(150000, "2024-25", include_medicare=False, has_phi=False)
        assert result.medicare_levy == 0
        assert result.medicare_surcharge == 0
        assert result.total_tax == result.income_tax

    def test_zero_and_negative_income(self):
        """Zero income has a zero effective rate rather than dividing by zero."""
        for income in (0, -10000):
            result = calculate_income_tax(income, "2024-25")
            assert result.taxable_income == 0
            assert result.total_tax == 0
            assert result.effective_rate == 0

    def test_accepts_formatted_strings(self):
        result = calculate_income_tax("$45,000", "2024-25", include_medicare=False)
        assert result.income_tax == Decimal("4288")

    def test_default_year_comes_from_settings(self, monkeypatch):
        monkeypatch.setenv("APP_DEFAULT_FINANCIAL_YEAR", "2023-24")
        result = calculate_income_tax(100000)
        assert result.financial_year == "2023-24"

    def test_unknown_year_uses_nearest_rates(self):
        """A future year falls back to the newest rates and reports which year was used."""
        result = calculate_income_tax(100000, "2030-31")
        assert result.financial_year == "2024-25"
        assert result.income_tax == Decimal("20788")

    def test_malformed_year_is_rejected(self):
        with pytest.raises(InvalidFinancialYearError):
            calculate_income_tax(100000, "2024")


class TestRatesTable:
    """Tests for the versioned rates table."""

    def test_builtin_years(self):
        table = RatesTable(BUILTIN_RATES)
        assert table.financial_years == ["2023-24", "2024-25"]

    def test_past_year_uses_oldest(self):
        table = RatesTable(BUILTIN_RATES)
        assert table.get("2015-16").financial_year == "2023-24"

    def test_empty_table_rejected(self):
        with pytest.raises(ValueError):
            RatesTable({})

    def test_mismatched_key_rejected(self):
        with pytest.raises(ValueError):
            RatesTable({"2025-26": RATES_2024_25})

    def test_json_override_adds_years(self, tmp_path):
        """Years in the file are added on top of the built-in table."""
        override = RATES_2024_25.model_dump(mode="json")
        override["financial_year"] = "2025-26"
        override["brackets"][1]["rate"] = "0.15"
        path = tmp_path / "rates.json"
        path.write_text(json.dumps({"2025-26": override}))

        table = RatesTable.from_json_file(path)

        assert table.financial_years == ["2023-24", "2024-25", "2025-26"]
        assert table.get("2025-26").brackets[1].rate == Decimal("0.15")
        assert calculate_base_tax(45000, table.get("2025-26")) == Decimal("4020")

    def test_rates_file_setting(self, tmp_path, monkeypatch):
        override = RATES_2024_25.model_dump(mode="json")
        override["financial_year"] = "2025-26"
        path = tmp_path / "rates.json"
        path.write_text(json.dumps({"2025-26": override}))
        monkeypatch.setenv("APP_RATES_FILE", str(path))

        assert "2025-26" in default_rates_table().financial_years

    def test_invalid_schedule_rejected(self):
        """Brackets must start at zero."""
        data = RATES_2024_25.model_dump(mode="json")
        data["brackets"] = data["brackets"][1:]
        with pytest.raises(ValueError):
            type(RATES_2024_25).model_validate(data)
