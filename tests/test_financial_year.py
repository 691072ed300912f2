"""Tests for financial year helpers."""

from datetime import date

import pytest

from family_accountant.calculators import (
    InvalidFinancialYearError,
    days_until_eofy,
    financial_year_bounds,
    financial_year_for,
    parse_financial_year,
    previous_financial_years,
)


class TestFinancialYear:
    def test_year_starts_in_july(self):
        assert financial_year_for(date(2024, 7, 1)) == "2024-25"
        assert financial_year_for(date(2024, 6, 30)) == "2023-24"

    def test_century_rollover(self):
        assert financial_year_for(date(2099, 8, 1)) == "2099-00"
        assert parse_financial_year("2099-00") == 2099

    @pytest.mark.parametrize("value", ["2024", "2024-26", "24-25", "", "2024/25"])
    def test_malformed(self, value):
        with pytest.raises(InvalidFinancialYearError):
            parse_financial_year(value)

    def test_whitespace_tolerated(self):
        assert parse_financial_year(" 2024-25 ") == 2024

    def test_bounds(self):
        assert financial_year_bounds("2024-25") == (date(2024, 7, 1), date(2025, 6, 30))

    def test_previous_years(self):
        assert previous_financial_years("2024-25", 3) == ["2023-24", "2022-23", "2021-22"]


class TestDaysUntilEOFY:
    def test_on_the_day(self):
        assert days_until_eofy(date(2025, 6, 30)) == 0

    def test_start_of_year(self):
        assert days_until_eofy(date(2024, 7, 1)) == 364

    def test_mid_may(self):
        assert days_until_eofy(date(2025, 5, 15)) == 46
