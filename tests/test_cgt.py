"""Tests for the CGT calculator."""

from datetime import date
from decimal import Decimal

import pytest

from family_accountant.calculators import (
    CGTInputError,
    calculate_cgt,
    is_discount_eligible,
    months_held,
)
from family_accountant.models.tax import AssetType


class TestHoldingPeriod:
    """Tests for months_held and discount eligibility."""

    def test_whole_months(self):
        assert months_held(date(2022, 1, 15), date(2023, 3, 20)) == 14

    def test_partial_month_not_counted(self):
        assert months_held(date(2023, 1, 31), date(2024, 1, 30)) == 11

    def test_one_day_short_of_anniversary(self):
        """31 Jan -> 30 Jan next year is not 12 months."""
        assert not is_discount_eligible(date(2023, 1, 31), date(2024, 1, 30))

    def test_on_anniversary(self):
        assert is_discount_eligible(date(2023, 3, 15), date(2024, 3, 15))

    def test_leap_day_acquisition(self):
        """Bought 29 Feb: the anniversary is 28 Feb the next year."""
        assert is_discount_eligible(date(2024, 2, 29), date(2025, 2, 28))
        assert not is_discount_eligible(date(2024, 2, 29), date(2025, 2, 27))


class TestCalculateCGT:
    """Tests for calculate_cgt."""

    def test_discounted_gain(self):
        result = calculate_cgt(10000, 15000, "2022-01-15", "2023-03-20")

        assert result.capital_gain == Decimal("5000")
        assert result.months_held == 14
        assert result.eligible_for_discount is True
        assert result.discount_percent == 50
        assert result.taxable_gain == Decimal("2500")
        assert "50%" in result.note
        assert not result.is_loss

    def test_short_holding_no_discount(self):
        result = calculate_cgt(10000, 12000, date(2024, 1, 1), date(2024, 6, 30), "crypto")

        assert result.asset_type == AssetType.CRYPTO
        assert result.eligible_for_discount is False
        assert result.discount_percent == 0
        assert result.taxable_gain == Decimal("2000")

    def test_loss(self):
        result = calculate_cgt(15000, 12000, "2020-01-01", "2024-01-01")

        assert result.is_loss
        assert result.capital_gain == Decimal("-3000")
        assert result.capital_loss == Decimal("3000")
        assert result.taxable_gain == 0
        assert "carried forward" in result.note

    def test_break_even_is_treated_as_loss(self):
        result = calculate_cgt(5000, 5000, "2020-01-01", "2024-01-01")
        assert result.is_loss
        assert result.capital_loss == 0
        assert result.taxable_gain == 0

    def test_sale_before_acquisition(self):
        with pytest.raises(CGTInputError):
            calculate_cgt(10000, 15000, "2024-01-01", "2023-01-01")

    def test_unreadable_date(self):
        with pytest.raises(CGTInputError):
            calculate_cgt(10000, 15000, "2024-13-01", "2025-01-01")

    def test_unknown_asset_type(self):
        with pytest.raises(ValueError):
            calculate_cgt(10000, 15000, "2022-01-01", "2024-01-01", "art")

    def test_same_day_sale(self):
        result = calculate_cgt(1000, 1100, "2024-05-01", "2024-05-01")
        assert result.months_held == 0
        assert result.taxable_gain == Decimal("100")
