"""Tests for the SMSF contribution cap tracker."""

from datetime import date
from decimal import Decimal

import pytest

from family_accountant.calculators import (
    InvalidFinancialYearError,
    cap_usage,
    carry_forward_summary,
    get_rates,
    summarise_contributions,
)
from family_accountant.models.smsf import (
    CapWarningLevel,
    CarryForwardRecord,
    ContributionRecord,
    ContributionType,
)


def contribution(amount, contribution_type=ContributionType.CONCESSIONAL, financial_year="2024-25"):
    return ContributionRecord(
        financial_year=financial_year,
        contribution_type=contribution_type,
        amount=amount,
        date=date(2024, 10, 1),
    )


class TestCapUsage:
    """Tests for a single cap."""

    def test_under_warning(self):
        usage = cap_usage(Decimal("10000"), Decimal("30000"), warning_percent=80)
        assert usage.remaining == Decimal("20000")
        assert usage.percentage_used == Decimal("33.3")
        assert usage.warning_level == CapWarningLevel.NONE
        assert not usage.cap_exceeded

    def test_approaching(self):
        usage = cap_usage(Decimal("24000"), Decimal("30000"), warning_percent=80)
        assert usage.warning_level == CapWarningLevel.APPROACHING

    def test_exactly_reached(self):
        usage = cap_usage(Decimal("30000"), Decimal("30000"), warning_percent=80)
        assert usage.warning_level == CapWarningLevel.REACHED
        assert not usage.cap_exceeded
        assert usage.remaining == 0

    def test_just_under_cap_is_not_reached(self):
        """99.97% displays as 100.0 but the cap is not used up."""
        usage = cap_usage(Decimal("29990"), Decimal("30000"), warning_percent=80)
        assert usage.percentage_used == Decimal("100.0")
        assert usage.warning_level == CapWarningLevel.APPROACHING
        assert usage.remaining == Decimal("10")

    def test_just_under_warning_threshold(self):
        usage = cap_usage(Decimal("23990"), Decimal("30000"), warning_percent=80)
        assert usage.percentage_used == Decimal("80.0")
        assert usage.warning_level == CapWarningLevel.NONE

    def test_exceeded_is_unclamped(self):
        usage = cap_usage(Decimal("35000"), Decimal("30000"), warning_percent=80)
        assert usage.cap_exceeded
        assert usage.remaining == 0
        assert usage.percentage_used == Decimal("116.7")

    def test_warning_percent_from_settings(self, monkeypatch):
        monkeypatch.setenv("APP_CAP_WARNING_PERCENT", "50")
        usage = cap_usage(Decimal("15000"), Decimal("30000"))
        assert usage.warning_level == CapWarningLevel.APPROACHING


class TestCarryForward:
    """Tests for carry-forward of unused concessional cap."""

    def records(self):
        return [
            CarryForwardRecord(financial_year=fy, unused_amount=Decimal("5000"))
            for fy in ("2018-19", "2019-20", "2020-21", "2021-22", "2022-23", "2023-24")
        ]

    def test_only_five_most_recent_prior_years(self):
        summary = carry_forward_summary(
            "2024-25", Decimal("300000"), self.records(), get_rates("2024-25")
        )
        assert summary.eligible
        assert summary.available == Decimal("25000")
        assert [b.financial_year for b in summary.breakdown] == [
            "2023-24", "2022-23", "2021-22", "2020-21", "2019-20",
        ]

    def test_current_and_future_years_ignored(self):
        records = [
            CarryForwardRecord(financial_year="2024-25", unused_amount=Decimal("9000")),
            CarryForwardRecord(financial_year="2025-26", unused_amount=Decimal("9000")),
            CarryForwardRecord(financial_year="2023-24", unused_amount=Decimal("1000")),
        ]
        summary = carry_forward_summary("2024-25", Decimal("0"), records, get_rates("2024-25"))
        assert summary.available == Decimal("1000")

    def test_records_older_than_window_ignored(self):
        """A record from long ago is not one of the five prior years, even if it is the only one."""
        records = [CarryForwardRecord(financial_year="2012-13", unused_amount=Decimal("20000"))]
        summary = carry_forward_summary("2024-25", Decimal("100000"), records, get_rates("2024-25"))
        assert summary.eligible
        assert summary.available == 0
        assert summary.breakdown == []

    def test_gaps_do_not_pull_in_older_years(self):
        """Missing years leave the window at five financial years, not five records."""
        records = [
            CarryForwardRecord(financial_year=fy, unused_amount=Decimal("1000"))
            for fy in ("2026-27", "2025-26", "2023-24", "2020-21", "2018-19", "2016-17")
        ]
        summary = carry_forward_summary("2024-25", Decimal("0"), records, get_rates("2024-25"))
        assert summary.available == Decimal("2000")
        assert [b.financial_year for b in summary.breakdown] == ["2023-24", "2020-21"]

    def test_balance_at_threshold_not_eligible(self):
        summary = carry_forward_summary(
            "2024-25", Decimal("500000"), self.records(), get_rates("2024-25")
        )
        assert not summary.eligible
        assert summary.available == 0
        assert len(summary.breakdown) == 5

    def test_ineligible_and_zero_years_skipped(self):
        records = [
            CarryForwardRecord(financial_year="2023-24", unused_amount=Decimal("4000"),
                               eligible_for_carry_forward=False),
            CarryForwardRecord(financial_year="2022-23", unused_amount=Decimal("0")),
            CarryForwardRecord(financial_year="2021-22", unused_amount=Decimal("3000")),
        ]
        summary = carry_forward_summary("2024-25", Decimal("0"), records, get_rates("2024-25"))
        assert summary.available == Decimal("3000")


class TestSummariseContributions:
    """Tests for a member's yearly summary."""

    def test_over_concessional_cap(self):
        summary = summarise_contributions(
            "Grant",
            "2024-25",
            [contribution(20000), contribution(15000), contribution(10000, ContributionType.NON_CONCESSIONAL)],
        )

        assert summary.concessional.contributed == Decimal("35000")
        assert summary.concessional.remaining == 0
        assert summary.concessional.percentage_used == Decimal("116.7")
        assert summary.concessional.cap_exceeded
        assert summary.non_concessional.contributed == Decimal("10000")
        assert summary.non_concessional.cap == Decimal("120000")
        assert summary.warnings == ["Concessional cap exceeded by $5,000 (116.7% used)"]
        assert summary.has_warnings
        assert len(summary.contributions) == 3

    def test_approaching_warning_text(self):
        summary = summarise_contributions("Shannon", "2024-25", [contribution(24000)])
        assert summary.warnings == [
            "Approaching concessional cap: 80.0% used, $6,000 remaining"
        ]

    def test_just_under_cap_warning_text(self):
        summary = summarise_contributions("Shannon", "2024-25", [contribution(29990)])
        assert summary.warnings == [
            "Approaching concessional cap: 100.0% used, $10 remaining"
        ]

    def test_other_years_and_types_ignored(self):
        summary = summarise_contributions(
            "Shannon",
            "2024-25",
            [
                contribution(10000),
                contribution(27500, financial_year="2023-24"),
                contribution(3000, ContributionType.SPOUSE),
            ],
        )
        assert summary.concessional.contributed == Decimal("10000")
        assert summary.non_concessional.contributed == 0
        assert len(summary.contributions) == 2
        assert not summary.has_warnings

    def test_previous_year_caps(self):
        summary = summarise_contributions("Grant", "2023-24", [contribution(27500, financial_year="2023-24")])
        assert summary.concessional.cap == Decimal("27500")
        assert summary.warnings == ["Concessional cap fully used"]

    def test_effective_cap_includes_carry_forward(self):
        summary = summarise_contributions(
            "Grant",
            "2024-25",
            [contribution(35000)],
            total_super_balance="420000",
            carry_forward=[CarryForwardRecord(financial_year="2023-24", unused_amount=Decimal("7500"))],
        )
        assert summary.carry_forward.available == Decimal("7500")
        assert summary.effective_concessional_cap == Decimal("37500")

    def test_blank_member_name(self):
        with pytest.raises(ValueError):
            summarise_contributions("  ", "2024-25", [])

    def test_bad_financial_year(self):
        with pytest.raises(InvalidFinancialYearError):
            summarise_contributions("Grant", "FY25", [])
