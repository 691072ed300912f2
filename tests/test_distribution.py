"""Tests for the trust distribution scenario modeller."""

from decimal import Decimal

import pytest

from family_accountant.calculators import (
    evaluate_split,
    even_split,
    get_rates,
    model_distribution,
    preset_splits,
)
from family_accountant.models.trust import DistributionSplit, InvalidSplitError

NAMES = ["Grant", "Shannon"]
INCOMES = {"Grant": 120000, "Shannon": 40000}


def split(*percents):
    return DistributionSplit.of(NAMES, list(percents))


class TestDistributionSplit:
    """Tests for split construction and labels."""

    def test_label(self):
        assert split(60, 40).label == "60/40"
        assert split(33.5, 66.5).label == "33.5/66.5"

    def test_must_total_100(self):
        with pytest.raises(InvalidSplitError, match="total 100%, got 110%"):
            split(60, 50)

    def test_range_checked(self):
        with pytest.raises(InvalidSplitError):
            split(-10, 110)

    def test_one_percentage_per_name(self):
        with pytest.raises(InvalidSplitError):
            DistributionSplit.of(NAMES, [100])

    def test_direct_construction_validated(self):
        with pytest.raises(ValueError):
            DistributionSplit(percentages={"Grant": 50, "Shannon": 40})

    def test_sort_key_ignores_name_order(self):
        """The same shares listed in a different name order are the same split."""
        forward = DistributionSplit.of(["Grant", "Shannon"], [60, 40])
        reordered = DistributionSplit.of(["Shannon", "Grant"], [40, 60])
        swapped = DistributionSplit.of(["Shannon", "Grant"], [60, 40])

        assert forward.sort_key == reordered.sort_key
        assert forward.sort_key != swapped.sort_key
        assert reordered.label == "40/60"

    def test_even_split_remainder_to_first(self):
        assert even_split(["A", "B", "C"]).label == "33.34/33.33/33.33"

    def test_presets_need_two_names(self):
        assert len(preset_splits(NAMES)) == 6
        with pytest.raises(InvalidSplitError):
            preset_splits(["A", "B", "C"])


class TestEvaluateSplit:
    """Tests for a single scenario."""

    def test_all_to_first_beneficiary(self):
        scenario = evaluate_split(
            split(100, 0), Decimal("100000"), Decimal("0"),
            {"Grant": Decimal("120000"), "Shannon": Decimal("40000")},
            get_rates("2024-25"),
        )
        grant = scenario.allocation_for("Grant")
        shannon = scenario.allocation_for("Shannon")

        assert scenario.split == "100/0"
        assert grant.distribution == Decimal("100000")
        assert shannon.distribution == 0
        assert grant.tax == Decimal("65138")
        assert shannon.tax == Decimal("3488")
        assert scenario.total_tax == Decimal("68626")

    def test_franking_credit_offset(self):
        """Credits are added to taxable income, then offset against tax."""
        scenario = evaluate_split(
            split(100, 0), Decimal("10000"), Decimal("3000"),
            {"Grant": Decimal("100000"), "Shannon": Decimal("0")},
            get_rates("2024-25"),
        )
        grant = scenario.allocation_for("Grant")

        assert grant.taxable_income == Decimal("113000")
        assert grant.tax_before_offset == Decimal("24688")
        assert grant.tax == Decimal("21688")

    def test_offset_floored_at_zero(self):
        scenario = evaluate_split(
            split(50, 50), Decimal("10000"), Decimal("3000"),
            {"Grant": Decimal("0"), "Shannon": Decimal("0")},
            get_rates("2024-25"),
        )
        assert scenario.total_tax == 0
        assert all(a.tax == 0 for a in scenario.allocations)

    def test_names_must_match_incomes(self):
        with pytest.raises(InvalidSplitError):
            evaluate_split(
                split(50, 50), Decimal("1000"), Decimal("0"),
                {"Grant": Decimal("0"), "Someone": Decimal("0")},
                get_rates("2024-25"),
            )


class TestModelDistribution:
    """Tests for comparing scenarios."""

    def test_presets_and_recommendation(self):
        result = model_distribution(100000, 0, INCOMES, financial_year="2024-25")
        rec = result.recommendation

        assert len(result.scenarios) == 6
        assert rec.optimal_split == "0/100"
        assert rec.total_tax == Decimal("59926")
        assert rec.baseline_split == "50/50"
        assert rec.baseline_total_tax == Decimal("62026")
        assert rec.tax_savings_vs_baseline == Decimal("2100")

    def test_baseline_always_evaluated(self):
        result = model_distribution(
            100000, 0, INCOMES, splits=[split(60, 40), split(70, 30)], financial_year="2024-25"
        )
        labels = [s.split for s in result.scenarios]

        assert labels == ["60/40", "70/30", "50/50"]
        assert result.recommendation.baseline_split == "50/50"

    def test_never_worse_than_baseline(self):
        for incomes in ({"Grant": 0, "Shannon": 0}, {"Grant": 250000, "Shannon": 10000}, INCOMES):
            rec = model_distribution(80000, 5000, incomes, financial_year="2024-25").recommendation
            assert rec.total_tax <= rec.baseline_total_tax
            assert rec.tax_savings_vs_baseline >= 0

    def test_tie_broken_by_percentages(self):
        """50/50, 60/40 and 40/60 all cost nothing; the lowest first share wins."""
        incomes = {"Grant": 0, "Shannon": 0}
        forward = model_distribution(20000, 0, incomes, financial_year="2024-25")
        backward = model_distribution(
            20000, 0, incomes,
            splits=list(reversed(preset_splits(NAMES))),
            financial_year="2024-25",
        )

        assert forward.recommendation.optimal_split == "40/60"
        assert backward.recommendation.optimal_split == "40/60"
        assert forward.recommendation.tax_savings_vs_baseline == 0

    def test_reordered_even_split_counts_as_baseline(self):
        """An even split listed Shannon first is not evaluated a second time."""
        reordered = DistributionSplit.of(["Shannon", "Grant"], [50, 50])
        result = model_distribution(
            100000, 0, INCOMES, splits=[split(70, 30), reordered], financial_year="2024-25"
        )

        assert [s.split for s in result.scenarios] == ["70/30", "50/50"]
        assert result.recommendation.baseline_total_tax == Decimal("62026")

    def test_three_beneficiaries_with_custom_splits(self):
        incomes = {"A": 0, "B": 0, "C": 200000}
        custom = [DistributionSplit.of(["A", "B", "C"], [50, 50, 0])]
        result = model_distribution(60000, 0, incomes, splits=custom, financial_year="2024-25")

        assert [s.split for s in result.scenarios] == ["50/50/0", "33.34/33.33/33.33"]
        assert result.recommendation.optimal_split == "50/50/0"

    def test_reports_rates_year_used(self):
        result = model_distribution(10000, 0, INCOMES, financial_year="2023-24")
        assert result.financial_year == "2023-24"
