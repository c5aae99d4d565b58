"""
tests/test_insights.py

Pytest unit tests for InsightGenerator and build_overview.

Rules are checked against hand-built profiles so every branch
(premium, budget, young, mature, balanced) and the priority order
are pinned down.
"""

from __future__ import annotations

import pytest

from segmentation.insights import InsightGenerator
from segmentation.overview import build_overview
from segmentation.schema import ClusterProfile, CustomerRecord, Gender, GenderDistribution


def _profile(
    *,
    age: float,
    income: float,
    spending: float,
    cluster: int = 0,
    description: str = "Segment",
) -> ClusterProfile:
    return ClusterProfile(
        cluster=cluster,
        count=10,
        avg_age=age,
        avg_income=income,
        avg_spending=spending,
        gender_distribution=GenderDistribution(male=50.0, female=50.0),
        description=description,
    )


def _insight(profile: ClusterProfile) -> str:
    return InsightGenerator().generate([profile])[0]


# ---------------------------------------------------------------------------
# Insight rules
# ---------------------------------------------------------------------------


class TestInsightRules:
    def test_premium(self) -> None:
        assert _insight(_profile(age=35, income=90, spending=80)) == (
            "Segment: Premium customers with high income and spending - target "
            "with luxury products and exclusive offers."
        )

    def test_budget(self) -> None:
        assert _insight(_profile(age=45, income=25, spending=20)).endswith(
            "Price-sensitive segment - focus on value propositions and discount campaigns."
        )

    def test_young(self) -> None:
        assert "Young high spenders" in _insight(_profile(age=24, income=50, spending=75))

    def test_mature(self) -> None:
        assert "Mature conservative spenders" in _insight(_profile(age=58, income=60, spending=35))

    def test_balanced_fallback(self) -> None:
        assert "Balanced segment" in _insight(_profile(age=40, income=60, spending=50))

    def test_thresholds_are_strict(self) -> None:
        assert "Balanced segment" in _insight(_profile(age=40, income=80, spending=70))
        assert "Balanced segment" in _insight(_profile(age=30, income=60, spending=60))

    def test_premium_outranks_young(self) -> None:
        assert "Premium customers" in _insight(_profile(age=22, income=95, spending=85))

    def test_budget_outranks_mature(self) -> None:
        assert "Price-sensitive" in _insight(_profile(age=60, income=20, spending=15))

    def test_uses_unrounded_averages(self) -> None:
        assert "Premium customers" in _insight(_profile(age=40, income=80.04, spending=70.04))

    def test_missing_description_falls_back_to_cluster_number(self) -> None:
        text = _insight(_profile(age=40, income=60, spending=50, cluster=3, description=""))
        assert text.startswith("Cluster 3: ")

    def test_one_insight_per_profile_in_order(self) -> None:
        profiles = [
            _profile(age=35, income=90, spending=80, description="A"),
            _profile(age=45, income=25, spending=20, description="B"),
        ]
        insights = InsightGenerator().generate(profiles)
        assert [text.split(":")[0] for text in insights] == ["A", "B"]


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------


def _customer(customer_id: int, gender: Gender, age: int, income: int) -> CustomerRecord:
    return CustomerRecord(
        customer_id=customer_id,
        gender=gender,
        age=age,
        annual_income=income,
        spending_score=50,
    )


class TestOverview:
    def test_totals_and_gender_counts(self) -> None:
        overview = build_overview(
            [
                _customer(1, Gender.MALE, 20, 20),
                _customer(2, Gender.FEMALE, 30, 40),
                _customer(3, Gender.FEMALE, 41, 60),
            ]
        )

        assert overview.total_customers == 3
        assert overview.avg_age == pytest.approx(91 / 3)
        assert overview.avg_income == pytest.approx(40.0)
        assert overview.avg_spending == pytest.approx(50.0)
        assert (overview.gender_counts.male, overview.gender_counts.female) == (1, 2)

    def test_age_buckets_are_disjoint(self) -> None:
        ages = [18, 25, 26, 35, 36, 45, 46, 55, 56, 65, 66, 80]
        overview = build_overview(
            [_customer(i, Gender.MALE, age, 50) for i, age in enumerate(ages)]
        )

        counts = {bucket.label: bucket.count for bucket in overview.age_distribution}
        assert counts == {
            "18-25": 2,
            "26-35": 2,
            "36-45": 2,
            "46-55": 2,
            "56-65": 2,
            "65+": 2,
        }

    def test_income_buckets(self) -> None:
        incomes = [0, 30, 31, 50, 70, 90, 110, 111, 137]
        overview = build_overview(
            [_customer(i, Gender.MALE, 30, income) for i, income in enumerate(incomes)]
        )

        counts = [bucket.count for bucket in overview.income_distribution]
        assert counts == [2, 2, 1, 1, 1, 2]

    def test_empty_table(self) -> None:
        with pytest.raises(ValueError):
            build_overview([])
