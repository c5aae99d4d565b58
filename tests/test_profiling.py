"""
tests/test_profiling.py

Pytest unit tests for ClusterProfiler and ClusterLabeler.
"""

from __future__ import annotations

import numpy as np
import pytest

from segmentation.features import FEATURE_KEYS, FeatureEngineer
from segmentation.labeling import ClusterLabeler, cluster_color, describe_cluster
from segmentation.profiling import ClusterProfiler
from segmentation.schema import CustomerRecord, Gender


def _customer(customer_id: int, gender: Gender, age: int, income: int, spending: int) -> CustomerRecord:
    return CustomerRecord(
        customer_id=customer_id,
        gender=gender,
        age=age,
        annual_income=income,
        spending_score=spending,
    )


@pytest.fixture()
def records() -> list[CustomerRecord]:
    return [
        _customer(1, Gender.MALE, 20, 15, 80),
        _customer(2, Gender.FEMALE, 22, 17, 90),
        _customer(3, Gender.FEMALE, 24, 19, 70),
        _customer(4, Gender.MALE, 60, 100, 10),
    ]


# ---------------------------------------------------------------------------
# FeatureEngineer
# ---------------------------------------------------------------------------


class TestFeatureEngineer:
    def test_matrix_rows_follow_records(self, records: list[CustomerRecord]) -> None:
        matrix, names = FeatureEngineer().build_feature_matrix(records)

        assert names == list(FEATURE_KEYS)
        assert matrix.shape == (4, 3)
        assert matrix.dtype == np.float64
        np.testing.assert_array_equal(matrix[3], [60.0, 100.0, 10.0])

    def test_empty_records(self) -> None:
        matrix, _ = FeatureEngineer().build_feature_matrix([])
        assert matrix.shape == (0, 3)


# ---------------------------------------------------------------------------
# ClusterProfiler
# ---------------------------------------------------------------------------


class TestClusterProfiler:
    def test_averages_and_counts(self, records: list[CustomerRecord]) -> None:
        profiles = ClusterProfiler().profile_clusters(records, [0, 0, 0, 1])

        young, mature = profiles
        assert young.cluster == 0
        assert young.count == 3
        assert young.avg_age == pytest.approx(22.0)
        assert young.avg_income == pytest.approx(17.0)
        assert young.avg_spending == pytest.approx(80.0)
        assert mature.count == 1
        assert mature.avg_income == pytest.approx(100.0)

    def test_gender_shares_are_unrounded_percentages(self, records: list[CustomerRecord]) -> None:
        young = ClusterProfiler().profile_clusters(records, [0, 0, 0, 1])[0]

        assert young.gender_distribution.male == pytest.approx(100.0 / 3.0)
        assert young.gender_distribution.female == pytest.approx(200.0 / 3.0)

    def test_counts_sum_to_record_total(self, records: list[CustomerRecord]) -> None:
        profiles = ClusterProfiler().profile_clusters(records, [2, 0, 2, 1])
        assert sum(profile.count for profile in profiles) == len(records)

    def test_empty_clusters_are_omitted_and_order_is_ascending(
        self, records: list[CustomerRecord]
    ) -> None:
        profiles = ClusterProfiler().profile_clusters(records, np.array([4, 1, 4, 1]))
        assert [profile.cluster for profile in profiles] == [1, 4]

    def test_length_mismatch(self, records: list[CustomerRecord]) -> None:
        with pytest.raises(ValueError, match="same length"):
            ClusterProfiler().profile_clusters(records, [0, 1])


# ---------------------------------------------------------------------------
# ClusterLabeler
# ---------------------------------------------------------------------------


class TestClusterLabeler:
    def test_lookup_tables(self) -> None:
        assert describe_cluster(0) == "Budget Conscious Shoppers"
        assert describe_cluster(4) == "Premium Segment"
        assert cluster_color(1) == "#d946ef"

    def test_labels_beyond_table(self) -> None:
        assert describe_cluster(7) == "Cluster 7"
        assert cluster_color(7) == "#6b7280"

    def test_label_returns_copies(self, records: list[CustomerRecord]) -> None:
        profiles = ClusterProfiler().profile_clusters(records, [0, 0, 0, 5])
        labeled = ClusterLabeler().label(profiles)

        assert [profile.description for profile in labeled] == [
            "Budget Conscious Shoppers",
            "Cluster 5",
        ]
        assert labeled[0].color == "#0ea5e9"
        assert profiles[0].description == ""
        assert labeled[0].avg_age == profiles[0].avg_age
