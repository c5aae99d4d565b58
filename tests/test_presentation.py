"""
tests/test_presentation.py

Pytest tests for display rounding, dashboard tables and the CLI.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from app.presentation import (
    AXIS_OPTIONS,
    DEFAULT_X_AXIS,
    DEFAULT_Y_AXIS,
    cluster_averages_frame,
    cluster_sizes_frame,
    cluster_summary,
    cluster_table,
    distribution_frame,
    scatter_frame,
)
from app.schemas.segmentation import (
    ClusterSummaryResponse,
    SegmentationResponse,
    round_half_up,
)
from scripts.run_segmentation import main
from segmentation.orchestrator import SegmentationOrchestrator
from segmentation.schema import ClusterProfile, CustomerRecord, Gender, GenderDistribution


@pytest.fixture()
def response() -> SegmentationResponse:
    records = [
        CustomerRecord(customer_id=1, gender=Gender.MALE, age=19, annual_income=15, spending_score=39),
        CustomerRecord(customer_id=2, gender=Gender.FEMALE, age=21, annual_income=15, spending_score=81),
        CustomerRecord(customer_id=3, gender=Gender.FEMALE, age=60, annual_income=120, spending_score=20),
    ]
    result = SegmentationOrchestrator().run_segmentation(records, n_clusters=2, seed=3)
    return SegmentationResponse.from_result(result)


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


class TestRounding:
    @pytest.mark.parametrize(
        ("value", "digits", "expected"),
        [
            (2.5, 0, 3.0),
            (3.5, 0, 4.0),
            (33.333, 1, 33.3),
            (44.25, 1, 44.3),
            (66.6667, 0, 67.0),
            (0.0, 1, 0.0),
        ],
    )
    def test_round_half_up(self, value: float, digits: int, expected: float) -> None:
        assert round_half_up(value, digits) == pytest.approx(expected)

    def test_cluster_summary_rounding(self) -> None:
        profile = ClusterProfile(
            cluster=0,
            count=3,
            avg_age=100.0 / 3.0,
            avg_income=44.25,
            avg_spending=70.04,
            gender_distribution=GenderDistribution(male=100.0 / 3.0, female=200.0 / 3.0),
            description="Budget Conscious Shoppers",
            color="#0ea5e9",
        )

        summary = ClusterSummaryResponse.from_profile(profile)

        assert summary.avg_age == pytest.approx(33.3)
        assert summary.avg_income == pytest.approx(44.3)
        assert summary.avg_spending == pytest.approx(70.0)
        assert (summary.gender_distribution.male, summary.gender_distribution.female) == (33, 67)

    def test_response_without_load_summary(self, response: SegmentationResponse) -> None:
        assert response.rows_failed == 0
        assert response.validation_errors == []
        assert response.overview.avg_age == 33


# ---------------------------------------------------------------------------
# Dashboard tables
# ---------------------------------------------------------------------------


class TestTables:
    def test_axis_options(self) -> None:
        assert list(AXIS_OPTIONS) == ["Age", "Annual Income (k$)", "Spending Score (1-100)"]
        assert (DEFAULT_X_AXIS, DEFAULT_Y_AXIS) == ("Annual Income (k$)", "Spending Score (1-100)")

    def test_scatter_frame(self, response: SegmentationResponse) -> None:
        frame = scatter_frame(response, "Age", "Spending Score (1-100)")

        assert list(frame.columns) == ["CustomerID", "Age", "Spending Score (1-100)", "Segment", "Color"]
        assert frame["Age"].tolist() == [19, 21, 60]
        assert frame["Color"].str.startswith("#").all()

    def test_scatter_frame_same_axis(self, response: SegmentationResponse) -> None:
        frame = scatter_frame(response, "Age", "Age")
        assert list(frame.columns) == ["CustomerID", "Age", "Segment", "Color"]

    def test_scatter_frame_unknown_axis(self, response: SegmentationResponse) -> None:
        with pytest.raises(KeyError):
            scatter_frame(response, "Height", "Age")

    def test_cluster_table(self, response: SegmentationResponse) -> None:
        table = cluster_table(response)

        assert len(table) == len(response.clusters)
        assert table["Customers"].sum() == 3
        assert "Male %" in table.columns

    def test_cluster_summary_weights_by_cluster_size(self, response: SegmentationResponse) -> None:
        summary = cluster_summary(response)

        assert summary["total_clusters"] == len(response.clusters)
        assert summary["total_customers"] == 3
        assert summary["avg_income"] == pytest.approx(50.0)
        assert summary["avg_spending"] == pytest.approx(46.7)

    def test_cluster_bar_frames(self, response: SegmentationResponse) -> None:
        sizes = cluster_sizes_frame(response)
        averages = cluster_averages_frame(response)

        assert sizes.index.name == "Segment"
        assert sizes["Customers"].sum() == 3
        assert list(averages.columns) == ["Avg Age", "Avg Income (k$)", "Avg Spending"]
        assert list(averages.index) == [cluster.description for cluster in response.clusters]

    def test_distribution_frame(self, response: SegmentationResponse) -> None:
        frame = distribution_frame(response.overview.age_distribution, "Age Range")

        assert frame.index.name == "Age Range"
        assert frame.loc["18-25", "Customers"] == 2
        assert frame.loc["65+", "Customers"] == 0


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class TestCli:
    def test_prints_summary(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "customers.csv"
        path.write_text(
            "CustomerID,Gender,Age,Annual Income (k$),Spending Score (1-100)\n"
            "1,Male,19,15,39\n2,Female,21,15,81\n3,Female,60,120,20\n",
            encoding="utf-8",
        )

        exit_code = main(["--data", str(path), "-k", "2", "--seed", "1"])

        assert exit_code == 0
        body = json.loads(capsys.readouterr().out)
        assert body["n_clusters"] == 2
        assert "customers" not in body

    def test_include_customers(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "customers.csv"
        path.write_text(
            "CustomerID,Gender,Age,Annual Income (k$),Spending Score (1-100)\n1,Male,19,15,39\n",
            encoding="utf-8",
        )

        assert main(["--data", str(path), "-k", "1", "--include-customers"]) == 0
        body = json.loads(capsys.readouterr().out)
        assert body["customers"][0]["cluster"] == 0

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--data", str(tmp_path / "nope.csv")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_invalid_k(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "customers.csv"
        path.write_text(
            "CustomerID,Gender,Age,Annual Income (k$),Spending Score (1-100)\n1,Male,19,15,39\n",
            encoding="utf-8",
        )
        assert main(["--data", str(path), "-k", "0"]) == 1
        assert "positive integer" in capsys.readouterr().err
