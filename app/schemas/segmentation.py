"""
app/schemas/segmentation.py

Display-ready response schemas for segmentation results.

Core models keep raw floats; values are rounded here, at the
presentation boundary (averages to one decimal, percentages to
whole numbers, halves rounded up).
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field

from segmentation.features import FEATURE_LABELS
from segmentation.loader import LoadResult
from segmentation.schema import ClusterProfile, DatasetOverview, SegmentationResult


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a dashboard would: 2.5 -> 3, 44.25 -> 44.3."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


class GenderShareResponse(BaseModel):
    male: int
    female: int


class ClusterSummaryResponse(BaseModel):
    """
    API response model for one cluster.
    """

    cluster: int = Field(..., ge=0)
    count: int = Field(..., ge=1)
    avg_age: float
    avg_income: float
    avg_spending: float
    gender_distribution: GenderShareResponse
    description: str
    color: str

    @classmethod
    def from_profile(cls, profile: ClusterProfile) -> "ClusterSummaryResponse":
        return cls(
            cluster=profile.cluster,
            count=profile.count,
            avg_age=round_half_up(profile.avg_age, 1),
            avg_income=round_half_up(profile.avg_income, 1),
            avg_spending=round_half_up(profile.avg_spending, 1),
            gender_distribution=GenderShareResponse(
                male=int(round_half_up(profile.gender_distribution.male)),
                female=int(round_half_up(profile.gender_distribution.female)),
            ),
            description=profile.description,
            color=profile.color,
        )


class CustomerPointResponse(BaseModel):
    """
    One scatter-plot point.
    """

    customer_id: int
    gender: str
    age: int
    annual_income: int
    spending_score: int
    cluster: int


class BucketResponse(BaseModel):
    label: str
    count: int = Field(..., ge=0)


class OverviewResponse(BaseModel):
    """
    API response model for the data overview.
    """

    total_customers: int = Field(..., ge=0)
    avg_age: int
    avg_income: int
    avg_spending: int
    gender_counts: dict[str, int]
    age_distribution: list[BucketResponse]
    income_distribution: list[BucketResponse]

    @classmethod
    def from_overview(cls, overview: DatasetOverview) -> "OverviewResponse":
        return cls(
            total_customers=overview.total_customers,
            avg_age=int(round_half_up(overview.avg_age)),
            avg_income=int(round_half_up(overview.avg_income)),
            avg_spending=int(round_half_up(overview.avg_spending)),
            gender_counts={
                "Female": overview.gender_counts.female,
                "Male": overview.gender_counts.male,
            },
            age_distribution=[
                BucketResponse(label=bucket.label, count=bucket.count)
                for bucket in overview.age_distribution
            ],
            income_distribution=[
                BucketResponse(label=bucket.label, count=bucket.count)
                for bucket in overview.income_distribution
            ],
        )


class RowErrorResponse(BaseModel):
    """
    API response model for one row-level validation error.
    """

    row_number: int = Field(..., ge=1)
    message: str
    column: str | None = None
    value: str | None = None


class SegmentationResponse(BaseModel):
    """
    API response model for a segmentation run.
    """

    n_clusters: int = Field(..., ge=1)
    max_iterations: int = Field(..., ge=1)
    iterations: int = Field(..., ge=1)
    converged: bool
    feature_labels: dict[str, str]
    clusters: list[ClusterSummaryResponse]
    insights: list[str]
    overview: OverviewResponse
    customers: list[CustomerPointResponse]
    rows_failed: int = Field(default=0, ge=0)
    validation_errors: list[RowErrorResponse] = Field(default_factory=list)

    @classmethod
    def from_result(
        cls,
        result: SegmentationResult,
        loaded: LoadResult | None = None,
    ) -> "SegmentationResponse":
        return cls(
            n_clusters=result.n_clusters,
            max_iterations=result.max_iterations,
            iterations=result.iterations,
            converged=result.converged,
            feature_labels=dict(FEATURE_LABELS),
            clusters=[ClusterSummaryResponse.from_profile(profile) for profile in result.clusters],
            insights=list(result.insights),
            overview=OverviewResponse.from_overview(result.overview),
            customers=[
                CustomerPointResponse(
                    customer_id=customer.customer_id,
                    gender=customer.gender.value,
                    age=customer.age,
                    annual_income=customer.annual_income,
                    spending_score=customer.spending_score,
                    cluster=customer.cluster,
                )
                for customer in result.customers
            ],
            rows_failed=loaded.rows_failed if loaded is not None else 0,
            validation_errors=[
                RowErrorResponse(
                    row_number=error.row_number,
                    message=error.message,
                    column=error.column,
                    value=error.value,
                )
                for error in (loaded.validation_errors if loaded is not None else [])
            ],
        )
