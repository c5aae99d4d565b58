"""Typed customer records and segmentation outputs."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class CustomerRecord(BaseModel):
    """One row of the customer table."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    customer_id: int
    gender: Gender
    age: int = Field(ge=0)
    annual_income: int = Field(ge=0, description="Annual income in k$.")
    spending_score: int = Field(ge=0, le=100)


class SegmentedCustomer(CustomerRecord):
    """A customer record joined with its cluster label."""

    cluster: int = Field(ge=0)


class GenderDistribution(BaseModel):
    """Share of each gender inside one cluster, in percent (unrounded)."""

    model_config = ConfigDict(frozen=True)

    male: float = Field(ge=0.0, le=100.0)
    female: float = Field(ge=0.0, le=100.0)


class ClusterProfile(BaseModel):
    """Descriptive statistics for one non-empty cluster."""

    model_config = ConfigDict(frozen=True)

    cluster: int = Field(ge=0)
    count: int = Field(ge=1)
    avg_age: float
    avg_income: float
    avg_spending: float
    gender_distribution: GenderDistribution
    description: str = ""
    color: str = ""


class GenderCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    male: int = Field(ge=0)
    female: int = Field(ge=0)


class DistributionBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    count: int = Field(ge=0)


class DatasetOverview(BaseModel):
    """Whole-table summary shown before any clustering."""

    model_config = ConfigDict(frozen=True)

    total_customers: int = Field(ge=0)
    avg_age: float
    avg_income: float
    avg_spending: float
    gender_counts: GenderCounts
    age_distribution: list[DistributionBucket]
    income_distribution: list[DistributionBucket]


class SegmentationResult(BaseModel):
    """Everything the presentation layer needs from one segmentation run."""

    model_config = ConfigDict(frozen=True)

    n_clusters: int = Field(ge=1)
    max_iterations: int = Field(ge=1)
    iterations: int = Field(ge=1)
    converged: bool
    customers: list[SegmentedCustomer]
    clusters: list[ClusterProfile]
    insights: list[str]
    overview: DatasetOverview
