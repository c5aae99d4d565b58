"""
Whole-table summary for the data overview view.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from segmentation.schema import (
    CustomerRecord,
    DatasetOverview,
    DistributionBucket,
    Gender,
    GenderCounts,
)

# (label, inclusive min, inclusive max); None means unbounded.
AGE_RANGES: tuple[tuple[str, int, int | None], ...] = (
    ("18-25", 18, 25),
    ("26-35", 26, 35),
    ("36-45", 36, 45),
    ("46-55", 46, 55),
    ("56-65", 56, 65),
    ("65+", 66, None),
)

INCOME_RANGES: tuple[tuple[str, int, int | None], ...] = (
    ("$0-30k", 0, 30),
    ("$31-50k", 31, 50),
    ("$51-70k", 51, 70),
    ("$71-90k", 71, 90),
    ("$91-110k", 91, 110),
    ("$110k+", 111, None),
)


def build_overview(records: Sequence[CustomerRecord]) -> DatasetOverview:
    """
    Summarise the customer table.

    Raises:
        ValueError: If ``records`` is empty.
    """
    if not records:
        raise ValueError("Cannot build an overview of an empty customer table.")

    ages = [record.age for record in records]
    incomes = [record.annual_income for record in records]

    return DatasetOverview(
        total_customers=len(records),
        avg_age=float(np.mean(ages)),
        avg_income=float(np.mean(incomes)),
        avg_spending=float(np.mean([record.spending_score for record in records])),
        gender_counts=GenderCounts(
            male=sum(1 for record in records if record.gender == Gender.MALE),
            female=sum(1 for record in records if record.gender == Gender.FEMALE),
        ),
        age_distribution=_bucketize(ages, AGE_RANGES),
        income_distribution=_bucketize(incomes, INCOME_RANGES),
    )


def _bucketize(
    values: Sequence[int],
    ranges: Sequence[tuple[str, int, int | None]],
) -> list[DistributionBucket]:
    return [
        DistributionBucket(
            label=label,
            count=sum(
                1
                for value in values
                if value >= low and (high is None or value <= high)
            ),
        )
        for label, low, high in ranges
    ]
