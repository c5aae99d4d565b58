"""
Cluster profiling module for segmentation.

Computes per-cluster aggregate statistics from customer records
and their assigned cluster labels. No ML or feature engineering here.
"""

from collections import defaultdict
from typing import List, Sequence

import numpy as np

from segmentation.schema import ClusterProfile, CustomerRecord, Gender, GenderDistribution


class ClusterProfiler:
    """
    Summarises clusters by counting members and averaging their attributes.

    Responsibilities:
        - Group records by cluster label.
        - Compute per-cluster mean age, income and spending score.
        - Compute the male/female split in percent.

    Not responsible for:
        - Cluster assignment (labels come from the partitioner).
        - Descriptions or colors (that is the labeler's job).
        - Rounding for display.
    """

    def profile_clusters(
        self,
        records: Sequence[CustomerRecord],
        labels: Sequence[int] | np.ndarray,
    ) -> List[ClusterProfile]:
        """
        Build a profile for each cluster that has at least one member.

        Args:
            records: Customer records aligned with ``labels``.
            labels:  Cluster label per record, same length as ``records``.

        Returns:
            Profiles sorted by ascending cluster label. Clusters that
            received no members are absent.

        Raises:
            ValueError: If ``records`` and ``labels`` differ in length.
        """
        self._validate(records, labels)

        buckets: dict[int, list[CustomerRecord]] = defaultdict(list)
        for record, label in zip(records, labels):
            buckets[int(label)].append(record)

        return [
            self._summarise(cluster_id, members)
            for cluster_id, members in sorted(buckets.items())
        ]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _summarise(cluster_id: int, members: list[CustomerRecord]) -> ClusterProfile:
        size = len(members)
        males = sum(1 for member in members if member.gender == Gender.MALE)
        females = sum(1 for member in members if member.gender == Gender.FEMALE)

        return ClusterProfile(
            cluster=cluster_id,
            count=size,
            avg_age=float(np.mean([member.age for member in members])),
            avg_income=float(np.mean([member.annual_income for member in members])),
            avg_spending=float(np.mean([member.spending_score for member in members])),
            gender_distribution=GenderDistribution(
                male=males / size * 100.0,
                female=females / size * 100.0,
            ),
        )

    @staticmethod
    def _validate(records: Sequence[CustomerRecord], labels) -> None:
        """
        Ensure records and labels are compatible.

        Raises:
            ValueError: If lengths differ.
        """
        if len(records) != len(labels):
            raise ValueError(
                f"records and labels must have the same length; "
                f"got {len(records)} records and {len(labels)} labels."
            )
