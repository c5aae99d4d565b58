"""
Feature engineering module for segmentation.

Transforms customer records into the numeric feature matrix the
partitioner clusters on. Values stay in their original units; scaling
is the partitioner's job.
"""

from typing import List, Sequence, Tuple

import numpy as np

from segmentation.schema import CustomerRecord


FEATURE_KEYS = (
    "age",
    "annual_income",
    "spending_score",
)

# Column captions used by charts and tables.
FEATURE_LABELS = {
    "age": "Age",
    "annual_income": "Annual Income (k$)",
    "spending_score": "Spending Score (1-100)",
}


class FeatureEngineer:
    """
    Extracts the clustering attributes from a list of customer records.

    Row ``i`` of the matrix always describes ``records[i]``; the index
    is the only link back to the record.
    """

    def build_feature_matrix(
        self, records: Sequence[CustomerRecord]
    ) -> Tuple[np.ndarray, List[str]]:
        """
        Build the raw feature matrix for ``records``.

        Args:
            records: Parsed customer records.

        Returns:
            A tuple of:
                - feature_matrix: float64 array of shape (n_records, 3)
                  holding age, annual income and spending score.
                - feature_names: feature keys in column order.
        """
        matrix = np.empty((len(records), len(FEATURE_KEYS)), dtype=np.float64)
        for i, record in enumerate(records):
            for j, key in enumerate(FEATURE_KEYS):
                matrix[i, j] = float(getattr(record, key))
        return matrix, list(FEATURE_KEYS)
