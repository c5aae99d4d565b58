"""
Segmentation orchestrator.

Wires together record loading, feature engineering, clustering,
profiling, labeling and insight generation into a single pipeline call.
No math and no business rules here.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

from app.logging_utils import log_event
from segmentation.clustering import DEFAULT_MAX_ITERATIONS, KMeansPartitioner
from segmentation.errors import EmptyDatasetError
from segmentation.features import FeatureEngineer
from segmentation.insights import InsightGenerator
from segmentation.labeling import ClusterLabeler
from segmentation.loader import CustomerCSVLoader, LoadResult
from segmentation.overview import build_overview
from segmentation.profiling import ClusterProfiler
from segmentation.schema import CustomerRecord, SegmentationResult, SegmentedCustomer

logger = logging.getLogger(__name__)

PartitionerFactory = Callable[[int, int], KMeansPartitioner]


class SegmentationOrchestrator:
    """
    Coordinates the end-to-end segmentation pipeline.

    Each pipeline step is delegated entirely to its dedicated module:
        1. CustomerCSVLoader  - parses the customer table (``segment_csv``).
        2. FeatureEngineer    - builds the raw feature matrix.
        3. KMeansPartitioner  - normalizes and assigns cluster labels.
        4. ClusterProfiler    - computes per-cluster statistics.
        5. ClusterLabeler     - attaches descriptions and colors.
        6. InsightGenerator   - writes one recommendation per cluster.

    Args:
        loader:              CSV loader used by ``segment_csv``.
        partitioner_factory: Builds a partitioner from
                             ``(n_clusters, max_iterations)``.
    """

    def __init__(
        self,
        loader: Optional[CustomerCSVLoader] = None,
        partitioner_factory: PartitionerFactory = KMeansPartitioner,
    ) -> None:
        self._loader = loader or CustomerCSVLoader()
        self._partitioner_factory = partitioner_factory
        self._feature_engineer = FeatureEngineer()
        self._profiler = ClusterProfiler()
        self._labeler = ClusterLabeler()
        self._insights = InsightGenerator()

    def run_segmentation(
        self,
        records: Sequence[CustomerRecord],
        n_clusters: int,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        seed: Optional[int] = None,
    ) -> SegmentationResult:
        """
        Execute the full segmentation pipeline over parsed records.

        Args:
            records:        Customer records, one per table row.
            n_clusters:     Number of clusters (k).
            max_iterations: Cap on assignment passes.
            seed:           Optional seed for centroid initialization.

        Returns:
            SegmentationResult with raw (unrounded) statistics.

        Raises:
            InvalidInputError: Propagated from clustering if inputs are
                               invalid (e.g. no records, k < 1).
        """
        # Step 1 - Feature engineering
        feature_matrix, _feature_names = self._feature_engineer.build_feature_matrix(records)

        # Step 2 - Clustering
        partitioner = self._partitioner_factory(n_clusters, max_iterations)
        partition = partitioner.fit(feature_matrix, seed=seed)
        labels = [int(label) for label in partition.labels]

        # Step 3 - Profiling
        profiles = self._profiler.profile_clusters(records=records, labels=labels)

        # Step 4 - Descriptions and colors
        labeled = self._labeler.label(profiles)

        # Step 5 - Insights
        insights = self._insights.generate(labeled)

        log_event(
            logger,
            logging.INFO,
            "segmentation_completed",
            n_records=len(records),
            n_clusters=n_clusters,
            max_iterations=max_iterations,
            iterations=partition.iterations,
            converged=partition.converged,
            cluster_sizes={profile.cluster: profile.count for profile in labeled},
        )

        return SegmentationResult(
            n_clusters=n_clusters,
            max_iterations=max_iterations,
            iterations=partition.iterations,
            converged=partition.converged,
            customers=[
                SegmentedCustomer(**record.model_dump(), cluster=label)
                for record, label in zip(records, labels)
            ],
            clusters=labeled,
            insights=insights,
            overview=build_overview(records),
        )

    def segment_csv(
        self,
        source: str | Path | bytes,
        n_clusters: int,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        seed: Optional[int] = None,
    ) -> Tuple[LoadResult, SegmentationResult]:
        """
        Load a customer CSV and segment its valid rows.

        Args:
            source: File path, or raw CSV bytes (e.g. an upload).

        Returns:
            The load summary (skipped rows, row errors) and the result.

        Raises:
            FileNotFoundError: If a path does not exist.
            CSVHeaderValidationError: On encoding, header or format problems.
            EmptyDatasetError: If no row could be parsed.
            InvalidInputError: Propagated from clustering.
        """
        if isinstance(source, bytes):
            loaded = self._loader.load_bytes(source)
            source_name = "upload"
        else:
            loaded = self._loader.load_file(source)
            source_name = Path(source).name

        log_event(
            logger,
            logging.INFO,
            "customer_table_loaded",
            source=source_name,
            rows_processed=loaded.rows_processed,
            rows_failed=loaded.rows_failed,
        )
        if not loaded.records:
            raise EmptyDatasetError(f"No valid customer rows found in {source_name}.")

        result = self.run_segmentation(
            records=loaded.records,
            n_clusters=n_clusters,
            max_iterations=max_iterations,
            seed=seed,
        )
        return loaded, result
