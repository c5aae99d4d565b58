"""
KMeans clustering engine for segmentation.

Accepts a feature matrix in its original units and returns one cluster
label per row. Normalization, initialization, assignment and the
convergence test all live here; no feature engineering, no business
logic, no logging.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Sequence, Tuple

import numpy as np
from sklearn.preprocessing import MinMaxScaler

from segmentation.errors import InvalidInputError


DEFAULT_MAX_ITERATIONS = 100


class RandomSource(Protocol):
    """Anything that can draw uniform floats in [0, 1) like numpy's Generator."""

    def random(self, size: Any) -> np.ndarray: ...


@dataclass(frozen=True)
class NormalizationBounds:
    """Per-dimension (min, max) pairs computed once from a dataset."""

    mins: np.ndarray
    maxs: np.ndarray

    @property
    def n_features(self) -> int:
        return int(self.mins.shape[0])


@dataclass(frozen=True)
class PartitionResult:
    """
    Outcome of one partition run.

    Attributes:
        labels:     1-D int array, one cluster index in [0, k) per point.
        centroids:  (k, n_features) array in normalized space; the
                    centroids the final labels were assigned against.
        bounds:     Normalization bounds of the input.
        iterations: Number of assignment passes performed.
        converged:  True when the last pass changed no label.
    """

    labels: np.ndarray
    centroids: np.ndarray
    bounds: NormalizationBounds
    iterations: int
    converged: bool


def normalize(points: Any) -> Tuple[np.ndarray, NormalizationBounds]:
    """
    Rescale every dimension of ``points`` to [0, 1].

    A dimension whose max equals its min maps to 0 for every point.

    Args:
        points: 2-D array-like of shape (n_samples, n_features).

    Returns:
        A tuple of the normalized float64 copy and the bounds used.

    Raises:
        InvalidInputError: If ``points`` is not a valid dataset.
    """
    matrix = _as_matrix(points)
    scaler = MinMaxScaler(feature_range=(0.0, 1.0))
    try:
        scaler.fit(matrix)
    except ValueError as exc:
        raise InvalidInputError(f"points could not be normalized: {exc}") from exc
    mins = scaler.data_min_.astype(np.float64)
    maxs = scaler.data_max_.astype(np.float64)
    spans = maxs - mins

    # Only an exactly zero span counts as constant.
    normalized = np.divide(
        matrix - mins,
        spans,
        out=np.zeros_like(matrix),
        where=spans != 0,
    )
    return normalized, NormalizationBounds(mins=mins, maxs=maxs)


class KMeansPartitioner:
    """
    Plain k-means over min/max normalized features.

    Centroids start at uniform random positions in the unit cube rather
    than at data points (no forgy, no k-means++). This keeps parity with
    the dashboard's historical segmentation; it may leave clusters empty
    more often than a data-driven seed would.

    Each ``fit`` call owns its generator and centroids, so instances can
    be shared across threads.
    """

    def __init__(
        self,
        n_clusters: int,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        _require_positive_int("n_clusters", n_clusters)
        _require_positive_int("max_iterations", max_iterations)
        self.n_clusters = n_clusters
        self.max_iterations = max_iterations

    def fit(
        self,
        points: Any,
        *,
        seed: Optional[int] = None,
        rng: Optional[RandomSource] = None,
    ) -> PartitionResult:
        """
        Partition ``points`` into ``n_clusters`` groups.

        Args:
            points: 2-D array-like, one feature vector per row, in
                    original units. Must be non-empty with a consistent
                    dimensionality of at least one.
            seed:   Seed for a fresh ``numpy.random.default_rng``.
            rng:    Caller-owned random source; mutually exclusive with
                    ``seed``.

        Returns:
            PartitionResult for this run.

        Raises:
            InvalidInputError: On any invalid input; no partial result.
        """
        if seed is not None and rng is not None:
            raise InvalidInputError("Pass either seed or rng, not both.")

        normalized, bounds = normalize(points)
        generator = rng if rng is not None else np.random.default_rng(seed)

        n_samples, n_features = normalized.shape
        centroids = self._initial_centroids(generator, n_features)
        labels = np.zeros(n_samples, dtype=np.int64)

        iterations = 0
        converged = False
        while iterations < self.max_iterations:
            iterations += 1
            assigned = self._assign(normalized, centroids)
            changed = bool(np.any(assigned != labels))
            labels = assigned

            if not changed:
                converged = True
                break
            if iterations == self.max_iterations:
                break

            centroids = self._update(normalized, labels, centroids)

        return PartitionResult(
            labels=labels,
            centroids=centroids,
            bounds=bounds,
            iterations=iterations,
            converged=converged,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _initial_centroids(self, generator: RandomSource, n_features: int) -> np.ndarray:
        drawn = np.asarray(
            generator.random((self.n_clusters, n_features)), dtype=np.float64
        )
        if drawn.shape != (self.n_clusters, n_features):
            raise InvalidInputError(
                f"Random source returned shape {drawn.shape}, "
                f"expected {(self.n_clusters, n_features)}."
            )
        return drawn.copy()

    @staticmethod
    def _assign(normalized: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        """
        Index of the nearest centroid for every point.

        ``argmin`` returns the first minimum, so equal distances resolve
        to the lowest centroid index.
        """
        deltas = normalized[:, np.newaxis, :] - centroids[np.newaxis, :, :]
        distances = np.sqrt(np.sum(deltas * deltas, axis=2))
        return np.argmin(distances, axis=1).astype(np.int64)

    @staticmethod
    def _update(
        normalized: np.ndarray,
        labels: np.ndarray,
        centroids: np.ndarray,
    ) -> np.ndarray:
        """
        Move each centroid to the mean of its members.

        Clusters without members keep their previous position.
        """
        updated = centroids.copy()
        for cluster_id in range(centroids.shape[0]):
            members = normalized[labels == cluster_id]
            if members.shape[0] > 0:
                updated[cluster_id] = members.mean(axis=0)
        return updated


def partition(
    points: Any,
    k: int,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    *,
    seed: Optional[int] = None,
    rng: Optional[RandomSource] = None,
) -> List[int]:
    """
    Assign each point a cluster label in [0, k).

    Labels are index-aligned with ``points``. Which region of feature
    space becomes label 0 is arbitrary per run.
    """
    result = KMeansPartitioner(n_clusters=k, max_iterations=max_iterations).fit(
        points, seed=seed, rng=rng
    )
    return [int(label) for label in result.labels]


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------


def _require_positive_int(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
        raise InvalidInputError(f"{name} must be a positive integer, got {value!r}.")


def _as_matrix(points: Any) -> np.ndarray:
    """
    Convert ``points`` to a float64 (n_samples, n_features) matrix.

    Raises:
        InvalidInputError: On empty, ragged, zero-width, non-numeric or non-finite input.
    """
    if isinstance(points, np.ndarray):
        rows: Sequence[Any] = points
    else:
        try:
            rows = list(points)
        except TypeError as exc:
            raise InvalidInputError("points must be a sequence of feature vectors.") from exc

    if len(rows) == 0:
        raise InvalidInputError("points is empty (0 samples).")

    if not isinstance(points, np.ndarray):
        widths = set()
        for row in rows:
            try:
                widths.add(len(row))
            except TypeError as exc:
                raise InvalidInputError(
                    "every point must be a sequence of numbers."
                ) from exc
        if len(widths) > 1:
            raise InvalidInputError(
                f"points have inconsistent dimensionality: {sorted(widths)}."
            )

    try:
        matrix = np.asarray(rows, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"points must contain only numbers: {exc}") from exc

    if matrix.ndim != 2:
        raise InvalidInputError(
            f"points must be 2-D (n_samples, n_features), got shape {matrix.shape}."
        )
    if matrix.shape[1] == 0:
        raise InvalidInputError("points must have at least one feature.")
    if not np.isfinite(matrix).all():
        raise InvalidInputError("points must not contain NaN or infinite values.")

    return matrix
