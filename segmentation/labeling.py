"""
Business labeling module for segmentation clusters.

Attaches a display description and chart color to each cluster
profile from fixed lookup tables. No ML or statistics here.
"""

from typing import List, Sequence

from segmentation.schema import ClusterProfile


# ------------------------------------------------------------------
# Lookup tables (indexed by raw cluster label)
# ------------------------------------------------------------------

_DESCRIPTIONS = (
    "Budget Conscious Shoppers",
    "High Value Customers",
    "Young Spenders",
    "Mature Savers",
    "Premium Segment",
)

_COLORS = (
    "#0ea5e9",
    "#d946ef",
    "#f97316",
    "#10b981",
    "#ef4444",
)

_FALLBACK_COLOR = "#6b7280"


def describe_cluster(cluster_id: int) -> str:
    """Return the table description for a label, or ``Cluster <n>``."""
    if 0 <= cluster_id < len(_DESCRIPTIONS):
        return _DESCRIPTIONS[cluster_id]
    return f"Cluster {cluster_id}"


def cluster_color(cluster_id: int) -> str:
    """Return the table color for a label, or the neutral fallback."""
    if 0 <= cluster_id < len(_COLORS):
        return _COLORS[cluster_id]
    return _FALLBACK_COLOR


class ClusterLabeler:
    """
    Assigns a description and color to each cluster profile.

    The tables are keyed by the raw label the partitioner produced.
    Labels come from a randomly initialized run, so label 0 is not
    guaranteed to hold budget-conscious shoppers: the same customers
    can be called "Premium Segment" on the next run. Treat the
    description as a name tag for the run, not a finding; the
    insight generator reads the actual averages.
    """

    def label(self, profiles: Sequence[ClusterProfile]) -> List[ClusterProfile]:
        """
        Return copies of ``profiles`` with ``description`` and ``color`` set.

        The input profiles are not mutated.
        """
        return [
            profile.model_copy(
                update={
                    "description": describe_cluster(profile.cluster),
                    "color": cluster_color(profile.cluster),
                }
            )
            for profile in profiles
        ]
