"""
app/presentation.py

Table builders shared by the Streamlit dashboard and the CLI.

Everything here reads display-ready ``SegmentationResponse`` objects and
returns pandas DataFrames; no clustering or statistics.
"""

from __future__ import annotations

import pandas as pd

from app.schemas.segmentation import SegmentationResponse, round_half_up
from segmentation.features import FEATURE_KEYS, FEATURE_LABELS

AXIS_OPTIONS: dict[str, str] = {FEATURE_LABELS[key]: key for key in FEATURE_KEYS}

DEFAULT_X_AXIS = FEATURE_LABELS["annual_income"]
DEFAULT_Y_AXIS = FEATURE_LABELS["spending_score"]


def scatter_frame(response: SegmentationResponse, x_axis: str, y_axis: str) -> pd.DataFrame:
    """
    One row per customer with the two chosen axes, segment name and color.

    Args:
        response: Display result of a segmentation run.
        x_axis:   Caption from ``AXIS_OPTIONS`` (e.g. "Age").
        y_axis:   Caption from ``AXIS_OPTIONS``.

    Raises:
        KeyError: If an axis caption is unknown.
    """
    x_key = AXIS_OPTIONS[x_axis]
    y_key = AXIS_OPTIONS[y_axis]
    names = {cluster.cluster: cluster.description for cluster in response.clusters}
    colors = {cluster.cluster: cluster.color for cluster in response.clusters}

    rows = [
        {
            "CustomerID": customer.customer_id,
            x_axis: getattr(customer, x_key),
            y_axis: getattr(customer, y_key),
            "Segment": names.get(customer.cluster, f"Cluster {customer.cluster}"),
            "Color": colors.get(customer.cluster, ""),
        }
        for customer in response.customers
    ]
    # Same caption on both axes collapses into a single column.
    columns = list(dict.fromkeys(["CustomerID", x_axis, y_axis, "Segment", "Color"]))
    return pd.DataFrame(rows, columns=columns)


def cluster_table(response: SegmentationResponse) -> pd.DataFrame:
    """Cluster statistics as shown on the analysis tab."""
    return pd.DataFrame(
        [
            {
                "Cluster": cluster.cluster,
                "Segment": cluster.description,
                "Customers": cluster.count,
                "Avg Age": cluster.avg_age,
                "Avg Income (k$)": cluster.avg_income,
                "Avg Spending": cluster.avg_spending,
                "Male %": cluster.gender_distribution.male,
                "Female %": cluster.gender_distribution.female,
            }
            for cluster in response.clusters
        ],
        columns=[
            "Cluster",
            "Segment",
            "Customers",
            "Avg Age",
            "Avg Income (k$)",
            "Avg Spending",
            "Male %",
            "Female %",
        ],
    )


def distribution_frame(buckets, label: str) -> pd.DataFrame:
    """Histogram buckets indexed by range label, ready for ``st.bar_chart``."""
    frame = pd.DataFrame(
        [{label: bucket.label, "Customers": bucket.count} for bucket in buckets],
        columns=[label, "Customers"],
    )
    return frame.set_index(label)


def cluster_summary(response: SegmentationResponse) -> dict[str, int | float]:
    """
    Headline figures for the analysis tab.

    Income and spending are cluster averages weighted by cluster size,
    which equals the mean over every segmented customer.
    """
    frame = pd.DataFrame(
        [
            {"income": customer.annual_income, "spending": customer.spending_score}
            for customer in response.customers
        ],
        columns=["income", "spending"],
    )
    if frame.empty:
        avg_income = avg_spending = 0.0
    else:
        avg_income = round_half_up(float(frame["income"].mean()), 1)
        avg_spending = round_half_up(float(frame["spending"].mean()), 1)
    return {
        "total_clusters": len(response.clusters),
        "total_customers": sum(cluster.count for cluster in response.clusters),
        "avg_income": avg_income,
        "avg_spending": avg_spending,
    }


def cluster_sizes_frame(response: SegmentationResponse) -> pd.DataFrame:
    """Customers per segment, indexed by segment name."""
    frame = pd.DataFrame(
        [{"Segment": cluster.description, "Customers": cluster.count} for cluster in response.clusters],
        columns=["Segment", "Customers"],
    )
    return frame.set_index("Segment")


def cluster_averages_frame(response: SegmentationResponse) -> pd.DataFrame:
    """Per-segment averages side by side, indexed by segment name."""
    frame = pd.DataFrame(
        [
            {
                "Segment": cluster.description,
                "Avg Age": cluster.avg_age,
                "Avg Income (k$)": cluster.avg_income,
                "Avg Spending": cluster.avg_spending,
            }
            for cluster in response.clusters
        ],
        columns=["Segment", "Avg Age", "Avg Income (k$)", "Avg Spending"],
    )
    return frame.set_index("Segment")
