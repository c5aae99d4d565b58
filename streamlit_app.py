"""Streamlit dashboard for customer segmentation.

Replaceable UI layer - all display logic lives here.
Clustering is invoked via SegmentationOrchestrator only.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Optional

import pandas as pd
import streamlit as st

from app.config import (
    MAX_ITERATIONS_LIMIT,
    MAX_N_CLUSTERS,
    get_csv_ingestion_settings,
    get_segmentation_settings,
)
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
from app.schemas.segmentation import SegmentationResponse
from segmentation.errors import CSVHeaderValidationError, EmptyDatasetError, InvalidInputError
from segmentation.loader import CustomerCSVLoader
from segmentation.orchestrator import SegmentationOrchestrator

# ── Page config (must be first Streamlit call) ─────────────────────────────
st.set_page_config(
    page_title="Customer Segmentation",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource(show_spinner=False)
def _load_backend_handles() -> dict[str, Any]:
    """Build the loader and orchestrator once per server process."""
    csv_settings = get_csv_ingestion_settings()
    loader = CustomerCSVLoader(
        max_validation_errors=csv_settings.max_validation_errors,
        log_validation_errors=csv_settings.log_validation_errors,
    )
    return {
        "orchestrator": SegmentationOrchestrator(loader=loader),
    }


def _build_run_signature(
    *,
    n_clusters: int,
    max_iterations: int,
    seed: Optional[int],
    upload_hash: Optional[str],
    run_nonce: int,
) -> str:
    """Build deterministic signature used to skip unnecessary reruns."""
    payload = {
        "n_clusters": n_clusters,
        "max_iterations": max_iterations,
        "seed": seed,
        "upload_hash": upload_hash or "",
        "run_nonce": run_nonce,
    }
    serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def run_pipeline(
    data: bytes | None,
    n_clusters: int,
    max_iterations: int,
    seed: Optional[int],
) -> SegmentationResponse:
    """Thin frontend adapter that delegates all processing to backend layers."""
    orchestrator: SegmentationOrchestrator = _load_backend_handles()["orchestrator"]
    source = data if data is not None else get_segmentation_settings().data_path
    loaded, result = orchestrator.segment_csv(
        source,
        n_clusters=n_clusters,
        max_iterations=max_iterations,
        seed=seed,
    )
    return SegmentationResponse.from_result(result, loaded)


# ── Renderers ──────────────────────────────────────────────────────────────


def _render_overview(response: SegmentationResponse) -> None:
    overview = response.overview
    col_total, col_age, col_income, col_spending = st.columns(4)
    col_total.metric("Total Customers", overview.total_customers)
    col_age.metric("Average Age", f"{overview.avg_age} years")
    col_income.metric("Average Income", f"${overview.avg_income}k")
    col_spending.metric("Avg Spending Score", overview.avg_spending, help="Out of 100")

    col_gender, col_age_dist = st.columns(2)
    with col_gender:
        st.subheader("Gender Distribution")
        st.bar_chart(
            pd.DataFrame(
                {"Customers": list(overview.gender_counts.values())},
                index=list(overview.gender_counts.keys()),
            )
        )
    with col_age_dist:
        st.subheader("Age Distribution")
        st.bar_chart(distribution_frame(overview.age_distribution, "Age Range"))

    st.subheader("Income Distribution")
    st.bar_chart(distribution_frame(overview.income_distribution, "Income Range"))


def _render_segmentation(response: SegmentationResponse) -> None:
    captions = list(AXIS_OPTIONS.keys())
    col_x, col_y = st.columns(2)
    x_axis = col_x.selectbox("X-Axis", captions, index=captions.index(DEFAULT_X_AXIS))
    y_axis = col_y.selectbox("Y-Axis", captions, index=captions.index(DEFAULT_Y_AXIS))

    st.subheader(f"Customer Clusters: {x_axis} vs {y_axis}")
    frame = scatter_frame(response, x_axis, y_axis)
    st.scatter_chart(frame, x=x_axis, y=y_axis, color="Color")

    st.caption(
        " · ".join(
            f"{cluster.description} ({cluster.count}, {cluster.color})"
            for cluster in response.clusters
        )
    )


def _render_cluster_analysis(response: SegmentationResponse) -> None:
    summary = cluster_summary(response)
    col_clusters, col_customers, col_income, col_spending = st.columns(4)
    col_clusters.metric("Total Clusters", summary["total_clusters"])
    col_customers.metric("Total Customers", summary["total_customers"])
    col_income.metric("Avg Income", f"${summary['avg_income']}k")
    col_spending.metric("Avg Spending Score", summary["avg_spending"])

    col_sizes, col_averages = st.columns(2)
    with col_sizes:
        st.subheader("Cluster Sizes")
        st.bar_chart(cluster_sizes_frame(response))
    with col_averages:
        st.subheader("Cluster Averages")
        st.bar_chart(cluster_averages_frame(response), stack=False)

    st.caption(
        f"k={response.n_clusters} · {response.iterations} iteration(s) · "
        f"{'converged' if response.converged else 'stopped at iteration cap'}"
    )
    st.dataframe(cluster_table(response), use_container_width=True, hide_index=True)

    for cluster in response.clusters:
        with st.expander(f"{cluster.description} - {cluster.count} customers"):
            col_age, col_income, col_spending = st.columns(3)
            col_age.metric("Avg Age", cluster.avg_age)
            col_income.metric("Avg Income (k$)", cluster.avg_income)
            col_spending.metric("Avg Spending", cluster.avg_spending)
            st.progress(
                cluster.gender_distribution.male / 100,
                text=f"Male {cluster.gender_distribution.male}% · "
                f"Female {cluster.gender_distribution.female}%",
            )


def _render_insights(response: SegmentationResponse) -> None:
    st.subheader("Marketing Insights")
    for insight in response.insights:
        st.markdown(f"- {insight}")
    st.caption(
        "Segment names follow cluster numbers, which change between random "
        "initializations; read each insight against its averages."
    )


# ── Session state defaults ─────────────────────────────────────────────────
_STATE_DEFAULTS: dict = {
    "response": None,
    "pipeline_error": None,
    "last_run_signature": None,
    "run_nonce": 0,
}

for _key, _val in _STATE_DEFAULTS.items():
    if _key not in st.session_state:
        st.session_state[_key] = _val


# ── Sidebar ────────────────────────────────────────────────────────────────
_settings = get_segmentation_settings()

with st.sidebar:
    st.title("Customer Segmentation")
    st.caption("K-means on age, income and spending score")
    st.divider()

    n_clusters = st.slider("Clusters (k)", min_value=1, max_value=MAX_N_CLUSTERS, value=_settings.n_clusters)
    max_iterations = st.number_input(
        "Max iterations", min_value=1, max_value=MAX_ITERATIONS_LIMIT, value=_settings.max_iterations, step=1
    )
    use_seed = st.checkbox("Fixed seed", value=_settings.seed is not None)
    seed: Optional[int] = (
        int(st.number_input("Seed", min_value=0, value=_settings.seed or 0, step=1)) if use_seed else None
    )

    uploaded_file = st.file_uploader(
        "Upload customers (CSV)",
        type=["csv"],
        help="Optional - the bundled customer table is used otherwise.",
    )
    if st.button("Re-run clustering", use_container_width=True):
        st.session_state.run_nonce += 1


uploaded_bytes = uploaded_file.getvalue() if uploaded_file is not None else None
signature = _build_run_signature(
    n_clusters=n_clusters,
    max_iterations=int(max_iterations),
    seed=seed,
    upload_hash=hashlib.sha256(uploaded_bytes).hexdigest() if uploaded_bytes else None,
    run_nonce=st.session_state.run_nonce,
)

if signature != st.session_state.last_run_signature:
    try:
        with st.spinner("Segmenting customers..."):
            st.session_state.response = run_pipeline(
                uploaded_bytes, n_clusters, int(max_iterations), seed
            )
        st.session_state.pipeline_error = None
    except (CSVHeaderValidationError, EmptyDatasetError, InvalidInputError, FileNotFoundError) as exc:
        st.session_state.response = None
        st.session_state.pipeline_error = str(exc)
    st.session_state.last_run_signature = signature


# ── Main content area ──────────────────────────────────────────────────────
st.title("Customer Segmentation Dashboard")

response: Optional[SegmentationResponse] = st.session_state.response

if st.session_state.pipeline_error:
    st.error(st.session_state.pipeline_error)
elif response is not None and response.rows_failed:
    st.warning(f"{response.rows_failed} row(s) skipped during loading.")

tab_overview, tab_segments, tab_analysis, tab_insights = st.tabs(
    ["Data Overview", "Customer Segmentation", "Cluster Analysis", "Marketing Insights"]
)

with tab_overview:
    if response:
        _render_overview(response)
    else:
        st.info("No customer data loaded.")

with tab_segments:
    if response:
        _render_segmentation(response)
    else:
        st.info("No segmentation available.")

with tab_analysis:
    if response:
        _render_cluster_analysis(response)
    else:
        st.info("No segmentation available.")

with tab_insights:
    if response:
        _render_insights(response)
    else:
        st.info("No insights available.")
