"""
app/schemas package marker.
"""

from app.schemas.segmentation import (
    ClusterSummaryResponse,
    OverviewResponse,
    RowErrorResponse,
    SegmentationResponse,
)

__all__ = [
    "ClusterSummaryResponse",
    "OverviewResponse",
    "RowErrorResponse",
    "SegmentationResponse",
]
