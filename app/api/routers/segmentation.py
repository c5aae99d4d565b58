"""
app/api/routers/segmentation.py

Customer segmentation HTTP endpoints.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status

from app.api.dependencies import get_csv_upload, get_segmentation_orchestrator
from app.config import (
    MAX_ITERATIONS_LIMIT,
    MAX_N_CLUSTERS,
    SegmentationSettings,
    get_segmentation_settings,
)
from app.schemas.segmentation import SegmentationResponse
from segmentation.errors import CSVHeaderValidationError, EmptyDatasetError, InvalidInputError
from segmentation.orchestrator import SegmentationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/segments", tags=["segmentation"])


def _segment(
    *,
    source: Path | bytes,
    orchestrator: SegmentationOrchestrator,
    settings: SegmentationSettings,
    n_clusters: int | None,
    max_iterations: int | None,
    seed: int | None,
) -> SegmentationResponse:
    """
    Run the pipeline with request overrides falling back to settings.
    """

    try:
        loaded, result = orchestrator.segment_csv(
            source,
            n_clusters=n_clusters if n_clusters is not None else settings.n_clusters,
            max_iterations=max_iterations if max_iterations is not None else settings.max_iterations,
            seed=seed if seed is not None else settings.seed,
        )
    except FileNotFoundError as exc:
        logger.error("Customer dataset not found path=%s", source)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer dataset not found.",
        ) from exc
    except (CSVHeaderValidationError, EmptyDatasetError, InvalidInputError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return SegmentationResponse.from_result(result, loaded)


@router.get("", response_model=SegmentationResponse)
def segment_default_dataset(
    n_clusters: int | None = Query(
        default=None, ge=1, le=MAX_N_CLUSTERS, description="Number of clusters (k)"
    ),
    max_iterations: int | None = Query(
        default=None, ge=1, le=MAX_ITERATIONS_LIMIT, description="Cap on assignment passes"
    ),
    seed: int | None = Query(default=None, ge=0, description="Seed for centroid initialization"),
    orchestrator: SegmentationOrchestrator = Depends(get_segmentation_orchestrator),
    settings: SegmentationSettings = Depends(get_segmentation_settings),
) -> SegmentationResponse:
    """
    Segment the configured customer table.
    """

    return _segment(
        source=settings.data_path,
        orchestrator=orchestrator,
        settings=settings,
        n_clusters=n_clusters,
        max_iterations=max_iterations,
        seed=seed,
    )


@router.post("/upload-csv", response_model=SegmentationResponse)
def segment_uploaded_csv(
    file: UploadFile = Depends(get_csv_upload),
    n_clusters: int | None = Query(
        default=None, ge=1, le=MAX_N_CLUSTERS, description="Number of clusters (k)"
    ),
    max_iterations: int | None = Query(
        default=None, ge=1, le=MAX_ITERATIONS_LIMIT, description="Cap on assignment passes"
    ),
    seed: int | None = Query(default=None, ge=0, description="Seed for centroid initialization"),
    orchestrator: SegmentationOrchestrator = Depends(get_segmentation_orchestrator),
    settings: SegmentationSettings = Depends(get_segmentation_settings),
) -> SegmentationResponse:
    """
    Segment an uploaded customer CSV.
    """

    try:
        data = file.file.read()
    finally:
        file.file.close()

    return _segment(
        source=data,
        orchestrator=orchestrator,
        settings=settings,
        n_clusters=n_clusters,
        max_iterations=max_iterations,
        seed=seed,
    )
