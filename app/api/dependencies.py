"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and pipeline wiring.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import File, HTTPException, UploadFile, status

from app.config import get_csv_ingestion_settings
from segmentation.loader import CustomerCSVLoader
from segmentation.orchestrator import SegmentationOrchestrator

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a CSV by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    return file


@lru_cache(maxsize=1)
def get_customer_loader() -> CustomerCSVLoader:
    """
    Return the shared CSV loader configured from settings.
    """

    settings = get_csv_ingestion_settings()
    return CustomerCSVLoader(
        max_validation_errors=settings.max_validation_errors,
        log_validation_errors=settings.log_validation_errors,
    )


@lru_cache(maxsize=1)
def get_segmentation_orchestrator() -> SegmentationOrchestrator:
    """
    Return the shared orchestrator; it holds no per-run state.
    """

    return SegmentationOrchestrator(loader=get_customer_loader())
