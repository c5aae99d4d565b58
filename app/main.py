from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from app.config import load_env_files

_INT_ENV_RULES: dict[str, int] = {
    "SEGMENTATION_N_CLUSTERS": 1,
    "SEGMENTATION_MAX_ITERATIONS": 1,
    "CSV_INGEST_MAX_VALIDATION_ERRORS": 1,
}


def _validate_env() -> None:
    """
    Validate segmentation environment variables at startup.

    Every variable is optional, but a value that is set must parse.
    Raises RuntimeError listing every invalid variable so the
    operator can fix all problems in one restart cycle.
    """

    load_env_files()

    errors: list[str] = []

    for name, minimum in _INT_ENV_RULES.items():
        raw = os.getenv(name)
        if raw is None:
            continue
        try:
            value = int(raw.strip())
        except ValueError:
            errors.append(f"{name}='{raw}' is not an integer.")
            continue
        if value < minimum:
            errors.append(f"{name}={value} must be >= {minimum}.")

    seed = os.getenv("SEGMENTATION_SEED")
    if seed is not None and seed.strip():
        try:
            if int(seed.strip()) < 0:
                errors.append(f"SEGMENTATION_SEED={seed.strip()} must be >= 0.")
        except ValueError:
            errors.append(f"SEGMENTATION_SEED='{seed}' is not an integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed - invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Customer Segmentation API",
        version="1.0.0",
    )

    from app.api.routers import segmentation_router

    application.include_router(segmentation_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
