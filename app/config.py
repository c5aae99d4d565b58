"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_N_CLUSTERS = 5
DEFAULT_MAX_ITERATIONS = 100
DEFAULT_DATA_PATH = "data/customers.csv"

# Upper bounds for per-request overrides.
MAX_N_CLUSTERS = 10
MAX_ITERATIONS_LIMIT = 1000


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_optional_int_env(name: str) -> int | None:
    """
    Read an optional integer; blank or invalid values count as unset.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return None
    try:
        return int(raw_value)
    except ValueError:
        return None


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class SegmentationSettings:
    """
    Runtime settings for the clustering run.
    """

    n_clusters: int = DEFAULT_N_CLUSTERS
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    seed: int | None = None
    data_path: Path = PROJECT_ROOT / DEFAULT_DATA_PATH


@dataclass(frozen=True)
class CSVIngestionSettings:
    """
    Runtime settings for CSV loading.
    """

    max_validation_errors: int = 500
    log_validation_errors: bool = True


def _resolve_data_path(raw: str) -> Path:
    path = Path(raw)
    return path if path.is_absolute() else PROJECT_ROOT / path


@lru_cache(maxsize=1)
def get_segmentation_settings() -> SegmentationSettings:
    """
    Return cached segmentation settings from environment variables.
    """

    return SegmentationSettings(
        n_clusters=min(
            MAX_N_CLUSTERS,
            max(1, _get_int_env("SEGMENTATION_N_CLUSTERS", DEFAULT_N_CLUSTERS)),
        ),
        max_iterations=min(
            MAX_ITERATIONS_LIMIT,
            max(1, _get_int_env("SEGMENTATION_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS)),
        ),
        seed=_get_optional_int_env("SEGMENTATION_SEED"),
        data_path=_resolve_data_path(_get_str_env("SEGMENTATION_DATA_PATH", DEFAULT_DATA_PATH)),
    )


@lru_cache(maxsize=1)
def get_csv_ingestion_settings() -> CSVIngestionSettings:
    """
    Return cached CSV loading settings from environment variables.
    """

    return CSVIngestionSettings(
        max_validation_errors=max(1, _get_int_env("CSV_INGEST_MAX_VALIDATION_ERRORS", 500)),
        log_validation_errors=_get_bool_env("CSV_INGEST_LOG_VALIDATION_ERRORS", True),
    )
