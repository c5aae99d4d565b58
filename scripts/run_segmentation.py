"""
Run customer segmentation from CLI.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from app.config import get_csv_ingestion_settings, get_segmentation_settings
from app.schemas.segmentation import SegmentationResponse
from segmentation.errors import CSVHeaderValidationError, EmptyDatasetError, InvalidInputError
from segmentation.loader import CustomerCSVLoader
from segmentation.orchestrator import SegmentationOrchestrator


def main(argv: list[str] | None = None) -> int:
    settings = get_segmentation_settings()
    csv_settings = get_csv_ingestion_settings()

    parser = argparse.ArgumentParser(description="Segment a customer table with k-means.")
    parser.add_argument(
        "--data",
        dest="data",
        type=Path,
        default=settings.data_path,
        help="Customer CSV path (defaults to SEGMENTATION_DATA_PATH).",
    )
    parser.add_argument("--clusters", "-k", dest="n_clusters", type=int, default=settings.n_clusters)
    parser.add_argument(
        "--max-iterations",
        dest="max_iterations",
        type=int,
        default=settings.max_iterations,
    )
    parser.add_argument("--seed", dest="seed", type=int, default=settings.seed)
    parser.add_argument(
        "--include-customers",
        action="store_true",
        help="Include per-customer labels in the output.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s [%(name)s] %(message)s")

    orchestrator = SegmentationOrchestrator(
        loader=CustomerCSVLoader(
            max_validation_errors=csv_settings.max_validation_errors,
            log_validation_errors=csv_settings.log_validation_errors,
        )
    )
    try:
        loaded, result = orchestrator.segment_csv(
            args.data,
            n_clusters=args.n_clusters,
            max_iterations=args.max_iterations,
            seed=args.seed,
        )
    except FileNotFoundError:
        print(f"error: customer dataset not found: {args.data}", file=sys.stderr)
        return 1
    except (CSVHeaderValidationError, EmptyDatasetError, InvalidInputError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    response = SegmentationResponse.from_result(result, loaded)
    exclude = None if args.include_customers else {"customers"}
    print(response.model_dump_json(indent=2, exclude=exclude))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
