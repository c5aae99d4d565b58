"""
segmentation/loader.py

Parses the customer table (delimited text with a header row) into typed
``CustomerRecord`` models.

Header or encoding problems abort the load with ``CSVHeaderValidationError``.
Row problems skip the row and are reported in the ``LoadResult``.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from segmentation.errors import CSVHeaderValidationError
from segmentation.schema import CustomerRecord, Gender

logger = logging.getLogger(__name__)

# Canonical field -> accepted header spellings (compared case-insensitively).
HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "customer_id": ("customerid", "customer_id", "customer id"),
    "gender": ("gender", "genre"),
    "age": ("age",),
    "annual_income": (
        "annual income (k$)",
        "annual income",
        "annual_income",
    ),
    "spending_score": (
        "spending score (1-100)",
        "spending score",
        "spending_score",
    ),
}

_INTEGER_FIELDS = ("customer_id", "age", "annual_income", "spending_score")


@dataclass(frozen=True)
class RowValidationError:
    """
    One CSV row validation error detail.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class LoadResult:
    """
    End-of-run load summary.
    """

    records: list[CustomerRecord]
    rows_processed: int
    rows_failed: int
    validation_errors: list[RowValidationError] = field(default_factory=list)


class CustomerCSVLoader:
    """
    Reads customer CSV data into ``CustomerRecord`` instances.
    """

    def __init__(
        self,
        *,
        max_validation_errors: int = 500,
        log_validation_errors: bool = True,
    ) -> None:
        self._max_validation_errors = max(1, max_validation_errors)
        self._log_validation_errors = log_validation_errors

    def load_file(self, path: str | Path) -> LoadResult:
        """
        Load a CSV file from disk.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
            CSVHeaderValidationError: On encoding, format or header problems.
        """
        raw = Path(path).read_bytes()
        return self.load_bytes(raw)

    def load_bytes(self, data: bytes) -> LoadResult:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CSVHeaderValidationError("CSV must be UTF-8 encoded.") from exc
        return self.load_text(text)

    def load_text(self, text: str) -> LoadResult:
        """
        Parse CSV text into customer records, skipping invalid rows.
        """
        records: list[CustomerRecord] = []
        rows_failed = 0
        captured_errors: list[RowValidationError] = []

        try:
            reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff"), newline=""))
            headers = reader.fieldnames or []
            if not headers:
                raise CSVHeaderValidationError("CSV header row is missing.")
            columns = self._resolve_columns(headers)

            for row_number, raw_row in enumerate(reader, start=2):
                if self._is_completely_empty_row(raw_row):
                    rows_failed += 1
                    self._record_error(
                        captured_errors,
                        RowValidationError(
                            row_number=row_number,
                            message="Completely empty rows are not allowed.",
                        ),
                    )
                    continue

                record, row_errors = self._parse_row(raw_row, columns, row_number)
                if record is None:
                    rows_failed += 1
                    for error in row_errors:
                        self._record_error(captured_errors, error)
                    continue

                records.append(record)
        except csv.Error as exc:
            raise CSVHeaderValidationError(f"Invalid CSV format: {exc}") from exc

        return LoadResult(
            records=records,
            rows_processed=len(records),
            rows_failed=rows_failed,
            validation_errors=captured_errors,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_columns(headers: list[str]) -> dict[str, str]:
        """
        Map each canonical field to the header that carries it.

        Raises:
            CSVHeaderValidationError: If any required column is absent.
        """
        by_normalized = {
            " ".join(header.strip().lower().split()): header
            for header in headers
            if header is not None
        }

        columns: dict[str, str] = {}
        missing: list[str] = []
        for canonical, aliases in HEADER_ALIASES.items():
            source = next(
                (by_normalized[alias] for alias in aliases if alias in by_normalized),
                None,
            )
            if source is None:
                missing.append(canonical)
            else:
                columns[canonical] = source

        if missing:
            raise CSVHeaderValidationError(
                f"CSV is missing required columns: {', '.join(missing)}."
            )
        return columns

    def _parse_row(
        self,
        raw_row: Mapping[str, Any],
        columns: Mapping[str, str],
        row_number: int,
    ) -> tuple[CustomerRecord | None, list[RowValidationError]]:
        errors: list[RowValidationError] = []
        values: dict[str, Any] = {}

        for name in _INTEGER_FIELDS:
            raw_value = raw_row.get(columns[name])
            parsed = self._parse_int(raw_value)
            if parsed is None:
                errors.append(
                    RowValidationError(
                        row_number=row_number,
                        column=columns[name],
                        message="Value must be an integer.",
                        value=self._stringify_value(raw_value),
                    )
                )
            else:
                values[name] = parsed

        raw_gender = raw_row.get(columns["gender"])
        gender = self._parse_gender(raw_gender)
        if gender is None:
            allowed = ", ".join(member.value for member in Gender)
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=columns["gender"],
                    message=f"Unsupported gender. Allowed values: {allowed}.",
                    value=self._stringify_value(raw_gender),
                )
            )
        else:
            values["gender"] = gender

        if errors:
            return None, errors

        try:
            return CustomerRecord(**values), []
        except ValidationError as exc:
            return None, [
                RowValidationError(
                    row_number=row_number,
                    column=columns.get(str(detail["loc"][0])) if detail.get("loc") else None,
                    message=detail["msg"],
                    value=self._stringify_value(detail.get("input")),
                )
                for detail in exc.errors()
            ]

    @staticmethod
    def _parse_int(value: Any) -> int | None:
        if value is None:
            return None
        text = str(value).strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            as_float = float(text)
        except ValueError:
            return None
        return int(as_float) if as_float.is_integer() else None

    @staticmethod
    def _parse_gender(value: Any) -> Gender | None:
        if value is None:
            return None
        normalized = str(value).strip().lower()
        for member in Gender:
            if member.value.lower() == normalized:
                return member
        return None

    @staticmethod
    def _is_completely_empty_row(row: Mapping[str, Any]) -> bool:
        return all(value is None or not str(value).strip() for value in row.values())

    @staticmethod
    def _stringify_value(value: Any) -> str | None:
        if value is None:
            return None
        return str(value)

    def _record_error(
        self,
        captured_errors: list[RowValidationError],
        error: RowValidationError,
    ) -> None:
        if self._log_validation_errors:
            logger.warning(
                "CSV validation error row=%s column=%s message=%s value=%r",
                error.row_number,
                error.column,
                error.message,
                error.value,
            )

        if len(captured_errors) < self._max_validation_errors:
            captured_errors.append(error)
