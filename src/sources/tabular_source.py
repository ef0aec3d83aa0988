"""Delimited-file record source.

This module maps configured CSV/TSV column positions onto records.
Rows with the wrong shape are skipped with a debug diagnostic, while an
unreadable, malformed, or empty file fails the whole source.
"""

from __future__ import annotations

import csv
import os

from core.constants import CSV_FIELD_SIZE_LIMIT, SOURCE_TYPE_CSV
from core.errors import CodexIngestError, CodexValidationError
from core.logging_config import get_logger
from core.types import Record, TabularSourceOptions
from sources.base import RecordSource
from validation.validators import validate_csv_delimiter, validate_non_negative_int

_LOGGER = get_logger(__name__)


class TabularSource(RecordSource):
    """Record source backed by a CSV or TSV file."""

    source_type = SOURCE_TYPE_CSV

    def __init__(self, options: TabularSourceOptions) -> None:
        self._options = options

    @property
    def options(self) -> TabularSourceOptions:
        return self._options

    def validate(self) -> None:
        """Check the file exists and column indices are usable.

        Raises:
            CodexValidationError: If the path is missing, the file does not
                exist, the delimiter is unsupported, or an index is negative.
        """
        if not self._options.file_path:
            raise CodexValidationError("csv_file_path", "file path is required")
        if not os.path.isfile(self._options.file_path):
            raise CodexValidationError(
                "csv_file_path", f"CSV file does not exist: {self._options.file_path}"
            )
        validate_csv_delimiter(self._options.delimiter, "csv_delimiter")
        validate_non_negative_int(self._options.path_column, "csv_path_column")
        validate_non_negative_int(self._options.content_column, "csv_content_column")

    def process(self) -> list[Record]:
        """Parse the file and map rows to records in file order.

        Returns:
            Records for every well-formed data row.

        Raises:
            CodexIngestError: If the file cannot be read or parsed, or is empty.
        """
        rows = self._read_rows()
        if not rows:
            raise CodexIngestError(f"CSV file is empty: {self._options.file_path}")
        start_index = 1 if self._options.has_header else 0
        records: list[Record] = []
        for row_index in range(start_index, len(rows)):
            record = self._row_to_record(rows[row_index], row_index)
            if record is not None:
                records.append(record)
        _LOGGER.debug(
            "tabular_file_processed",
            file_path=self._options.file_path,
            record_count=len(records),
            skipped_count=len(rows) - start_index - len(records),
        )
        return records

    def _read_rows(self) -> list[list[str]]:
        """Read every non-blank row of the configured file.

        Returns:
            Parsed rows in file order.

        Raises:
            CodexIngestError: If the file cannot be opened, decoded, or parsed.
        """
        file_path = self._options.file_path
        csv.field_size_limit(CSV_FIELD_SIZE_LIMIT)
        try:
            with open(file_path, encoding="utf-8", newline="") as handle:
                reader = csv.reader(
                    handle,
                    delimiter=self._options.delimiter,
                    skipinitialspace=True,
                    strict=False,
                )
                return [row for row in reader if row]
        except OSError as error:
            raise CodexIngestError(
                f"Failed to open CSV file {file_path}: {error.strerror}"
            ) from error
        except (csv.Error, UnicodeDecodeError) as error:
            raise CodexIngestError(f"Failed to read CSV file {file_path}: {error}") from error

    def _row_to_record(self, row: list[str], row_index: int) -> Record | None:
        path_column = self._options.path_column
        content_column = self._options.content_column
        if path_column >= len(row):
            _log_skipped_row(row_index, "path column out of range", len(row))
            return None
        if content_column >= len(row):
            _log_skipped_row(row_index, "content column out of range", len(row))
            return None
        path = row[path_column]
        if not path:
            _log_skipped_row(row_index, "empty file path", len(row))
            return None
        return Record(path=path, content=row[content_column])


def _log_skipped_row(row_index: int, reason: str, column_count: int) -> None:
    """Emit the diagnostic for a row skipped because of its shape."""
    _LOGGER.debug(
        "tabular_row_skipped",
        row_index=row_index,
        reason=reason,
        column_count=column_count,
    )
