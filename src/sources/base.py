"""Common record source interface.

Each source variant validates its options, optionally acquires a resource,
produces records, and releases the resource on every exit path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterator

from core.types import Record


class RecordSource(ABC):
    """Abstract base for filesystem, tabular, and relational sources."""

    source_type: str = ""

    @abstractmethod
    def validate(self) -> None:
        """Check options before any resource is acquired.

        Raises:
            CodexValidationError: If options are unsafe or incomplete.
        """

    @abstractmethod
    def process(self) -> list[Record]:
        """Produce the ordered records for this source."""

    def open(self) -> None:
        """Acquire external resources. Sources without any do nothing."""

    def close(self) -> None:
        """Release external resources. Must be safe to call repeatedly."""

    def enumerate_records(self) -> Iterator[Record]:
        """Validate, open, process, and close, yielding records in order."""
        self.validate()
        self.open()
        try:
            records = self.process()
        finally:
            self.close()
        yield from records

    def __enter__(self) -> "RecordSource":
        self.open()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
