"""Plain-text rendering of ingested records.

This module joins records into one text blob, optionally replacing Go
file bodies with their function names, and writes or measures the result.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from core.errors import CodexIngestError
from core.logging_config import get_logger
from core.types import Record

_LOGGER = get_logger(__name__)

_GO_FUNC_PATTERN = re.compile(
    r"^func\s+(?:\([^)]*\)\s*)?([A-Za-z_][A-Za-z0-9_]*)\s*[\[(]",
    re.MULTILINE,
)
_KILOBYTE = 1024
_MEGABYTE = 1024 * 1024


def generate_output(records: Iterable[Record], show_funcs: bool = False) -> str:
    """Render records as ``File: <path>`` headers followed by content.

    Args:
        records: Records in ingest order.
        show_funcs: List function names for Go files instead of their body.

    Returns:
        Rendered output text.
    """
    parts: list[str] = []
    for record in records:
        parts.append(f"File: {record.path}\n")
        if show_funcs and is_go_file(record.path):
            for function_name in extract_go_functions(record.content):
                parts.append(f"Function: {function_name}\n")
        else:
            parts.append(record.content)
            parts.append("\n\n")
    return "".join(parts)


def is_go_file(path: str) -> bool:
    """Return whether a record path names a Go source file."""
    return Path(path).suffix == ".go"


def extract_go_functions(content: str) -> list[str]:
    """Return top-level Go function and method names in source order."""
    return _GO_FUNC_PATTERN.findall(content)


def save_output(output: str, output_file: str) -> None:
    """Write rendered output to a file.

    Raises:
        CodexIngestError: If the path is unusable or the file cannot be written.
    """
    try:
        Path(output_file).write_text(output, encoding="utf-8")
    except OSError as error:
        raise CodexIngestError(
            f"Failed to save output to {output_file}: {error.strerror}"
        ) from error
    except ValueError as error:
        raise CodexIngestError(f"Failed to save output to {output_file!r}: {error}") from error
    _LOGGER.info("output_saved", output_file=output_file, byte_count=output_size(output))


def output_size(output: str) -> int:
    """Return the UTF-8 encoded size of rendered output in bytes."""
    return len(output.encode("utf-8"))


def format_size(byte_count: int) -> str:
    """Format a byte count as bytes, KB, or MB.

    Args:
        byte_count: Size in bytes.

    Returns:
        Human-readable size such as ``512 bytes`` or ``1.50 KB``.
    """
    if byte_count < _KILOBYTE:
        return f"{byte_count} bytes"
    if byte_count < _MEGABYTE:
        return f"{byte_count / _KILOBYTE:.2f} KB"
    return f"{byte_count / _MEGABYTE:.2f} MB"
