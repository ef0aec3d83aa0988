"""Filesystem record source.

This module walks one or more root directories depth-first in lexical
order and reads every regular file that survives the ignore/include rules.
Any I/O failure aborts the whole walk; no partial results are returned.
"""

from __future__ import annotations

import os

from core.constants import SOURCE_TYPE_FILESYSTEM
from core.errors import CodexIngestError
from core.logging_config import get_logger
from core.types import FilesystemSourceOptions, Record
from sources.base import RecordSource
from validation.source_checks import validate_filesystem_options

_LOGGER = get_logger(__name__)


class FilesystemSource(RecordSource):
    """Record source backed by local directory trees."""

    source_type = SOURCE_TYPE_FILESYSTEM

    def __init__(self, options: FilesystemSourceOptions) -> None:
        self._options = options
        self._ignore_dirs = tuple(token for token in options.ignore_dirs if token)
        self._ignore_files = frozenset(options.ignore_files)
        self._ignore_exts = frozenset(_normalize_ext(ext) for ext in options.ignore_exts)
        self._include_exts = frozenset(_normalize_ext(ext) for ext in options.include_exts)

    @property
    def options(self) -> FilesystemSourceOptions:
        return self._options

    def validate(self) -> None:
        validate_filesystem_options(self._options)

    def process(self) -> list[Record]:
        """Walk every configured root and read surviving files.

        Returns:
            Records in traversal order across roots.

        Raises:
            CodexIngestError: If a root is missing or any entry is unreadable.
        """
        records: list[Record] = []
        for root in self._options.directories:
            _LOGGER.debug("filesystem_root_started", root=root)
            records.extend(self._walk_root(root))
        _LOGGER.debug("filesystem_walk_completed", record_count=len(records))
        return records

    def should_ignore_dir(self, path: str) -> bool:
        """Return whether a directory path contains any ignore token.

        Matching is by substring over the full traversed path, so a token
        such as ``git`` also matches ``digital``.
        """
        return any(token in path for token in self._ignore_dirs)

    def should_ignore_file(self, path: str) -> bool:
        """Return whether a file is excluded by name or extension rules."""
        file_name = os.path.basename(path)
        if file_name in self._ignore_files:
            return True
        ext = file_extension(file_name)
        if self._include_exts and ext not in self._include_exts:
            return True
        return ext in self._ignore_exts

    def _walk_root(self, root: str) -> list[Record]:
        """Read one configured root, which may be a directory or a single file.

        Args:
            root: Root path from the options.

        Returns:
            Records found under the root.

        Raises:
            CodexIngestError: If the root does not exist or an entry is unreadable.
        """
        is_directory = os.path.isdir(root)
        if not is_directory and not os.path.lexists(root):
            raise CodexIngestError(
                f"Failed to read source directory {root}: path does not exist. "
                "Provide an existing directory."
            )
        records: list[Record] = []
        if is_directory:
            self._walk_directory(root, root, records)
        elif not self.should_ignore_file(root):
            records.append(_read_record(root))
        return records

    def _walk_directory(self, path: str, root: str, records: list[Record]) -> None:
        """Append records for one directory, descending in name order.

        Args:
            path: Directory being visited.
            root: Root the walk started from.
            records: Accumulator for records in traversal order.

        Raises:
            CodexIngestError: If the directory or one of its entries is unreadable.
        """
        if self.should_ignore_dir(path):
            _LOGGER.debug("directory_ignored", path=path)
            return
        if path != root and not self._options.recursive:
            return
        try:
            with os.scandir(path) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as error:
            raise CodexIngestError(
                f"Failed to list directory {path}: {error.strerror}"
            ) from error
        for entry in entries:
            entry_path = os.path.join(path, entry.name)
            try:
                is_directory = entry.is_dir(follow_symlinks=False)
                is_regular_file = not is_directory and entry.is_file()
            except OSError as error:
                raise CodexIngestError(
                    f"Failed to stat {entry_path}: {error.strerror}"
                ) from error
            if is_directory:
                self._walk_directory(entry_path, root, records)
            elif not is_regular_file:
                continue
            elif self.should_ignore_file(entry_path):
                _LOGGER.debug("file_ignored", path=entry_path)
            else:
                records.append(_read_record(entry_path))


def file_extension(file_name: str) -> str:
    """Return the text after the last dot of a base name, without the dot.

    ``.gitignore`` yields ``gitignore`` and ``Makefile`` yields ``""``.
    """
    _, dot, ext = file_name.rpartition(".")
    return ext if dot else ""


def _normalize_ext(ext: str) -> str:
    """Strip one leading dot from a configured extension."""
    return ext.removeprefix(".")


def _read_record(path: str) -> Record:
    """Read a file as a record, decoding invalid UTF-8 with replacement.

    Args:
        path: File path.

    Returns:
        Record with the path and decoded content.

    Raises:
        CodexIngestError: If the file cannot be read.
    """
    try:
        with open(path, "rb") as handle:
            payload = handle.read()
    except OSError as error:
        raise CodexIngestError(f"Failed to read file {path}: {error.strerror}") from error
    _LOGGER.debug("file_read", path=path, size_bytes=len(payload))
    return Record(path=path, content=payload.decode("utf-8", errors="replace"))
