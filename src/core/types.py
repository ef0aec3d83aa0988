"""Shared typed models.

This module defines immutable data models used by validation, sources,
output, and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.constants import (
    DEFAULT_OUTPUT_FILE,
    SOURCE_TYPE_CSV,
    SOURCE_TYPE_DATABASE,
    SOURCE_TYPE_FILESYSTEM,
    SOURCE_TYPE_TSV,
)


@dataclass(frozen=True)
class Record:
    """Normalized ingested record.

    Attributes:
        path: Human-meaningful locator (file path, row path value, or label).
        content: Textual payload.
    """

    path: str
    content: str


@dataclass(frozen=True)
class FilesystemSourceOptions:
    """Filesystem source options.

    Attributes:
        directories: Root directories to walk, in order.
        ignore_files: Exact base names to skip.
        ignore_dirs: Tokens; a directory whose path contains one is skipped.
        ignore_exts: Extensions (without dot) to skip.
        include_exts: When non-empty, only these extensions are read.
        recursive: Descend into subdirectories of each root.
    """

    directories: tuple[str, ...] = (".",)
    ignore_files: tuple[str, ...] = ()
    ignore_dirs: tuple[str, ...] = ()
    ignore_exts: tuple[str, ...] = ()
    include_exts: tuple[str, ...] = ()
    recursive: bool = True


@dataclass(frozen=True)
class TabularSourceOptions:
    """Delimited-file source options.

    Attributes:
        file_path: Path of the CSV/TSV file.
        delimiter: Single-character field delimiter; empty means the type default.
        path_column: Zero-based index of the path column.
        content_column: Zero-based index of the content column.
        has_header: Drop the first row when true.
    """

    file_path: str
    delimiter: str = ""
    path_column: int = 0
    content_column: int = 1
    has_header: bool = True


@dataclass(frozen=True)
class RelationalSourceOptions:
    """Relational database source options.

    Attributes:
        db_type: Dialect name (postgres, mysql, sqlite).
        host: Network host for networked dialects.
        port: Network port; unused by sqlite.
        db_name: Database name, or the database file path for sqlite.
        user: Database user for networked dialects.
        password: Database password.
        ssl_mode: PostgreSQL ``sslmode`` value.
        table_name: Table to read when no custom query is given.
        column_path: Column holding record paths.
        column_content: Column holding record contents.
        column_type: Optional file type column.
        column_size: Optional file size column.
        custom_query: Optional full SELECT replacing the built query.
    """

    db_type: str
    host: str = ""
    port: int = 0
    db_name: str = ""
    user: str = ""
    password: str = field(default="", repr=False)
    ssl_mode: str = ""
    table_name: str = ""
    column_path: str = ""
    column_content: str = ""
    column_type: str = ""
    column_size: str = ""
    custom_query: str = ""


@dataclass(frozen=True)
class SourceConfig:
    """Tagged source configuration.

    Exactly one variant matching ``source_type`` is expected to be set;
    validation rejects anything else.

    Attributes:
        source_type: One of filesystem, csv, tsv, database.
        filesystem: Filesystem variant.
        tabular: CSV/TSV variant.
        relational: Database variant.
    """

    source_type: str
    filesystem: FilesystemSourceOptions | None = None
    tabular: TabularSourceOptions | None = None
    relational: RelationalSourceOptions | None = None

    @classmethod
    def for_filesystem(cls, options: FilesystemSourceOptions) -> "SourceConfig":
        """Build a filesystem source config."""
        return cls(source_type=SOURCE_TYPE_FILESYSTEM, filesystem=options)

    @classmethod
    def for_tabular(cls, options: TabularSourceOptions, tsv: bool = False) -> "SourceConfig":
        """Build a CSV or TSV source config."""
        source_type = SOURCE_TYPE_TSV if tsv else SOURCE_TYPE_CSV
        return cls(source_type=source_type, tabular=options)

    @classmethod
    def for_relational(cls, options: RelationalSourceOptions) -> "SourceConfig":
        """Build a database source config."""
        return cls(source_type=SOURCE_TYPE_DATABASE, relational=options)


@dataclass(frozen=True)
class OutputOptions:
    """Output rendering options.

    Attributes:
        save: Write rendered output to ``output_file``.
        output_file: Destination path when saving.
        show_size: Print output size instead of the output itself.
        show_funcs: List Go function signatures instead of file contents.
    """

    save: bool = False
    output_file: str = DEFAULT_OUTPUT_FILE
    show_size: bool = False
    show_funcs: bool = False
