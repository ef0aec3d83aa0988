"""Per-variant source configuration checks.

This module composes the field validators into whole-config checks.
Sources call the variant checks from their ``validate`` methods, and the
dispatcher calls ``validate_source_config`` before building any source.
"""

from __future__ import annotations

from core.constants import (
    DB_TYPE_SQLITE,
    SOURCE_TYPE_CSV,
    SOURCE_TYPE_DATABASE,
    SOURCE_TYPE_FILESYSTEM,
    SOURCE_TYPE_TSV,
)
from core.errors import CodexValidationError
from core.types import (
    FilesystemSourceOptions,
    RelationalSourceOptions,
    SourceConfig,
    TabularSourceOptions,
)
from validation.validators import (
    validate_csv_delimiter,
    validate_custom_query,
    validate_database_type,
    validate_file_extension,
    validate_file_path,
    validate_host,
    validate_non_negative_int,
    validate_port,
    validate_source_type,
    validate_sql_identifier,
)

_VARIANT_FIELDS = {
    SOURCE_TYPE_FILESYSTEM: "filesystem",
    SOURCE_TYPE_CSV: "tabular",
    SOURCE_TYPE_TSV: "tabular",
    SOURCE_TYPE_DATABASE: "relational",
}
_VARIANT_NAMES = ("filesystem", "tabular", "relational")


def validate_source_config(config: SourceConfig) -> None:
    """Validate a tagged source config and its active variant.

    Args:
        config: Source config from the configuration layer.

    Raises:
        CodexValidationError: If the type is unknown, the matching variant is
            missing, another variant is set, or any variant field is unsafe.
    """
    validate_source_type(config.source_type, "source_type")
    source_type = config.source_type.lower()
    expected_field = _VARIANT_FIELDS[source_type]
    for variant_field in _VARIANT_NAMES:
        present = getattr(config, variant_field) is not None
        if variant_field == expected_field and not present:
            raise CodexValidationError(
                variant_field, f"is required for {source_type} source"
            )
        if variant_field != expected_field and present:
            raise CodexValidationError(
                variant_field, f"is not allowed for {source_type} source"
            )
    if config.filesystem is not None:
        validate_filesystem_options(config.filesystem)
    elif config.tabular is not None:
        validate_tabular_options(config.tabular)
    elif config.relational is not None:
        validate_relational_options(config.relational)


def validate_filesystem_options(options: FilesystemSourceOptions) -> None:
    """Validate filesystem roots and extension filters."""
    if not options.directories:
        raise CodexValidationError(
            "directories", "are required for filesystem source"
        )
    for index, directory in enumerate(options.directories):
        validate_file_path(directory, f"directories[{index}]")
    for index, ext in enumerate(options.include_exts):
        validate_file_extension(ext, f"include_extensions[{index}]")
    for index, ext in enumerate(options.ignore_exts):
        validate_file_extension(ext, f"exclude_extensions[{index}]")


def validate_tabular_options(options: TabularSourceOptions) -> None:
    """Validate tabular file path, delimiter, and column indices."""
    validate_file_path(options.file_path, "csv_file_path")
    validate_csv_delimiter(options.delimiter, "csv_delimiter")
    validate_non_negative_int(options.path_column, "csv_path_column")
    validate_non_negative_int(options.content_column, "csv_content_column")


def validate_relational_options(options: RelationalSourceOptions) -> None:
    """Validate connection parameters and query configuration.

    Networked dialects require host, port, and user. Either a custom query
    or a table with path/content columns must be configured.

    Args:
        options: Relational source options.

    Raises:
        CodexValidationError: If any parameter is missing or unsafe.
    """
    validate_database_type(options.db_type, "db_type")
    db_type = options.db_type.lower()
    if db_type != DB_TYPE_SQLITE:
        validate_host(options.host, "db_host")
        validate_port(options.port, "db_port")
        if not options.user:
            raise CodexValidationError("db_user", f"is required for {db_type}")
    if not options.db_name:
        raise CodexValidationError("db_name", "database name is required")
    if options.custom_query:
        validate_custom_query(options.custom_query, "db_query")
        return
    if not options.table_name:
        raise CodexValidationError(
            "db_table_name", "is required when db_query is not provided"
        )
    validate_sql_identifier(options.table_name, "db_table_name")
    validate_sql_identifier(options.column_path, "db_column_path")
    validate_sql_identifier(options.column_content, "db_column_content")
    if options.column_type:
        validate_sql_identifier(options.column_type, "db_column_type")
    if options.column_size:
        validate_sql_identifier(options.column_size, "db_column_size")
