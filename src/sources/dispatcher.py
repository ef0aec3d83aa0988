"""Source selection and orchestration.

This module maps a declared source type onto one record source and drives
its validate, open, process, and close sequence. Defaults are filled and
the whole config is validated before any source touches external systems.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Iterator

from core.constants import (
    DEFAULT_CSV_DELIMITER,
    DEFAULT_TSV_DELIMITER,
    SOURCE_TYPE_CSV,
    SOURCE_TYPE_DATABASE,
    SOURCE_TYPE_FILESYSTEM,
    SOURCE_TYPE_TSV,
    SUPPORTED_SOURCE_TYPES,
)
from core.errors import CodexValidationError
from core.logging_config import get_logger
from core.types import Record, SourceConfig
from sources.base import RecordSource
from sources.filesystem_source import FilesystemSource
from sources.relational_source import RelationalSource, apply_relational_defaults
from sources.tabular_source import TabularSource
from validation.source_checks import validate_source_config

_LOGGER = get_logger(__name__)

_SOURCE_FACTORIES: dict[str, Callable[[SourceConfig], RecordSource]] = {
    SOURCE_TYPE_FILESYSTEM: lambda config: FilesystemSource(_require(config.filesystem)),
    SOURCE_TYPE_CSV: lambda config: TabularSource(_require(config.tabular)),
    SOURCE_TYPE_TSV: lambda config: TabularSource(_require(config.tabular)),
    SOURCE_TYPE_DATABASE: lambda config: RelationalSource(_require(config.relational)),
}


def read_records(config: SourceConfig) -> list[Record]:
    """Ingest all records from the configured source.

    Args:
        config: Tagged source config from the configuration layer.

    Returns:
        Ordered records produced by the selected source.

    Raises:
        CodexValidationError: If the config is unsafe or incomplete.
        CodexConnectionError: If a database cannot be reached or queried.
        CodexIngestError: If a file or row cannot be read.
    """
    records = list(iter_records(config))
    _LOGGER.info(
        "ingest_completed",
        source_type=config.source_type,
        record_count=len(records),
    )
    return records


def iter_records(config: SourceConfig) -> Iterator[Record]:
    """Yield records from the configured source.

    Validation runs before the first record is produced; the source's
    resources are released before any record is yielded.
    """
    prepared_config = apply_source_defaults(config)
    validate_source_config(prepared_config)
    source = build_source(prepared_config)
    _LOGGER.debug("source_selected", source_type=prepared_config.source_type)
    yield from source.enumerate_records()


def build_source(config: SourceConfig) -> RecordSource:
    """Instantiate the record source matching ``config.source_type``.

    Raises:
        CodexValidationError: If the source type or its variant is missing.
    """
    source_type = config.source_type.lower() if isinstance(config.source_type, str) else ""
    factory = _SOURCE_FACTORIES.get(source_type)
    if factory is None:
        raise CodexValidationError(
            "source_type", f"must be one of: {', '.join(SUPPORTED_SOURCE_TYPES)}"
        )
    return factory(config)


def apply_source_defaults(config: SourceConfig) -> SourceConfig:
    """Fill type-dependent defaults before validation.

    An empty delimiter becomes a comma for csv and a tab for tsv; relational
    options get dialect host, port, ssl mode, and column defaults.
    """
    source_type = config.source_type.lower() if isinstance(config.source_type, str) else ""
    if config.tabular is not None and not config.tabular.delimiter:
        delimiter = (
            DEFAULT_TSV_DELIMITER if source_type == SOURCE_TYPE_TSV else DEFAULT_CSV_DELIMITER
        )
        config = replace(config, tabular=replace(config.tabular, delimiter=delimiter))
    if config.relational is not None:
        config = replace(config, relational=apply_relational_defaults(config.relational))
    return config


def _require(variant: Any) -> Any:
    if variant is None:
        raise CodexValidationError("source_config", "source options are missing")
    return variant
