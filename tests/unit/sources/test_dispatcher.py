"""Unit tests for source selection and orchestration."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import CodexValidationError
from core.types import (
    FilesystemSourceOptions,
    Record,
    RelationalSourceOptions,
    SourceConfig,
    TabularSourceOptions,
)
from sources.dispatcher import apply_source_defaults, build_source, iter_records, read_records
from sources.filesystem_source import FilesystemSource
from sources.relational_source import RelationalSource
from sources.tabular_source import TabularSource


def test_build_source_maps_types_to_sources() -> None:
    """Dispatcher should pick the source class for each declared type."""
    tabular = TabularSourceOptions(file_path="data.tsv")

    assert isinstance(
        build_source(SourceConfig.for_filesystem(FilesystemSourceOptions())), FilesystemSource
    )
    assert isinstance(build_source(SourceConfig.for_tabular(tabular)), TabularSource)
    assert isinstance(build_source(SourceConfig.for_tabular(tabular, tsv=True)), TabularSource)
    assert isinstance(
        build_source(SourceConfig.for_relational(RelationalSourceOptions(db_type="sqlite"))),
        RelationalSource,
    )


def test_build_source_rejects_unknown_type() -> None:
    """Dispatcher should reject unsupported source types."""
    with pytest.raises(CodexValidationError):
        build_source(SourceConfig(source_type="s3"))


def test_apply_defaults_sets_delimiter_by_type() -> None:
    """Dispatcher defaults should pick comma for csv and tab for tsv."""
    options = TabularSourceOptions(file_path="data.txt")

    csv_config = apply_source_defaults(SourceConfig.for_tabular(options))
    tsv_config = apply_source_defaults(SourceConfig.for_tabular(options, tsv=True))

    assert csv_config.tabular is not None and csv_config.tabular.delimiter == ","
    assert tsv_config.tabular is not None and tsv_config.tabular.delimiter == "\t"


def test_apply_defaults_keeps_explicit_delimiter() -> None:
    """Dispatcher defaults should not override a configured delimiter."""
    options = TabularSourceOptions(file_path="data.txt", delimiter="|")

    config = apply_source_defaults(SourceConfig.for_tabular(options, tsv=True))

    assert config.tabular is not None and config.tabular.delimiter == "|"


def test_read_records_reads_tsv_with_default_delimiter(tmp_path: Path) -> None:
    """Dispatcher should ingest a TSV source end to end."""
    tsv_path = tmp_path / "files.tsv"
    tsv_path.write_text("path\tcontent\nmain.go\tpackage main\n", encoding="utf-8")
    config = SourceConfig.for_tabular(TabularSourceOptions(file_path=str(tsv_path)), tsv=True)

    records = read_records(config)

    assert records == [Record(path="main.go", content="package main")]


def test_iter_records_validates_before_any_io(tmp_path: Path) -> None:
    """Dispatcher should reject unsafe configs before touching the filesystem."""
    config = SourceConfig.for_filesystem(
        FilesystemSourceOptions(directories=(str(tmp_path), "../outside"))
    )

    with pytest.raises(CodexValidationError) as error_info:
        next(iter_records(config))

    assert error_info.value.field == "directories[1]"


def test_iter_records_rejects_mismatched_variant(tmp_path: Path) -> None:
    """Dispatcher should reject a config whose variant does not match its type."""
    config = SourceConfig(
        source_type="database",
        filesystem=FilesystemSourceOptions(directories=(str(tmp_path),)),
    )

    with pytest.raises(CodexValidationError) as error_info:
        list(iter_records(config))

    assert error_info.value.field == "filesystem"
