"""Unit tests for the relational database record source."""

from __future__ import annotations

from pathlib import Path
import sqlite3

import pytest

from core.errors import CodexConnectionError, CodexIngestError, CodexValidationError
from core.types import Record, RelationalSourceOptions
from sources import relational_source
from sources.relational_source import (
    ConnectionState,
    RelationalSource,
    apply_relational_defaults,
)


def _seed_database(db_path: Path, rows: list[tuple[object, object]]) -> None:
    connection = sqlite3.connect(db_path)
    try:
        connection.execute(
            "CREATE TABLE code_files (file_path TEXT, content TEXT, file_type TEXT)"
        )
        connection.executemany(
            "INSERT INTO code_files (file_path, content, file_type) VALUES (?, ?, 'go')",
            rows,
        )
        connection.commit()
    finally:
        connection.close()


def _sqlite_options(db_path: Path, **overrides: object) -> RelationalSourceOptions:
    values: dict[str, object] = {
        "db_type": "sqlite",
        "db_name": str(db_path),
        "table_name": "code_files",
    }
    values.update(overrides)
    return apply_relational_defaults(RelationalSourceOptions(**values))  # type: ignore[arg-type]


def test_build_query_from_identifiers(tmp_path: Path) -> None:
    """Query builder should produce the exact SELECT for default columns."""
    source = RelationalSource(_sqlite_options(tmp_path / "code.db"))

    assert source.build_query() == "SELECT file_path, content FROM code_files"


def test_build_query_appends_optional_columns(tmp_path: Path) -> None:
    """Query builder should append type and size columns when configured."""
    options = _sqlite_options(tmp_path / "code.db", column_type="file_type", column_size="size")

    query = RelationalSource(options).build_query()

    assert query == "SELECT file_path, content, file_type, size FROM code_files"


def test_build_query_rejects_injected_table(tmp_path: Path) -> None:
    """Query builder should re-validate identifiers before interpolation."""
    options = _sqlite_options(tmp_path / "code.db", table_name="code_files; DROP TABLE users")

    with pytest.raises(CodexValidationError):
        RelationalSource(options).build_query()


def test_build_query_returns_custom_query_verbatim(tmp_path: Path) -> None:
    """Query builder should pass a custom query through unchanged."""
    custom_query = "SELECT file_path, content FROM code_files WHERE file_type = 'go'"
    options = _sqlite_options(tmp_path / "code.db", custom_query=custom_query)

    assert RelationalSource(options).build_query() == custom_query


def test_enumerate_records_reads_rows_in_order(tmp_path: Path) -> None:
    """Relational source should return rows as records and close afterwards."""
    db_path = tmp_path / "code.db"
    _seed_database(db_path, [("a.go", "package a"), ("b.go", "package b")])
    source = RelationalSource(_sqlite_options(db_path, column_type="file_type"))

    records = list(source.enumerate_records())

    assert records == [
        Record(path="a.go", content="package a"),
        Record(path="b.go", content="package b"),
    ]
    assert source.state is ConnectionState.CLOSED


def test_custom_query_with_percent_sign_runs_verbatim(tmp_path: Path) -> None:
    """Custom queries should reach the driver without parameter parsing."""
    db_path = tmp_path / "code.db"
    _seed_database(db_path, [("a.go", "package a"), ("b.txt", "notes")])
    options = _sqlite_options(
        db_path,
        custom_query="SELECT file_path, content FROM code_files WHERE file_path LIKE '%.go'",
    )

    records = list(RelationalSource(options).enumerate_records())

    assert records == [Record(path="a.go", content="package a")]


def test_null_content_fails_row_scan(tmp_path: Path) -> None:
    """Relational source should fail when a row has no content."""
    db_path = tmp_path / "code.db"
    _seed_database(db_path, [("a.go", None)])

    with pytest.raises(CodexIngestError, match="failed to read database row"):
        list(RelationalSource(_sqlite_options(db_path)).enumerate_records())


def test_process_requires_connection(tmp_path: Path) -> None:
    """Relational source should refuse to query before connecting."""
    db_path = tmp_path / "code.db"
    _seed_database(db_path, [])

    with pytest.raises(CodexConnectionError, match="not established"):
        RelationalSource(_sqlite_options(db_path)).process()


def test_missing_table_reports_generic_query_error(tmp_path: Path) -> None:
    """Query failures should surface a generic message without a chained cause."""
    db_path = tmp_path / "code.db"
    _seed_database(db_path, [])
    source = RelationalSource(_sqlite_options(db_path, table_name="missing_table"))

    with pytest.raises(CodexConnectionError) as error_info:
        list(source.enumerate_records())

    assert str(error_info.value) == "query execution failed"
    assert error_info.value.__cause__ is None
    assert source.state is ConnectionState.CLOSED


def test_validate_rejects_missing_sqlite_file(tmp_path: Path) -> None:
    """Validation should fail instead of creating an empty database file."""
    db_path = tmp_path / "absent.db"

    with pytest.raises(CodexValidationError) as error_info:
        RelationalSource(_sqlite_options(db_path)).validate()

    assert error_info.value.field == "db_name"
    assert not db_path.exists()


def test_close_is_safe_when_never_opened(tmp_path: Path) -> None:
    """Closing a never-opened source should do nothing and not raise."""
    source = RelationalSource(_sqlite_options(tmp_path / "code.db"))

    source.close()
    source.close()

    assert source.state is ConnectionState.CLOSED


def test_close_after_close_is_noop(tmp_path: Path) -> None:
    """Closing an already-closed source should not raise."""
    db_path = tmp_path / "code.db"
    _seed_database(db_path, [])
    source = RelationalSource(_sqlite_options(db_path))
    source.connect()

    source.close()
    source.close()

    assert source.state is ConnectionState.CLOSED


def test_context_manager_connects_and_closes(tmp_path: Path) -> None:
    """Context manager should connect on entry and close on exit."""
    db_path = tmp_path / "code.db"
    _seed_database(db_path, [("a.go", "package a")])

    with RelationalSource(_sqlite_options(db_path)) as source:
        assert source.state is ConnectionState.CONNECTED
        records = source.process()

    assert records == [Record(path="a.go", content="package a")]
    assert source.state is ConnectionState.CLOSED


def test_test_connection_leaves_source_closed(tmp_path: Path) -> None:
    """Connection test should connect and then release the pool."""
    db_path = tmp_path / "code.db"
    _seed_database(db_path, [])
    source = RelationalSource(_sqlite_options(db_path))

    source.test_connection()

    assert source.state is ConnectionState.CLOSED


def test_connect_failure_hides_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Engine creation failures should not leak the connection URL."""

    def _failing_engine(*args: object, **kwargs: object) -> None:
        raise RuntimeError("could not connect to postgresql://reader:s3cr3t@db/codebase")

    monkeypatch.setattr(relational_source, "create_engine", _failing_engine)
    options = apply_relational_defaults(
        RelationalSourceOptions(
            db_type="postgres",
            db_name="codebase",
            user="reader",
            password="s3cr3t",
            table_name="code_files",
        )
    )
    source = RelationalSource(options)

    with pytest.raises(CodexConnectionError) as error_info:
        source.connect()

    assert "s3cr3t" not in str(error_info.value)
    assert error_info.value.__cause__ is None
    assert source.state is ConnectionState.UNCONNECTED


class _FailingPingConnection:
    def __enter__(self) -> "_FailingPingConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def exec_driver_sql(self, statement: str) -> None:
        raise RuntimeError("server at postgresql://reader:s3cr3t@db/codebase went away")


class _FailingPingEngine:
    def __init__(self) -> None:
        self.disposed = False

    def connect(self) -> _FailingPingConnection:
        return _FailingPingConnection()

    def dispose(self) -> None:
        self.disposed = True


def test_ping_failure_disposes_engine(monkeypatch: pytest.MonkeyPatch) -> None:
    """A failed ping should release the new pool and report a generic error."""
    engine = _FailingPingEngine()
    monkeypatch.setattr(relational_source, "create_engine", lambda *args, **kwargs: engine)
    options = apply_relational_defaults(
        RelationalSourceOptions(
            db_type="postgres",
            db_name="codebase",
            user="reader",
            password="s3cr3t",
            table_name="code_files",
        )
    )
    source = RelationalSource(options)

    with pytest.raises(CodexConnectionError) as error_info:
        source.connect()

    assert str(error_info.value) == "database connection test failed"
    assert error_info.value.__cause__ is None
    assert engine.disposed
    assert source.state is ConnectionState.UNCONNECTED


def test_options_repr_hides_password() -> None:
    """Option reprs should never include the database password."""
    options = RelationalSourceOptions(db_type="postgres", password="s3cr3t")

    assert "s3cr3t" not in repr(options)


def test_apply_defaults_fills_dialect_values() -> None:
    """Defaults should fill host, port, ssl mode, and column names."""
    options = apply_relational_defaults(RelationalSourceOptions(db_type="POSTGRES"))

    assert (options.db_type, options.host, options.port, options.ssl_mode) == (
        "postgres",
        "localhost",
        5432,
        "disable",
    )
    assert (options.column_path, options.column_content) == ("file_path", "content")


def test_apply_defaults_leaves_custom_query_columns_empty() -> None:
    """Defaults should not invent column names when a custom query is set."""
    options = apply_relational_defaults(
        RelationalSourceOptions(db_type="mysql", custom_query="SELECT a, b FROM t")
    )

    assert options.port == 3306
    assert options.column_path == ""
    assert options.ssl_mode == ""
