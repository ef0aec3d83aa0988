"""Unit tests for the database dialect registry."""

from __future__ import annotations

import pytest

from core.errors import CodexValidationError
from core.types import RelationalSourceOptions
from sources.dialects import build_connection_url, get_dialect, supported_dialects


def test_supported_dialects_lists_all_types() -> None:
    """Dialect registry should expose postgres, mysql, and sqlite."""
    assert supported_dialects() == ("postgres", "mysql", "sqlite")


def test_get_dialect_is_case_insensitive() -> None:
    """Dialect lookup should ignore case."""
    assert get_dialect("MySQL").default_port == 3306


def test_get_dialect_rejects_unknown() -> None:
    """Dialect lookup should reject unsupported database types."""
    with pytest.raises(CodexValidationError):
        get_dialect("oracle")


def test_postgres_url_carries_ssl_mode_and_hides_password() -> None:
    """Postgres URLs should include sslmode and mask the password when rendered."""
    options = RelationalSourceOptions(
        db_type="postgres",
        host="db.internal",
        port=5432,
        db_name="codebase",
        user="reader",
        password="s3cr3t",
        ssl_mode="require",
    )

    url = build_connection_url(options)

    assert url.drivername == "postgresql+psycopg2"
    assert url.query["sslmode"] == "require"
    assert url.password == "s3cr3t"
    assert "s3cr3t" not in str(url)


def test_mysql_url_has_no_ssl_query() -> None:
    """MySQL URLs should not carry a postgres sslmode parameter."""
    options = RelationalSourceOptions(
        db_type="mysql",
        host="localhost",
        port=3306,
        db_name="codebase",
        user="reader",
        ssl_mode="disable",
    )

    url = build_connection_url(options)

    assert url.drivername == "mysql+pymysql"
    assert "sslmode" not in url.query


def test_sqlite_url_uses_bare_file_path() -> None:
    """SQLite URLs should only carry the database file path."""
    options = RelationalSourceOptions(db_type="sqlite", db_name="data/code.db", host="ignored")

    url = build_connection_url(options)

    assert url.database == "data/code.db"
    assert url.host is None
