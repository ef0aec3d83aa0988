"""Relational database record source.

This module connects to a configured database through SQLAlchemy, builds
or passes through a SELECT, and scans result rows into records.

Lifecycle: ``UNCONNECTED -> CONNECTED -> CLOSED``. Connection failures are
reported with generic messages and no chained cause, so connection URLs and
credentials never reach error messages, tracebacks, or logs.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
import os
from typing import Any, Sequence

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool

from core.constants import (
    DB_MAX_IDLE_CONNECTIONS,
    DB_MAX_OPEN_CONNECTIONS,
    DB_PING_QUERY,
    DB_TYPE_POSTGRES,
    DEFAULT_CONTENT_COLUMN,
    DEFAULT_DB_HOST,
    DEFAULT_PATH_COLUMN,
    DEFAULT_SSL_MODE,
    SOURCE_TYPE_DATABASE,
)
from core.errors import (
    CodexConnectionError,
    CodexDependencyError,
    CodexIngestError,
    CodexValidationError,
)
from core.logging_config import get_logger
from core.types import Record, RelationalSourceOptions
from sources.base import RecordSource
from sources.dialects import build_connection_url, get_dialect, supported_dialects
from validation.source_checks import validate_relational_options
from validation.validators import validate_sql_identifier

_LOGGER = get_logger(__name__)


class ConnectionState(Enum):
    """Relational source connection lifecycle state."""

    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    CLOSED = "closed"


class RelationalSource(RecordSource):
    """Record source backed by a relational database table or query."""

    source_type = SOURCE_TYPE_DATABASE

    def __init__(self, options: RelationalSourceOptions) -> None:
        self._options = options
        self._engine: Engine | None = None
        self._state = ConnectionState.UNCONNECTED

    @property
    def options(self) -> RelationalSourceOptions:
        return self._options

    @property
    def state(self) -> ConnectionState:
        return self._state

    def validate(self) -> None:
        """Validate options; an embedded database file must already exist."""
        validate_relational_options(self._options)
        if not get_dialect(self._options.db_type).networked:
            if not os.path.isfile(self._options.db_name):
                raise CodexValidationError(
                    "db_name", f"database file does not exist: {self._options.db_name}"
                )

    def open(self) -> None:
        self.connect()

    def connect(self) -> None:
        """Create a bounded connection pool and verify it with a ping.

        Raises:
            CodexDependencyError: If the dialect's driver is not installed.
            CodexConnectionError: If the engine cannot be created or pinged.
        """
        if self._state is ConnectionState.CONNECTED:
            return
        dialect = get_dialect(self._options.db_type)
        _LOGGER.debug(
            "database_connecting",
            db_type=dialect.name,
            host=self._options.host if dialect.networked else None,
        )
        engine = _create_pooled_engine(self._options)
        try:
            with engine.connect() as connection:
                connection.exec_driver_sql(DB_PING_QUERY)
        except Exception:
            engine.dispose()
            raise CodexConnectionError("database connection test failed") from None
        self._engine = engine
        self._state = ConnectionState.CONNECTED
        _LOGGER.debug("database_connected", db_type=dialect.name)

    def close(self) -> None:
        """Release the connection pool. Safe to call in any state."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        self._state = ConnectionState.CLOSED

    def test_connection(self) -> None:
        """Connect and immediately close, raising on any connection failure."""
        self.connect()
        self.close()

    def process(self) -> list[Record]:
        """Execute the built or custom query and scan rows into records.

        Returns:
            Records in database-returned row order.

        Raises:
            CodexConnectionError: If not connected or the query fails.
            CodexValidationError: If an identifier fails re-validation.
            CodexIngestError: If a row lacks a path or content value.
        """
        if self._engine is None or self._state is not ConnectionState.CONNECTED:
            raise CodexConnectionError("database connection not established")
        query = self.build_query()
        _LOGGER.debug(
            "database_query_started",
            table_name=self._options.table_name or None,
            custom_query=bool(self._options.custom_query),
        )
        try:
            with self._engine.connect() as connection:
                result = connection.execution_options(no_parameters=True).exec_driver_sql(query)
                rows = result.fetchall()
        except SQLAlchemyError:
            raise CodexConnectionError("query execution failed") from None
        records = [_row_to_record(row) for row in rows]
        _LOGGER.debug("database_query_completed", record_count=len(records))
        return records

    def build_query(self) -> str:
        """Return the custom query or build one from validated identifiers.

        Every identifier is re-validated right before interpolation.

        Returns:
            SQL SELECT statement.

        Raises:
            CodexValidationError: If any identifier is unsafe.
        """
        options = self._options
        if options.custom_query:
            return options.custom_query
        validate_sql_identifier(options.table_name, "db_table_name")
        validate_sql_identifier(options.column_path, "db_column_path")
        validate_sql_identifier(options.column_content, "db_column_content")
        columns = [options.column_path, options.column_content]
        if options.column_type:
            validate_sql_identifier(options.column_type, "db_column_type")
            columns.append(options.column_type)
        if options.column_size:
            validate_sql_identifier(options.column_size, "db_column_size")
            columns.append(options.column_size)
        return f"SELECT {', '.join(columns)} FROM {options.table_name}"


def apply_relational_defaults(options: RelationalSourceOptions) -> RelationalSourceOptions:
    """Fill unset connection and column fields with dialect defaults.

    Args:
        options: Options from the configuration layer.

    Returns:
        Options with host, port, ssl mode, and column defaults applied.
    """
    db_type = options.db_type.lower() if isinstance(options.db_type, str) else ""
    if db_type not in supported_dialects():
        return options
    dialect = get_dialect(db_type)
    updates: dict[str, Any] = {"db_type": db_type}
    if dialect.networked and not options.host:
        updates["host"] = DEFAULT_DB_HOST
    if not options.port:
        updates["port"] = dialect.default_port
    if db_type == DB_TYPE_POSTGRES and not options.ssl_mode:
        updates["ssl_mode"] = DEFAULT_SSL_MODE
    if not options.custom_query:
        if not options.column_path:
            updates["column_path"] = DEFAULT_PATH_COLUMN
        if not options.column_content:
            updates["column_content"] = DEFAULT_CONTENT_COLUMN
    return replace(options, **updates)


def _create_pooled_engine(options: RelationalSourceOptions) -> Engine:
    """Create an engine capped at the fixed open/idle connection limits."""
    try:
        return create_engine(
            build_connection_url(options),
            poolclass=QueuePool,
            pool_size=DB_MAX_IDLE_CONNECTIONS,
            max_overflow=DB_MAX_OPEN_CONNECTIONS - DB_MAX_IDLE_CONNECTIONS,
            pool_pre_ping=True,
        )
    except ImportError:
        raise CodexDependencyError(
            f"The database driver for '{options.db_type}' is not installed. "
            f"Install the '{options.db_type}' extra to read from this database."
        ) from None
    except Exception:
        raise CodexConnectionError("failed to establish database connection") from None


def _row_to_record(row: Sequence[Any]) -> Record:
    """Scan one result row; optional trailing columns may be NULL."""
    if len(row) < 2 or row[0] is None or row[1] is None:
        raise CodexIngestError("failed to read database row")
    return Record(path=_as_text(row[0]), content=_as_text(row[1]))


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)
