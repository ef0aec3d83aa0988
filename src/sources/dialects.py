"""Database dialect registry for relational sources.

Each supported database type maps to a SQLAlchemy driver name, a default
port, and whether it is reached over the network. Connection URLs are
assembled with ``URL.create`` so credentials are never string-formatted.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.engine import URL

from core.constants import (
    DB_TYPE_MYSQL,
    DB_TYPE_POSTGRES,
    DB_TYPE_SQLITE,
    DEFAULT_MYSQL_PORT,
    DEFAULT_POSTGRES_PORT,
)
from core.errors import CodexValidationError
from core.types import RelationalSourceOptions


@dataclass(frozen=True)
class DatabaseDialect:
    """Connection traits of one database type.

    Attributes:
        name: Database type name used in configuration.
        drivername: SQLAlchemy ``dialect+driver`` string.
        default_port: Port used when none is configured; 0 when unused.
        networked: Whether host, port, and user are required.
        supports_ssl_mode: Whether ``sslmode`` is passed as a URL query.
    """

    name: str
    drivername: str
    default_port: int
    networked: bool
    supports_ssl_mode: bool = False


_DIALECTS = {
    DB_TYPE_POSTGRES: DatabaseDialect(
        name=DB_TYPE_POSTGRES,
        drivername="postgresql+psycopg2",
        default_port=DEFAULT_POSTGRES_PORT,
        networked=True,
        supports_ssl_mode=True,
    ),
    DB_TYPE_MYSQL: DatabaseDialect(
        name=DB_TYPE_MYSQL,
        drivername="mysql+pymysql",
        default_port=DEFAULT_MYSQL_PORT,
        networked=True,
    ),
    DB_TYPE_SQLITE: DatabaseDialect(
        name=DB_TYPE_SQLITE,
        drivername="sqlite",
        default_port=0,
        networked=False,
    ),
}


def get_dialect(db_type: str) -> DatabaseDialect:
    """Look up a dialect by configured database type.

    Args:
        db_type: Database type name (case-insensitive).

    Returns:
        Dialect traits.

    Raises:
        CodexValidationError: If the database type is not supported.
    """
    dialect = _DIALECTS.get(db_type.lower())
    if dialect is None:
        raise CodexValidationError(
            "db_type", f"must be one of: {', '.join(supported_dialects())}"
        )
    return dialect


def supported_dialects() -> tuple[str, ...]:
    """Return supported database type names."""
    return tuple(_DIALECTS.keys())


def build_connection_url(options: RelationalSourceOptions) -> URL:
    """Build a SQLAlchemy URL for the configured database.

    Networked dialects get host, port, user, password, and database name;
    sqlite gets the bare database file path.

    Args:
        options: Relational source options with defaults applied.

    Returns:
        Connection URL. Its string form hides the password.
    """
    dialect = get_dialect(options.db_type)
    if not dialect.networked:
        return URL.create(dialect.drivername, database=options.db_name)
    query = {}
    if dialect.supports_ssl_mode and options.ssl_mode:
        query["sslmode"] = options.ssl_mode
    return URL.create(
        dialect.drivername,
        username=options.user or None,
        password=options.password or None,
        host=options.host or None,
        port=options.port or None,
        database=options.db_name or None,
        query=query,
    )
