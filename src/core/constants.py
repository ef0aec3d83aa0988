"""Core constants used across Codex modules.

This module centralizes limits, defaults, and closed value sets.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

MAX_PATH_LENGTH = 4096
MAX_QUERY_LENGTH = 10000
MAX_CONFIG_NAME_LENGTH = 255
MAX_IDENTIFIER_LENGTH = 128
MAX_HOST_LENGTH = 255
MAX_EXTENSION_LENGTH = 10
MIN_PORT = 0
MAX_PORT = 65535

SOURCE_TYPE_FILESYSTEM = "filesystem"
SOURCE_TYPE_CSV = "csv"
SOURCE_TYPE_TSV = "tsv"
SOURCE_TYPE_DATABASE = "database"
SUPPORTED_SOURCE_TYPES = (
    SOURCE_TYPE_FILESYSTEM,
    SOURCE_TYPE_CSV,
    SOURCE_TYPE_TSV,
    SOURCE_TYPE_DATABASE,
)

DB_TYPE_POSTGRES = "postgres"
DB_TYPE_MYSQL = "mysql"
DB_TYPE_SQLITE = "sqlite"
SUPPORTED_DATABASE_TYPES = (DB_TYPE_POSTGRES, DB_TYPE_MYSQL, DB_TYPE_SQLITE)

SUPPORTED_CSV_DELIMITERS = (",", "\t", ";", "|")
CSV_FIELD_SIZE_LIMIT = 2**31 - 1
DEFAULT_CSV_DELIMITER = ","
DEFAULT_TSV_DELIMITER = "\t"

DEFAULT_DB_HOST = "localhost"
DEFAULT_POSTGRES_PORT = 5432
DEFAULT_MYSQL_PORT = 3306
DEFAULT_SSL_MODE = "disable"
DEFAULT_PATH_COLUMN = "file_path"
DEFAULT_CONTENT_COLUMN = "content"
DB_MAX_OPEN_CONNECTIONS = 25
DB_MAX_IDLE_CONNECTIONS = 5
DB_PING_QUERY = "SELECT 1"

DEFAULT_OUTPUT_FILE = "output.txt"
