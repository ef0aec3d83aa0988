"""Input validators for untrusted configuration values.

Every validator is pure and raises ``CodexValidationError`` on rejection.
These checks run before any filesystem or database access happens.

Identifiers are the only untrusted strings interpolated into SQL, so
``validate_sql_identifier`` combines an allowlist pattern with a keyword
denylist. Custom queries and paths rely on denylists only, which is
inherently incomplete.
"""

from __future__ import annotations

import os
import re

from core.constants import (
    MAX_CONFIG_NAME_LENGTH,
    MAX_EXTENSION_LENGTH,
    MAX_HOST_LENGTH,
    MAX_IDENTIFIER_LENGTH,
    MAX_PATH_LENGTH,
    MAX_PORT,
    MAX_QUERY_LENGTH,
    MIN_PORT,
    SUPPORTED_CSV_DELIMITERS,
    SUPPORTED_DATABASE_TYPES,
    SUPPORTED_SOURCE_TYPES,
)
from core.errors import CodexValidationError

_SQL_IDENTIFIER_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_EXTENSION_PATTERN = re.compile(r"[A-Za-z0-9]*")
_CONFIG_NAME_PATTERN = re.compile(r"[A-Za-z0-9 _-]*")

_PATH_TRAVERSAL_PATTERNS = ("..", "~", "$", "|", ";", "&", "`", "<", ">")
_HOST_DANGEROUS_PATTERNS = ("|", ";", "&", "`", "$", "(", ")", "<", ">")
_SQL_INJECTION_PATTERNS = (
    "--",
    "/*",
    "*/",
    ";",
    "'",
    '"',
    "XP_",
    "SP_",
    "DROP ",
    "INSERT ",
    "UPDATE ",
    "DELETE ",
    "EXEC",
    "UNION",
)
_FORBIDDEN_QUERY_KEYWORDS = (
    "DROP",
    "DELETE",
    "UPDATE",
    "INSERT",
    "ALTER",
    "CREATE",
    "EXEC",
    "EXECUTE",
    "INTO OUTFILE",
    "INTO DUMPFILE",
    "LOAD_FILE",
)


def validate_sql_identifier(name: str, field: str) -> None:
    """Validate a SQL table or column name.

    Args:
        name: Candidate identifier.
        field: Field name reported on failure.

    Raises:
        CodexValidationError: If the identifier is empty, too long, does not
            match ``^[A-Za-z][A-Za-z0-9_]*$``, or contains a denylisted token.
    """
    if not isinstance(name, str) or not name:
        raise CodexValidationError(field, "cannot be empty")
    if _byte_length(name) > MAX_IDENTIFIER_LENGTH:
        raise CodexValidationError(
            field, f"exceeds maximum length of {MAX_IDENTIFIER_LENGTH} characters"
        )
    if _SQL_IDENTIFIER_PATTERN.fullmatch(name) is None:
        raise CodexValidationError(
            field,
            "must contain only alphanumeric characters and underscores, starting with a letter",
        )
    upper_name = name.upper()
    if any(pattern in upper_name for pattern in _SQL_INJECTION_PATTERNS):
        raise CodexValidationError(
            field, "contains potentially dangerous SQL characters or keywords"
        )


def validate_custom_query(query: str, field: str) -> None:
    """Validate a caller-supplied SELECT statement.

    An empty query is valid and means "build the query from identifiers".

    Args:
        query: Candidate query text.
        field: Field name reported on failure.

    Raises:
        CodexValidationError: If the query is too long, is not a SELECT, or
            contains a forbidden keyword.
    """
    if not isinstance(query, str):
        raise CodexValidationError(field, "must be a string")
    if query == "":
        return
    if _byte_length(query) > MAX_QUERY_LENGTH:
        raise CodexValidationError(
            field, f"exceeds maximum length of {MAX_QUERY_LENGTH} characters"
        )
    upper_query = query.upper().strip()
    if not upper_query.startswith("SELECT"):
        raise CodexValidationError(field, "must be a SELECT statement")
    for keyword in _FORBIDDEN_QUERY_KEYWORDS:
        if keyword in upper_query:
            raise CodexValidationError(field, f"contains forbidden keyword: {keyword}")


def validate_file_path(path: str, field: str) -> None:
    """Validate a filesystem path against traversal and shell metacharacters.

    Args:
        path: Candidate path.
        field: Field name reported on failure.

    Raises:
        CodexValidationError: If the path is empty, too long, contains a
            null byte or blocked pattern, or changes absoluteness when normalized.
    """
    if not isinstance(path, str) or not path:
        raise CodexValidationError(field, "cannot be empty")
    if _byte_length(path) > MAX_PATH_LENGTH:
        raise CodexValidationError(
            field, f"exceeds maximum length of {MAX_PATH_LENGTH} characters"
        )
    if "\x00" in path:
        raise CodexValidationError(field, "contains a null byte")
    if any(pattern in path for pattern in _PATH_TRAVERSAL_PATTERNS):
        raise CodexValidationError(
            field, "contains potentially dangerous path traversal characters"
        )
    if os.path.isabs(os.path.normpath(path)) != os.path.isabs(path):
        raise CodexValidationError(
            field, "path normalization detected potential traversal attempt"
        )


def validate_host(host: str, field: str) -> None:
    """Validate a hostname or IP address.

    Args:
        host: Candidate host.
        field: Field name reported on failure.

    Raises:
        CodexValidationError: If the host is empty, too long, or contains
            shell metacharacters.
    """
    if not isinstance(host, str) or not host:
        raise CodexValidationError(field, "cannot be empty")
    if _byte_length(host) > MAX_HOST_LENGTH:
        raise CodexValidationError(
            field, f"exceeds maximum length of {MAX_HOST_LENGTH} characters"
        )
    if any(pattern in host for pattern in _HOST_DANGEROUS_PATTERNS):
        raise CodexValidationError(field, "contains potentially dangerous characters")


def validate_port(port: int, field: str) -> None:
    """Validate a network port in ``[0, 65535]``."""
    if not _is_int(port) or port < MIN_PORT or port > MAX_PORT:
        raise CodexValidationError(field, f"must be between {MIN_PORT} and {MAX_PORT}")


def validate_database_type(db_type: str, field: str) -> None:
    """Validate a database dialect name (case-insensitive)."""
    _validate_member(db_type, field, SUPPORTED_DATABASE_TYPES)


def validate_source_type(source_type: str, field: str) -> None:
    """Validate a source type discriminator (case-insensitive)."""
    _validate_member(source_type, field, SUPPORTED_SOURCE_TYPES)


def validate_csv_delimiter(delimiter: str, field: str) -> None:
    """Validate a tabular field delimiter.

    Raises:
        CodexValidationError: If the delimiter is empty or not one of
            comma, tab, semicolon, or pipe.
    """
    if not isinstance(delimiter, str) or not delimiter:
        raise CodexValidationError(field, "cannot be empty")
    if delimiter not in SUPPORTED_CSV_DELIMITERS:
        raise CodexValidationError(
            field, "must be one of: comma (,), tab (\\t), semicolon (;), or pipe (|)"
        )


def validate_file_extension(ext: str, field: str) -> None:
    """Validate a file extension, with or without its leading dot.

    Empty extensions are allowed.
    """
    if not isinstance(ext, str):
        raise CodexValidationError(field, "must be a string")
    ext = ext.removeprefix(".")
    if _byte_length(ext) > MAX_EXTENSION_LENGTH:
        raise CodexValidationError(
            field, f"extension too long (max {MAX_EXTENSION_LENGTH} characters)"
        )
    if _EXTENSION_PATTERN.fullmatch(ext) is None:
        raise CodexValidationError(field, "extension must contain only alphanumeric characters")


def validate_config_name(name: str, field: str) -> None:
    """Validate a configuration profile name.

    Empty names are allowed for unnamed configurations.
    """
    if not isinstance(name, str):
        raise CodexValidationError(field, "must be a string")
    if _byte_length(name) > MAX_CONFIG_NAME_LENGTH:
        raise CodexValidationError(
            field, f"exceeds maximum length of {MAX_CONFIG_NAME_LENGTH} characters"
        )
    if _CONFIG_NAME_PATTERN.fullmatch(name) is None:
        raise CodexValidationError(
            field,
            "must contain only alphanumeric characters, spaces, dashes, and underscores",
        )


def validate_non_negative_int(value: int, field: str) -> None:
    """Validate an integer that must be zero or positive."""
    if not _is_int(value) or value < 0:
        raise CodexValidationError(field, "must be zero or a positive integer")


def _validate_member(value: str, field: str, allowed: tuple[str, ...]) -> None:
    """Check a value against a closed set, ignoring case.

    Raises:
        CodexValidationError: If the value is empty or not in ``allowed``.
    """
    if not isinstance(value, str) or not value:
        raise CodexValidationError(field, "cannot be empty")
    if value.lower() not in allowed:
        raise CodexValidationError(field, f"must be one of: {', '.join(allowed)}")


def _is_int(value: object) -> bool:
    """Return whether a value is an int and not a bool."""
    return isinstance(value, int) and not isinstance(value, bool)


def _byte_length(value: str) -> int:
    """Return the UTF-8 length used for length limits."""
    return len(value.encode("utf-8", errors="surrogatepass"))
