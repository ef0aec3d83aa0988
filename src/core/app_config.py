"""Application config files for Codex.

This module loads and saves flat JSON or YAML config profiles, fills
defaults, and converts a profile into the typed source and output options
consumed by the ingest pipeline. Unknown keys and wrongly typed values are
rejected instead of silently ignored.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
import json
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from core.constants import (
    DB_TYPE_MYSQL,
    DB_TYPE_POSTGRES,
    DB_TYPE_SQLITE,
    DEFAULT_CONTENT_COLUMN,
    DEFAULT_CSV_DELIMITER,
    DEFAULT_DB_HOST,
    DEFAULT_MYSQL_PORT,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_PATH_COLUMN,
    DEFAULT_POSTGRES_PORT,
    DEFAULT_SSL_MODE,
    DEFAULT_TSV_DELIMITER,
    SOURCE_TYPE_CSV,
    SOURCE_TYPE_DATABASE,
    SOURCE_TYPE_FILESYSTEM,
    SOURCE_TYPE_TSV,
)
from core.errors import CodexConfigError
from core.types import (
    FilesystemSourceOptions,
    OutputOptions,
    RelationalSourceOptions,
    SourceConfig,
    TabularSourceOptions,
)
from validation.source_checks import validate_source_config
from validation.validators import validate_config_name, validate_file_path

_JSON_SUFFIXES = (".json",)
_YAML_SUFFIXES = (".yaml", ".yml")
_DEFAULT_DB_PORTS = {
    DB_TYPE_POSTGRES: DEFAULT_POSTGRES_PORT,
    DB_TYPE_MYSQL: DEFAULT_MYSQL_PORT,
    DB_TYPE_SQLITE: 0,
}


@dataclass(frozen=True)
class AppConfig:
    """Flat, file-backed application config profile.

    Field names match the keys accepted in JSON and YAML config files.
    """

    source_type: str = SOURCE_TYPE_FILESYSTEM
    directories: tuple[str, ...] = ()
    recursive: bool = True
    ignore_files: tuple[str, ...] = ()
    ignore_dirs: tuple[str, ...] = ()
    exclude_extensions: tuple[str, ...] = ()
    include_extensions: tuple[str, ...] = ()
    csv_file_path: str = ""
    csv_delimiter: str = ""
    csv_path_column: int = 0
    csv_content_column: int = 1
    csv_has_header: bool = True
    db_type: str = ""
    db_host: str = ""
    db_port: int = 0
    db_name: str = ""
    db_user: str = ""
    db_password: str = field(default="", repr=False)
    db_ssl_mode: str = ""
    db_table_name: str = ""
    db_column_path: str = ""
    db_column_content: str = ""
    db_column_type: str = ""
    db_column_size: str = ""
    db_query: str = ""
    output_file: str = ""
    show_size: bool = False
    show_funcs: bool = False
    debug: bool = False
    name: str = ""
    description: str = ""


_FIELD_DEFAULTS: dict[str, Any] = {item.name: item.default for item in fields(AppConfig)}


def new_default_app_config() -> AppConfig:
    """Return a filesystem profile reading the current directory."""
    return AppConfig(
        source_type=SOURCE_TYPE_FILESYSTEM,
        directories=(".",),
        recursive=True,
        output_file=DEFAULT_OUTPUT_FILE,
    )


def load_app_config(config_path: str) -> AppConfig:
    """Load a config profile from a JSON or YAML file.

    The format is chosen by file extension: ``.json``, ``.yaml`` or ``.yml``.

    Args:
        config_path: Path of the config file.

    Returns:
        Parsed config profile without defaults applied.

    Raises:
        CodexConfigError: If the file is missing, unreadable, malformed,
            has an unsupported extension, or contains invalid keys or values.
    """
    config_file = Path(config_path).expanduser()
    suffix = _config_suffix(config_file)
    if not config_file.is_file():
        raise CodexConfigError(
            f"Config file does not exist at {config_file}. Provide a valid config file path."
        )
    try:
        raw_text = config_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise CodexConfigError(
            f"Failed to read config file at {config_file}: {error}."
        ) from error
    try:
        if suffix in _JSON_SUFFIXES:
            payload = cast(object, json.loads(raw_text))
        else:
            payload = cast(object, yaml.safe_load(raw_text))
    except (ValueError, yaml.YAMLError) as error:
        raise CodexConfigError(
            f"Failed to parse config file at {config_file}: {error}. Fix the syntax and retry."
        ) from error
    if payload is None:
        raise CodexConfigError(f"Config file at {config_file} is empty. Define 'source_type'.")
    return app_config_from_mapping(payload)


def save_app_config(config: AppConfig, config_path: str) -> None:
    """Write a config profile as JSON or YAML, chosen by file extension.

    Raises:
        CodexConfigError: If the extension is unsupported or the write fails.
    """
    config_file = Path(config_path).expanduser()
    suffix = _config_suffix(config_file)
    payload = app_config_to_mapping(config)
    if suffix in _JSON_SUFFIXES:
        rendered = json.dumps(payload, indent=2) + "\n"
    else:
        rendered = yaml.safe_dump(payload, sort_keys=False)
    try:
        config_file.write_text(rendered, encoding="utf-8")
    except OSError as error:
        raise CodexConfigError(
            f"Failed to write config file at {config_file}: {error.strerror}."
        ) from error


def app_config_from_mapping(payload: object) -> AppConfig:
    """Build a config profile from a decoded JSON/YAML mapping.

    Keys set to null fall back to their defaults.

    Raises:
        CodexConfigError: If the payload is not a mapping, has unknown keys,
            or holds a value of the wrong type.
    """
    if not isinstance(payload, Mapping):
        raise CodexConfigError(
            f"Invalid config root: expected object mapping, got {type(payload).__name__}."
        )
    unknown_keys = sorted(str(key) for key in payload if key not in _FIELD_DEFAULTS)
    if unknown_keys:
        raise CodexConfigError(
            f"Unknown config keys: {', '.join(unknown_keys)}. "
            f"Supported keys are: {', '.join(_FIELD_DEFAULTS)}."
        )
    values: dict[str, Any] = {}
    for key, raw_value in payload.items():
        if raw_value is None:
            continue
        values[key] = _coerce_field(key, raw_value)
    return AppConfig(**values)


def app_config_to_mapping(config: AppConfig) -> dict[str, Any]:
    """Return a JSON/YAML-serializable mapping of every config key."""
    payload = asdict(config)
    for key, value in payload.items():
        if isinstance(value, tuple):
            payload[key] = list(value)
    return payload


def with_defaults(config: AppConfig) -> AppConfig:
    """Fill unset optional fields with their defaults.

    Returns:
        Profile with output file, filesystem root, delimiter, database
        connection, and column name defaults applied.
    """
    updates: dict[str, Any] = {}
    source_type = config.source_type.lower()
    if not config.output_file:
        updates["output_file"] = DEFAULT_OUTPUT_FILE
    if source_type == SOURCE_TYPE_FILESYSTEM and not config.directories:
        updates["directories"] = (".",)
    if not config.csv_delimiter:
        if source_type == SOURCE_TYPE_CSV:
            updates["csv_delimiter"] = DEFAULT_CSV_DELIMITER
        elif source_type == SOURCE_TYPE_TSV:
            updates["csv_delimiter"] = DEFAULT_TSV_DELIMITER
    db_type = config.db_type.lower()
    if db_type:
        updates["db_type"] = db_type
        if db_type != DB_TYPE_SQLITE and not config.db_host:
            updates["db_host"] = DEFAULT_DB_HOST
        if not config.db_port and db_type in _DEFAULT_DB_PORTS:
            updates["db_port"] = _DEFAULT_DB_PORTS[db_type]
        if db_type == DB_TYPE_POSTGRES and not config.db_ssl_mode:
            updates["db_ssl_mode"] = DEFAULT_SSL_MODE
        if not config.db_query:
            updates["db_column_path"] = config.db_column_path or DEFAULT_PATH_COLUMN
            updates["db_column_content"] = config.db_column_content or DEFAULT_CONTENT_COLUMN
    return replace(config, **updates)


def to_source_config(config: AppConfig) -> SourceConfig:
    """Convert a profile into the tagged source config for its source type.

    An unrecognized source type yields a config without any variant, which
    source validation rejects.
    """
    source_type = config.source_type.lower()
    if source_type == SOURCE_TYPE_FILESYSTEM:
        return SourceConfig.for_filesystem(
            FilesystemSourceOptions(
                directories=config.directories,
                ignore_files=config.ignore_files,
                ignore_dirs=config.ignore_dirs,
                ignore_exts=config.exclude_extensions,
                include_exts=config.include_extensions,
                recursive=config.recursive,
            )
        )
    if source_type in (SOURCE_TYPE_CSV, SOURCE_TYPE_TSV):
        return SourceConfig.for_tabular(
            TabularSourceOptions(
                file_path=config.csv_file_path,
                delimiter=config.csv_delimiter,
                path_column=config.csv_path_column,
                content_column=config.csv_content_column,
                has_header=config.csv_has_header,
            ),
            tsv=source_type == SOURCE_TYPE_TSV,
        )
    if source_type == SOURCE_TYPE_DATABASE:
        return SourceConfig.for_relational(
            RelationalSourceOptions(
                db_type=config.db_type,
                host=config.db_host,
                port=config.db_port,
                db_name=config.db_name,
                user=config.db_user,
                password=config.db_password,
                ssl_mode=config.db_ssl_mode,
                table_name=config.db_table_name,
                column_path=config.db_column_path,
                column_content=config.db_column_content,
                column_type=config.db_column_type,
                column_size=config.db_column_size,
                custom_query=config.db_query,
            )
        )
    return SourceConfig(source_type=config.source_type)


def to_output_options(config: AppConfig, save: bool = False) -> OutputOptions:
    """Build output options from a profile."""
    return OutputOptions(
        save=save,
        output_file=config.output_file or DEFAULT_OUTPUT_FILE,
        show_size=config.show_size,
        show_funcs=config.show_funcs,
    )


def validate_app_config(config: AppConfig) -> None:
    """Run every security check a profile must pass before use.

    Args:
        config: Profile, with or without defaults applied.

    Raises:
        CodexValidationError: If the name, source settings, or output file
            path are unsafe or incomplete.
    """
    validate_config_name(config.name, "name")
    prepared_config = with_defaults(config)
    validate_source_config(to_source_config(prepared_config))
    if prepared_config.output_file:
        validate_file_path(prepared_config.output_file, "output_file")


def _config_suffix(config_file: Path) -> str:
    """Return the lowercased config file suffix.

    Raises:
        CodexConfigError: If the suffix is not JSON or YAML.
    """
    suffix = config_file.suffix.lower()
    if suffix in _JSON_SUFFIXES or suffix in _YAML_SUFFIXES:
        return suffix
    raise CodexConfigError(
        f"Unsupported config file format '{suffix}'. Use .json, .yaml, or .yml."
    )


def _coerce_field(key: str, raw_value: object) -> Any:
    """Check one raw profile value against its field's default type.

    Args:
        key: Profile field name.
        raw_value: Value decoded from JSON or YAML.

    Returns:
        The value, with lists converted to tuples.

    Raises:
        CodexConfigError: If the value has the wrong type.
    """
    default_value = _FIELD_DEFAULTS[key]
    if isinstance(default_value, bool):
        if isinstance(raw_value, bool):
            return raw_value
        raise CodexConfigError(f"Config field '{key}' must be true/false.")
    if isinstance(default_value, int):
        if isinstance(raw_value, int) and not isinstance(raw_value, bool):
            return raw_value
        raise CodexConfigError(f"Config field '{key}' must be an integer.")
    if isinstance(default_value, tuple):
        if isinstance(raw_value, list) and all(isinstance(item, str) for item in raw_value):
            return tuple(raw_value)
        raise CodexConfigError(f"Config field '{key}' must be a list of strings.")
    if isinstance(raw_value, str):
        return raw_value
    raise CodexConfigError(f"Config field '{key}' must be a string.")
