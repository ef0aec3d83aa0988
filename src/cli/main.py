"""Codex CLI entry points.

This module exposes the ingest and config validation commands.
It maps argparse commands onto config loading, ingest, and output calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import sys
from typing import Sequence

from core.app_config import (
    AppConfig,
    load_app_config,
    to_output_options,
    to_source_config,
    validate_app_config,
    with_defaults,
)
from core.config import CodexConfig
from core.constants import SOURCE_TYPE_FILESYSTEM
from core.errors import CodexError
from core.logging_config import configure_logging, get_logger
from core.types import OutputOptions, SourceConfig
from output.formatter import format_size, generate_output, output_size, save_output
from sources.dispatcher import read_records

_LOGGER = get_logger(__name__)

_FILESYSTEM_FLAGS = (
    ("--dir", "dir"),
    ("--ignore-file", "ignore_file"),
    ("--ignore-dir", "ignore_dir"),
    ("--ignore-ext", "ignore_ext"),
    ("--include-ext", "include_ext"),
    ("--no-recursive", "no_recursive"),
)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="codex",
        description="Aggregate files, tabular exports, or database rows into one text output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers)
    _add_validate_config_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Codex CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "ingest":
        _check_ingest_flags(parser, args)
    try:
        runtime_config = CodexConfig.from_env()
        if args.command == "ingest":
            return _run_ingest_command(runtime_config, args)
        if args.command == "validate-config":
            return _run_validate_config_command(runtime_config, args)
    except CodexError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_ingest_command(runtime_config: CodexConfig, args: argparse.Namespace) -> int:
    """Handle ingest command.

    Args:
        runtime_config: Environment-derived runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    app_config = _resolve_app_config(runtime_config, args)
    configure_logging(debug=app_config.debug)
    validate_app_config(app_config)
    source_config = _with_password_fallback(to_source_config(app_config), runtime_config)
    output_options = to_output_options(app_config, save=args.save)
    _LOGGER.debug(
        "ingest_configured",
        source_type=source_config.source_type,
        save=output_options.save,
        output_file=output_options.output_file,
        show_size=output_options.show_size,
        show_funcs=output_options.show_funcs,
    )
    records = read_records(source_config)
    _emit_output(generate_output(records, show_funcs=output_options.show_funcs), output_options)
    return 0


def _run_validate_config_command(runtime_config: CodexConfig, args: argparse.Namespace) -> int:
    """Handle validate-config command.

    Args:
        runtime_config: Environment-derived runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    configure_logging(debug=runtime_config.debug)
    app_config = with_defaults(load_app_config(args.config_path))
    validate_app_config(app_config)
    label = app_config.name or args.config_path
    print(f"Config {label} is valid ({app_config.source_type} source)")
    return 0


def _resolve_app_config(runtime_config: CodexConfig, args: argparse.Namespace) -> AppConfig:
    """Build the effective profile from a config file or filesystem flags.

    Output flags given on the command line take precedence over the profile.
    """
    if args.config:
        app_config = load_app_config(args.config)
    else:
        app_config = AppConfig(
            source_type=SOURCE_TYPE_FILESYSTEM,
            directories=_split_csv(args.dir) or (".",),
            recursive=not args.no_recursive,
            ignore_files=_split_csv(args.ignore_file),
            ignore_dirs=_split_csv(args.ignore_dir),
            exclude_extensions=_split_csv(args.ignore_ext),
            include_extensions=_split_csv(args.include_ext),
        )
    app_config = replace(
        app_config,
        output_file=args.output_file or app_config.output_file or runtime_config.output_file,
        show_size=app_config.show_size or args.show_size,
        show_funcs=app_config.show_funcs or args.show_funcs,
        debug=app_config.debug or args.debug or runtime_config.debug,
    )
    return with_defaults(app_config)


def _check_ingest_flags(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    """Reject filesystem flags combined with a config profile.

    Args:
        parser: Top-level parser used to report the usage error.
        args: Parsed CLI args.
    """
    if not args.config:
        return
    conflicting = [flag for flag, attribute in _FILESYSTEM_FLAGS if getattr(args, attribute)]
    if conflicting:
        parser.error(f"--config cannot be combined with {', '.join(conflicting)}")


def _with_password_fallback(
    source_config: SourceConfig, runtime_config: CodexConfig
) -> SourceConfig:
    """Use the environment password for a database config that has none."""
    relational = source_config.relational
    if relational is None or relational.password or not runtime_config.db_password:
        return source_config
    return replace(
        source_config,
        relational=replace(relational, password=runtime_config.db_password),
    )


def _emit_output(output: str, options: OutputOptions) -> None:
    """Print the output or its size, then save it when requested."""
    if options.show_size:
        print(f"Output size: {format_size(output_size(output))}")
    else:
        print(output)
    if options.save:
        save_output(output, options.output_file)
        print(f"Output saved to {options.output_file}")


def _split_csv(raw_value: str | None) -> tuple[str, ...]:
    """Split a comma-separated flag value, dropping blank items."""
    if not raw_value:
        return ()
    return tuple(item.strip() for item in raw_value.split(",") if item.strip())


def _add_ingest_command(subparsers: argparse._SubParsersAction) -> None:
    """Register ingest command."""
    parser = subparsers.add_parser("ingest", help="Ingest a source and render its records")
    parser.add_argument(
        "--config",
        help=(
            "JSON or YAML config profile describing the source; "
            "cannot be combined with the filesystem flags below"
        ),
    )
    parser.add_argument("--dir", help="Comma-separated directories to walk (default: .)")
    parser.add_argument("--ignore-file", help="Comma-separated file names to skip")
    parser.add_argument("--ignore-dir", help="Comma-separated directory tokens to skip")
    parser.add_argument("--ignore-ext", help="Comma-separated file extensions to skip")
    parser.add_argument("--include-ext", help="Comma-separated file extensions to keep")
    parser.add_argument(
        "--no-recursive",
        action="store_true",
        help="Do not descend into subdirectories",
    )
    parser.add_argument("--save", action="store_true", help="Save output to the output file")
    parser.add_argument("--output-file", help="Output file path used with --save")
    parser.add_argument(
        "--show-size",
        action="store_true",
        help="Print the output size instead of the output",
    )
    parser.add_argument(
        "--show-funcs",
        action="store_true",
        help="List function names for Go files instead of their contents",
    )
    parser.add_argument("--debug", action="store_true", help="Emit debug log events")


def _add_validate_config_command(subparsers: argparse._SubParsersAction) -> None:
    """Register validate-config command."""
    parser = subparsers.add_parser(
        "validate-config",
        help="Check a config profile against all security rules",
    )
    parser.add_argument("config_path", help="JSON or YAML config profile path")
