"""Public SDK surface for Codex.

This module provides a stable import path for library users.
It re-exports the ingest entry points, typed option models, and errors.
"""

from __future__ import annotations

from core.app_config import (
    AppConfig,
    load_app_config,
    new_default_app_config,
    save_app_config,
    to_output_options,
    to_source_config,
    validate_app_config,
    with_defaults,
)
from core.config import CodexConfig
from core.errors import (
    CodexConfigError,
    CodexConnectionError,
    CodexDependencyError,
    CodexError,
    CodexIngestError,
    CodexValidationError,
)
from core.types import (
    FilesystemSourceOptions,
    OutputOptions,
    Record,
    RelationalSourceOptions,
    SourceConfig,
    TabularSourceOptions,
)
from output.formatter import generate_output, save_output
from sources.dispatcher import build_source, iter_records, read_records

__all__ = [
    "AppConfig",
    "CodexConfig",
    "CodexConfigError",
    "CodexConnectionError",
    "CodexDependencyError",
    "CodexError",
    "CodexIngestError",
    "CodexValidationError",
    "FilesystemSourceOptions",
    "OutputOptions",
    "Record",
    "RelationalSourceOptions",
    "SourceConfig",
    "TabularSourceOptions",
    "build_source",
    "generate_output",
    "iter_records",
    "load_app_config",
    "new_default_app_config",
    "read_records",
    "save_app_config",
    "save_output",
    "to_output_options",
    "to_source_config",
    "validate_app_config",
    "with_defaults",
]
