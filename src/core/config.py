"""Runtime configuration model for Codex.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os

from core.constants import DEFAULT_OUTPUT_FILE
from core.errors import CodexConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class CodexConfig:
    """Validated runtime configuration.

    Attributes:
        debug: Emit debug-level log events.
        output_file: Default output file used when saving results.
        db_password: Fallback database password kept out of config files.
    """

    debug: bool
    output_file: str
    db_password: str | None = field(default=None, repr=False)

    @classmethod
    def from_env(cls) -> "CodexConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            CodexConfigError: If environment values are invalid.
        """
        debug = _parse_bool("CODEX_DEBUG", os.getenv("CODEX_DEBUG", "false"))
        output_file = os.getenv("CODEX_OUTPUT_FILE", DEFAULT_OUTPUT_FILE).strip()
        if not output_file:
            raise CodexConfigError(
                "Invalid CODEX_OUTPUT_FILE value: expected a file path, got an empty string. "
                "Unset CODEX_OUTPUT_FILE or set it to a file name."
            )
        return cls(
            debug=debug,
            output_file=output_file,
            db_password=os.getenv("CODEX_DB_PASSWORD") or None,
        )


def _parse_bool(name: str, raw_value: str) -> bool:
    """Parse a boolean environment value.

    Args:
        name: Environment variable name for error context.
        raw_value: Raw string from environment.

    Returns:
        Parsed boolean.

    Raises:
        CodexConfigError: If value is not a recognized boolean.
    """
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise CodexConfigError(
        f"Invalid {name} value: expected true/false, got '{raw_value}'. "
        f"Set {name} to one of {_TRUE_VALUES + _FALSE_VALUES[:-1]}."
    )
