"""Codex exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class CodexError(Exception):
    """Base exception for all Codex failures."""


class CodexConfigError(CodexError):
    """Raised for invalid runtime or config-file configuration."""


class CodexValidationError(CodexError):
    """Raised when untrusted input is rejected before any I/O.

    Attributes:
        field: Name of the rejected configuration field.
        message: Human-readable reason for the rejection.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"validation error for {field}: {message}")
        self.field = field
        self.message = message


class CodexConnectionError(CodexError):
    """Raised for database transport failures.

    Messages are generic and never carry connection strings or credentials.
    """


class CodexIngestError(CodexError):
    """Raised for source reading failures."""


class CodexDependencyError(CodexError):
    """Raised when an optional runtime dependency is missing."""
