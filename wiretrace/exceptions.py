"""Custom exceptions for wiretrace."""

from typing import Any


class WiretraceError(Exception):
    """Base exception for wiretrace errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FormatterError(WiretraceError):
    """Raised by a body formatter that cannot format its input.

    The printer never lets this escape: the body falls back to raw bytes.
    """


class ConfigurationError(WiretraceError):
    """Raised when logger configuration or settings are invalid."""
