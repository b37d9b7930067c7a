"""
Pantry - Exception hierarchy.

Structural validation problems are normally returned as data
(ValidationResult). These exceptions are for the fail-fast paths.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pantry.validation.results import FieldError


class PantryError(Exception):
    """Base exception for all pantry errors."""


class SchemaValidationError(PantryError, ValueError):
    """
    Raised by validate_or_throw and friends.

    The message is already human-readable (see format_error_message);
    the individual field errors stay available on `.errors`.
    """

    def __init__(self, message: str, errors: list[FieldError] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message)


class ConfigurationError(PantryError):
    """Raised when process configuration is invalid. Always fatal."""

    def __init__(self, message: str, errors: list[FieldError] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message)
