"""
Pantry - Validation layer.

Entity schemas, validation helpers, error formatting and sanitization.
Nothing in this package logs or performs I/O.
"""

from pantry.validation.core import (
    QueryValidator,
    collect_validation_errors,
    create_query_validator,
    create_validated_function,
    get_adapter,
    merge_validation_results,
    parse_json,
    validate,
    validate_array,
    validate_array_or_throw,
    validate_or_throw,
    validate_partial,
)
from pantry.validation.debounce import DebouncedValidator
from pantry.validation.env import create_env_schema, validate_env
from pantry.validation.formatting import (
    format_error_message,
    format_structural_errors,
    to_form_errors,
)
from pantry.validation.results import (
    FieldError,
    ValidationFailure,
    ValidationResult,
    ValidationSuccess,
)
from pantry.validation.sanitize import sanitize_object, sanitize_string
from pantry.validation.schemas import SCHEMA_REGISTRY, EntitySchemas, get_entity_schemas

__all__ = [
    "DebouncedValidator",
    "EntitySchemas",
    "FieldError",
    "QueryValidator",
    "SCHEMA_REGISTRY",
    "ValidationFailure",
    "ValidationResult",
    "ValidationSuccess",
    "collect_validation_errors",
    "create_env_schema",
    "create_query_validator",
    "create_validated_function",
    "format_error_message",
    "format_structural_errors",
    "get_adapter",
    "get_entity_schemas",
    "merge_validation_results",
    "parse_json",
    "sanitize_object",
    "sanitize_string",
    "to_form_errors",
    "validate",
    "validate_array",
    "validate_array_or_throw",
    "validate_env",
    "validate_or_throw",
    "validate_partial",
]
