"""
Validation core.

`validate` never raises for bad data; it returns a ValidationResult.
The *_or_throw variants raise SchemaValidationError and are meant for
trust boundaries (before writes, after reads).

A "schema" is anything pydantic can build a TypeAdapter for: a model
class, `list[Model]`, an Annotated type, or a TypeAdapter itself.
Adapters are built once per schema and reused.
"""

import json
from dataclasses import dataclass
from functools import lru_cache, reduce, wraps
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from pantry.errors import SchemaValidationError
from pantry.validation.formatting import format_error_message, format_structural_errors
from pantry.validation.models import make_partial
from pantry.validation.results import (
    FieldError,
    ValidationFailure,
    ValidationResult,
    ValidationSuccess,
)

T = TypeVar("T")
R = TypeVar("R")

NO_DATA_ERROR = FieldError(field="general", message="No valid data found")
INVALID_JSON_ERROR = FieldError(field="json", message="Invalid JSON format")


@lru_cache(maxsize=None)
def _adapter_for(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def get_adapter(schema: Any) -> TypeAdapter:
    """Return the (cached) TypeAdapter for a schema."""
    if isinstance(schema, TypeAdapter):
        return schema
    return _adapter_for(schema)


# =============================================================================
# Single values
# =============================================================================


def validate(schema: Any, value: Any) -> ValidationResult:
    """
    Check `value` against `schema`, collecting every violation.

    Returns ValidationSuccess with the coerced data (trimmed strings,
    defaulted lists) or ValidationFailure with one FieldError per
    violation, each addressed by its dot-path from the root.
    """
    try:
        data = get_adapter(schema).validate_python(value)
    except ValidationError as exc:
        return ValidationFailure(format_structural_errors(exc))
    return ValidationSuccess(data)


def validate_or_throw(schema: Any, value: Any) -> Any:
    """Validate and return the data, or raise SchemaValidationError."""
    result = validate(schema, value)
    if not result.success:
        raise SchemaValidationError(format_error_message(result.errors), result.errors)
    return result.data


def validate_partial(model: type[BaseModel], value: Any) -> ValidationResult:
    """Validate against an all-optional copy of `model`; absent fields are not errors."""
    return validate(make_partial(model), value)


# =============================================================================
# Collections
# =============================================================================


def validate_array(item_schema: Any, data: Any) -> ValidationResult:
    """
    Validate a whole collection in one pass.

    Errors come back in a single list with indexed paths ("0.name",
    "1.name", ...). A TypeAdapter item schema is applied item by item
    with the same paths.
    """
    if isinstance(item_schema, TypeAdapter):
        return _validate_items(item_schema, data)
    return validate(list[item_schema], data)


def validate_array_or_throw(item_schema: Any, data: Any) -> list:
    """Throwing counterpart of validate_array."""
    result = validate_array(item_schema, data)
    if not result.success:
        raise SchemaValidationError(format_error_message(result.errors), result.errors)
    return result.data


def _validate_items(adapter: TypeAdapter, data: Any) -> ValidationResult:
    # a TypeAdapter can't be nested in list[...], so it runs once per item
    outer = validate(list, data)
    if not outer.success:
        return outer

    items: list = []
    errors: list[FieldError] = []
    for index, item in enumerate(outer.data):
        try:
            items.append(adapter.validate_python(item))
        except ValidationError as exc:
            errors.extend(
                FieldError(field=f"{index}.{e.field}" if e.field else str(index), message=e.message)
                for e in format_structural_errors(exc)
            )

    if errors:
        return ValidationFailure(errors)
    return ValidationSuccess(items)


def collect_validation_errors(*results: ValidationResult) -> ValidationResult:
    """
    Combine results of validating the *same* value with several schemas.

    - any failure: fail with the errors of every failed input, in order
    - all succeeded: succeed with the last input's data
    - no inputs: fail with a single "No valid data found" error

    Data from the other successful inputs is dropped. To combine results
    for different values use merge_validation_results.
    """
    errors: list[FieldError] = []
    for result in results:
        if not result.success:
            errors.extend(result.errors)

    if errors:
        return ValidationFailure(errors)
    if not results:
        return ValidationFailure([NO_DATA_ERROR])
    return ValidationSuccess(results[-1].data)


def merge_validation_results(
    *results: ValidationResult,
    merge: Callable[[Any, Any], Any],
) -> ValidationResult:
    """
    Combine results of validating *different* values.

    Failure handling matches collect_validation_errors. On success the
    data of all inputs is folded left to right with `merge`.
    """
    collected = collect_validation_errors(*results)
    if not collected.success:
        return collected
    return ValidationSuccess(reduce(merge, (result.data for result in results)))


# =============================================================================
# Helpers for integration code
# =============================================================================


def parse_json(
    schema: Any,
    text: str | bytes,
    *,
    on_error: Callable[[Exception], None] | None = None,
) -> ValidationResult:
    """
    Parse JSON text and validate the result.

    Malformed JSON yields a single "json" error. `on_error` receives the
    decode exception (e.g. to log it while debugging).
    """
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError) as exc:
        if on_error is not None:
            on_error(exc)
        return ValidationFailure([INVALID_JSON_ERROR])
    return validate(schema, parsed)


def create_validated_function(
    schema: Any,
    fn: Callable[[Any], Awaitable[R]],
) -> Callable[[Any], Awaitable[R]]:
    """Wrap an async function so its single argument is validated first."""

    @wraps(fn)
    async def wrapper(data: Any) -> R:
        return await fn(validate_or_throw(schema, data))

    return wrapper


@dataclass(frozen=True)
class QueryValidator:
    """Input/output validator pair for one query."""

    input_schema: Any
    output_schema: Any

    def validate_input(self, data: Any) -> Any:
        return validate_or_throw(self.input_schema, data)

    def validate_output(self, data: Any) -> Any:
        return validate_or_throw(self.output_schema, data)


def create_query_validator(input_schema: Any, output_schema: Any) -> QueryValidator:
    return QueryValidator(input_schema=input_schema, output_schema=output_schema)
