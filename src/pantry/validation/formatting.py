"""
Error formatting.

Turns pydantic's native errors into FieldError lists, and FieldError lists
into messages for humans (single string) or form layers (field map).
"""

from pydantic import ValidationError

from pantry.validation.results import FieldError

FALLBACK_MESSAGE = "Validation failed"


def format_structural_errors(error: ValidationError) -> list[FieldError]:
    """Convert a pydantic ValidationError into FieldErrors (path + message as-is)."""
    return [
        FieldError(
            field=".".join(str(part) for part in issue["loc"]),
            message=issue["msg"],
        )
        for issue in error.errors(include_url=False)
    ]


def format_error_message(errors: list[FieldError]) -> str:
    """
    Collapse errors into one message.

    - no errors: generic fallback
    - one error: its message, unprefixed
    - several: header line plus one "- field: message" line each
    """
    if not errors:
        return FALLBACK_MESSAGE
    if len(errors) == 1:
        return errors[0].message

    lines = [f"- {e.field}: {e.message}" for e in errors]
    return f"{FALLBACK_MESSAGE}:\n" + "\n".join(lines)


def to_form_errors(errors: list[FieldError]) -> dict[str, dict[str, str]]:
    """Key errors by field for a form layer. Later duplicates overwrite earlier ones."""
    form_errors: dict[str, dict[str, str]] = {}
    for error in errors:
        form_errors[error.field] = {"message": error.message}
    return form_errors
