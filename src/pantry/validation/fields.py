"""
Reusable field types for entity schemas.

Each type is an `Annotated` pydantic type whose validators raise
PydanticCustomError, so the messages that reach users are ours rather
than pydantic's defaults.
"""

import math
import re
from datetime import date, datetime
from typing import Annotated, Any, Literal
from urllib.parse import urlparse

from pydantic import AfterValidator, BeforeValidator, Field, ValidationError, WrapValidator
from pydantic_core import PydanticCustomError

_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def is_absolute_url(value: str) -> bool:
    """True for URLs with both a scheme and a host (https://example.com/x)."""
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


# =============================================================================
# String formats
# =============================================================================


def _check_uuid(value: str) -> str:
    if not _UUID_RE.match(value):
        raise PydanticCustomError("uuid_format", "Invalid UUID format")
    return value


def _check_email(value: str) -> str:
    if not _EMAIL_RE.match(value):
        raise PydanticCustomError("email_format", "Invalid email address")
    return value


def _check_datetime(value: str) -> str:
    if not _DATETIME_RE.match(value):
        raise PydanticCustomError("datetime_format", "Invalid datetime format")
    try:
        datetime.fromisoformat(value)
    except ValueError:
        raise PydanticCustomError("datetime_format", "Invalid datetime format") from None
    return value


def _check_date(value: str) -> str:
    if not _DATE_RE.match(value):
        raise PydanticCustomError("date_format", "Invalid date format")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise PydanticCustomError("date_format", "Invalid date format") from None
    return value


def _check_url(value: str) -> str:
    if not is_absolute_url(value):
        raise PydanticCustomError("url_format", "Invalid URL format")
    return value


def _check_image_url(value: str) -> str:
    # "" means no image set, which is different from a broken URL
    if value == "":
        return value
    if not is_absolute_url(value):
        raise PydanticCustomError("url_format", "Invalid image URL")
    return value


UUIDStr = Annotated[str, AfterValidator(_check_uuid)]
Email = Annotated[str, AfterValidator(_check_email)]
DateTimeStr = Annotated[str, AfterValidator(_check_datetime)]
DateStr = Annotated[str, AfterValidator(_check_date)]
Url = Annotated[str, AfterValidator(_check_url)]
ImageUrl = Annotated[str, AfterValidator(_check_image_url)]


def text(
    min_length: int | None = None,
    max_length: int | None = None,
    *,
    required_message: str | None = None,
    too_long_message: str | None = None,
    strip: bool = True,
    pattern: str | None = None,
    pattern_message: str = "Invalid format",
) -> Any:
    """
    Build a constrained string type.

    Whitespace is trimmed before the length checks, so "   " does not
    satisfy a minimum length of 1.
    """
    compiled = re.compile(pattern) if pattern else None

    def _check(value: str) -> str:
        if strip:
            value = value.strip()
        if min_length is not None and len(value) < min_length:
            raise PydanticCustomError(
                "string_too_short",
                required_message or "String must contain at least {min_length} character(s)",
                {"min_length": min_length},
            )
        if max_length is not None and len(value) > max_length:
            raise PydanticCustomError(
                "string_too_long",
                too_long_message or "String must contain at most {max_length} character(s)",
                {"max_length": max_length},
            )
        if compiled is not None and not compiled.search(value):
            raise PydanticCustomError("string_pattern_mismatch", pattern_message)
        return value

    return Annotated[str, AfterValidator(_check)]


def tag_list(max_length: int = 100) -> Any:
    """List of short labels that defaults to [] when absent."""
    return Annotated[list[text(max_length=max_length, strip=False)], Field(default_factory=list)]


# =============================================================================
# Numbers
# =============================================================================


def _require_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError(
            "number_type",
            "Expected number, received {received}",
            {"received": _type_name(value)},
        )
    if isinstance(value, float) and not math.isfinite(value):
        raise PydanticCustomError(
            "number_type",
            "Expected number, received {received}",
            {"received": "nan" if math.isnan(value) else "infinity"},
        )
    return value


def positive(message: str = "Must be a positive number") -> Any:
    """Number strictly greater than zero (quantities)."""

    def _check(value: float) -> float:
        if value <= 0:
            raise PydanticCustomError("number_not_positive", message)
        return value

    return Annotated[float, BeforeValidator(_require_number), AfterValidator(_check)]


def non_negative(message: str = "Must be non-negative") -> Any:
    """Number greater than or equal to zero (durations, thresholds)."""

    def _check(value: float) -> float:
        if value < 0:
            raise PydanticCustomError("number_negative", message)
        return value

    return Annotated[float, BeforeValidator(_require_number), AfterValidator(_check)]


def whole_number(
    message: str,
    *,
    positive_message: str = "Must be a positive number",
    maximum: int | None = None,
    maximum_message: str | None = None,
) -> Any:
    """Positive integer. Integral floats (4.0) are accepted and returned as int."""

    def _check(value: float) -> int:
        if value <= 0:
            raise PydanticCustomError("number_not_positive", positive_message)
        if not float(value).is_integer():
            raise PydanticCustomError("number_not_integer", message)
        if maximum is not None and value > maximum:
            raise PydanticCustomError(
                "number_too_big",
                maximum_message or "Number must be less than or equal to {maximum}",
                {"maximum": maximum},
            )
        return int(value)

    return Annotated[float, BeforeValidator(_require_number), AfterValidator(_check)]


# =============================================================================
# Enumerations
# =============================================================================


def one_of(*values: str, message: str) -> Any:
    """Closed set of strings; any failure is reported with `message`."""

    def _check(value: Any, handler: Any) -> Any:
        try:
            return handler(value)
        except ValidationError:
            raise PydanticCustomError("enum", message) from None

    return Annotated[Literal[values], WrapValidator(_check)]
