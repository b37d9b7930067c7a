"""
Validation result types.

A validation either succeeds with data or fails with a non-empty list of
field errors. The two shapes are separate classes so a result can never
carry both (or neither).
"""

from dataclasses import dataclass, field
from typing import ClassVar, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class FieldError:
    """A single field-level problem. `field` is a dot-path into the value."""

    field: str
    message: str


@dataclass(frozen=True)
class ValidationSuccess(Generic[T]):
    """Validated (and coerced) data."""

    data: T
    success: ClassVar[bool] = True


@dataclass(frozen=True)
class ValidationFailure:
    """One or more field errors, in the order they were found."""

    errors: list[FieldError] = field(default_factory=list)
    success: ClassVar[bool] = False

    def __post_init__(self) -> None:
        if not self.errors:
            raise ValueError("ValidationFailure requires at least one error")


ValidationResult = Union[ValidationSuccess[T], ValidationFailure]
