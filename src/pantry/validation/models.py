"""
Base model and schema derivation.

Insert and update schemas are derived from the read schema instead of
being written out by hand, so the three can't drift apart:

    read   - full row, including server-generated fields
    insert - read minus server fields
    update - insert with every field optional, ownership key removed
"""

from functools import lru_cache
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, create_model
from pydantic.fields import FieldInfo

SERVER_FIELDS: tuple[str, ...] = ("id", "created_at", "updated_at")


class PantryModel(BaseModel):
    """Base for all entity schemas. Unknown keys (joined columns) are dropped."""

    model_config = ConfigDict(extra="ignore")

    def to_row(self) -> dict[str, Any]:
        """
        JSON-ready dict for the backend.

        Keeps fields the caller set plus fields with a non-null default
        (e.g. list fields defaulting to []). Optional fields that were
        never provided stay absent rather than becoming null.
        """
        fields = type(self).model_fields
        keep = {
            name
            for name, info in fields.items()
            if name in self.model_fields_set or info.default is not None
        }
        return self.model_dump(mode="json", include=keep)


class PantryUpdateModel(PantryModel):
    """Base for update schemas. Unknown keys, including ownership keys, are rejected."""

    model_config = ConfigDict(extra="forbid")


def _field_definition(info: FieldInfo, *, optional: bool = False) -> tuple[Any, Any]:
    annotation = info.annotation
    if info.metadata:
        annotation = Annotated[(annotation, *info.metadata)]

    if optional:
        return annotation, Field(default=None, description=info.description)
    if info.default_factory is not None:
        return annotation, Field(default_factory=info.default_factory, description=info.description)
    return annotation, Field(default=info.default, description=info.description)


def derive_model(
    model: type[BaseModel],
    name: str,
    *,
    exclude: tuple[str, ...] = (),
    optional: bool = False,
    base: type[BaseModel] = PantryModel,
) -> type[BaseModel]:
    """Copy `model` under a new name, dropping `exclude` and optionally relaxing every field."""
    fields = {
        field_name: _field_definition(info, optional=optional)
        for field_name, info in model.model_fields.items()
        if field_name not in exclude
    }
    return create_model(
        name,
        __base__=base,
        __module__=model.__module__,
        __doc__=f"{model.__name__} derived schema ({name}).",
        **fields,
    )


def derive_insert(
    model: type[BaseModel],
    name: str,
    *,
    server_fields: tuple[str, ...] = SERVER_FIELDS,
) -> type[BaseModel]:
    """Read schema without server-generated fields."""
    return derive_model(model, name, exclude=server_fields)


def derive_update(
    insert_model: type[BaseModel],
    name: str,
    *,
    immutable: tuple[str, ...] = ("user_id",),
) -> type[BaseModel]:
    """Insert schema with every field optional and immutable keys removed."""
    return derive_model(
        insert_model,
        name,
        exclude=immutable,
        optional=True,
        base=PantryUpdateModel,
    )


@lru_cache(maxsize=None)
def make_partial(model: type[BaseModel]) -> type[BaseModel]:
    """All-optional copy of `model`, built once per model."""
    return derive_model(model, f"Partial{model.__name__}", optional=True)
