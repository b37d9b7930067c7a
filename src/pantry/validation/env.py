"""
Environment validation.

The Supabase URL and anon key are required everywhere except in "test"
mode, so the test suite can run without credentials; a URL that is given
is still checked there. A failure always raises ConfigurationError: a
misconfigured deployment must not start.
"""

from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, Field, create_model
from pydantic_core import PydanticCustomError

from pantry.errors import ConfigurationError
from pantry.validation.core import validate
from pantry.validation.fields import is_absolute_url

ENV_MODES = ("development", "production", "test")
Mode = Literal["development", "production", "test"]


def _required_setting(name: str, check: Callable[[str], bool], invalid_message: str) -> tuple[Any, Any]:
    def _check(value: str | None) -> str:
        if value is None or value == "":
            raise PydanticCustomError(
                "missing_setting",
                "{name} is required. Please set {name} in your .env file.",
                {"name": name},
            )
        if not check(value):
            raise PydanticCustomError("invalid_setting", invalid_message)
        return value

    return Annotated[str | None, AfterValidator(_check)], Field(default=None, validate_default=True)


def _optional_setting(check: Callable[[str], bool], invalid_message: str) -> tuple[Any, Any]:
    def _check(value: str | None) -> str | None:
        if value and not check(value):
            raise PydanticCustomError("invalid_setting", invalid_message)
        return value

    return Annotated[str | None, AfterValidator(_check)], None


@lru_cache(maxsize=None)
def create_env_schema(mode: str | None) -> type[BaseModel]:
    """Build the env schema for `mode`. Built once per mode."""
    if mode == "test":
        return create_model(
            "TestEnvSchema",
            SUPABASE_URL=_optional_setting(
                is_absolute_url,
                "Invalid Supabase URL. Please set SUPABASE_URL in your .env file.",
            ),
            SUPABASE_ANON_KEY=(str | None, None),
            MODE=(Mode | None, None),
        )

    return create_model(
        "EnvSchema",
        SUPABASE_URL=_required_setting(
            "SUPABASE_URL",
            is_absolute_url,
            "Invalid Supabase URL. Please set SUPABASE_URL in your .env file.",
        ),
        SUPABASE_ANON_KEY=_required_setting(
            "SUPABASE_ANON_KEY",
            lambda value: bool(value.strip()),
            "Supabase anon key is required. Please set SUPABASE_ANON_KEY in your .env file.",
        ),
        MODE=(Mode | None, None),
    )


def validate_env(schema: Any, env: Mapping[str, str | None]) -> Any:
    """Validate a flat config map. Raises ConfigurationError listing every problem."""
    result = validate(schema, dict(env))
    if not result.success:
        lines = [f"- {e.field}: {e.message}" for e in result.errors]
        raise ConfigurationError("Environment validation failed:\n" + "\n".join(lines), result.errors)
    return result.data
