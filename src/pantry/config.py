"""
Pantry - Configuration and settings.

Values come from the environment and `.env`. get_settings() validates
them once at startup; outside "test" mode a missing or malformed
Supabase URL/key raises ConfigurationError.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from pantry.validation.env import create_env_schema, validate_env


class PantrySettings(BaseSettings):
    """
    Application settings.

    The Supabase fields are optional here; whether they are required
    depends on `pantry_env` and is enforced by validate_env.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase
    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    # Application
    pantry_env: Literal["development", "production", "test"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Read cache
    cache_ttl_seconds: float = 60.0
    cache_max_entries: int = 512

    @property
    def is_test(self) -> bool:
        return self.pantry_env == "test"

    @property
    def is_production(self) -> bool:
        return self.pantry_env == "production"

    def env_values(self) -> dict[str, str | None]:
        """Settings in the flat shape the env schema expects."""
        return {
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_ANON_KEY": self.supabase_anon_key,
            "MODE": self.pantry_env,
        }


@lru_cache
def get_settings() -> PantrySettings:
    """Load, validate and cache settings."""
    loaded = PantrySettings()
    validate_env(create_env_schema(loaded.pantry_env), loaded.env_values())
    return loaded


# Convenience singleton - lazy loaded
class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: PantrySettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
