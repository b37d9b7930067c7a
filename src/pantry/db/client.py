"""
Pantry - Supabase Client.

Low-level database access. All queries go through here.
"""

from supabase import Client, create_client

from pantry.config import settings
from pantry.db.cache import QueryCache

# Singleton instances
_client: Client | None = None
_cache: QueryCache | None = None


def get_client() -> Client:
    """
    Get the Supabase client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client


def get_cache() -> QueryCache:
    """Shared read cache, sized from settings."""
    global _cache

    if _cache is None:
        _cache = QueryCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
        )

    return _cache
