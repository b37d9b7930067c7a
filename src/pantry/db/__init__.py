"""
Pantry - Database access.

Supabase client, read cache, and validated repositories.
"""

from pantry.db.cache import QueryCache, cache_key
from pantry.db.client import get_cache, get_client
from pantry.db.errors import (
    BackendError,
    ConflictError,
    DataAccessError,
    NotFoundError,
    translate_error,
)
from pantry.db.services import (
    BookmarkRepository,
    ChatMessageRepository,
    ConversationRepository,
    EntityRepository,
    IngredientRepository,
    LeftoverRepository,
    RecipeRepository,
    ShoppingListRepository,
    UserPreferencesRepository,
    UserProfileRepository,
)

__all__ = [
    "BackendError",
    "BookmarkRepository",
    "ChatMessageRepository",
    "ConflictError",
    "ConversationRepository",
    "DataAccessError",
    "EntityRepository",
    "IngredientRepository",
    "LeftoverRepository",
    "NotFoundError",
    "QueryCache",
    "RecipeRepository",
    "ShoppingListRepository",
    "UserPreferencesRepository",
    "UserProfileRepository",
    "cache_key",
    "get_cache",
    "get_client",
    "translate_error",
]
