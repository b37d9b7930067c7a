"""
Pantry - Validated repositories.

Every backend call is bracketed by validation:
- insert/update schemas before writing
- read schema (array form for lists) on whatever comes back

Reads are cached per table; any write to a table invalidates its keys.
Backend exceptions are translated into pantry.db.errors kinds.
"""

import logging
from datetime import date, timedelta
from typing import Any

from supabase import Client

from pantry.db.cache import QueryCache, cache_key
from pantry.db.client import get_cache, get_client
from pantry.db.errors import BackendError, ConflictError, NotFoundError, translate_error
from pantry.errors import SchemaValidationError
from pantry.validation.core import validate_array_or_throw, validate_or_throw
from pantry.validation.schemas import (
    EntitySchemas,
    RecipeMatch,
    get_entity_schemas,
)

logger = logging.getLogger(__name__)

DEFAULT_LEFTOVER_DAYS = 3
RECIPE_WITH_INGREDIENTS = "*, recipe_ingredients(ingredient_name, quantity, unit)"


def names_match(a: str, b: str) -> bool:
    """Loose ingredient name match: either name contains the other, ignoring case."""
    a, b = a.strip().lower(), b.strip().lower()
    return a in b or b in a


class EntityRepository:
    """
    CRUD for one registered entity.

    `client` and `cache` default to the process-wide singletons; tests
    pass their own.
    """

    def __init__(
        self,
        entity: str | EntitySchemas,
        client: Client | None = None,
        cache: QueryCache | None = None,
        order_by: str | None = "created_at",
        descending: bool = True,
    ) -> None:
        self.schemas = get_entity_schemas(entity) if isinstance(entity, str) else entity
        self._client = client
        self._cache = cache
        self.order_by = order_by
        self.descending = descending

    @property
    def table(self) -> str:
        return self.schemas.table

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_client()
        return self._client

    @property
    def cache(self) -> QueryCache:
        if self._cache is None:
            self._cache = get_cache()
        return self._cache

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def _execute(self, query: Any, operation: str) -> Any:
        try:
            return query.execute()
        except Exception as exc:
            error = translate_error(exc, table=self.table)
            logger.warning("%s.%s failed: %s", self.table, operation, error)
            raise error from exc

    def _query(self) -> Any:
        return self.client.table(self.table)

    def _read_many(self, rows: Any) -> list:
        return validate_array_or_throw(self.schemas.read, rows or [])

    def _read_one(self, rows: Any, operation: str) -> Any:
        if isinstance(rows, list):
            if not rows:
                raise BackendError(f"{operation} returned no rows", table=self.table)
            rows = rows[0]
        return validate_or_throw(self.schemas.read, rows)

    def _cached_list(self, key: str, query: Any, operation: str) -> list:
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        response = self._execute(query, operation)
        rows = self._read_many(response.data)
        self.cache.set(key, rows)
        return list(rows)

    def invalidate(self) -> None:
        """Drop every cached read for this table."""
        self.cache.invalidate_prefix(f"{self.table}:")

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    async def find(self, **filters: Any) -> list:
        """All rows matching the equality filters, newest first by default."""
        key = cache_key(self.table, "list", *sorted(filters.items()))
        query = self._query().select("*")
        for column, value in filters.items():
            query = query.eq(column, value)
        if self.order_by:
            query = query.order(self.order_by, desc=self.descending)
        return self._cached_list(key, query, "list")

    async def get(self, row_id: str) -> Any | None:
        """One row by id, or None when it does not exist."""
        key = cache_key(self.table, "get", row_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            response = self._execute(self._query().select("*").eq("id", row_id).single(), "get")
        except NotFoundError:
            return None
        if not response.data:
            return None

        row = self._read_one(response.data, "get")
        self.cache.set(key, row)
        return row

    async def create(self, data: Any) -> Any:
        """Validate against the insert schema, insert, validate the stored row."""
        payload = validate_or_throw(self.schemas.insert, data)
        response = self._execute(self._query().insert(payload.to_row()), "create")
        self.invalidate()
        return self._read_one(response.data, "create")

    async def update(self, row_id: str, data: Any) -> Any:
        """Validate a partial update, apply it, validate the stored row."""
        payload = validate_or_throw(self.schemas.update, data)
        changes = payload.to_row()
        if not changes:
            raise SchemaValidationError("No fields to update")

        response = self._execute(self._query().update(changes).eq("id", row_id), "update")
        self.invalidate()
        if not response.data:
            raise NotFoundError(f"{self.table} row {row_id} not found", table=self.table)
        return self._read_one(response.data, "update")

    async def create_many(self, items: list[Any]) -> list:
        """Validate every item, then insert them all in one call."""
        payload = validate_array_or_throw(self.schemas.insert, items)
        if not payload:
            return []

        response = self._execute(self._query().insert([item.to_row() for item in payload]), "create_many")
        self.invalidate()
        return self._read_many(response.data)

    async def delete(self, row_id: str) -> None:
        self._execute(self._query().delete().eq("id", row_id), "delete")
        self.invalidate()


# =============================================================================
# Pantry
# =============================================================================


class _ExpiringMixin:
    """Rows with an `expiration_date` belonging to a user."""

    async def expiring_soon(self, user_id: str, days: int = 7, today: date | None = None) -> list:
        """Rows expiring within `days` (including already expired), soonest first."""
        cutoff = (today or date.today()) + timedelta(days=days)
        key = cache_key(self.table, "expiring", user_id, cutoff.isoformat())
        query = (
            self._query()
            .select("*")
            .eq("user_id", user_id)
            .not_.is_("expiration_date", "null")
            .lte("expiration_date", cutoff.isoformat())
            .order("expiration_date")
        )
        return self._cached_list(key, query, "expiring_soon")


class IngredientRepository(_ExpiringMixin, EntityRepository):
    """Pantry items."""

    def __init__(self, client: Client | None = None, cache: QueryCache | None = None) -> None:
        super().__init__("ingredient", client=client, cache=cache)

    async def low_stock(self, user_id: str) -> list:
        """Items at or below their low_stock_threshold (computed by the backend)."""
        response = self._execute(
            self.client.rpc("get_low_stock_ingredients", {"user_uuid": user_id}),
            "low_stock",
        )
        return self._read_many(response.data)

    async def update_stock_threshold(self, row_id: str, threshold: float) -> Any:
        return await self.update(row_id, {"low_stock_threshold": threshold})

    async def add_from_shopping(
        self,
        user_id: str,
        item_name: str,
        quantity: float,
        unit: str,
        category: str = "Other",
    ) -> Any:
        """
        Move a purchased item into the pantry.

        If an ingredient with a similar name exists its quantity is
        increased, otherwise a new ingredient is created.
        """
        response = self._execute(
            self._query().select("*").eq("user_id", user_id).ilike("name", f"%{item_name}%"),
            "add_from_shopping",
        )
        candidates = self._read_many(response.data)

        existing = next((item for item in candidates if names_match(item.name, item_name)), None)

        if existing is not None:
            return await self.update(
                existing.id,
                {"quantity": existing.quantity + quantity, "unit": unit or existing.unit},
            )

        return await self.create(
            {
                "user_id": user_id,
                "name": item_name,
                "quantity": quantity,
                "unit": unit,
                "category": category,
                "notes": "Added from shopping list",
            }
        )


class LeftoverRepository(_ExpiringMixin, EntityRepository):
    """Leftovers, usually created after cooking a recipe."""

    def __init__(self, client: Client | None = None, cache: QueryCache | None = None) -> None:
        super().__init__("leftover", client=client, cache=cache)

    async def expiring_soon(
        self, user_id: str, days: int = DEFAULT_LEFTOVER_DAYS, today: date | None = None
    ) -> list:
        return await super().expiring_soon(user_id, days=days, today=today)

    async def create_from_recipe(
        self,
        user_id: str,
        recipe_id: str,
        recipe_name: str,
        quantity: float = 1,
        unit: str = "portions",
        notes: str | None = None,
        today: date | None = None,
    ) -> Any:
        expires = (today or date.today()) + timedelta(days=DEFAULT_LEFTOVER_DAYS)
        return await self.create(
            {
                "user_id": user_id,
                "name": f"{recipe_name} (Leftovers)",
                "quantity": quantity,
                "unit": unit,
                "expiration_date": expires.isoformat(),
                "source_recipe_id": recipe_id,
                "notes": notes or "Created from recipe",
            }
        )

    async def by_recipe(self, user_id: str, recipe_id: str) -> list:
        return await self.find(user_id=user_id, source_recipe_id=recipe_id)


# =============================================================================
# Recipes
# =============================================================================


class RecipeRepository(EntityRepository):
    """Recipes plus their ingredient lines and steps."""

    def __init__(self, client: Client | None = None, cache: QueryCache | None = None) -> None:
        super().__init__("recipe", client=client, cache=cache)
        self.ingredients = EntityRepository(
            "recipe_ingredient", client=client, cache=cache, order_by="ingredient_name", descending=False
        )
        self.instructions = EntityRepository(
            "recipe_instruction", client=client, cache=cache, order_by="step_number", descending=False
        )

    async def get_ingredients(self, recipe_id: str) -> list:
        return await self.ingredients.find(recipe_id=recipe_id)

    async def get_instructions(self, recipe_id: str) -> list:
        return await self.instructions.find(recipe_id=recipe_id)

    async def can_cook(self, available: list[str]) -> list:
        """Recipes whose every ingredient line matches one of the `available` names."""
        if not available:
            return []

        response = self._execute(self._query().select(RECIPE_WITH_INGREDIENTS), "can_cook")
        cookable = [
            row
            for row in response.data or []
            if all(
                any(names_match(line["ingredient_name"], name) for name in available)
                for line in row.get("recipe_ingredients") or []
            )
        ]
        return self._read_many(cookable)

    async def match_to_pantry(
        self,
        user_id: str,
        min_match_percentage: float = 0,
        max_missing_ingredients: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[RecipeMatch]:
        """
        Recipes ranked by how much of them the pantry covers.

        The matching runs in the match_recipes_to_pantry stored
        procedure; this only pages through its results.
        """
        params = {
            "user_id": user_id,
            "min_match_percentage": min_match_percentage,
            "max_missing_ingredients": max_missing_ingredients,
            "limit_count": limit,
            "offset_count": offset,
        }
        response = self._execute(self.client.rpc("match_recipes_to_pantry", params), "match_to_pantry")
        return validate_array_or_throw(RecipeMatch, response.data or [])


# =============================================================================
# Shopping
# =============================================================================


class ShoppingListRepository(EntityRepository):
    """Shopping lists and their items."""

    def __init__(self, client: Client | None = None, cache: QueryCache | None = None) -> None:
        super().__init__("shopping_list", client=client, cache=cache)
        self.items = EntityRepository("shopping_list_item", client=client, cache=cache, descending=False)
        self.recipe_ingredients = EntityRepository(
            "recipe_ingredient", client=client, cache=cache, order_by="ingredient_name", descending=False
        )

    async def get_items(self, shopping_list_id: str) -> list:
        return await self.items.find(shopping_list_id=shopping_list_id)

    async def add_item(self, item: dict[str, Any]) -> Any:
        return await self.items.create({"is_purchased": False, **item})

    async def set_purchased(self, item_id: str, purchased: bool = True) -> Any:
        return await self.items.update(item_id, {"is_purchased": purchased})

    async def create_from_recipe(self, list_id: str, recipe_id: str, pantry: list[Any]) -> list:
        """
        Add a recipe's ingredient lines to a shopping list.

        Lines already covered by something in `pantry` (ingredient rows)
        are skipped. The remaining items are validated together and
        inserted in one call.
        """
        lines = await self.recipe_ingredients.find(recipe_id=recipe_id)
        needed = [
            line
            for line in lines
            if not any(names_match(ingredient.name, line.ingredient_name) for ingredient in pantry)
        ]
        return await self.items.create_many(
            [
                {
                    "shopping_list_id": list_id,
                    "name": line.ingredient_name,
                    "quantity": line.quantity,
                    "unit": line.unit,
                    "category": "Other",
                    "is_purchased": False,
                    "notes": line.notes or "",
                    "recipe_id": recipe_id,
                }
                for line in needed
            ]
        )


# =============================================================================
# Bookmarks
# =============================================================================


class BookmarkRepository(EntityRepository):
    """Recipes a user has bookmarked."""

    def __init__(self, client: Client | None = None, cache: QueryCache | None = None) -> None:
        super().__init__("bookmark", client=client, cache=cache, order_by=None)

    async def recipe_ids(self, user_id: str) -> list[str]:
        return [bookmark.recipe_id for bookmark in await self.find(user_id=user_id)]

    async def add(self, user_id: str, recipe_id: str) -> bool:
        """Bookmark a recipe. Returns False when it was already bookmarked."""
        try:
            await self.create({"user_id": user_id, "recipe_id": recipe_id})
        except ConflictError:
            return False
        return True

    async def remove(self, user_id: str, recipe_id: str) -> None:
        self._execute(
            self._query().delete().eq("user_id", user_id).eq("recipe_id", recipe_id),
            "remove",
        )
        self.invalidate()


# =============================================================================
# Profile and preferences
# =============================================================================


class _UserScopedRepository(EntityRepository):
    """Entities with at most one row per user."""

    async def get_for_user(self, user_id: str) -> Any | None:
        key = cache_key(self.table, "user", user_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        response = self._execute(self._query().select("*").eq("user_id", user_id).limit(1), "get_for_user")
        if not response.data:
            return None

        row = self._read_one(response.data, "get_for_user")
        self.cache.set(key, row)
        return row


class UserProfileRepository(_UserScopedRepository):
    def __init__(self, client: Client | None = None, cache: QueryCache | None = None) -> None:
        super().__init__("user_profile", client=client, cache=cache)

    async def update_for_user(self, user_id: str, updates: dict[str, Any]) -> Any:
        payload = validate_or_throw(self.schemas.update, updates)
        response = self._execute(
            self._query().update(payload.to_row()).eq("user_id", user_id),
            "update_for_user",
        )
        self.invalidate()
        if not response.data:
            raise NotFoundError(f"No profile for user {user_id}", table=self.table)
        return self._read_one(response.data, "update_for_user")


class UserPreferencesRepository(_UserScopedRepository):
    def __init__(self, client: Client | None = None, cache: QueryCache | None = None) -> None:
        super().__init__("user_preferences", client=client, cache=cache)

    async def upsert_for_user(self, user_id: str, updates: dict[str, Any]) -> Any:
        """Create or update the user's preferences row."""
        payload = validate_or_throw(self.schemas.update, updates)
        row = {**payload.to_row(), "user_id": user_id}
        response = self._execute(self._query().upsert(row, on_conflict="user_id"), "upsert_for_user")
        self.invalidate()
        return self._read_one(response.data, "upsert_for_user")


# =============================================================================
# Chat
# =============================================================================


class ConversationRepository(EntityRepository):
    def __init__(self, client: Client | None = None, cache: QueryCache | None = None) -> None:
        super().__init__("conversation", client=client, cache=cache, order_by="updated_at")

    async def start(self, user_id: str, title: str | None = None) -> Any:
        return await self.create({"user_id": user_id, "title": title})

    async def update_title(self, conversation_id: str, title: str) -> Any:
        return await self.update(conversation_id, {"title": title})


class ChatMessageRepository(EntityRepository):
    def __init__(self, client: Client | None = None, cache: QueryCache | None = None) -> None:
        super().__init__("chat_message", client=client, cache=cache, order_by="timestamp", descending=False)

    async def history(self, conversation_id: str) -> list:
        return await self.find(conversation_id=conversation_id)

    async def post(
        self,
        conversation_id: str,
        sender: str,
        content: str,
        suggestions: list[str] | None = None,
        recipes: list[Any] | None = None,
    ) -> Any:
        message: dict[str, Any] = {
            "conversation_id": conversation_id,
            "sender": sender,
            "content": content,
        }
        if suggestions is not None:
            message["suggestions"] = suggestions
        if recipes is not None:
            message["recipes"] = recipes
        return await self.create(message)
