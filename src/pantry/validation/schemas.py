"""
Pantry - Entity schemas.

These models map to the Supabase tables used by the pantry app.
They are used for:
- Validating rows read from the backend (read schemas)
- Validating data before create calls (insert schemas)
- Validating partial updates (update schemas)

Every entity is registered in SCHEMA_REGISTRY with all three variants.
"""

from dataclasses import dataclass

from pydantic import BaseModel, Field, StrictBool, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from pantry.validation.fields import (
    DateStr,
    DateTimeStr,
    Email,
    ImageUrl,
    Url,
    UUIDStr,
    non_negative,
    one_of,
    positive,
    tag_list,
    text,
    whole_number,
)
from pantry.validation.models import (
    SERVER_FIELDS,
    PantryModel,
    derive_insert,
    derive_update,
)

# =============================================================================
# Shared field types
# =============================================================================

Quantity = positive()
Duration = non_negative()
Unit = text(1, 50, required_message="Unit is required", too_long_message="Unit name too long")
Category = text(1, 100, required_message="Category is required", too_long_message="Category name too long")
ShortNotes = text(max_length=500, too_long_message="Notes too long", strip=False)
LongNotes = text(max_length=1000, too_long_message="Notes too long", strip=False)


# =============================================================================
# Users
# =============================================================================


class User(PantryModel):
    """Authenticated user account."""

    id: UUIDStr
    email: Email
    full_name: text(1, 255) = None
    avatar_url: Url = None
    created_at: DateTimeStr
    updated_at: DateTimeStr


UserInsert = derive_insert(User, "UserInsert")
UserUpdate = derive_update(UserInsert, "UserUpdate", immutable=())


# =============================================================================
# Pantry
# =============================================================================


class Ingredient(PantryModel):
    """
    Item in a user's pantry.

    `low_stock_threshold` drives the low-stock alerts; `expiration_date`
    is a calendar date (no time).
    """

    id: UUIDStr
    user_id: UUIDStr
    name: text(1, 255, required_message="Ingredient name is required", too_long_message="Ingredient name too long")
    quantity: Quantity
    unit: Unit
    category: Category
    expiration_date: DateStr = None
    notes: LongNotes = None
    low_stock_threshold: Duration = None
    created_at: DateTimeStr
    updated_at: DateTimeStr


IngredientInsert = derive_insert(Ingredient, "IngredientInsert")
IngredientUpdate = derive_update(IngredientInsert, "IngredientUpdate")


class Leftover(PantryModel):
    """Cooked food kept for later, optionally linked to the recipe it came from."""

    id: UUIDStr
    user_id: UUIDStr
    name: text(1, 255, required_message="Leftover name is required", too_long_message="Leftover name too long")
    quantity: Quantity
    unit: Unit
    expiration_date: DateStr = None
    source_recipe_id: UUIDStr = None
    notes: LongNotes = None
    created_at: DateTimeStr
    updated_at: DateTimeStr


LeftoverInsert = derive_insert(Leftover, "LeftoverInsert")
LeftoverUpdate = derive_update(LeftoverInsert, "LeftoverUpdate")


# =============================================================================
# Recipes
# =============================================================================


class Recipe(PantryModel):
    """A user-created recipe."""

    id: UUIDStr
    user_id: UUIDStr
    title: text(1, 255, required_message="Recipe title is required", too_long_message="Recipe title too long")
    description: text(
        1, 5000, required_message="Recipe description is required", too_long_message="Recipe description too long"
    )
    image_url: ImageUrl
    prep_time: Duration
    cook_time: Duration
    servings: whole_number("Servings must be a whole number")
    difficulty: one_of("Easy", "Medium", "Hard", message="Difficulty must be Easy, Medium, or Hard")
    cuisine_type: text(max_length=100, too_long_message="Cuisine type too long", strip=False) = None
    created_at: DateTimeStr
    updated_at: DateTimeStr


RecipeInsert = derive_insert(Recipe, "RecipeInsert")
RecipeUpdate = derive_update(RecipeInsert, "RecipeUpdate")


class RecipeIngredient(PantryModel):
    """Junction row: an ingredient line of a recipe."""

    id: UUIDStr
    recipe_id: UUIDStr
    ingredient_name: text(
        1, 255, required_message="Ingredient name is required", too_long_message="Ingredient name too long"
    )
    quantity: Quantity
    unit: Unit
    notes: ShortNotes = None


RecipeIngredientInsert = derive_insert(RecipeIngredient, "RecipeIngredientInsert", server_fields=("id",))
RecipeIngredientUpdate = derive_update(RecipeIngredientInsert, "RecipeIngredientUpdate", immutable=("recipe_id",))


class RecipeInstruction(PantryModel):
    """One numbered step of a recipe."""

    id: UUIDStr
    recipe_id: UUIDStr
    step_number: whole_number("Step number must be a whole number")
    instruction: text(1, 2000, required_message="Instruction is required", too_long_message="Instruction too long")


RecipeInstructionInsert = derive_insert(RecipeInstruction, "RecipeInstructionInsert", server_fields=("id",))
RecipeInstructionUpdate = derive_update(
    RecipeInstructionInsert, "RecipeInstructionUpdate", immutable=("recipe_id",)
)


class Bookmark(PantryModel):
    """A recipe bookmarked by a user. (user_id, recipe_id) is unique."""

    user_id: UUIDStr
    recipe_id: UUIDStr


BookmarkInsert = derive_insert(Bookmark, "BookmarkInsert", server_fields=())
BookmarkUpdate = derive_update(BookmarkInsert, "BookmarkUpdate")


class RecipeMatch(PantryModel):
    """Row returned by the match_recipes_to_pantry stored procedure."""

    recipe_id: UUIDStr
    recipe_title: str
    match_percentage: float = Field(ge=0, le=100)
    missing_ingredients: list[str] = Field(default_factory=list)

    @field_validator("missing_ingredients", mode="before")
    @classmethod
    def _missing_null_as_empty(cls, value):
        return [] if value is None else value


# =============================================================================
# Shopping
# =============================================================================


class ShoppingList(PantryModel):
    """A named shopping list."""

    id: UUIDStr
    user_id: UUIDStr
    name: text(
        1, 255, required_message="Shopping list name is required", too_long_message="Shopping list name too long"
    )
    description: text(max_length=1000, too_long_message="Description too long", strip=False) = None
    created_at: DateTimeStr
    updated_at: DateTimeStr


ShoppingListInsert = derive_insert(ShoppingList, "ShoppingListInsert")
ShoppingListUpdate = derive_update(ShoppingListInsert, "ShoppingListUpdate")


class ShoppingListItem(PantryModel):
    """Line on a shopping list. Belongs to the list, not directly to a user."""

    id: UUIDStr
    shopping_list_id: UUIDStr
    name: text(1, 255, required_message="Item name is required", too_long_message="Item name too long")
    quantity: Quantity
    unit: Unit
    category: Category
    is_purchased: StrictBool
    notes: ShortNotes = None
    recipe_id: UUIDStr = None
    created_at: DateTimeStr
    updated_at: DateTimeStr


ShoppingListItemInsert = derive_insert(ShoppingListItem, "ShoppingListItemInsert")
ShoppingListItemUpdate = derive_update(
    ShoppingListItemInsert, "ShoppingListItemUpdate", immutable=("shopping_list_id",)
)


# =============================================================================
# Profile and preferences
# =============================================================================


class UserProfile(PantryModel):
    """Display profile shown in the header and settings page."""

    id: UUIDStr
    user_id: UUIDStr
    full_name: text(1, 255, required_message="Full name is required", too_long_message="Full name too long")
    bio: text(max_length=1000, too_long_message="Bio too long")
    avatar_color: text(
        pattern=r"^#[0-9A-Fa-f]{6}$", pattern_message="Invalid color format (use #RRGGBB)", strip=False
    )
    onboarding_completed: StrictBool
    avatar_url: Url = None
    created_at: DateTimeStr
    updated_at: DateTimeStr


UserProfileInsert = derive_insert(UserProfile, "UserProfileInsert")
UserProfileUpdate = derive_update(UserProfileInsert, "UserProfileUpdate")


class UserPreferences(PantryModel):
    """
    Cooking preferences.

    List fields default to [] so a freshly created row with only the
    required settings still validates.
    """

    id: UUIDStr
    user_id: UUIDStr
    dietary_restrictions: tag_list()
    allergies: tag_list()
    preferred_cuisines: tag_list()
    cooking_skill_level: one_of(
        "Beginner",
        "Intermediate",
        "Advanced",
        "Expert",
        message="Skill level must be Beginner, Intermediate, Advanced, or Expert",
    )
    measurement_units: one_of("Metric", "Imperial", message="Measurement units must be Metric or Imperial")
    family_size: whole_number("Family size must be a whole number")
    kitchen_equipment: tag_list()
    created_at: DateTimeStr
    updated_at: DateTimeStr
    notification_enabled: StrictBool = True
    expiration_threshold_days: whole_number(
        "Expiration threshold must be a whole number",
        maximum=365,
        maximum_message="Expiration threshold too high",
    )
    inventory_threshold: Duration


UserPreferencesInsert = derive_insert(UserPreferences, "UserPreferencesInsert")
UserPreferencesUpdate = derive_update(UserPreferencesInsert, "UserPreferencesUpdate")


# =============================================================================
# Chat
# =============================================================================


class Conversation(PantryModel):
    """Chat conversation. The title is required but may be null (untitled)."""

    id: UUIDStr
    user_id: UUIDStr
    created_at: DateTimeStr
    updated_at: DateTimeStr
    title: text(max_length=255, too_long_message="Title too long", strip=False) | None


ConversationInsert = derive_insert(Conversation, "ConversationInsert")
ConversationUpdate = derive_update(ConversationInsert, "ConversationUpdate")


class ChatMessage(PantryModel):
    """
    Message in a conversation.

    `recipes` embeds full recipe objects, so validating a message
    validates every recipe it carries.
    """

    id: UUIDStr
    conversation_id: UUIDStr
    sender: one_of("user", "ai", message="Sender must be 'user' or 'ai'")
    content: text(1, 10000, required_message="Message content is required", too_long_message="Message content too long")
    timestamp: DateTimeStr
    suggestions: list[text(max_length=500, strip=False)] | None = None
    recipes: list[Recipe] | None = None


ChatMessageInsert = derive_insert(ChatMessage, "ChatMessageInsert", server_fields=("id", "timestamp"))
ChatMessageUpdate = derive_update(ChatMessageInsert, "ChatMessageUpdate", immutable=("conversation_id",))


# =============================================================================
# Auth forms
# =============================================================================


class SignIn(BaseModel):
    """Sign-in form."""

    email: Email
    password: text(1, required_message="Password is required", strip=False)


class SignUp(BaseModel):
    """Sign-up form. `confirm_password` must repeat `password`."""

    email: Email
    password: text(
        8,
        128,
        required_message="Password must be at least 8 characters",
        too_long_message="Password too long",
        strip=False,
        pattern=r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)",
        pattern_message="Password must contain uppercase, lowercase, and number",
    )
    confirm_password: str
    full_name: text(2, 255, required_message="Full name must be at least 2 characters", too_long_message="Full name too long")

    @field_validator("confirm_password")
    @classmethod
    def _passwords_match(cls, value: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        # password failed its own checks; that error is already reported
        if password is not None and value != password:
            raise PydanticCustomError("password_mismatch", "Passwords don't match")
        return value


# =============================================================================
# Registry
# =============================================================================


@dataclass(frozen=True)
class EntitySchemas:
    """Read/insert/update schemas for one entity plus where it lives."""

    name: str
    table: str
    read: type[PantryModel]
    insert: type[PantryModel]
    update: type[PantryModel]
    server_fields: tuple[str, ...] = SERVER_FIELDS
    ownership_key: str | None = "user_id"


SCHEMA_REGISTRY: dict[str, EntitySchemas] = {
    entity.name: entity
    for entity in (
        EntitySchemas("user", "users", User, UserInsert, UserUpdate, ownership_key=None),
        EntitySchemas("ingredient", "ingredients", Ingredient, IngredientInsert, IngredientUpdate),
        EntitySchemas("recipe", "recipes", Recipe, RecipeInsert, RecipeUpdate),
        EntitySchemas(
            "recipe_ingredient",
            "recipe_ingredients",
            RecipeIngredient,
            RecipeIngredientInsert,
            RecipeIngredientUpdate,
            server_fields=("id",),
            ownership_key="recipe_id",
        ),
        EntitySchemas(
            "recipe_instruction",
            "recipe_instructions",
            RecipeInstruction,
            RecipeInstructionInsert,
            RecipeInstructionUpdate,
            server_fields=("id",),
            ownership_key="recipe_id",
        ),
        EntitySchemas(
            "bookmark",
            "user_bookmarks",
            Bookmark,
            BookmarkInsert,
            BookmarkUpdate,
            server_fields=(),
        ),
        EntitySchemas("shopping_list", "shopping_lists", ShoppingList, ShoppingListInsert, ShoppingListUpdate),
        EntitySchemas(
            "shopping_list_item",
            "shopping_list_items",
            ShoppingListItem,
            ShoppingListItemInsert,
            ShoppingListItemUpdate,
            ownership_key="shopping_list_id",
        ),
        EntitySchemas("leftover", "leftovers", Leftover, LeftoverInsert, LeftoverUpdate),
        EntitySchemas("user_profile", "user_profiles", UserProfile, UserProfileInsert, UserProfileUpdate),
        EntitySchemas(
            "user_preferences",
            "user_preferences",
            UserPreferences,
            UserPreferencesInsert,
            UserPreferencesUpdate,
        ),
        EntitySchemas("conversation", "conversations", Conversation, ConversationInsert, ConversationUpdate),
        EntitySchemas(
            "chat_message",
            "messages",
            ChatMessage,
            ChatMessageInsert,
            ChatMessageUpdate,
            server_fields=("id", "timestamp"),
            ownership_key="conversation_id",
        ),
    )
}


def get_entity_schemas(name: str) -> EntitySchemas:
    """Look up an entity by name. Raises KeyError listing the known entities."""
    try:
        return SCHEMA_REGISTRY[name]
    except KeyError:
        known = ", ".join(sorted(SCHEMA_REGISTRY))
        raise KeyError(f"Unknown entity '{name}'. Known entities: {known}") from None
