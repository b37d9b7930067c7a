"""
Pytest configuration and fixtures for pantry tests.
"""

import asyncio
import os
from unittest.mock import MagicMock

import pytest

# Set test environment before importing pantry modules
os.environ["PANTRY_ENV"] = "test"

from pantry.db.cache import QueryCache

USER_ID = "00000000-0000-0000-0000-000000000002"
OTHER_USER_ID = "00000000-0000-0000-0000-000000000003"
RECIPE_ID = "6f1c2d3e-4a5b-4c6d-8e9f-0a1b2c3d4e5f"
LIST_ID = "1b2c3d4e-5f60-4718-9a2b-3c4d5e6f7081"
CONVERSATION_ID = "9a8b7c6d-5e4f-4a3b-9c2d-1e0f2a3b4c5d"
ROW_ID = "3c4d5e6f-7081-4923-a4b5-c6d7e8f90a1b"
TIMESTAMP = "2024-05-01T12:00:00+00:00"


def run_async(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


def with_server_fields(row: dict, server_fields: tuple[str, ...]) -> dict:
    """Add plausible server-generated values, as the backend would on insert."""
    generated = {}
    for name in server_fields:
        generated[name] = ROW_ID if name == "id" else TIMESTAMP
    return {**row, **generated}


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations; every builder method returns the same builder
    mock_table = MagicMock()
    for method in (
        "select",
        "insert",
        "update",
        "upsert",
        "delete",
        "eq",
        "ilike",
        "lte",
        "gte",
        "is_",
        "order",
        "limit",
        "single",
    ):
        getattr(mock_table, method).return_value = mock_table
    mock_table.not_ = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table
    mock_client.rpc.return_value = mock_table

    return mock_client


@pytest.fixture
def query_cache():
    """Fresh cache per test so nothing leaks between tests."""
    return QueryCache(ttl_seconds=60, max_entries=100)


@pytest.fixture
def ingredient_row():
    """Ingredient row as the backend returns it."""
    return {
        "id": ROW_ID,
        "user_id": USER_ID,
        "name": "Flour",
        "quantity": 2,
        "unit": "kg",
        "category": "Baking",
        "expiration_date": "2024-06-01",
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


@pytest.fixture
def recipe_row():
    """Recipe row as the backend returns it."""
    return {
        "id": RECIPE_ID,
        "user_id": USER_ID,
        "title": "Pancakes",
        "description": "Fluffy buttermilk pancakes",
        "image_url": "https://example.com/pancakes.jpg",
        "prep_time": 10,
        "cook_time": 15,
        "servings": 4,
        "difficulty": "Easy",
        "cuisine_type": "American",
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


@pytest.fixture
def insert_payloads(recipe_row):
    """A valid insert payload for every registered entity."""
    return {
        "user": {"email": "alice@example.com", "full_name": "Alice"},
        "ingredient": {
            "user_id": USER_ID,
            "name": "  Flour  ",
            "quantity": 2,
            "unit": "kg",
            "category": "Baking",
        },
        "recipe": {
            "user_id": USER_ID,
            "title": "Pancakes",
            "description": "Fluffy buttermilk pancakes",
            "image_url": "",
            "prep_time": 10,
            "cook_time": 15,
            "servings": 4,
            "difficulty": "Easy",
        },
        "recipe_ingredient": {
            "recipe_id": RECIPE_ID,
            "ingredient_name": "flour",
            "quantity": 2,
            "unit": "cups",
        },
        "recipe_instruction": {
            "recipe_id": RECIPE_ID,
            "step_number": 1,
            "instruction": "Mix dry ingredients",
        },
        "bookmark": {"user_id": USER_ID, "recipe_id": RECIPE_ID},
        "shopping_list": {"user_id": USER_ID, "name": "Weekly shop"},
        "shopping_list_item": {
            "shopping_list_id": LIST_ID,
            "name": "Milk",
            "quantity": 1,
            "unit": "l",
            "category": "Dairy",
            "is_purchased": False,
        },
        "leftover": {
            "user_id": USER_ID,
            "name": "Chili",
            "quantity": 2,
            "unit": "portions",
            "expiration_date": "2024-05-04",
        },
        "user_profile": {
            "user_id": USER_ID,
            "full_name": "Alice Smith",
            "bio": "",
            "avatar_color": "#1A2b3C",
            "onboarding_completed": True,
        },
        "user_preferences": {
            "user_id": USER_ID,
            "cooking_skill_level": "Intermediate",
            "measurement_units": "Metric",
            "family_size": 2,
            "expiration_threshold_days": 3,
            "inventory_threshold": 1,
        },
        "conversation": {"user_id": USER_ID, "title": None},
        "chat_message": {
            "conversation_id": CONVERSATION_ID,
            "sender": "ai",
            "content": "Here are some ideas",
            "suggestions": ["Show me more"],
            "recipes": [recipe_row],
        },
    }
