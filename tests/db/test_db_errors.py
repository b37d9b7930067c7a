"""
Tests for backend error translation.
"""

from postgrest.exceptions import APIError

from pantry.db.errors import (
    BackendError,
    ConflictError,
    NotFoundError,
    translate_error,
)
from pantry.errors import PantryError


def api_error(message, code):
    return APIError({"message": message, "code": code, "hint": None, "details": None})


class TestTranslateError:
    def test_no_rows_is_not_found(self):
        error = translate_error(api_error("JSON object requested, multiple (or no) rows returned", "PGRST116"), table="recipes")
        assert isinstance(error, NotFoundError)
        assert error.table == "recipes"
        assert error.code == "PGRST116"

    def test_not_found_by_message(self):
        error = translate_error(api_error("multiple (or no) rows returned", None))
        assert isinstance(error, NotFoundError)

    def test_unique_violation_is_conflict(self):
        error = translate_error(api_error("duplicate key value violates unique constraint", "23505"))
        assert isinstance(error, ConflictError)

    def test_other_api_errors(self):
        error = translate_error(api_error("permission denied for table recipes", "42501"))
        assert isinstance(error, BackendError)
        assert str(error) == "permission denied for table recipes"

    def test_transport_errors(self):
        error = translate_error(ConnectionError("connection reset"), table="ingredients")
        assert isinstance(error, BackendError)
        assert str(error) == "connection reset"
        assert error.code is None

    def test_empty_message_uses_type_name(self):
        assert str(translate_error(TimeoutError())) == "TimeoutError"

    def test_already_translated_passes_through(self):
        original = ConflictError("dup")
        assert translate_error(original) is original

    def test_all_kinds_are_pantry_errors(self):
        assert issubclass(NotFoundError, PantryError)
        assert issubclass(BackendError, PantryError)
