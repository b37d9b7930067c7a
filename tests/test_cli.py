"""
Tests for the pantry command line.
"""

import json

import pytest
from typer.testing import CliRunner

from conftest import USER_ID
from pantry import __version__
from pantry.config import get_settings
from pantry.main import app

runner = CliRunner()


@pytest.fixture
def ingredient_file(tmp_path):
    def _write(payload):
        path = tmp_path / "ingredient.json"
        path.write_text(json.dumps(payload) if not isinstance(payload, str) else payload)
        return path

    return _write


class TestValidateCommand:
    def test_valid_insert(self, ingredient_file):
        path = ingredient_file({"user_id": USER_ID, "name": "Flour", "quantity": 2, "unit": "kg", "category": "Baking"})
        result = runner.invoke(app, ["validate", "ingredient", str(path), "--variant", "insert"])
        assert result.exit_code == 0
        assert "valid ingredient (insert)" in result.output

    def test_array_errors_are_listed(self, ingredient_file):
        good = {"user_id": USER_ID, "name": "Flour", "quantity": 2, "unit": "kg", "category": "Baking"}
        path = ingredient_file([good, {**good, "quantity": -1, "unit": ""}])
        result = runner.invoke(app, ["validate", "ingredient", str(path), "--variant", "insert"])
        assert result.exit_code == 1
        assert "2 error(s)" in result.output
        assert "1.quantity" in result.output
        assert "1.unit" in result.output

    def test_malformed_json(self, ingredient_file):
        path = ingredient_file("{not json")
        result = runner.invoke(app, ["validate", "ingredient", str(path)])
        assert result.exit_code == 1
        assert "Invalid JSON format" in result.output

    def test_unknown_entity(self, ingredient_file):
        path = ingredient_file({})
        result = runner.invoke(app, ["validate", "spaceship", str(path)])
        assert result.exit_code == 2
        assert "Unknown entity" in result.output

    def test_unknown_variant(self, ingredient_file):
        path = ingredient_file({})
        result = runner.invoke(app, ["validate", "ingredient", str(path), "--variant", "delete"])
        assert result.exit_code == 2


def test_entities_lists_registry():
    result = runner.invoke(app, ["entities"])
    assert result.exit_code == 0
    assert "leftovers" in result.output
    assert "messages" in result.output


def test_health_in_test_mode(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PANTRY_ENV", "test")
    get_settings.cache_clear()
    try:
        result = runner.invoke(app, ["health"])
    finally:
        get_settings.cache_clear()
    assert result.exit_code == 0
    assert "All checks passed" in result.output


def test_health_reports_configuration_error(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PANTRY_ENV", "production")
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    get_settings.cache_clear()
    try:
        result = runner.invoke(app, ["health"])
    finally:
        get_settings.cache_clear()
    assert result.exit_code == 1
    assert "SUPABASE_URL" in result.output


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output
