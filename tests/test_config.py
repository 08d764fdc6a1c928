"""
Tests for API configuration.
"""

import pytest
from pydantic import ValidationError

from product_api.config import APIConfig


def test_defaults(monkeypatch):
    for name in ("PORT", "MONGODB_DATABASE", "AUTH_ENABLED", "CATEGORY_REQUIRED", "LIST_RESPONSE_FORMAT"):
        monkeypatch.delenv(name, raising=False)

    settings = APIConfig(_env_file=None)

    assert settings.port == 3000
    assert settings.mongodb_database == "shop"
    assert settings.mongodb_collection == "products"
    assert settings.auth_enabled is False
    assert settings.category_required is False
    assert settings.default_category == "general"
    assert settings.uses_envelope()


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("MONGODB_URL", "mongodb://db:27017")
    monkeypatch.setenv("AUTH_ENABLED", "true")
    monkeypatch.setenv("API_KEY", "env-secret")
    monkeypatch.setenv("CATEGORY_REQUIRED", "1")
    monkeypatch.setenv("LIST_RESPONSE_FORMAT", "ARRAY")

    settings = APIConfig(_env_file=None)

    assert settings.port == 8080
    assert settings.mongodb_url == "mongodb://db:27017"
    assert settings.auth_enabled is True
    assert settings.api_key == "env-secret"
    assert settings.category_required is True
    assert settings.list_response_format == "array"
    assert not settings.uses_envelope()


def test_log_settings_are_normalised():
    settings = APIConfig(_env_file=None, log_level="debug", log_format="CONSOLE")
    assert settings.log_level == "DEBUG"
    assert settings.log_format == "console"


@pytest.mark.parametrize("field,value", [
    ("log_level", "verbose"),
    ("log_format", "xml"),
    ("list_response_format", "paged"),
])
def test_rejects_invalid_values(field, value):
    with pytest.raises(ValidationError):
        APIConfig(_env_file=None, **{field: value})
