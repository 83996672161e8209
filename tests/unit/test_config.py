"""
Unit tests for application settings.
"""

import pytest
from pydantic import ValidationError

from doc_registry.config import Settings, clear_settings_cache, get_settings
from doc_registry.main import create_app


@pytest.fixture
def fresh_settings():
    """Reload settings from the environment and restore the cache afterwards."""
    clear_settings_cache()
    yield get_settings
    clear_settings_cache()


@pytest.mark.unit
class TestSettings:
    """Tests for Settings parsing."""

    def test_comma_separated_lists(self, monkeypatch, fresh_settings):
        monkeypatch.setenv("DOC_REGISTRY_ADMIN_USERNAMES", " root, ops ,,")
        monkeypatch.setenv("DOC_REGISTRY_CORS_ORIGINS", "http://a.test,http://b.test")

        settings = fresh_settings()

        assert settings.admin_usernames_list == ["root", "ops"]
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_environment_flags(self, fresh_settings):
        settings = fresh_settings()

        assert settings.environment == "testing"
        assert not settings.is_development
        assert not settings.is_production

    def test_production_hides_api_docs(self, monkeypatch, fresh_settings):
        monkeypatch.setenv("DOC_REGISTRY_ENVIRONMENT", "production")
        assert fresh_settings().is_production

        app = create_app()

        assert app.docs_url is None
        assert app.openapi_url is None

    def test_short_secret_rejected(self, monkeypatch):
        monkeypatch.setenv("DOC_REGISTRY_SECRET_KEY", "too-short")

        with pytest.raises(ValidationError):
            Settings()

    def test_room_token_length_bounds(self, monkeypatch):
        monkeypatch.setenv("DOC_REGISTRY_ROOM_TOKEN_LENGTH", "4")

        with pytest.raises(ValidationError):
            Settings()
