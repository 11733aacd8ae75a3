"""
Tier-1 tests for core/config.py.

Settings loaded from environment variables.
"""

import pytest

from copydesk.core.config import (
    Settings,
    clear_settings_cache,
    get_settings,
    load_settings_from_env,
)


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.app_name == "Copydesk"
        assert settings.log_format == "text"
        assert not settings.tracker_enabled
        assert not settings.is_production

    def test_invalid_log_format_rejected(self):
        with pytest.raises(ValueError, match="LOG_FORMAT"):
            Settings(log_format="xml")

    def test_tracker_url_requires_token(self):
        with pytest.raises(ValueError, match="TRACKER_API_TOKEN"):
            Settings(tracker_api_url="https://tracker.test")

    def test_tracker_enabled(self):
        settings = Settings(tracker_api_url="https://tracker.test", tracker_api_token="pk")
        assert settings.tracker_enabled


class TestLoadSettingsFromEnv:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "yes")
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.test, https://b.test")
        monkeypatch.setenv("TRACKER_API_URL", "https://tracker.test/api/v2")
        monkeypatch.setenv("TRACKER_API_TOKEN", "pk_live")
        monkeypatch.setenv("TRACKER_TIMEOUT_SECONDS", "5")

        settings = load_settings_from_env()

        assert settings.is_production
        assert settings.debug is True
        assert settings.log_format == "json"
        assert settings.allowed_origins == ["https://a.test", "https://b.test"]
        assert settings.tracker_api_token == "pk_live"
        assert settings.tracker_timeout_seconds == 5.0

    def test_get_settings_is_cached(self, monkeypatch):
        monkeypatch.setenv("APP_NAME", "First")
        first = get_settings()
        monkeypatch.setenv("APP_NAME", "Second")
        assert get_settings() is first

        clear_settings_cache()
        assert get_settings().app_name == "Second"
