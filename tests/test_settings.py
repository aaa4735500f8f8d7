"""Tests for client settings and environment overrides."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from RestKit.network import policy
from RestKit.settings import ClientSettings, HttpSettings, get_settings, reset_settings


class TestClientSettings:
    """Defaults, validation, and environment overrides."""

    def test_defaults(self):
        settings = ClientSettings()
        assert settings.base_url is None
        assert settings.content_type == "application/json"
        assert settings.keep_response_body is False
        assert settings.rate_limit is None
        assert settings.http.timeout_read == policy.HTTP_READ_TIMEOUT
        assert settings.http.user_agent == policy.USER_AGENT

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch):
        """``RESTKIT_*`` variables populate fields, nested ones via ``__``."""
        monkeypatch.setenv("RESTKIT_BASE_URL", "https://hostname.domain")
        monkeypatch.setenv("RESTKIT_CONTENT_TYPE", "application/yaml")
        monkeypatch.setenv("RESTKIT_PASSWORD", "distortions")
        monkeypatch.setenv("RESTKIT_RATE_LIMIT", "5/second,100/minute")
        monkeypatch.setenv("RESTKIT_HTTP__TIMEOUT_READ", "12.5")

        settings = ClientSettings()

        assert settings.base_url == "https://hostname.domain"
        assert settings.content_type == "application/yaml"
        assert settings.password.get_secret_value() == "distortions"
        assert "distortions" not in repr(settings)
        assert settings.rate_limit == "5/second,100/minute"
        assert settings.http.timeout_read == 12.5

    def test_invalid_rate_limit(self):
        with pytest.raises(ValidationError):
            ClientSettings(rate_limit="lots/second")

    def test_blank_rate_limit_means_unlimited(self):
        assert ClientSettings(rate_limit="  ").rate_limit is None

    def test_log_level_normalized(self):
        assert ClientSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            ClientSettings(log_level="chatty")

    def test_http_settings_are_frozen(self):
        http = HttpSettings()
        with pytest.raises(ValidationError):
            http.timeout_read = 1.0

    def test_http_settings_bounds(self):
        with pytest.raises(ValidationError):
            HttpSettings(timeout_connect=0)


class TestSettingsSingleton:
    """Process-wide settings cache."""

    def test_cached_until_reset(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RESTKIT_BASE_URL", "https://first.domain")
        first = get_settings()
        monkeypatch.setenv("RESTKIT_BASE_URL", "https://second.domain")
        assert get_settings() is first

        reset_settings()
        assert get_settings().base_url == "https://second.domain"
