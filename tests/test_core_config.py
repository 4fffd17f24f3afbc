"""Tests for settings validation at worker startup."""

import pytest

from salon_audit.core.config import Settings, settings, validate_settings_for_production


class TestSettingsDefaults:
    def test_audit_job_defaults(self, monkeypatch):
        for name in ("AUDIT_MAX_RETRIES", "AUDIT_QUEUE", "GEMINI_MODEL"):
            monkeypatch.delenv(name, raising=False)
        fresh = Settings(_env_file=None)
        assert fresh.audit_max_retries == 3
        assert fresh.audit_queue == "audits"
        assert fresh.gemini_model == "gemini-2.0-flash"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("AUDIT_RETRY_BASE_DELAY", "5")
        assert Settings(_env_file=None).audit_retry_base_delay == 5


class TestValidateSettingsForProduction:
    def test_valid_development_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "app_env", "development")
        validate_settings_for_production()

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.setattr(settings, "gemini_api_key", "")
        with pytest.raises(SystemExit, match="GEMINI_API_KEY"):
            validate_settings_for_production()

    def test_production_rejects_debug_and_local_broker(self, monkeypatch):
        monkeypatch.setattr(settings, "app_env", "production")
        monkeypatch.setattr(settings, "app_debug", True)
        monkeypatch.setattr(settings, "redis_url", "redis://localhost:6379/0")

        with pytest.raises(SystemExit) as exc_info:
            validate_settings_for_production()

        message = str(exc_info.value)
        assert "APP_DEBUG" in message
        assert "REDIS_URL" in message
