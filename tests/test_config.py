"""Tests for settings loading."""

from decimal import Decimal

import pytest

from lavafix.config import AppSettings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_app_defaults(self, monkeypatch):
        """Test the business defaults without any environment."""
        for name in ("APP_NAME", "STORAGE_BACKEND", "DEFAULT_MONTHLY_AMOUNT"):
            monkeypatch.delenv(name, raising=False)
        settings = AppSettings(_env_file=None)
        assert settings.app_name == "LavaFix"
        assert settings.storage_backend == "json"
        assert settings.default_monthly_amount == Decimal("150")

    def test_app_settings_from_environment(self, monkeypatch):
        """Test values are read from environment variables."""
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("CURRENCY_SYMBOL", "$")
        settings = AppSettings(_env_file=None)
        assert settings.storage_backend == "memory"
        assert settings.currency_symbol == "$"

    def test_invalid_country_code_rejected(self):
        """Test the WhatsApp prefix must be digits only."""
        with pytest.raises(ValueError):
            AppSettings(_env_file=None, whatsapp_country_code="+502")

    def test_validate_all_settings_reports_missing_gemini_key(self, monkeypatch, tmp_path):
        """Test missing required settings are reported, not raised."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.chdir(tmp_path)
        results = validate_all_settings()
        assert results["gemini"] is False
        assert "gemini_error" in results
        assert results["app"] is True
