"""
Unit tests for config/settings.py and translation_providers/manager.py
"""
import pytest

from config.logging_config import get_logger, set_log_level
from config.settings import Settings
from core.errors import ConfigurationError
from translation_providers import (
    DeepLProvider,
    GoogleProvider,
    create_adapter,
    create_adapters,
    get_provider_type,
    list_providers,
)
from translation_providers.base import TranslationProviderType


class TestSettings:
    """Test configuration loading."""

    def test_defaults(self, empty_settings):
        """Test default target, providers and policy."""
        assert empty_settings.target_language == "en"
        assert empty_settings.providers == ["deepl", "google"]
        assert empty_settings.selection_policy == "preferred"
        assert empty_settings.max_retries == 3

    def test_from_environment(self, monkeypatch):
        """Test values are read from environment variables."""
        monkeypatch.setenv("DEEPL_API_KEY", "env-key")
        monkeypatch.setenv("TARGET_LANGUAGE", "de")
        monkeypatch.setenv("PROVIDERS", '["google"]')

        settings = Settings(_env_file=None)

        assert settings.get_api_key("deepl") == "env-key"
        assert settings.target_language == "de"
        assert settings.providers == ["google"]

    def test_missing_key_raises(self, empty_settings):
        """Test a missing credential raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="DEEPL_API_KEY"):
            empty_settings.get_api_key("deepl")

    def test_secret_not_exposed(self, test_settings):
        """Test credentials stay out of repr and describe()."""
        assert "test-google-key" not in repr(test_settings)
        assert "test-google-key" not in str(test_settings.describe())
        assert test_settings.describe()["google_configured"] is True

    def test_provider_options(self, test_settings):
        """Test per-provider batch limits."""
        assert test_settings.get_provider_options("deepl")["max_batch_size"] == 50
        assert test_settings.get_provider_options("google")["max_batch_size"] == 128
        assert test_settings.get_provider_options("google")["max_attempts"] == 3


class TestProviderManager:
    """Test adapter construction."""

    def test_get_provider_type(self):
        """Test provider name resolution."""
        assert get_provider_type(" DeepL ") == TranslationProviderType.DEEPL
        with pytest.raises(ConfigurationError):
            get_provider_type("babelfish")

    def test_create_adapters_in_order(self, test_settings):
        """Test adapters are built in the requested order."""
        adapters = create_adapters(["google", "deepl"], settings=test_settings)

        assert [a.name for a in adapters] == ["google", "deepl"]
        assert isinstance(adapters[0], GoogleProvider)
        assert isinstance(adapters[1], DeepLProvider)
        assert adapters[1].config.api_key == "test-deepl-key:fx"
        assert adapters[1].config.retry_base_delay == 0.0

    def test_duplicate_providers_rejected(self, test_settings):
        """Test a provider listed twice is rejected."""
        with pytest.raises(ConfigurationError):
            create_adapters(["deepl", "DEEPL"], settings=test_settings)

    def test_missing_key_is_deferred(self, empty_settings):
        """Test a missing key surfaces at the configuration check."""
        adapter = create_adapter("deepl", settings=empty_settings)

        with pytest.raises(ConfigurationError):
            adapter.check_configuration("de", "en")

    def test_missing_key_strict(self, empty_settings):
        """Test strict creation raises immediately."""
        with pytest.raises(ConfigurationError):
            create_adapter("google", settings=empty_settings, strict=True)

    def test_list_providers(self):
        """Test provider metadata names the environment variables."""
        assert {p.env_key for p in list_providers()} == {"DEEPL_API_KEY", "GOOGLE_API_KEY"}


class TestLogging:
    """Test logging helpers."""

    def test_get_logger_configures_once(self):
        """Test handlers are not duplicated."""
        first = get_logger("normalizer.test")
        second = get_logger("normalizer.test")
        assert first is second
        assert len(first.handlers) == 2

    def test_set_log_level_rejects_unknown(self):
        """Test invalid level names are rejected."""
        with pytest.raises(ValueError):
            set_log_level("chatty")
