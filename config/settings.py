#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigurationError
from .constants import (
    DEFAULT_TARGET_LANGUAGE,
    DEFAULT_PROVIDERS,
    GOOGLE_API_URL,
    DEEPL_BATCH_SIZE,
    DEEPL_MAX_TEXT_LENGTH,
    GOOGLE_BATCH_SIZE,
    GOOGLE_MAX_TEXT_LENGTH,
    TRANSLATION_MAX_ATTEMPTS,
    TRANSLATION_RETRY_BASE_DELAY,
    TRANSLATION_RETRY_MAX_DELAY,
    REQUEST_TIMEOUT_SECONDS,
    PIPELINE_MAX_CONCURRENCY,
    LOW_AGREEMENT_THRESHOLD,
)


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========== API Keys ==========
    deepl_api_key: Optional[SecretStr] = None
    google_api_key: Optional[SecretStr] = None

    # ========== Endpoints ==========
    # DeepL endpoint is derived from the key (":fx" keys use the free API)
    deepl_base_url: Optional[str] = None
    google_base_url: str = GOOGLE_API_URL
    deepl_english_variant: str = "EN-US"
    deepl_portuguese_variant: str = "PT-PT"

    # ========== Languages ==========
    target_language: str = DEFAULT_TARGET_LANGUAGE
    extra_languages: List[str] = []

    # ========== Providers & Selection ==========
    providers: List[str] = list(DEFAULT_PROVIDERS)
    selection_policy: str = "preferred"  # preferred | confidence
    preferred_providers: List[str] = list(DEFAULT_PROVIDERS)

    # ========== Performance ==========
    max_concurrency: int = PIPELINE_MAX_CONCURRENCY
    max_retries: int = TRANSLATION_MAX_ATTEMPTS
    retry_base_delay: float = TRANSLATION_RETRY_BASE_DELAY
    retry_max_delay: float = TRANSLATION_RETRY_MAX_DELAY
    request_timeout: float = REQUEST_TIMEOUT_SECONDS
    pipeline_timeout: Optional[float] = None
    deepl_batch_size: int = DEEPL_BATCH_SIZE
    google_batch_size: int = GOOGLE_BATCH_SIZE
    deepl_max_text_length: int = DEEPL_MAX_TEXT_LENGTH
    google_max_text_length: int = GOOGLE_MAX_TEXT_LENGTH
    show_progress: bool = False

    # ========== Review ==========
    low_agreement_threshold: float = LOW_AGREEMENT_THRESHOLD

    def get_api_key(self, provider: str) -> str:
        """Get API key based on provider"""
        provider = provider.lower()
        if provider == "deepl":
            if not self.deepl_api_key or not self.deepl_api_key.get_secret_value():
                raise ConfigurationError("DEEPL_API_KEY not set", provider="deepl")
            return self.deepl_api_key.get_secret_value()
        elif provider == "google":
            if not self.google_api_key or not self.google_api_key.get_secret_value():
                raise ConfigurationError("GOOGLE_API_KEY not set", provider="google")
            return self.google_api_key.get_secret_value()
        else:
            raise ConfigurationError(f"Unsupported provider: {provider}", provider=provider)

    def get_provider_options(self, provider: str) -> Dict[str, object]:
        """Batch/timeout/retry options for one provider"""
        provider = provider.lower()
        options: Dict[str, object] = {
            "timeout": self.request_timeout,
            "max_attempts": self.max_retries,
            "retry_base_delay": self.retry_base_delay,
            "retry_max_delay": self.retry_max_delay,
            "max_concurrency": self.max_concurrency,
            "show_progress": self.show_progress,
        }
        if provider == "deepl":
            options.update(
                base_url=self.deepl_base_url,
                max_batch_size=self.deepl_batch_size,
                max_text_length=self.deepl_max_text_length,
            )
        elif provider == "google":
            options.update(
                base_url=self.google_base_url,
                max_batch_size=self.google_batch_size,
                max_text_length=self.google_max_text_length,
            )
        return options

    def describe(self) -> Dict[str, object]:
        """Configuration summary without credentials"""
        return {
            "target_language": self.target_language,
            "providers": self.providers,
            "selection_policy": self.selection_policy,
            "preferred_providers": self.preferred_providers,
            "max_concurrency": self.max_concurrency,
            "max_retries": self.max_retries,
            "pipeline_timeout": self.pipeline_timeout,
            "deepl_configured": self.deepl_api_key is not None,
            "google_configured": self.google_api_key is not None,
        }


# Global settings instance
settings = Settings()
