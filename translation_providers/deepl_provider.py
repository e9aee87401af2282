"""
DeepL Provider - DeepL API v2
Social Corpus Normalizer - Multi-Provider Support
"""

from typing import Optional, List, FrozenSet

import httpx

from config.constants import DEEPL_API_URL, DEEPL_FREE_API_URL
from core.errors import RecordTranslationFailure, ERROR_PROVIDER

from .base import (
    BaseTranslationAdapter,
    TranslationProviderType,
    ProviderConfig,
    ProviderTranslation,
)


class DeepLProvider(BaseTranslationAdapter):
    """
    DeepL translation provider

    Supports:
    - Batch translation (up to 50 texts per request)
    - Free (``:fx`` keys) and Pro endpoints
    - Regional English/Portuguese targets
    """

    SOURCE_LANGUAGES = frozenset({
        "ar", "bg", "cs", "da", "de", "el", "en", "es", "et", "fi", "fr", "hu",
        "id", "it", "ja", "ko", "lt", "lv", "nb", "nl", "pl", "pt", "ro", "ru",
        "sk", "sl", "sv", "tr", "uk", "zh",
    })
    TARGET_LANGUAGES = SOURCE_LANGUAGES

    # Targets where DeepL wants a regional variant
    TARGET_CODE_OVERRIDES = {
        "zh": "ZH-HANS",
    }

    def __init__(
        self,
        config: ProviderConfig,
        client: Optional[httpx.AsyncClient] = None,
        english_variant: str = "EN-US",
        portuguese_variant: str = "PT-PT"
    ):
        super().__init__(config, client)
        self.english_variant = english_variant.upper()
        self.portuguese_variant = portuguese_variant.upper()

    @property
    def provider_type(self) -> TranslationProviderType:
        return TranslationProviderType.DEEPL

    @property
    def supported_source_languages(self) -> FrozenSet[str]:
        return self.SOURCE_LANGUAGES

    @property
    def supported_target_languages(self) -> FrozenSet[str]:
        return self.TARGET_LANGUAGES

    @property
    def endpoint(self) -> str:
        if self.config.base_url:
            base = self.config.base_url
        elif self.config.api_key and self.config.api_key.endswith(":fx"):
            base = DEEPL_FREE_API_URL
        else:
            base = DEEPL_API_URL
        return f"{base.rstrip('/')}/v2/translate"

    def source_code(self, language: str) -> str:
        return language.upper()

    def target_code(self, language: str) -> str:
        if language == "en":
            return self.english_variant
        if language == "pt":
            return self.portuguese_variant
        return self.TARGET_CODE_OVERRIDES.get(language, language.upper())

    async def _translate_batch(
        self,
        client: httpx.AsyncClient,
        texts: List[str],
        source_language: str,
        target_language: str
    ) -> List[ProviderTranslation]:
        """Call POST /v2/translate for one batch"""
        headers = {"Authorization": f"DeepL-Auth-Key {self.config.api_key}"}
        payload = {
            "text": texts,
            "source_lang": self.source_code(source_language),
            "target_lang": self.target_code(target_language),
        }

        response = await client.post(self.endpoint, headers=headers, json=payload)
        self._check_response(response)

        try:
            translations = response.json()["translations"]
            return [
                ProviderTranslation(
                    text=item["text"],
                    detected_source_language=(item.get("detected_source_language") or "").lower() or None,
                )
                for item in translations
            ]
        except (ValueError, KeyError, TypeError) as e:
            raise RecordTranslationFailure(
                f"Malformed DeepL response: {e}", code=ERROR_PROVIDER, provider=self.name
            ) from e
