"""
Google Provider - Cloud Translation API v2 (Basic)
Social Corpus Normalizer - Multi-Provider Support
"""

from typing import List, FrozenSet

import httpx

from config.constants import GOOGLE_API_URL
from core.errors import (
    ConfigurationError,
    RecordTranslationFailure,
    TransientProviderError,
    ERROR_PROVIDER,
    ERROR_QUOTA_EXCEEDED,
)
from core.language import LANGUAGES

from .base import (
    BaseTranslationAdapter,
    TranslationProviderType,
    ProviderTranslation,
    parse_retry_after,
)


class GoogleProvider(BaseTranslationAdapter):
    """
    Google Cloud Translation provider

    Supports:
    - Batch translation (up to 128 segments per request)
    - Every language in the registry
    - API key sent as a header so it never shows up in request URLs
    """

    SUPPORTED_LANGUAGES = frozenset(LANGUAGES)

    # Registry codes that Google spells differently
    CODE_OVERRIDES = {
        "nb": "no",
        "zh": "zh-CN",
    }

    RATE_LIMIT_REASONS = ("ratelimitexceeded", "userratelimitexceeded")
    QUOTA_REASONS = ("quotaexceeded", "dailylimitexceeded")

    @property
    def provider_type(self) -> TranslationProviderType:
        return TranslationProviderType.GOOGLE

    @property
    def supported_source_languages(self) -> FrozenSet[str]:
        return self.SUPPORTED_LANGUAGES

    @property
    def supported_target_languages(self) -> FrozenSet[str]:
        return self.SUPPORTED_LANGUAGES

    @property
    def endpoint(self) -> str:
        base = self.config.base_url or GOOGLE_API_URL
        return f"{base.rstrip('/')}/language/translate/v2"

    def language_code(self, language: str) -> str:
        return self.CODE_OVERRIDES.get(language, language)

    def _error_reason(self, response: httpx.Response) -> str:
        try:
            error = response.json().get("error", {})
        except ValueError:
            return response.text[:200]
        reasons = [e.get("reason", "") for e in error.get("errors", [])]
        return " ".join(reasons + [error.get("message", "")])

    def _classify_http_error(self, response: httpx.Response) -> Exception:
        status = response.status_code
        reason = self._error_reason(response)
        lowered = reason.lower()

        if status == 403 and any(r in lowered for r in self.QUOTA_REASONS):
            return RecordTranslationFailure(
                f"Quota exceeded ({reason.strip()})", code=ERROR_QUOTA_EXCEEDED, provider=self.name
            )
        if status == 403 and any(r in lowered for r in self.RATE_LIMIT_REASONS):
            return TransientProviderError(
                f"Rate limited by google ({reason.strip()})",
                provider=self.name,
                status_code=status,
                retry_after=parse_retry_after(response),
            )
        if status in (401, 403) or (status == 400 and ("api key" in lowered or "keyinvalid" in lowered)):
            return ConfigurationError(f"Credential rejected (HTTP {status}): {reason.strip()}", provider=self.name)
        if status == 400:
            return RecordTranslationFailure(
                f"Bad request: {reason.strip()}", code=ERROR_PROVIDER, provider=self.name
            )
        return super()._classify_http_error(response)

    async def _translate_batch(
        self,
        client: httpx.AsyncClient,
        texts: List[str],
        source_language: str,
        target_language: str
    ) -> List[ProviderTranslation]:
        """Call POST /language/translate/v2 for one batch"""
        headers = {"X-Goog-Api-Key": self.config.api_key}
        payload = {
            "q": texts,
            "source": self.language_code(source_language),
            "target": self.language_code(target_language),
            "format": "text",
        }

        response = await client.post(self.endpoint, headers=headers, json=payload)
        self._check_response(response)

        try:
            translations = response.json()["data"]["translations"]
            return [ProviderTranslation(text=item["translatedText"]) for item in translations]
        except (ValueError, KeyError, TypeError) as e:
            raise RecordTranslationFailure(
                f"Malformed Google response: {e}", code=ERROR_PROVIDER, provider=self.name
            ) from e
