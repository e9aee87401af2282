"""
Base Translation Adapter - Abstract Interface
Social Corpus Normalizer - Multi-Provider Support
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Sequence, FrozenSet
from dataclasses import dataclass, field
from enum import Enum

import httpx

from config.constants import (
    PIPELINE_MAX_CONCURRENCY,
    REQUEST_TIMEOUT_SECONDS,
    TRANSLATION_MAX_ATTEMPTS,
    TRANSLATION_RETRY_BASE_DELAY,
    TRANSLATION_RETRY_MAX_DELAY,
)
from config.logging_config import get_logger
from core.errors import (
    ConfigurationError,
    RecordTranslationFailure,
    TransientProviderError,
    ERROR_MISSING_RESULT,
    ERROR_PROVIDER,
    ERROR_QUOTA_EXCEEDED,
    ERROR_TEXT_TOO_LONG,
)
from core.language import normalize_language_tag, get_language_pair
from core.parallel import ParallelProcessor, TaskStatus
from core.records import TranslationResult

logger = get_logger(__name__)


class TranslationProviderType(Enum):
    """Supported translation providers"""
    DEEPL = "deepl"
    GOOGLE = "google"


@dataclass
class ProviderConfig:
    """Provider configuration"""
    api_key: Optional[str] = field(default=None, repr=False)
    base_url: Optional[str] = None  # For custom endpoints
    max_batch_size: int = 50
    max_text_length: int = 30000
    timeout: float = REQUEST_TIMEOUT_SECONDS
    max_attempts: int = TRANSLATION_MAX_ATTEMPTS
    retry_base_delay: float = TRANSLATION_RETRY_BASE_DELAY
    retry_max_delay: float = TRANSLATION_RETRY_MAX_DELAY
    max_concurrency: int = PIPELINE_MAX_CONCURRENCY
    show_progress: bool = False


@dataclass
class ProviderTranslation:
    """One translated segment as returned by a provider"""
    text: str
    detected_source_language: Optional[str] = None
    confidence: Optional[float] = None


TRANSIENT_STATUS_CODES = {408, 429, 500, 502, 503, 504}


def parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Seconds from a Retry-After header, if it is numeric"""
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class BaseTranslationAdapter(ABC):
    """
    Abstract base class for translation adapters.

    Subclasses implement one HTTP request for one batch of texts
    (``_translate_batch``). This class handles batching, per-item length
    checks, bounded retries and order-preserving reassembly, so
    ``translate`` always returns one result per input text, in input order,
    with failures recorded per item.
    """

    def __init__(self, config: ProviderConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = client
        self._owns_client = client is None

    @property
    @abstractmethod
    def provider_type(self) -> TranslationProviderType:
        """Return the provider type"""
        pass

    @property
    def name(self) -> str:
        return self.provider_type.value

    @property
    @abstractmethod
    def supported_source_languages(self) -> FrozenSet[str]:
        """Normalized source language codes the provider accepts"""
        pass

    @property
    @abstractmethod
    def supported_target_languages(self) -> FrozenSet[str]:
        """Normalized target language codes the provider accepts"""
        pass

    @abstractmethod
    async def _translate_batch(
        self,
        client: httpx.AsyncClient,
        texts: List[str],
        source_language: str,
        target_language: str
    ) -> List[ProviderTranslation]:
        """
        Send one request.

        Raises:
            TransientProviderError: Retryable failure
            RecordTranslationFailure: Permanent failure for this batch
            ConfigurationError: Credential or language pair rejected
        """
        pass

    def supports_pair(self, source_language: str, target_language: str) -> bool:
        pair = get_language_pair(source_language, target_language)
        return (
            pair.source in self.supported_source_languages
            and pair.target in self.supported_target_languages
            and pair.source != pair.target
        )

    def check_configuration(self, source_language: str, target_language: str) -> None:
        """
        Fail fast before any request.

        Raises:
            ConfigurationError: Missing credential or unsupported pair
        """
        if not self.config.api_key:
            raise ConfigurationError("API key not configured", provider=self.name)
        if not self.supports_pair(source_language, target_language):
            pair = get_language_pair(source_language, target_language)
            raise ConfigurationError(f"Unsupported language pair {pair}", provider=self.name)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout))
            self._owns_client = True
        return self._client

    def _classify_http_error(self, response: httpx.Response) -> Exception:
        """Map an error response onto the error taxonomy"""
        status = response.status_code
        if status in TRANSIENT_STATUS_CODES:
            return TransientProviderError(
                f"HTTP {status} from {self.name}",
                provider=self.name,
                status_code=status,
                retry_after=parse_retry_after(response),
            )
        if status in (401, 403):
            return ConfigurationError(f"Credential rejected (HTTP {status})", provider=self.name)
        if status == 456:
            return RecordTranslationFailure("Quota exceeded", code=ERROR_QUOTA_EXCEEDED, provider=self.name)
        if status in (413, 414):
            return RecordTranslationFailure("Request too large", code=ERROR_TEXT_TOO_LONG, provider=self.name)
        return RecordTranslationFailure(
            f"HTTP {status}: {response.text[:200]}", code=ERROR_PROVIDER, provider=self.name
        )

    def _check_response(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        raise self._classify_http_error(response)

    async def translate(
        self,
        texts: Sequence[str],
        source_language: str,
        target_language: str,
        ids: Optional[Sequence[str]] = None
    ) -> List[TranslationResult]:
        """
        Translate texts, one result per input text in input order.

        Args:
            texts: Source texts
            source_language: Source language code
            target_language: Target language code
            ids: Record ids for the results (defaults to positions)

        Returns:
            List of TranslationResult; failed items carry ``error``

        Raises:
            ConfigurationError: Missing credential or unsupported pair
        """
        self.check_configuration(source_language, target_language)

        ids = [str(i) for i in range(len(texts))] if ids is None else [str(i) for i in ids]
        if len(ids) != len(texts):
            raise ValueError(f"{len(texts)} texts but {len(ids)} ids")

        source = normalize_language_tag(source_language)
        target = normalize_language_tag(target_language)

        results: List[Optional[TranslationResult]] = [None] * len(texts)
        pending: List[int] = []

        for index, text in enumerate(texts):
            if text is None or not str(text).strip():
                results[index] = TranslationResult(record_id=ids[index], text="", provider=self.name)
            elif len(text) > self.config.max_text_length:
                results[index] = TranslationResult.failed(
                    ids[index], self.name,
                    f"Text length {len(text)} exceeds {self.config.max_text_length}",
                    ERROR_TEXT_TOO_LONG,
                )
            else:
                pending.append(index)

        batch_size = max(1, self.config.max_batch_size)
        batches = [pending[i:i + batch_size] for i in range(0, len(pending), batch_size)]

        if batches:
            client = self._get_client()

            async def run_batch(batch: List[int]) -> List[ProviderTranslation]:
                return await self._translate_batch(client, [texts[i] for i in batch], source, target)

            processor = ParallelProcessor(
                max_concurrency=self.config.max_concurrency,
                max_attempts=self.config.max_attempts,
                timeout=self.config.timeout,
                retry_base_delay=self.config.retry_base_delay,
                retry_max_delay=self.config.retry_max_delay,
                show_progress=self.config.show_progress,
                description=f"{self.name} {source}→{target}",
            )
            tasks, stats = await processor.process_all(batches, run_batch)

            for task in tasks:
                batch = task.data
                if task.status == TaskStatus.COMPLETED:
                    translations = task.result or []
                    for position, index in enumerate(batch):
                        if position < len(translations):
                            item = translations[position]
                            results[index] = TranslationResult(
                                record_id=ids[index],
                                text=item.text,
                                provider=self.name,
                                confidence=item.confidence,
                                detected_source_language=item.detected_source_language,
                            )
                        else:
                            results[index] = TranslationResult.failed(
                                ids[index], self.name, "Provider returned no result", ERROR_MISSING_RESULT
                            )
                else:
                    for index in batch:
                        results[index] = TranslationResult.failed(
                            ids[index], self.name,
                            task.error or "Translation failed",
                            task.error_code or ERROR_PROVIDER,
                        )

            logger.info(
                f"{self.name}: {len(texts)} texts in {len(batches)} batches, "
                f"{stats.failed} batches failed, {stats.retried} retried"
            )

        return results

    async def aclose(self) -> None:
        """Close the HTTP client if this adapter created it"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} batch={self.config.max_batch_size}>"
