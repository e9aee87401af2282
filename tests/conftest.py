"""
Pytest configuration and shared fixtures for Social Corpus Normalizer tests.
"""
import asyncio
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import Settings
from core.errors import ConfigurationError, ERROR_PROVIDER
from core.records import LanguageSubset, Record, TranslationResult


# ============================================================================
# Scripted adapter
# ============================================================================

class ScriptedAdapter:
    """
    Stand-in for a translation adapter with scripted behaviour.

    By default it "translates" a text to ``"<text> (<name>)"``.
    """

    def __init__(
        self,
        name: str,
        translations: Optional[Dict[str, str]] = None,
        fail_ids: Iterable[str] = (),
        drop_ids: Iterable[str] = (),
        fail_all: bool = False,
        confidence: Optional[float] = None,
        delay: float = 0.0,
        configured: bool = True,
        supported_sources: Optional[Iterable[str]] = None,
        raise_error: Optional[BaseException] = None
    ):
        self.name = name
        self.translations = dict(translations or {})
        self.fail_ids = set(fail_ids)
        self.drop_ids = set(drop_ids)
        self.fail_all = fail_all
        self.confidence = confidence
        self.delay = delay
        self.configured = configured
        self.supported_sources = None if supported_sources is None else set(supported_sources)
        self.raise_error = raise_error
        self.calls: List[dict] = []
        self.closed = False

    def check_configuration(self, source_language: str, target_language: str) -> None:
        if not self.configured:
            raise ConfigurationError("API key not configured", provider=self.name)
        if self.supported_sources is not None and source_language not in self.supported_sources:
            raise ConfigurationError(
                f"Unsupported language pair {source_language}→{target_language}", provider=self.name
            )

    async def translate(
        self,
        texts: Sequence[str],
        source_language: str,
        target_language: str,
        ids: Optional[Sequence[str]] = None
    ) -> List[TranslationResult]:
        ids = [str(i) for i in range(len(texts))] if ids is None else list(ids)
        self.calls.append({"texts": list(texts), "source": source_language, "target": target_language, "ids": ids})
        self.check_configuration(source_language, target_language)

        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raise_error is not None:
            raise self.raise_error

        results = []
        for record_id, text in zip(ids, texts):
            if record_id in self.drop_ids:
                continue
            if self.fail_all or record_id in self.fail_ids:
                results.append(TranslationResult.failed(record_id, self.name, "scripted failure", ERROR_PROVIDER))
                continue
            results.append(TranslationResult(
                record_id=record_id,
                text=self.translations.get(record_id, f"{text} ({self.name})"),
                provider=self.name,
                confidence=self.confidence,
            ))
        return results

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def scripted_adapter():
    """Factory for ScriptedAdapter instances."""
    return ScriptedAdapter


# ============================================================================
# Fixtures: Configuration & Settings
# ============================================================================

@pytest.fixture
def test_settings():
    """Settings with fake credentials and fast retries."""
    return Settings(
        _env_file=None,
        deepl_api_key="test-deepl-key:fx",
        google_api_key="test-google-key",
        retry_base_delay=0.0,
        retry_max_delay=0.0,
        max_retries=3,
    )


@pytest.fixture
def empty_settings():
    """Settings without any credentials."""
    return Settings(_env_file=None, deepl_api_key=None, google_api_key=None)


# ============================================================================
# Fixtures: Sample Data
# ============================================================================

def make_corpus(counts: Dict[Optional[str], int]) -> List[Record]:
    """Records with sequential ids; languages interleaved round-robin."""
    remaining = dict(counts)
    records = []
    next_id = 1
    while any(remaining.values()):
        for language in list(remaining):
            if remaining[language]:
                records.append(Record(
                    id=f"r{next_id}",
                    text=f"post {next_id} in {language}",
                    language=language,
                    metadata={"author": f"user{next_id % 7}"},
                ))
                remaining[language] -= 1
                next_id += 1
    return records


@pytest.fixture
def scenario_a_corpus() -> List[Record]:
    """150 records: 130 en, 12 de, 8 fr."""
    return make_corpus({"en": 130, "de": 12, "fr": 8})


@pytest.fixture
def small_corpus() -> List[Record]:
    """Mixed corpus including an untagged and an unrecognised record."""
    return [
        Record(id="1", text="Great game last night!", language="en"),
        Record(id="2", text="Guten Morgen zusammen", language="de"),
        Record(id="3", text="Bonjour tout le monde", language="fr"),
        Record(id="4", text="Das Wetter ist schön", language="de-AT"),
        Record(id="5", text="lol", language=None),
        Record(id="6", text="See you soon", language="EN"),
        Record(id="7", text="qapla'", language="tlh"),
    ]


@pytest.fixture
def german_subset() -> LanguageSubset:
    """12-record German subset."""
    return LanguageSubset("de", [
        Record(id=f"de{i}", text=f"Beitrag Nummer {i}", language="de") for i in range(1, 13)
    ])
