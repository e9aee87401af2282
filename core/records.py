"""
Record types shared by the partitioner, adapters, reconciler and merger.

Records and translation results are frozen: every stage builds new objects
instead of mutating its input, so the ingested corpus stays available for
audit and re-processing.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from config.constants import NATIVE_PROVIDER


def _freeze(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Record:
    """One social-media post."""
    id: str
    text: str
    language: Optional[str]
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "metadata", _freeze(self.metadata))


# Ordered sequence of records, insertion order
Corpus = List[Record]


@dataclass(frozen=True)
class LanguageSubset:
    """Read-only, same-language slice of a corpus."""
    language: str
    records: Tuple[Record, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "records", tuple(self.records))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    @property
    def ids(self) -> List[str]:
        return [r.id for r in self.records]

    @property
    def texts(self) -> List[str]:
        return [r.text for r in self.records]


@dataclass(frozen=True)
class TranslationResult:
    """One provider's translation of one record."""
    record_id: str
    text: Optional[str]
    provider: str
    error: Optional[str] = None
    error_code: Optional[str] = None
    confidence: Optional[float] = None
    detected_source_language: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, record_id: str, provider: str, error: str, code: str) -> "TranslationResult":
        return cls(record_id=record_id, text=None, provider=provider, error=error, error_code=code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "provider": self.provider,
            "text": self.text,
            "error": self.error,
            "error_code": self.error_code,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class SimilarityScore:
    """Agreement between two providers' translations of the same record."""
    record_id: str
    provider_a: str
    provider_b: str
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "providers": [self.provider_a, self.provider_b],
            "value": round(self.value, 6),
        }


@dataclass(frozen=True)
class MergedRecord:
    """A record of the analysis-ready corpus, with translation provenance."""
    id: str
    text: str
    language: str
    source_language: str
    translation_provider: str
    original_text: str
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)
    annotations: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "metadata", _freeze(self.metadata))
        object.__setattr__(self, "annotations", _freeze(self.annotations))

    @property
    def is_translated(self) -> bool:
        return self.translation_provider != NATIVE_PROVIDER

    @classmethod
    def from_native(cls, record: Record, language: str) -> "MergedRecord":
        return cls(
            id=record.id,
            text=record.text,
            language=language,
            source_language=language,
            translation_provider=NATIVE_PROVIDER,
            original_text=record.text,
            metadata=record.metadata,
        )

    @classmethod
    def from_translation(
        cls,
        record: Record,
        result: TranslationResult,
        source_language: str,
        target_language: str
    ) -> "MergedRecord":
        return cls(
            id=record.id,
            text=result.text or "",
            language=target_language,
            source_language=source_language,
            translation_provider=result.provider,
            original_text=record.text,
            metadata=record.metadata,
        )

    def with_annotations(self, **annotations: Any) -> "MergedRecord":
        merged = dict(self.annotations)
        merged.update(annotations)
        return MergedRecord(
            id=self.id,
            text=self.text,
            language=self.language,
            source_language=self.source_language,
            translation_provider=self.translation_provider,
            original_text=self.original_text,
            metadata=self.metadata,
            annotations=merged,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "language": self.language,
            "source_language": self.source_language,
            "translation_provider": self.translation_provider,
            "original_text": self.original_text,
            "metadata": dict(self.metadata),
            "annotations": dict(self.annotations),
        }
