"""
Language partitioning.

Splits a corpus into a native subset (records already in the target
language), one subset per foreign language and an ``unknown`` bucket for
missing or unrecognised tags. Nothing is dropped: the caller can always see
how many records landed in the unknown bucket.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from config.constants import UNKNOWN_LANGUAGE
from config.logging_config import get_logger
from .errors import ExclusionReason
from .language import normalize_language_tag, recognized_languages
from .records import LanguageSubset, Record

logger = get_logger(__name__)


@dataclass(frozen=True)
class PartitionResult:
    """Output of LanguagePartitioner.partition"""
    target_language: str
    native: LanguageSubset
    foreign: Dict[str, LanguageSubset] = field(default_factory=dict)
    unknown: LanguageSubset = field(default_factory=lambda: LanguageSubset(UNKNOWN_LANGUAGE))

    @property
    def unknown_count(self) -> int:
        return len(self.unknown)

    @property
    def total(self) -> int:
        return len(self.native) + sum(len(s) for s in self.foreign.values()) + len(self.unknown)

    @property
    def exclusion_counts(self) -> Dict[str, int]:
        return {ExclusionReason.UNKNOWN_LANGUAGE.value: self.unknown_count}

    def subsets(self) -> List[LanguageSubset]:
        """All subsets: native first, foreign in first-seen order, unknown last"""
        return [self.native, *self.foreign.values(), self.unknown]

    def summary(self) -> Dict[str, int]:
        counts = {self.native.language: len(self.native)}
        counts.update({lang: len(s) for lang, s in self.foreign.items()})
        counts[UNKNOWN_LANGUAGE] = self.unknown_count
        return counts


class LanguagePartitioner:
    """
    Route records to per-language subsets.

    Usage:
        partitioner = LanguagePartitioner()
        result = partitioner.partition(records, target_language="en")
        result.native, result.foreign["de"], result.unknown
    """

    def __init__(self, known_languages: Optional[Iterable[str]] = None):
        """
        Args:
            known_languages: Extra language codes to accept besides the
                built-in registry.
        """
        self.known_languages = recognized_languages(known_languages)

    def partition(self, corpus: Sequence[Record], target_language: str) -> PartitionResult:
        """
        Partition a corpus by language tag.

        Args:
            corpus: Ordered records
            target_language: Language of the analysis corpus

        Returns:
            PartitionResult whose subsets keep the corpus order

        Raises:
            ValueError: If the target language is not recognised or a
                record id occurs twice
        """
        target = normalize_language_tag(target_language)
        if target is None or target not in self.known_languages:
            raise ValueError(f"Unrecognised target language: {target_language!r}")

        native: List[Record] = []
        foreign: Dict[str, List[Record]] = {}
        unknown: List[Record] = []
        seen = set()

        for record in corpus:
            if record.id in seen:
                raise ValueError(f"Duplicate record id: {record.id}")
            seen.add(record.id)

            language = normalize_language_tag(record.language)
            if language is None or language not in self.known_languages:
                unknown.append(record)
            elif language == target:
                native.append(record)
            else:
                foreign.setdefault(language, []).append(record)

        result = PartitionResult(
            target_language=target,
            native=LanguageSubset(target, native),
            foreign={lang: LanguageSubset(lang, recs) for lang, recs in foreign.items()},
            unknown=LanguageSubset(UNKNOWN_LANGUAGE, unknown),
        )

        logger.info(f"Partitioned {len(seen)} records: {result.summary()}")
        if unknown:
            tags = sorted({str(r.language) for r in unknown})
            logger.warning(
                f"{len(unknown)} records routed to '{UNKNOWN_LANGUAGE}' bucket "
                f"(tags: {', '.join(tags[:10])})"
            )

        return result


def partition(
    corpus: Sequence[Record],
    target_language: str,
    known_languages: Optional[Iterable[str]] = None
) -> PartitionResult:
    """Convenience wrapper around LanguagePartitioner"""
    return LanguagePartitioner(known_languages).partition(corpus, target_language)
