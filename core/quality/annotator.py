"""
Text Quality Annotator

Pluggable per-record checker run after the merge. Annotators never change
the text; they return flagged spans with optional suggestions, which are
attached to each MergedRecord under ``annotations["quality_flags"]``.

Includes a lexicon-based spelling annotator tuned for social-media text:
URLs, @mentions, #hashtags and numbers are never flagged.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from difflib import get_close_matches
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from config.logging_config import get_logger
from core.records import MergedRecord

logger = get_logger(__name__)

QUALITY_FLAGS_KEY = "quality_flags"

# Spans that are not words to spell-check
_SKIP_PATTERN = re.compile(r"https?://\S+|www\.\S+|[@#]\w+")
_WORD_PATTERN = re.compile(r"[^\W\d_]+(?:['’][^\W\d_]+)*")


@dataclass(frozen=True)
class QualityFlag:
    """A flagged span of a text"""
    start: int
    end: int
    token: str
    issue: str = "spelling"
    suggestions: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "token": self.token,
            "issue": self.issue,
            "suggestions": list(self.suggestions),
        }


class TextQualityAnnotator(ABC):
    """Interface for post-merge text checks"""

    @abstractmethod
    def annotate(self, text: str) -> List[QualityFlag]:
        """Return flagged spans for one text"""


class LexiconSpellingAnnotator(TextQualityAnnotator):
    """
    Flag words missing from a vocabulary and suggest close matches.

    Usage:
        annotator = LexiconSpellingAnnotator.from_file("words_en.txt")
        flags = annotator.annotate("Ths is a wnderful day!")
        # [QualityFlag(start=0, end=3, token='Ths', suggestions=('this', ...)), ...]
    """

    def __init__(
        self,
        vocabulary: Iterable[str],
        max_suggestions: int = 3,
        cutoff: float = 0.75,
        min_token_length: int = 2
    ):
        """
        Args:
            vocabulary: Known words (compared case-insensitively)
            max_suggestions: Suggestions per flagged word
            cutoff: difflib similarity cutoff for suggestions (0-1)
            min_token_length: Shorter tokens are never flagged
        """
        self.vocabulary = frozenset(w.strip().casefold() for w in vocabulary if w and w.strip())
        self._candidates = sorted(self.vocabulary)
        self.max_suggestions = max_suggestions
        self.cutoff = cutoff
        self.min_token_length = min_token_length

    @classmethod
    def from_file(cls, path: Union[str, Path], encoding: str = "utf-8", **kwargs) -> "LexiconSpellingAnnotator":
        """Load a vocabulary with one word per line ('#' starts a comment)"""
        lines = Path(path).read_text(encoding=encoding).splitlines()
        words = [line for line in lines if line.strip() and not line.lstrip().startswith("#")]
        logger.info(f"Loaded {len(words)} vocabulary entries from {path}")
        return cls(words, **kwargs)

    def suggest(self, word: str) -> Tuple[str, ...]:
        return tuple(get_close_matches(word.casefold(), self._candidates, n=self.max_suggestions, cutoff=self.cutoff))

    def annotate(self, text: str) -> List[QualityFlag]:
        if not text:
            return []

        skipped = [m.span() for m in _SKIP_PATTERN.finditer(text)]
        flags = []

        for match in _WORD_PATTERN.finditer(text):
            start, end = match.span()
            if any(s <= start < e for s, e in skipped):
                continue
            token = match.group()
            if len(token) < self.min_token_length or token.casefold() in self.vocabulary:
                continue
            flags.append(QualityFlag(start=start, end=end, token=token, suggestions=self.suggest(token)))

        return flags


def annotate_corpus(
    records: Sequence[MergedRecord],
    annotator: TextQualityAnnotator
) -> List[MergedRecord]:
    """
    Run an annotator over a merged corpus.

    Returns:
        New MergedRecords (same order) carrying their flags
    """
    annotated = []
    flagged = 0
    for record in records:
        flags = annotator.annotate(record.text)
        if flags:
            flagged += 1
        annotated.append(record.with_annotations(**{QUALITY_FLAGS_KEY: tuple(f.to_dict() for f in flags)}))

    logger.info(f"Quality annotation: {flagged}/{len(records)} records flagged")
    return annotated
