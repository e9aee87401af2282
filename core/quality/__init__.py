"""
Text quality annotation for the merged corpus.

Components:
  - TextQualityAnnotator: interface for pluggable per-record checks
  - LexiconSpellingAnnotator: vocabulary-based spelling flags with suggestions
  - annotate_corpus: attach flags to MergedRecords
"""

from core.quality.annotator import (
    QUALITY_FLAGS_KEY,
    QualityFlag,
    TextQualityAnnotator,
    LexiconSpellingAnnotator,
    annotate_corpus,
)

__all__ = [
    'QUALITY_FLAGS_KEY',
    'QualityFlag',
    'TextQualityAnnotator',
    'LexiconSpellingAnnotator',
    'annotate_corpus',
]
