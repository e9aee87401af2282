#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Language Support - language registry and tag normalization
"""

import re
from typing import FrozenSet, Iterable, Optional
from dataclasses import dataclass


# Primary subtags accepted without extra configuration
LANGUAGES: FrozenSet[str] = frozenset({
    "ar", "bg", "cs", "da", "de", "el", "en", "es", "et", "fi", "fr", "he",
    "hi", "hu", "id", "it", "ja", "ko", "lt", "lv", "nb", "nl", "pl", "pt",
    "ro", "ru", "sk", "sl", "sv", "th", "tr", "uk", "vi", "zh",
})

# Subtag separators seen in the wild: en-US, en_GB, pt-br
_SUBTAG_SPLIT = re.compile(r"[-_]")


@dataclass(frozen=True)
class LanguagePair:
    """A translation language pair"""
    source: str
    target: str

    def __str__(self):
        return f"{self.source}→{self.target}"


def normalize_language_tag(tag: Optional[str]) -> Optional[str]:
    """
    Reduce a raw language tag to its lower-case primary subtag.

    Args:
        tag: Raw tag from the input data (e.g. "EN", "de-AT", " pt_BR ")

    Returns:
        Primary subtag ("en", "de", "pt"), or None for missing/blank tags
    """
    if tag is None:
        return None
    cleaned = str(tag).strip().lower()
    if not cleaned:
        return None
    return _SUBTAG_SPLIT.split(cleaned, 1)[0] or None


def recognized_languages(extra: Optional[Iterable[str]] = None) -> FrozenSet[str]:
    """Registry codes plus any caller-supplied extra codes"""
    codes = set(LANGUAGES)
    for code in extra or ():
        normalized = normalize_language_tag(code)
        if normalized:
            codes.add(normalized)
    return frozenset(codes)


def get_language_pair(source: str, target: str) -> LanguagePair:
    """Build a normalized language pair"""
    return LanguagePair(
        source=normalize_language_tag(source) or source,
        target=normalize_language_tag(target) or target,
    )
