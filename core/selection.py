"""
Selection policies: which provider's translation is carried forward.

Similarity between two translations only flags disagreement; it says nothing
about which one is correct. Choosing a translation is therefore an explicit,
overridable policy. Every policy is total: given at least one successful
translation it always returns one of them.
"""

from abc import ABC, abstractmethod
from typing import Callable, Mapping, Optional, Sequence, Union

from .records import Record, TranslationResult


class SelectionPolicy(ABC):
    """Pick one translation out of the successful ones for a record."""

    name: str = "policy"

    @abstractmethod
    def select(self, record: Record, candidates: Sequence[TranslationResult]) -> TranslationResult:
        """
        Args:
            record: Source record
            candidates: Successful translations, in adapter order (never empty)

        Returns:
            One element of ``candidates``
        """

    def describe(self) -> str:
        return self.name


class PreferredProviderPolicy(SelectionPolicy):
    """
    Fixed provider preference: the first provider in ``preference`` that
    succeeded wins. Providers not listed rank after listed ones, in adapter
    order.
    """

    name = "preferred"

    def __init__(self, preference: Sequence[str] = ()):
        self.preference = [p.lower() for p in preference]

    def _rank(self, provider: str) -> int:
        try:
            return self.preference.index(provider.lower())
        except ValueError:
            return len(self.preference)

    def select(self, record: Record, candidates: Sequence[TranslationResult]) -> TranslationResult:
        if not candidates:
            raise ValueError(f"No candidates for record {record.id}")
        # min() keeps the first of equal ranks, i.e. adapter order
        return min(candidates, key=lambda c: self._rank(c.provider))

    def describe(self) -> str:
        return f"preferred({', '.join(self.preference) or 'adapter order'})"


class HighestConfidencePolicy(SelectionPolicy):
    """
    Highest provider-reported confidence wins. Candidates without a
    confidence rank below those with one; ties go to the fallback policy.
    """

    name = "confidence"

    def __init__(self, fallback: Optional[SelectionPolicy] = None):
        self.fallback = fallback or PreferredProviderPolicy()

    def select(self, record: Record, candidates: Sequence[TranslationResult]) -> TranslationResult:
        if not candidates:
            raise ValueError(f"No candidates for record {record.id}")
        scored = [c for c in candidates if c.confidence is not None]
        if not scored:
            return self.fallback.select(record, candidates)
        best = max(c.confidence for c in scored)
        top = [c for c in scored if c.confidence == best]
        if len(top) == 1:
            return top[0]
        return self.fallback.select(record, top)

    def describe(self) -> str:
        return f"confidence(fallback={self.fallback.describe()})"


OverrideSource = Union[Mapping[str, str], Callable[[Record, Sequence[TranslationResult]], Optional[str]]]


class OverridePolicy(SelectionPolicy):
    """
    Caller-supplied choice per record.

    ``overrides`` is either a mapping ``record id -> provider`` or a callable
    returning a provider name (or None). When the override is missing or
    names a provider that did not succeed, the fallback policy decides.
    """

    name = "override"

    def __init__(self, overrides: OverrideSource, fallback: Optional[SelectionPolicy] = None):
        self.overrides = overrides
        self.fallback = fallback or PreferredProviderPolicy()

    def _wanted(self, record: Record, candidates: Sequence[TranslationResult]) -> Optional[str]:
        if callable(self.overrides):
            return self.overrides(record, candidates)
        return self.overrides.get(record.id)

    def select(self, record: Record, candidates: Sequence[TranslationResult]) -> TranslationResult:
        if not candidates:
            raise ValueError(f"No candidates for record {record.id}")
        wanted = self._wanted(record, candidates)
        if wanted:
            for candidate in candidates:
                if candidate.provider.lower() == wanted.lower():
                    return candidate
        return self.fallback.select(record, candidates)

    def describe(self) -> str:
        return f"override(fallback={self.fallback.describe()})"


def create_policy(name: str, preference: Sequence[str] = ()) -> SelectionPolicy:
    """Build a policy from its settings name"""
    name = name.lower()
    if name == "preferred":
        return PreferredProviderPolicy(preference)
    if name == "confidence":
        return HighestConfidencePolicy(PreferredProviderPolicy(preference))
    raise ValueError(f"Unknown selection policy: {name} (use 'preferred' or 'confidence')")
