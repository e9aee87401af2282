#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Translation Reconciler

Runs several translation adapters over the same language subset, aligns
their results by record id, scores agreement between providers with a
similarity function and selects one translation per record through an
explicit SelectionPolicy.

Usage:
    reconciler = TranslationReconciler(policy=PreferredProviderPolicy(["deepl"]))
    report = await reconciler.reconcile(subset, [deepl, google], "en")

    report.selections          # record id -> chosen TranslationResult
    report.unresolved          # records no provider could translate
    report.mean_similarity     # derived from report.scores
"""

import asyncio
import statistics
from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

from config.logging_config import get_logger
from .errors import (
    ConfigurationError,
    ExclusionReason,
    ERROR_CANCELLED,
    ERROR_CONFIGURATION,
    ERROR_MISSING_RESULT,
    ERROR_PROVIDER,
)
from .language import normalize_language_tag
from .records import LanguageSubset, Record, SimilarityScore, TranslationResult
from .selection import PreferredProviderPolicy, SelectionPolicy
from .similarity import SimilarityFn, cosine_similarity

if TYPE_CHECKING:
    from translation_providers.base import BaseTranslationAdapter

logger = get_logger(__name__)

# Floating point slack when validating similarity values
_SIMILARITY_TOLERANCE = 1e-9


class ReconciliationStatus(Enum):
    """Whether every adapter call for the subset finished"""
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class UnresolvedRecord:
    """A record that no provider translated"""
    record_id: str
    errors: Mapping[str, str] = field(default_factory=dict)
    reason: str = ExclusionReason.UNRESOLVED.value

    def to_dict(self) -> Dict[str, Any]:
        return {"record_id": self.record_id, "reason": self.reason, "errors": dict(self.errors)}


@dataclass
class ReconciliationReport:
    """Outcome of reconciling one foreign-language subset."""
    subset: LanguageSubset
    target_language: str
    providers: List[str]
    status: ReconciliationStatus = ReconciliationStatus.COMPLETE
    policy: str = ""
    results: Dict[str, Dict[str, TranslationResult]] = field(default_factory=dict)
    scores: List[SimilarityScore] = field(default_factory=list)
    selections: Dict[str, TranslationResult] = field(default_factory=dict)
    unresolved: List[UnresolvedRecord] = field(default_factory=list)
    provider_errors: Dict[str, str] = field(default_factory=dict)
    note: Optional[str] = None

    @property
    def language(self) -> str:
        return self.subset.language

    @property
    def is_complete(self) -> bool:
        return self.status == ReconciliationStatus.COMPLETE

    @property
    def mean_similarity(self) -> Optional[float]:
        if not self.scores:
            return None
        return statistics.fmean(s.value for s in self.scores)

    @property
    def median_similarity(self) -> Optional[float]:
        if not self.scores:
            return None
        return statistics.median(s.value for s in self.scores)

    @property
    def resolved_count(self) -> int:
        return len(self.selections)

    @property
    def unresolved_count(self) -> int:
        return len(self.unresolved)

    def scores_for(self, record_id: str) -> List[SimilarityScore]:
        return [s for s in self.scores if s.record_id == record_id]

    def low_agreement(self, threshold: float) -> List[str]:
        """Record ids whose weakest provider pair scores below threshold"""
        lowest: Dict[str, float] = {}
        for score in self.scores:
            lowest[score.record_id] = min(score.value, lowest.get(score.record_id, 1.0))
        return [r.id for r in self.subset if r.id in lowest and lowest[r.id] < threshold]

    def success_counts(self) -> Dict[str, int]:
        """Successful translations per provider"""
        return {
            provider: sum(1 for r in self.results.get(provider, {}).values() if r.success)
            for provider in self.providers
        }

    def selection_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for result in self.selections.values():
            counts[result.provider] = counts.get(result.provider, 0) + 1
        return counts

    def resolved_records(self) -> List[Tuple[Record, TranslationResult]]:
        """(record, selected translation) pairs in subset order"""
        if not self.is_complete:
            return []
        return [(r, self.selections[r.id]) for r in self.subset if r.id in self.selections]

    @classmethod
    def incomplete(
        cls,
        subset: LanguageSubset,
        target_language: str,
        providers: Sequence[str],
        note: str = ERROR_CANCELLED
    ) -> "ReconciliationReport":
        """Report for a subset whose reconciliation did not finish"""
        return cls(
            subset=subset,
            target_language=target_language,
            providers=list(providers),
            status=ReconciliationStatus.INCOMPLETE,
            note=note,
        )

    def to_dict(self, include_results: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "language": self.language,
            "target_language": self.target_language,
            "status": self.status.value,
            "policy": self.policy,
            "providers": list(self.providers),
            "records": len(self.subset),
            "resolved": self.resolved_count,
            "unresolved": [u.to_dict() for u in self.unresolved],
            "provider_errors": dict(self.provider_errors),
            "success_counts": self.success_counts(),
            "selection_counts": self.selection_counts(),
            "mean_similarity": self.mean_similarity,
            "median_similarity": self.median_similarity,
            "scores": [s.to_dict() for s in self.scores],
        }
        if self.note:
            data["note"] = self.note
        if include_results:
            data["results"] = {
                provider: [r.to_dict() for r in by_id.values()]
                for provider, by_id in self.results.items()
            }
        return data


class TranslationReconciler:
    """
    Reconcile translations of one subset from several providers.

    Features:
    - All adapters run concurrently on the full subset
    - Alignment by record id, so dropped items count as failures
    - Pairwise similarity for every record with 2+ successful translations
    - Policy-driven, total selection; records with no success are reported
      as unresolved, never silently dropped
    """

    def __init__(
        self,
        similarity_fn: SimilarityFn = cosine_similarity,
        policy: Optional[SelectionPolicy] = None
    ):
        self.similarity_fn = similarity_fn
        self.policy = policy or PreferredProviderPolicy()

    async def _run_adapter(
        self,
        adapter: "BaseTranslationAdapter",
        subset: LanguageSubset,
        target_language: str
    ) -> Tuple[Optional[List[TranslationResult]], Optional[str], Optional[str]]:
        """Returns (results, provider error, error code)"""
        try:
            results = await adapter.translate(
                subset.texts, subset.language, target_language, ids=subset.ids
            )
            return list(results), None, None
        except ConfigurationError as e:
            logger.error(f"{adapter.name}: configuration error for {subset.language}→{target_language}: {e}")
            return None, str(e), ERROR_CONFIGURATION
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"{adapter.name}: translation of '{subset.language}' subset failed")
            return None, f"{type(e).__name__}: {e}", ERROR_PROVIDER

    def _align(
        self,
        provider: str,
        subset: LanguageSubset,
        results: Optional[List[TranslationResult]],
        error: Optional[str],
        error_code: Optional[str]
    ) -> Dict[str, TranslationResult]:
        """Index results by record id; absent ids become failures"""
        by_id: Dict[str, TranslationResult] = {}
        wanted = set(subset.ids)

        for result in results or []:
            if result.record_id not in wanted:
                logger.warning(f"{provider}: ignoring result for unknown record {result.record_id}")
                continue
            by_id.setdefault(result.record_id, result)

        aligned: Dict[str, TranslationResult] = {}
        for record_id in subset.ids:
            if record_id in by_id:
                aligned[record_id] = by_id[record_id]
            elif error is not None:
                aligned[record_id] = TranslationResult.failed(record_id, provider, error, error_code or ERROR_PROVIDER)
            else:
                aligned[record_id] = TranslationResult.failed(
                    record_id, provider, "No result returned", ERROR_MISSING_RESULT
                )
        return aligned

    def _score(self, similarity_fn: SimilarityFn, a: TranslationResult, b: TranslationResult) -> SimilarityScore:
        value = float(similarity_fn(a.text or "", b.text or ""))
        if not (-_SIMILARITY_TOLERANCE <= value <= 1.0 + _SIMILARITY_TOLERANCE):
            raise ValueError(f"Similarity function returned {value}, expected a value in [0, 1]")
        return SimilarityScore(
            record_id=a.record_id,
            provider_a=a.provider,
            provider_b=b.provider,
            value=max(0.0, min(1.0, value)),
        )

    async def reconcile(
        self,
        subset: LanguageSubset,
        adapters: Sequence["BaseTranslationAdapter"],
        target_language: str,
        similarity_fn: Optional[SimilarityFn] = None,
        policy: Optional[SelectionPolicy] = None
    ) -> ReconciliationReport:
        """
        Translate a subset with every adapter and reconcile the results.

        Args:
            subset: Foreign-language subset
            adapters: Adapters in preference-neutral order (used for pair
                order and tie-breaking)
            target_language: Target language code
            similarity_fn: Overrides the reconciler's similarity function
            policy: Overrides the reconciler's selection policy

        Returns:
            ReconciliationReport with status COMPLETE
        """
        if not adapters:
            raise ValueError("At least one adapter is required")

        similarity_fn = similarity_fn or self.similarity_fn
        policy = policy or self.policy
        target = normalize_language_tag(target_language) or target_language
        providers = [a.name for a in adapters]
        if len(set(providers)) != len(providers):
            raise ValueError(f"Duplicate providers: {providers}")

        report = ReconciliationReport(
            subset=subset,
            target_language=target,
            providers=providers,
            policy=policy.describe(),
        )
        if not len(subset):
            return report

        outcomes = await asyncio.gather(
            *(self._run_adapter(adapter, subset, target) for adapter in adapters)
        )

        for provider, (results, error, error_code) in zip(providers, outcomes):
            if error is not None:
                report.provider_errors[provider] = error
            report.results[provider] = self._align(provider, subset, results, error, error_code)

        for record in subset:
            successes = [
                report.results[p][record.id]
                for p in providers
                if report.results[p][record.id].success
            ]

            for a, b in combinations(successes, 2):
                report.scores.append(self._score(similarity_fn, a, b))

            if successes:
                report.selections[record.id] = policy.select(record, successes)
            else:
                report.unresolved.append(UnresolvedRecord(
                    record_id=record.id,
                    errors={p: report.results[p][record.id].error or "" for p in providers},
                ))

        mean = report.mean_similarity
        logger.info(
            f"Reconciled '{subset.language}' ({len(subset)} records, providers={providers}): "
            f"{report.resolved_count} resolved, {report.unresolved_count} unresolved, "
            f"{len(report.scores)} scores"
            + (f", mean similarity {mean:.3f}" if mean is not None else "")
        )
        if report.unresolved:
            logger.warning(
                f"'{subset.language}': {report.unresolved_count} records unresolved "
                f"({ExclusionReason.UNRESOLVED.value})"
            )

        return report
