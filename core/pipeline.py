#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Normalization Pipeline

raw corpus -> partition -> reconcile every foreign subset (all providers
concurrently, subsets concurrently) -> merge -> optional quality annotation.

The pipeline always returns a PipelineReport. Records that do not reach the
merged corpus are listed under a reason: unknown language, unresolved
translation, or a subset whose reconciliation was cut short by a timeout or
cancel().

Usage:
    pipeline = NormalizationPipeline.from_settings()
    report = await pipeline.run(records)
    report.records            # merged corpus
    report.exclusion_counts   # {"UnresolvedRecordError": 1, ...}
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set, TYPE_CHECKING

from config.logging_config import get_logger
from .errors import ConfigurationError
from .language import normalize_language_tag
from .merger import CorpusMerger, MergeResult
from .partitioner import LanguagePartitioner, PartitionResult
from .quality.annotator import TextQualityAnnotator, annotate_corpus
from .records import LanguageSubset, MergedRecord, Record
from .reconciler import ReconciliationReport, TranslationReconciler
from .selection import SelectionPolicy
from .similarity import SimilarityFn, cosine_similarity

if TYPE_CHECKING:
    from config.settings import Settings
    from translation_providers.base import BaseTranslationAdapter

logger = get_logger(__name__)


@dataclass
class PipelineReport:
    """Everything a run produced, including what it left out and why."""
    target_language: str
    partition: PartitionResult
    reports: List[ReconciliationReport]
    merge: MergeResult
    records: List[MergedRecord]
    configuration_errors: Dict[str, Dict[str, str]] = field(default_factory=dict)
    cancelled: bool = False
    timed_out: bool = False
    duration_seconds: float = 0.0

    @property
    def input_total(self) -> int:
        return self.partition.total

    @property
    def exclusion_counts(self) -> Dict[str, int]:
        return self.merge.exclusion_counts

    @property
    def incomplete_languages(self) -> List[str]:
        return [r.language for r in self.reports if not r.is_complete]

    def report_for(self, language: str) -> Optional[ReconciliationReport]:
        for report in self.reports:
            if report.language == language:
                return report
        return None

    def low_agreement(self, threshold: float) -> Dict[str, List[str]]:
        """Per language, record ids whose providers disagree below threshold"""
        flagged = {}
        for report in self.reports:
            ids = report.low_agreement(threshold)
            if ids:
                flagged[report.language] = ids
        return flagged

    def accounts_for_all_records(self) -> bool:
        """Merged + excluded equals the number of input records"""
        return len(self.records) + self.merge.excluded_total == self.input_total

    def to_dict(self, include_results: bool = False) -> Dict[str, Any]:
        return {
            "target_language": self.target_language,
            "input_records": self.input_total,
            "merged_records": len(self.records),
            "partition": self.partition.summary(),
            "exclusion_counts": self.exclusion_counts,
            "excluded": self.merge.to_dict()["excluded"],
            "provenance": self.merge.provenance_counts(),
            "configuration_errors": self.configuration_errors,
            "cancelled": self.cancelled,
            "timed_out": self.timed_out,
            "duration_seconds": round(self.duration_seconds, 3),
            "reconciliation": [r.to_dict(include_results=include_results) for r in self.reports],
        }


class NormalizationPipeline:
    """
    Orchestrates partitioning, reconciliation and merging for one corpus.

    Holds configuration only; every run() builds its own reports, so one
    pipeline can serve several runs, concurrently or not.
    """

    def __init__(
        self,
        adapters: Sequence["BaseTranslationAdapter"],
        target_language: str = "en",
        policy: Optional[SelectionPolicy] = None,
        similarity_fn: SimilarityFn = cosine_similarity,
        annotator: Optional[TextQualityAnnotator] = None,
        known_languages: Optional[Sequence[str]] = None,
        max_concurrency: int = 4,
        timeout: Optional[float] = None,
        strict: bool = False
    ):
        """
        Args:
            adapters: Translation adapters, in tie-breaking order
            target_language: Language of the merged corpus
            policy: Selection policy (default: adapter order preference)
            similarity_fn: Symmetric [0, 1] similarity used for agreement scores
            annotator: Optional post-merge quality annotator
            known_languages: Extra language codes to accept
            max_concurrency: Subsets reconciled at the same time
            timeout: Seconds before unfinished subsets are reported incomplete
            strict: Raise on configuration errors found during preflight
        """
        if not adapters:
            raise ValueError("At least one translation adapter is required")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")

        self.adapters = list(adapters)
        self.target_language = normalize_language_tag(target_language) or target_language
        self.partitioner = LanguagePartitioner(known_languages)
        self.reconciler = TranslationReconciler(similarity_fn=similarity_fn, policy=policy)
        self.merger = CorpusMerger()
        self.annotator = annotator
        self.max_concurrency = max_concurrency
        self.timeout = timeout
        self.strict = strict

        self._cancel_events: Set[asyncio.Event] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Optional["Settings"] = None,
        adapters: Optional[Sequence["BaseTranslationAdapter"]] = None,
        annotator: Optional[TextQualityAnnotator] = None,
        **overrides: Any
    ) -> "NormalizationPipeline":
        """Build a pipeline (and, unless given, its adapters) from settings"""
        from config.settings import settings as default_settings
        from translation_providers.manager import create_adapters
        from .selection import create_policy

        settings = settings or default_settings
        options: Dict[str, Any] = dict(
            target_language=settings.target_language,
            policy=create_policy(settings.selection_policy, settings.preferred_providers),
            known_languages=settings.extra_languages,
            max_concurrency=settings.max_concurrency,
            timeout=settings.pipeline_timeout,
        )
        options.update(overrides)
        return cls(
            adapters=adapters if adapters is not None else create_adapters(settings.providers, settings),
            annotator=annotator,
            **options,
        )

    @property
    def provider_names(self) -> List[str]:
        return [a.name for a in self.adapters]

    def preflight(self, languages: Sequence[str]) -> Dict[str, Dict[str, str]]:
        """
        Check every adapter against every source language before any request.

        Returns:
            language -> provider -> error message, for failing combinations only
        """
        errors: Dict[str, Dict[str, str]] = {}
        for language in languages:
            for adapter in self.adapters:
                try:
                    adapter.check_configuration(language, self.target_language)
                except ConfigurationError as e:
                    errors.setdefault(language, {})[adapter.name] = str(e)

        for language, by_provider in errors.items():
            for provider, message in by_provider.items():
                logger.error(f"Preflight: {message} ({language}→{self.target_language})")
            if len(by_provider) == len(self.adapters):
                logger.error(f"Preflight: no usable provider for '{language}'; its records will be unresolved")

        if errors and self.strict:
            first = next(iter(next(iter(errors.values())).values()))
            raise ConfigurationError(f"Preflight failed for {sorted(errors)}: {first}")

        return errors

    def cancel(self) -> None:
        """Abandon in-flight reconciliations of every active run"""
        logger.warning("Pipeline cancellation requested")
        for event in list(self._cancel_events):
            event.set()

    async def _reconcile_subset(self, subset: LanguageSubset, semaphore: asyncio.Semaphore) -> ReconciliationReport:
        async with semaphore:
            return await self.reconciler.reconcile(subset, self.adapters, self.target_language)

    async def _reconcile_all(
        self,
        subsets: List[LanguageSubset],
        cancel_event: asyncio.Event
    ) -> List[ReconciliationReport]:
        """Fan out over subsets; unfinished ones come back incomplete"""
        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [asyncio.ensure_future(self._reconcile_subset(s, semaphore)) for s in subsets]
        waiter = asyncio.ensure_future(cancel_event.wait())
        loop = asyncio.get_running_loop()
        deadline = None if self.timeout is None else loop.time() + self.timeout
        pending = set(tasks)

        try:
            while pending and not cancel_event.is_set():
                remaining = None if deadline is None else deadline - loop.time()
                if remaining is not None and remaining <= 0:
                    break
                done, pending = await asyncio.wait(
                    pending | {waiter}, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
                )
                pending.discard(waiter)
        finally:
            waiter.cancel()
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        reports = []
        for subset, task in zip(subsets, tasks):
            if task.done() and not task.cancelled() and task.exception() is None:
                reports.append(task.result())
                continue

            if task.cancelled() or not task.done():
                note = "cancelled" if cancel_event.is_set() else "timeout"
            else:
                error = task.exception()
                note = f"error: {type(error).__name__}: {error}"
                logger.error(f"Reconciliation of '{subset.language}' failed: {note}")
            reports.append(ReconciliationReport.incomplete(
                subset, self.target_language, self.provider_names, note=note
            ))

        return reports

    async def run(self, corpus: Sequence[Record]) -> PipelineReport:
        """
        Normalize one corpus.

        Args:
            corpus: Records in input order

        Returns:
            PipelineReport (always, unless the caller's own task is cancelled)

        Raises:
            ConfigurationError: In strict mode, when preflight finds a problem
            ValueError: Unrecognised target language or duplicate record ids
        """
        start = time.time()
        partition = self.partitioner.partition(corpus, self.target_language)
        subsets = list(partition.foreign.values())

        configuration_errors = self.preflight([s.language for s in subsets])

        cancel_event = asyncio.Event()
        self._cancel_events.add(cancel_event)
        try:
            reports = await self._reconcile_all(subsets, cancel_event)
        finally:
            self._cancel_events.discard(cancel_event)

        merge_result = self.merger.merge(partition.native, reports, partition.unknown)

        records = merge_result.records
        if self.annotator is not None:
            records = annotate_corpus(records, self.annotator)

        incomplete = [r for r in reports if not r.is_complete]
        report = PipelineReport(
            target_language=partition.target_language,
            partition=partition,
            reports=reports,
            merge=merge_result,
            records=records,
            configuration_errors=configuration_errors,
            cancelled=cancel_event.is_set(),
            timed_out=any(r.note == "timeout" for r in incomplete),
            duration_seconds=time.time() - start,
        )

        logger.info(
            f"Pipeline finished in {report.duration_seconds:.2f}s: "
            f"{report.input_total} in, {len(records)} merged, excluded {report.exclusion_counts}"
        )
        if incomplete:
            logger.warning(f"Incomplete subsets: {[r.language for r in incomplete]}")

        return report

    def run_sync(self, corpus: Sequence[Record]) -> PipelineReport:
        """Blocking wrapper around run()"""
        return asyncio.run(self.run(corpus))

    async def aclose(self) -> None:
        """Close adapter HTTP clients"""
        for adapter in self.adapters:
            close = getattr(adapter, "aclose", None)
            if close is not None:
                await close()
