#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
CorpusMerger - order-preserving merge of native and translated subsets

Output order: native records in their original order, then the resolved
records of each reconciliation report in the order the reports are given,
each keeping its subset order. Every record that does not make it into the
output is counted under an ExclusionReason.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from config.logging_config import get_logger
from .errors import ExclusionReason
from .records import LanguageSubset, MergedRecord
from .reconciler import ReconciliationReport

logger = get_logger(__name__)


@dataclass
class MergeResult:
    """Merged corpus plus an account of everything left out."""
    records: List[MergedRecord]
    excluded: Dict[str, List[str]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def exclusion_counts(self) -> Dict[str, int]:
        return {reason: len(ids) for reason, ids in self.excluded.items()}

    @property
    def excluded_total(self) -> int:
        return sum(len(ids) for ids in self.excluded.values())

    @property
    def input_total(self) -> int:
        return len(self.records) + self.excluded_total

    def provenance_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for record in self.records:
            counts[record.translation_provider] = counts.get(record.translation_provider, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "merged": len(self.records),
            "provenance": self.provenance_counts(),
            "exclusion_counts": self.exclusion_counts,
            "excluded": {reason: list(ids) for reason, ids in self.excluded.items()},
        }


class CorpusMerger:
    """Merge a native subset with reconciled foreign subsets."""

    def merge(
        self,
        native: LanguageSubset,
        reports: Sequence[ReconciliationReport],
        unknown: Optional[LanguageSubset] = None
    ) -> MergeResult:
        """
        Build the analysis corpus.

        Args:
            native: Subset already in the target language
            reports: Reconciliation reports, one per foreign subset
            unknown: Unknown-language bucket, counted as excluded

        Returns:
            MergeResult with merged records and exclusions by reason

        Raises:
            ValueError: If a record id appears in more than one input
        """
        target = native.language
        records: List[MergedRecord] = []
        excluded: Dict[str, List[str]] = {reason.value: [] for reason in ExclusionReason}
        seen = set()

        def claim(record_id: str) -> None:
            if record_id in seen:
                raise ValueError(f"Record id {record_id} appears in more than one subset")
            seen.add(record_id)

        for record in native:
            claim(record.id)
            records.append(MergedRecord.from_native(record, target))

        for report in reports:
            if report.target_language != target:
                raise ValueError(
                    f"Report for '{report.language}' targets '{report.target_language}', "
                    f"native subset is '{target}'"
                )

            if not report.is_complete:
                for record in report.subset:
                    claim(record.id)
                    excluded[ExclusionReason.INCOMPLETE.value].append(record.id)
                logger.warning(
                    f"Subset '{report.language}' incomplete ({report.note}): "
                    f"{len(report.subset)} records excluded"
                )
                continue

            unresolved = {u.record_id for u in report.unresolved}
            for record in report.subset:
                claim(record.id)
                selected = report.selections.get(record.id)
                if selected is not None:
                    records.append(
                        MergedRecord.from_translation(record, selected, report.language, target)
                    )
                else:
                    if record.id not in unresolved:
                        logger.warning(f"Record {record.id} has no selection and no unresolved entry")
                    excluded[ExclusionReason.UNRESOLVED.value].append(record.id)

        if unknown is not None:
            for record in unknown:
                claim(record.id)
                excluded[ExclusionReason.UNKNOWN_LANGUAGE.value].append(record.id)

        result = MergeResult(records=records, excluded=excluded)

        logger.info(
            f"Merged {len(records)} records ({result.provenance_counts()}); "
            f"excluded {result.exclusion_counts}"
        )
        return result


def merge(
    native: LanguageSubset,
    reports: Sequence[ReconciliationReport],
    unknown: Optional[LanguageSubset] = None
) -> MergeResult:
    """Convenience wrapper around CorpusMerger"""
    return CorpusMerger().merge(native, reports, unknown)
