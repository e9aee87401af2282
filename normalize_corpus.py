#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Corpus Normalizer CLI - translate a multilingual corpus into one language

Usage:
    python normalize_corpus.py posts.csv --text-column text --language-column lang
    python normalize_corpus.py posts.csv --text-column text --language-column lang \\
        --id-column post_id --target en --providers deepl google --prefer deepl \\
        --output merged.csv --report report.json --vocabulary words_en.txt

Credentials come from DEEPL_API_KEY / GOOGLE_API_KEY (environment or .env).

Exit codes:
    0  pipeline finished (exclusions are listed in the report)
    1  bad input (missing file or columns, duplicate ids)
    2  no usable translation provider for the corpus
"""

import sys
import json
import asyncio
import argparse
from pathlib import Path

from dotenv import load_dotenv

# Add project to path
sys.path.insert(0, str(Path(__file__).parent))

# Load environment variables
load_dotenv()

from config.constants import CSV_DEFAULT_DELIMITER, CSV_DEFAULT_ENCODING
from config.logging_config import get_logger, set_log_level
from config.settings import settings
from core.errors import ConfigurationError
from core.ingestion import read_corpus_csv, write_merged_csv
from core.pipeline import NormalizationPipeline
from core.quality import LexiconSpellingAnnotator
from core.selection import create_policy
from core.similarity import SIMILARITY_FUNCTIONS, get_similarity_function
from translation_providers import create_adapters

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_BAD_INPUT = 1
EXIT_NO_PROVIDER = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Partition, translate, reconcile and merge a multilingual social-media corpus",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('input', help='Input CSV file')
    parser.add_argument('--text-column', required=True, help='Column holding the post text')
    parser.add_argument('--language-column', required=True, help='Column holding the language tag')
    parser.add_argument('--id-column', help='Column holding the record id (default: row number)')
    parser.add_argument('--target', default=settings.target_language,
                        help=f'Target language (default: {settings.target_language})')
    parser.add_argument('--providers', nargs='+', default=settings.providers,
                        help=f'Translation providers (default: {" ".join(settings.providers)})')
    parser.add_argument('--prefer', nargs='+',
                        help='Provider preference for selection (default: provider order)')
    parser.add_argument('--policy', choices=['preferred', 'confidence'], default=settings.selection_policy,
                        help='Selection policy')
    parser.add_argument('--similarity', choices=sorted(SIMILARITY_FUNCTIONS), default='cosine',
                        help='Similarity function for agreement scores')
    parser.add_argument('--output', '-o', help='Merged corpus CSV (default: <input>_<target>.csv)')
    parser.add_argument('--report', help='JSON report path')
    parser.add_argument('--include-results', action='store_true',
                        help='Include every provider result in the JSON report')
    parser.add_argument('--vocabulary', help='Word list for spelling annotation (one word per line)')
    parser.add_argument('--timeout', type=float, default=settings.pipeline_timeout,
                        help='Seconds before unfinished subsets are reported incomplete')
    parser.add_argument('--concurrency', type=int, default=settings.max_concurrency,
                        help='Language subsets reconciled at the same time')
    parser.add_argument('--encoding', default=CSV_DEFAULT_ENCODING,
                        help=f'CSV encoding (default: {CSV_DEFAULT_ENCODING})')
    parser.add_argument('--delimiter', default=CSV_DEFAULT_DELIMITER,
                        help=f'CSV delimiter (default: {CSV_DEFAULT_DELIMITER})')
    parser.add_argument('--log-level', default='INFO', help='Console log level')
    return parser


def print_summary(report, output_path: Path) -> None:
    """Human-readable run summary"""
    print("\n" + "=" * 60)
    print("CORPUS NORMALIZATION")
    print("=" * 60)
    print(f"   Input records: {report.input_total}")
    print(f"   Partition:     {report.partition.summary()}")
    print(f"   Merged:        {len(report.records)} -> {output_path}")
    print(f"   Provenance:    {report.merge.provenance_counts()}")
    print(f"   Excluded:      {report.exclusion_counts}")

    for reconciliation in report.reports:
        mean = reconciliation.mean_similarity
        print(
            f"   [{reconciliation.language}] {reconciliation.status.value}: "
            f"{reconciliation.resolved_count}/{len(reconciliation.subset)} resolved"
            + (f", mean similarity {mean:.3f}" if mean is not None else "")
        )
        for provider, error in reconciliation.provider_errors.items():
            print(f"       {provider}: {error}")

    if report.cancelled or report.timed_out:
        print(f"   Incomplete:    {report.incomplete_languages}")
    print("=" * 60)


async def run(args) -> int:
    try:
        corpus = read_corpus_csv(
            args.input,
            text_column=args.text_column,
            language_column=args.language_column,
            id_column=args.id_column,
            encoding=args.encoding,
            delimiter=args.delimiter,
        )
        annotator = LexiconSpellingAnnotator.from_file(args.vocabulary) if args.vocabulary else None
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read input: {e}")
        return EXIT_BAD_INPUT

    try:
        pipeline = NormalizationPipeline.from_settings(
            annotator=annotator,
            target_language=args.target,
            policy=create_policy(args.policy, args.prefer or args.providers),
            similarity_fn=get_similarity_function(args.similarity),
            max_concurrency=args.concurrency,
            timeout=args.timeout,
            adapters=create_adapters(args.providers, settings),
        )
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_NO_PROVIDER

    try:
        try:
            partition = pipeline.partitioner.partition(corpus, pipeline.target_language)
        except ValueError as e:
            logger.error(str(e))
            return EXIT_BAD_INPUT

        languages = list(partition.foreign)
        errors = pipeline.preflight(languages)
        if languages and all(len(errors.get(lang, {})) == len(pipeline.adapters) for lang in languages):
            logger.error("No usable translation provider; set DEEPL_API_KEY and/or GOOGLE_API_KEY")
            return EXIT_NO_PROVIDER

        report = await pipeline.run(corpus)
    finally:
        await pipeline.aclose()

    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else input_path.with_name(
        f"{input_path.stem}_{pipeline.target_language}.csv"
    )
    write_merged_csv(output_path, report.records, encoding=args.encoding, delimiter=args.delimiter)

    if args.report:
        data = report.to_dict(include_results=args.include_results)
        data["low_agreement"] = report.low_agreement(settings.low_agreement_threshold)
        report_path = Path(args.report)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info(f"Report written to {report_path}")

    print_summary(report, output_path)
    return EXIT_OK


def main() -> int:
    args = build_parser().parse_args()
    set_log_level(args.log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
