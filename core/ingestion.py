"""
Corpus ingestion and export.

Reads a delimited text file into Records (text and language columns mapped
explicitly, every other column kept as metadata) and writes a merged corpus
back out with its provenance columns.
"""

import csv
import json
from pathlib import Path
from typing import List, Optional, Sequence, Union

from config.constants import CSV_DEFAULT_DELIMITER, CSV_DEFAULT_ENCODING
from config.logging_config import get_logger
from .records import MergedRecord, Record

logger = get_logger(__name__)

PathLike = Union[str, Path]

MERGED_COLUMNS = [
    "id",
    "text",
    "language",
    "source_language",
    "translation_provider",
    "original_text",
]


def read_corpus_csv(
    path: PathLike,
    text_column: str,
    language_column: str,
    id_column: Optional[str] = None,
    encoding: str = CSV_DEFAULT_ENCODING,
    delimiter: str = CSV_DEFAULT_DELIMITER
) -> List[Record]:
    """
    Read a corpus from a delimited file.

    Args:
        path: Input file
        text_column: Column holding the post text
        language_column: Column holding the language tag
        id_column: Column holding a stable id; row numbers (1-based) when None
        encoding: File encoding (``utf-8-sig`` strips a BOM)
        delimiter: Field delimiter

    Returns:
        Records in file order

    Raises:
        ValueError: Missing columns or duplicate ids
    """
    path = Path(path)
    records: List[Record] = []
    seen = set()

    with open(path, "r", encoding=encoding, newline="") as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        columns = reader.fieldnames or []

        required = [text_column, language_column] + ([id_column] if id_column else [])
        missing = [c for c in required if c not in columns]
        if missing:
            raise ValueError(f"{path}: missing columns {missing} (found {columns})")

        mapped = set(required)
        for row_number, row in enumerate(reader, start=1):
            record_id = row[id_column] if id_column else str(row_number)
            if record_id in seen:
                raise ValueError(f"{path}: duplicate id {record_id!r} on row {row_number}")
            seen.add(record_id)

            records.append(Record(
                id=record_id,
                text=row.get(text_column) or "",
                language=row.get(language_column),
                metadata={k: v for k, v in row.items() if k not in mapped and k is not None},
            ))

    logger.info(f"Read {len(records)} records from {path}")
    return records


def write_merged_csv(
    path: PathLike,
    records: Sequence[MergedRecord],
    encoding: str = CSV_DEFAULT_ENCODING,
    delimiter: str = CSV_DEFAULT_DELIMITER
) -> Path:
    """
    Write a merged corpus.

    Metadata columns follow the provenance columns (first-seen order);
    annotations, when present, are written as one JSON column.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    metadata_columns: List[str] = []
    for record in records:
        for key in record.metadata:
            if key not in metadata_columns and key not in MERGED_COLUMNS:
                metadata_columns.append(key)
    has_annotations = any(record.annotations for record in records)

    fieldnames = MERGED_COLUMNS + metadata_columns + (["annotations"] if has_annotations else [])

    with open(path, "w", encoding=encoding, newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, delimiter=delimiter)
        writer.writeheader()
        for record in records:
            row = {column: getattr(record, column) for column in MERGED_COLUMNS}
            row.update({k: record.metadata.get(k, "") for k in metadata_columns})
            if has_annotations:
                row["annotations"] = json.dumps(dict(record.annotations), ensure_ascii=False)
            writer.writerow(row)

    logger.info(f"Wrote {len(records)} merged records to {path}")
    return path
