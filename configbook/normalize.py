"""
Normalize Layer
===============

Turns CSV text into raw records.

RecordNormalizer – CSV text (first line = header) → List[Dict[str, str]]
category_values  – first-seen ordered unique values of the category column
"""

from __future__ import annotations

import csv
import io
from typing import Dict, Iterable, List

from configbook.errors import ParseError
from configbook.logger import get_logger

logger = get_logger(__name__)

RawRecord = Dict[str, str]


# ---------------------------------------------------------------------------
# RecordNormalizer
# ---------------------------------------------------------------------------

class RecordNormalizer:
    """
    Parse comma separated text into flat string-keyed records.

    Blank lines are ignored; quoted fields may contain commas, quotes and
    newlines. An unterminated quote or a row whose width differs from the
    header raises :class:`ParseError`.
    """

    @classmethod
    def parse(cls, text: str) -> List[RawRecord]:
        reader = csv.reader(io.StringIO(text or "", newline=""), strict=True)
        header: List[str] = []
        records: List[RawRecord] = []
        try:
            for row in reader:
                if not row:
                    continue
                if not header:
                    header = row
                    continue
                if len(row) != len(header):
                    raise ParseError(
                        f"record on line {reader.line_num}: wrong number of fields "
                        f"(expected {len(header)}, got {len(row)})"
                    )
                records.append(dict(zip(header, row)))
        except csv.Error as e:
            raise ParseError(f"malformed CSV on line {reader.line_num}: {e}") from e

        logger.debug("Parsed %d records with %d columns", len(records), len(header))
        return records


def parse_records(text: str) -> List[RawRecord]:
    """Module-level shortcut for :meth:`RecordNormalizer.parse`."""
    return RecordNormalizer.parse(text)


def category_values(records: Iterable[RawRecord], category_column: str) -> List[str]:
    """Unique values of *category_column* in first-seen order."""
    seen: Dict[str, None] = {}
    for record in records:
        if category_column in record:
            seen.setdefault(record[category_column], None)
    return list(seen)
