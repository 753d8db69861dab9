"""
Tabular extractor: cut a rectangular table out of a spreadsheet sheet and
render it as CSV text for the record normalizer.

Two orientations are supported:

* ``horizontal`` - sheet row 0 is the header, each further row is a record.
* ``vertical``   - each sheet row is a field (first cell = field name) and
  each further column is a record, so the sheet is transposed.

Both honour an inclusive column window (``col_start``..``col_end``) and make
sure every record carries a category column.
"""

from __future__ import annotations

import csv
import io
from typing import List, Optional, Sequence, Tuple

from openpyxl.utils import column_index_from_string

from configbook.errors import InputValidationError, ResolutionError
from configbook.extractors.excel.config import (
    COLUMN_LETTERS_RE,
    ExtractorConfig,
    DEFAULT_CONFIG,
)
from configbook.extractors.excel.data_cleaner import DataCleaner
from configbook.extractors.excel.reader import ExcelReader
from configbook.ir import DEFAULT_CATEGORY_COLUMN, Orientation, SpreadsheetSource
from configbook.logger import get_logger

logger = get_logger(__name__)


def _column_index(letters: Optional[str], default: int, bound: str) -> int:
    """Zero-based index of a column letter; unusable letters fall back to *default*."""
    if letters is None:
        return default
    text = letters.strip()
    if not COLUMN_LETTERS_RE.match(text):
        logger.warning("Ignoring invalid %s column %r, using default", bound, letters)
        return default
    try:
        return column_index_from_string(text.upper()) - 1
    except ValueError:
        logger.warning("Ignoring out-of-range %s column %r, using default", bound, letters)
        return default


def column_window(
    col_start: Optional[str],
    col_end: Optional[str],
    width: int,
) -> Tuple[int, int]:
    """
    Resolve an inclusive ``(start, end)`` zero-based column window for a
    sheet *width* columns wide. The end is clipped to the sheet width.
    """
    start = _column_index(col_start, 0, "start")
    end = _column_index(col_end, width - 1, "end")
    end = min(end, width - 1)
    if start > end:
        raise InputValidationError(
            f"Column window {col_start or 'A'}..{col_end or 'last'} selects no columns "
            f"(sheet is {width} columns wide)"
        )
    return start, end


def rows_to_csv(rows: Sequence[Sequence[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue()


class TabularExtractor:
    """
    Turn one :class:`SpreadsheetSource` into CSV rows.

    Typical use::

        extractor = TabularExtractor()
        text = extractor.to_csv(source, "configuration_item", "web")
    """

    def __init__(
        self,
        reader: Optional[ExcelReader] = None,
        cfg: ExtractorConfig = DEFAULT_CONFIG,
    ):
        self._cfg = cfg
        self._reader = reader or ExcelReader(cfg)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def to_csv(
        self,
        source: SpreadsheetSource,
        category_column: str = DEFAULT_CATEGORY_COLUMN,
        default_category: Optional[str] = None,
    ) -> str:
        return rows_to_csv(self.extract_rows(source, category_column, default_category))

    def extract_rows(
        self,
        source: SpreadsheetSource,
        category_column: str = DEFAULT_CATEGORY_COLUMN,
        default_category: Optional[str] = None,
    ) -> List[List[str]]:
        """Header row first, then one row per record."""
        with self._reader.open(source.path, source.password) as handle:
            rows = handle.read_rows(source.sheet)

        if not rows:
            raise ResolutionError(f"Sheet '{source.sheet}' has no rows")

        width = max(len(r) for r in rows)
        if width == 0:
            raise ResolutionError(f"Sheet '{source.sheet}' has no rows")
        start, end = column_window(source.col_start, source.col_end, width)

        if source.orientation == Orientation.VERTICAL:
            table = self._vertical(rows, width, start, end, source.headers,
                                   category_column, default_category)
        else:
            table = self._horizontal(rows, width, start, end, source.headers,
                                     category_column, default_category)

        if len(table) < 2:
            raise ResolutionError(
                f"Sheet '{source.sheet}' holds only a header row, no data"
            )
        logger.info(
            "Extracted %d records from sheet '%s' (%s, columns %d..%d)",
            len(table) - 1, source.sheet, source.orientation.value, start + 1, end + 1,
        )
        return table

    # ------------------------------------------------------------------
    # Orientations
    # ------------------------------------------------------------------

    def _has_category(self, names: Sequence[str], category_column: str) -> bool:
        return self._cfg.category_column in names or category_column in names

    def _horizontal(
        self,
        rows: List[List[str]],
        width: int,
        start: int,
        end: int,
        overrides: Sequence[str],
        category_column: str,
        default_category: Optional[str],
    ) -> List[List[str]]:
        headers = DataCleaner.pad_row(rows[0], width)[start:end + 1]
        for i, name in enumerate(overrides[:len(headers)]):
            headers[i] = name

        inject = not self._has_category(headers, category_column) and default_category is not None
        if inject:
            logger.debug("Injecting category column '%s'=%r", category_column, default_category)

        table = [[category_column] + headers if inject else headers]
        for row in rows[1:]:
            cells = DataCleaner.pad_row(row, width)[start:end + 1]
            if DataCleaner.is_blank_row(cells, self._cfg):
                continue
            table.append([default_category] + cells if inject else cells)
        return table

    def _vertical(
        self,
        rows: List[List[str]],
        width: int,
        start: int,
        end: int,
        overrides: Sequence[str],
        category_column: str,
        default_category: Optional[str],
    ) -> List[List[str]]:
        names: List[str] = []
        columns: List[List[str]] = []
        pending_overrides = iter(overrides)
        for row in rows:
            cells = DataCleaner.pad_row(row, width)[start:end + 1]
            name = cells[0].strip()
            if not name:
                continue
            override = next(pending_overrides, None)
            names.append(override if override else name)
            columns.append(cells[1:])

        inject = not self._has_category(names, category_column)
        table = [[category_column] + names if inject else list(names)]
        record_count = (end - start)
        for j in range(record_count):
            values = [col[j] for col in columns]
            if DataCleaner.is_blank_row(values, self._cfg):
                continue
            table.append([default_category or ""] + values if inject else values)
        return table
