"""
DataCleaner: cell-level normalisation for the spreadsheet pipeline.

Responsibilities:
- Cell-level string conversion (``cell_to_str``)
- Empty-cell and blank-row detection
- Rectangular padding of ragged rows
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, List, Sequence

import pandas as pd

from configbook.extractors.excel.config import ExtractorConfig, DEFAULT_CONFIG


class DataCleaner:
    """Stateless helper that turns raw cell values into clean strings."""

    # ----- cell → string ---------------------------------------------------

    @staticmethod
    def is_empty(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, float) and pd.isna(value):
            return True
        return str(value).strip() == ""

    @staticmethod
    def cell_to_str(value: Any, cfg: ExtractorConfig = DEFAULT_CONFIG) -> str:
        """Convert an arbitrary cell value to the text a spreadsheet would show."""
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, bool):
            return cfg.true_text if value else cfg.false_text
        if isinstance(value, float):
            if pd.isna(value):
                return ""
            if value.is_integer():
                return str(int(value))
            return repr(value)
        if isinstance(value, int):
            return str(value)
        if isinstance(value, pd.Timestamp):
            if pd.isna(value):
                return ""
            value = value.to_pydatetime()
        if isinstance(value, datetime):
            if value.time() == time(0, 0):
                return value.date().isoformat()
            return value.isoformat(sep=" ", timespec="seconds")
        if isinstance(value, (date, time)):
            return value.isoformat()
        # Rich-text objects from openpyxl may expose .plain or .text
        plain_attr = getattr(value, "plain", None)
        if isinstance(plain_attr, str):
            return plain_attr.strip()
        text_attr = getattr(value, "text", None)
        if isinstance(text_attr, str):
            return text_attr.strip()
        text = str(value).strip()
        if text.lower() in {"nan", "none", "nat"}:
            return ""
        return text

    # ----- rows -------------------------------------------------------------

    @staticmethod
    def is_blank_row(cells: Sequence[str], cfg: ExtractorConfig = DEFAULT_CONFIG) -> bool:
        """True when the row holds nothing but separators, brackets and quotes."""
        return "".join(cells).strip(cfg.blank_row_chars) == ""

    @staticmethod
    def pad_row(cells: Sequence[str], width: int) -> List[str]:
        """Return *cells* truncated or right-padded with ``""`` to *width*."""
        row = list(cells[:width])
        if len(row) < width:
            row.extend([""] * (width - len(row)))
        return row
