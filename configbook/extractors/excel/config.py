"""
Centralised configuration for the spreadsheet extraction layer.

Character sets, regex patterns and suffix tables live here so that the
reader and the extractor stay free of hard-coded values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet


# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (shared across modules)
# ---------------------------------------------------------------------------

COLUMN_LETTERS_RE = re.compile(r"^[A-Za-z]{1,3}$")


# ---------------------------------------------------------------------------
# File-format tables
# ---------------------------------------------------------------------------

XLRD_SUFFIXES: FrozenSet[str] = frozenset({".xls"})
OPENPYXL_SUFFIXES: FrozenSet[str] = frozenset({".xlsx", ".xlsm", ".xltx", ".xltm"})


# ---------------------------------------------------------------------------
# ExtractorConfig: tunables
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExtractorConfig:
    """Immutable bag of tunables used by the tabular extractor."""

    # A row counts as blank when nothing but these characters remains.
    blank_row_chars: str = " \t\r\n,[]\"'"

    # Header name that always marks an existing category column.
    category_column: str = "configuration_item"

    # Booleans are rendered the way spreadsheet applications display them.
    true_text: str = "TRUE"
    false_text: str = "FALSE"


# Singleton default config
DEFAULT_CONFIG = ExtractorConfig()
