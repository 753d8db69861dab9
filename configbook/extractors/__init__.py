"""
Extractors turning spreadsheets into delimited text.

Provides:
- TabularExtractor: horizontal / vertical sheet extraction with a column window
- column_window: column-letter window resolution
"""

from configbook.extractors.excel_extractor import TabularExtractor, column_window, rows_to_csv

__all__ = [
    "TabularExtractor",
    "column_window",
    "rows_to_csv",
]
