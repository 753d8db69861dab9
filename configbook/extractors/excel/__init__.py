"""
Spreadsheet extraction subpackage.

Public API:
  - ExcelReader            (file I/O, engine selection, decryption)
  - WorkbookHandle         (opened workbook, rows of strings per sheet)
  - DataCleaner            (cell/value normalisation)
  - ExtractorConfig        (tunables)
"""

from configbook.extractors.excel.config import ExtractorConfig, DEFAULT_CONFIG
from configbook.extractors.excel.data_cleaner import DataCleaner
from configbook.extractors.excel.reader import ExcelReader, WorkbookHandle

__all__ = [
    "ExtractorConfig",
    "DEFAULT_CONFIG",
    "DataCleaner",
    "ExcelReader",
    "WorkbookHandle",
]
