"""
ExcelReader: low-level workbook I/O and sheet access.

Encapsulates:
- openpyxl vs xlrd engine selection by file suffix
- in-memory decryption of password protected workbooks (msoffcrypto)
- sheet lookup with a uniform "rows of strings" view
- guaranteed release of the workbook handle
"""

from __future__ import annotations

import io
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

import msoffcrypto
import xlrd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from configbook.errors import ParseError, ResolutionError
from configbook.extractors.excel.config import (
    ExtractorConfig,
    DEFAULT_CONFIG,
    OPENPYXL_SUFFIXES,
    XLRD_SUFFIXES,
)
from configbook.extractors.excel.data_cleaner import DataCleaner
from configbook.logger import get_logger

logger = get_logger(__name__)

Source = Union[str, io.BytesIO]


class WorkbookHandle:
    """
    An opened workbook. ``read_rows`` returns every row of a sheet as
    a list of cell strings; rows keep their own (ragged) length.
    """

    def __init__(self, file_path: str, book: Any, backend: str, cfg: ExtractorConfig):
        self.file_path = file_path
        self.backend = backend
        self._book = book
        self._cfg = cfg

    @property
    def sheet_names(self) -> List[str]:
        if self.backend == "xlrd":
            return list(self._book.sheet_names())
        return list(self._book.sheetnames)

    def read_rows(self, sheet_name: str) -> List[List[str]]:
        names = self.sheet_names
        if sheet_name not in names:
            raise ResolutionError(
                f"Sheet '{sheet_name}' not found in {Path(self.file_path).name}. "
                f"Available sheets: {names}"
            )
        if self.backend == "xlrd":
            return self._read_rows_xlrd(sheet_name)
        return self._read_rows_openpyxl(sheet_name)

    def close(self) -> None:
        if self.backend == "xlrd":
            self._book.release_resources()
        else:
            self._book.close()

    # ------------------------------------------------------------------

    def _read_rows_openpyxl(self, sheet_name: str) -> List[List[str]]:
        ws = self._book[sheet_name]
        rows: List[List[str]] = []
        for row in ws.iter_rows(values_only=True):
            cells = [DataCleaner.cell_to_str(c, self._cfg) for c in (row or ())]
            while cells and cells[-1] == "":
                cells.pop()
            rows.append(cells)
        while rows and not rows[-1]:
            rows.pop()
        return rows

    def _read_rows_xlrd(self, sheet_name: str) -> List[List[str]]:
        ws = self._book.sheet_by_name(sheet_name)
        rows: List[List[str]] = []
        for ri in range(ws.nrows):
            cells = []
            for ci in range(ws.ncols):
                cell = ws.cell(ri, ci)
                value = cell.value
                if cell.ctype == xlrd.XL_CELL_DATE:
                    value = xlrd.xldate.xldate_as_datetime(value, self._book.datemode)
                elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                    value = bool(value)
                elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
                    value = None
                cells.append(DataCleaner.cell_to_str(value, self._cfg))
            while cells and cells[-1] == "":
                cells.pop()
            rows.append(cells)
        while rows and not rows[-1]:
            rows.pop()
        return rows


class ExcelReader:
    """
    Open workbooks with the right engine and hand out :class:`WorkbookHandle`
    objects that are always closed by the ``open`` context manager.
    """

    def __init__(self, cfg: ExtractorConfig = DEFAULT_CONFIG):
        self._cfg = cfg

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @contextmanager
    def open(self, file_path: str, password: Optional[str] = None) -> Iterator[WorkbookHandle]:
        """Open *file_path* (decrypting with *password* when given) for the block."""
        handle = self._open_handle(file_path, password)
        try:
            yield handle
        finally:
            try:
                handle.close()
            except Exception as e:
                logger.debug("Closing %s failed: %s", file_path, e)

    def read_sheet(
        self,
        file_path: str,
        sheet_name: str,
        password: Optional[str] = None,
    ) -> List[List[str]]:
        """Convenience wrapper: open, read one sheet, close."""
        with self.open(file_path, password) as handle:
            return handle.read_rows(sheet_name)

    def list_sheet_names(self, file_path: str, password: Optional[str] = None) -> List[str]:
        with self.open(file_path, password) as handle:
            return handle.sheet_names

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _open_handle(self, file_path: str, password: Optional[str]) -> WorkbookHandle:
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise ParseError(f"Spreadsheet not found or unreadable: {file_path}")

        suffix = path.suffix.lower()
        if suffix not in XLRD_SUFFIXES and suffix not in OPENPYXL_SUFFIXES:
            raise ParseError(f"Unsupported spreadsheet type '{suffix}': {file_path}")

        source: Source = str(path)
        if password:
            source = self._decrypt(str(path), password)

        if suffix in XLRD_SUFFIXES:
            return self._open_xlrd(str(path), source)
        return self._open_openpyxl(str(path), source)

    @staticmethod
    def _decrypt(file_path: str, password: str) -> Source:
        """Return a decrypted in-memory copy, or the path if not encrypted."""
        try:
            with open(file_path, "rb") as fh:
                office = msoffcrypto.OfficeFile(fh)
                if not office.is_encrypted():
                    logger.debug("Password given but %s is not encrypted", file_path)
                    return file_path
                office.load_key(password=password)
                decrypted = io.BytesIO()
                office.decrypt(decrypted)
        except OSError as e:
            raise ParseError(f"Unable to read spreadsheet {file_path}: {e}") from e
        except Exception as e:
            raise ParseError(
                f"Unable to decrypt spreadsheet {file_path} (wrong password?): {e}"
            ) from e
        decrypted.seek(0)
        logger.debug("Decrypted %s in memory", file_path)
        return decrypted

    def _open_openpyxl(self, file_path: str, source: Source) -> WorkbookHandle:
        try:
            wb = load_workbook(source, data_only=True, read_only=False)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            raise ParseError(f"Unable to open spreadsheet {file_path}: {e}") from e
        return WorkbookHandle(file_path, wb, "openpyxl", self._cfg)

    def _open_xlrd(self, file_path: str, source: Source) -> WorkbookHandle:
        try:
            if isinstance(source, io.BytesIO):
                wb = xlrd.open_workbook(file_contents=source.getvalue())
            else:
                wb = xlrd.open_workbook(source)
        except (xlrd.XLRDError, OSError) as e:
            raise ParseError(f"Unable to open spreadsheet {file_path}: {e}") from e
        return WorkbookHandle(file_path, wb, "xlrd", self._cfg)
