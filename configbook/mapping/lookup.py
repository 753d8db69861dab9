"""
LookupResolver: replace field values with values from key/value sources.

Each :class:`LookupSpec` names a trigger column and one source:

* inline JSON / YAML object  – token is looked up as an object key
* inline INI + section       – token is looked up as a key of the section
* worksheet                  – rows of a sheet; the ``key_column`` cell is
  matched against the token and the ``value_column`` cell returned. The
  workbook file, its password and the sheet name default to the main
  spreadsheet of the call.

Values are comma separated token lists; every token is resolved on its own
and the results re-joined with ``,``. A token that cannot be resolved
contributes an empty string.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from configbook.errors import ParseError, RemapError
from configbook.extractors.excel.reader import ExcelReader
from configbook.ini import parse_ini
from configbook.ir import LookupSpec
from configbook.logger import get_logger
from configbook.mapping.schema import load_structured_text

logger = get_logger(__name__)

LookupTable = Dict[str, str]


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class LookupResolver:
    """
    Per-call resolver. Inline sources are decoded up front (a malformed one
    fails the call); worksheet sources are read on first use and cached.
    """

    def __init__(
        self,
        lookups: List[LookupSpec],
        default_excel: Optional[str] = None,
        default_password: Optional[str] = None,
        default_worksheet: Optional[str] = None,
        reader: Optional[ExcelReader] = None,
    ):
        self._specs: Dict[str, LookupSpec] = {spec.column: spec for spec in lookups}
        self._default_excel = default_excel
        self._default_password = default_password
        self._default_worksheet = default_worksheet
        self._reader = reader or ExcelReader()
        self._tables: Dict[str, LookupTable] = {}
        self._sheets: Dict[Tuple[str, str, Optional[str]], Optional[List[List[str]]]] = {}

        for column, spec in self._specs.items():
            if spec.json_text is not None:
                self._tables[column] = self._inline_table(spec.json_text, column, "json")
            elif spec.yaml_text is not None:
                self._tables[column] = self._inline_table(spec.yaml_text, column, "yaml")
            elif spec.ini_text is not None:
                sections = parse_ini(spec.ini_text)
                self._tables[column] = dict(sections.get(spec.section or "", {}))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def handles(self, column: str) -> bool:
        return column in self._specs

    def resolve(self, column: str, value: str) -> str:
        """Resolve every comma separated token of *value* and re-join them."""
        return ",".join(self.resolve_token(column, token) for token in value.split(","))

    def resolve_token(self, column: str, token: str) -> str:
        table = self._table_for(column)
        if token in table:
            return table[token]
        logger.warning("Lookup for column '%s' found no value for %r", column, token)
        return ""

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    @staticmethod
    def _inline_table(text: str, column: str, kind: str) -> LookupTable:
        data = load_structured_text(text)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ParseError(f"{kind} lookup source for column '{column}' must be an object")
        return {_scalar_text(k): _scalar_text(v) for k, v in data.items()}

    def _table_for(self, column: str) -> LookupTable:
        if column in self._tables:
            return self._tables[column]
        spec = self._specs.get(column)
        table: LookupTable = {}
        if spec is not None and "worksheet" in spec.source_kinds():
            table = self._worksheet_table(spec)
        self._tables[column] = table
        return table

    def _worksheet_table(self, spec: LookupSpec) -> LookupTable:
        path = spec.excel or self._default_excel
        sheet = spec.worksheet or self._default_worksheet
        password = spec.password or self._default_password
        if not path or not sheet:
            logger.warning(
                "Lookup for column '%s' has no workbook or worksheet to read", spec.column
            )
            return {}

        rows = self._read_sheet(path, sheet, password)
        if not rows:
            return {}

        header = rows[0]
        if spec.key_column not in header or spec.value_column not in header:
            logger.warning(
                "Lookup sheet '%s' lacks column '%s' or '%s'",
                sheet, spec.key_column, spec.value_column,
            )
            return {}
        key_idx = header.index(spec.key_column)
        value_idx = header.index(spec.value_column)

        table: LookupTable = {}
        for row in rows[1:]:
            if key_idx >= len(row):
                continue
            table[row[key_idx]] = row[value_idx] if value_idx < len(row) else ""
        logger.debug("Loaded %d lookup rows for '%s' from %s!%s", len(table), spec.column, path, sheet)
        return table

    def _read_sheet(self, path: str, sheet: str, password: Optional[str]) -> Optional[List[List[str]]]:
        cache_key = (path, sheet, password)
        if cache_key not in self._sheets:
            try:
                self._sheets[cache_key] = self._reader.read_sheet(path, sheet, password)
            except RemapError as e:
                logger.warning("Lookup sheet %s!%s could not be read: %s", path, sheet, e)
                self._sheets[cache_key] = None
        return self._sheets[cache_key]
