"""
Pipeline: thin orchestrator that composes the extract → normalize → remap
→ aggregate layers.

build_request – keyword arguments → validated RemapRequest
run_remap     – RemapRequest → OutputDocument
remap_to_text – RemapRequest → serialized JSON / YAML text

Heavy lifting is delegated to:
  configbook.extractors – TabularExtractor (spreadsheet → CSV text)
  configbook.normalize  – RecordNormalizer (CSV text → raw records)
  configbook.mapping    – schema resolution, lookups, FieldRemapper
  configbook.aggregate  – grouping and serialization
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from configbook.aggregate import group_records, serialize
from configbook.config import get_settings
from configbook.errors import InputValidationError
from configbook.extractors.excel.reader import ExcelReader
from configbook.extractors.excel_extractor import TabularExtractor
from configbook.ini import ini_to_text
from configbook.ir import OutputDocument, RemapRequest
from configbook.logger import get_logger
from configbook.mapping.lookup import LookupResolver
from configbook.mapping.mapper import FieldRemapper
from configbook.mapping.schema import resolve_schema
from configbook.mapping.validator import validate_request
from configbook.normalize import category_values, parse_records

logger = get_logger(__name__)

__all__ = ["build_request", "run_remap", "remap_to_text", "ini_to_text"]


def build_request(**kwargs: Any) -> RemapRequest:
    """
    Decode keyword arguments (``csv``, ``spreadsheet``, ``schema``,
    ``filters``, ``lookups``, ...) into a :class:`RemapRequest`.
    """
    try:
        request = RemapRequest.model_validate(kwargs)
    except ValidationError as e:
        raise InputValidationError(f"invalid request: {e}") from e
    return validate_request(request)


def run_remap(request: RemapRequest, reader: Optional[ExcelReader] = None) -> OutputDocument:
    """
    Remap one request into a grouped document.

    Steps:
      1. Validate the request (before any source is touched)
      2. CSV text, inline or extracted from the spreadsheet
      3. RecordNormalizer → raw records
      4. Schema (authored or default) + lookups + filters → OutputRecords
      5. Group by category
    """
    validate_request(request)
    reader = reader or ExcelReader()
    sheet = request.spreadsheet

    # 1-2. Source
    if sheet is not None:
        text = TabularExtractor(reader=reader).to_csv(
            sheet, request.category_column, request.default_category
        )
    else:
        text = request.csv_text or ""

    # 3. Records
    records = parse_records(text)
    logger.info("run_remap: %d records", len(records))

    # 4. Remap
    schema = resolve_schema(
        request.schema_text, records, request.category_column, request.default_category
    )
    lookups = None
    if request.lookups:
        lookups = LookupResolver(
            request.lookups,
            default_excel=sheet.path if sheet else None,
            default_password=sheet.password if sheet else None,
            default_worksheet=sheet.sheet if sheet else None,
            reader=reader,
        )
    remapper = FieldRemapper(schema, request.category_column, request.filters, lookups)
    output = remapper.remap(records)

    # 5. Group
    document = group_records(
        output,
        category_values(records, request.category_column),
        request.category_column,
        request.default_category,
    )
    logger.info("run_remap: %d groups, %d records", len(document.groups), len(output))
    return document


def remap_to_text(request: RemapRequest, fmt: Optional[str] = None) -> str:
    """:func:`run_remap` followed by serialization (format defaults to settings)."""
    settings = get_settings()
    document = run_remap(request)
    return serialize(document, fmt or settings.OUTPUT_FORMAT, settings.OUTPUT_INDENT)
