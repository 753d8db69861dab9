"""
SchemaResolver: produce the category → column → FieldSpec mapping.

Either decoded from an authored schema document (YAML, or JSON when the
text is not YAML) or synthesised from the observed records so that
``attr*`` columns always resolve to something deterministic.

Accepted document shapes::

    config_schema:            # optional wrapper key
      web:                    # category value
        attr1: hostname       # bare name, type string
        attr2:
          name: port
          type: number
        attr3: ~              # dropped
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from configbook.errors import ParseError
from configbook.ir import FieldSpec, SchemaMapping
from configbook.logger import get_logger
from configbook.normalize import RawRecord, category_values

logger = get_logger(__name__)

SCHEMA_ROOT_KEYS = ("config_schema", "configuration_workbook_mapping")


def load_structured_text(text: str) -> Any:
    """Decode *text* as YAML, falling back to JSON."""
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as yaml_error:
        try:
            return json.loads(text)
        except ValueError:
            raise ParseError("unable to parse string using yaml or json") from yaml_error


def _as_key(value: Any) -> str:
    return "" if value is None else str(value)


def parse_schema_text(text: str) -> SchemaMapping:
    """Decode an authored schema document into a :class:`SchemaMapping`."""
    document = load_structured_text(text)
    if document is None:
        return SchemaMapping()
    if not isinstance(document, dict):
        raise ParseError(
            f"schema must be a mapping of categories, got {type(document).__name__}"
        )

    for root_key in SCHEMA_ROOT_KEYS:
        if root_key in document:
            document = document[root_key] or {}
            break
    if not isinstance(document, dict):
        raise ParseError("schema root must be a mapping of categories")

    categories: Dict[str, Dict[str, Any]] = {}
    for category, columns in document.items():
        if columns is None:
            columns = {}
        if not isinstance(columns, dict):
            raise ParseError(
                f"schema entry for category '{category}' must be a mapping of columns"
            )
        categories[_as_key(category)] = {_as_key(k): v for k, v in columns.items()}

    try:
        mapping = SchemaMapping.model_validate({"categories": categories})
    except ValidationError as e:
        raise ParseError(f"invalid schema: {e}") from e
    logger.debug("Loaded schema with categories %s", list(mapping.categories))
    return mapping


def default_mapping(
    records: List[RawRecord],
    category_column: str,
    default_category: Optional[str] = None,
) -> SchemaMapping:
    """
    Map every non-category column to itself as a string, per observed
    category (or one bucket named after the default category).
    """
    items = category_values(records, category_column)
    if not items:
        items = [default_category or category_column]

    columns: List[str] = []
    for record in records[:1]:
        columns = [c for c in record if c != category_column]

    categories = {
        item: {column: FieldSpec(name=column, type="string") for column in columns}
        for item in items
    }
    return SchemaMapping(categories=categories)


def resolve_schema(
    schema_text: Optional[str],
    records: List[RawRecord],
    category_column: str,
    default_category: Optional[str] = None,
) -> SchemaMapping:
    """Use the authored schema when given, otherwise the default mapping."""
    if schema_text:
        return parse_schema_text(schema_text)
    logger.debug("No schema supplied, using default mapping")
    return default_mapping(records, category_column, default_category)
