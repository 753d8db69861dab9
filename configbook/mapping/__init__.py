"""
Mapping package: schema resolution, value coercion, lookups and remapping.
"""

from configbook.mapping.lookup import LookupResolver
from configbook.mapping.mapper import FieldRemapper
from configbook.mapping.schema import (
    default_mapping,
    load_structured_text,
    parse_schema_text,
    resolve_schema,
)
from configbook.mapping.validator import validate_request

__all__ = [
    "FieldRemapper",
    "LookupResolver",
    "default_mapping",
    "load_structured_text",
    "parse_schema_text",
    "resolve_schema",
    "validate_request",
]
