"""
FieldRemapper: turn raw records into typed output records.

For each record the category value selects the schema bucket; every column
is then resolved to a ``(target, type)`` pair, coerced, optionally replaced
through a lookup and checked against the inclusion filters.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from configbook.ir import (
    DEFAULT_CATEGORY_COLUMN,
    FieldType,
    FilterSpec,
    OutputRecord,
    SchemaMapping,
    TypedValue,
    ValueKind,
)
from configbook.logger import get_logger
from configbook.mapping.lookup import LookupResolver
from configbook.mapping.normalizer import (
    SCHEMA_PREFIX,
    coerce,
    match_convention,
    title_case_key,
)
from configbook.normalize import RawRecord

logger = get_logger(__name__)


class FieldRemapper:
    """
    Apply a :class:`SchemaMapping`, column conventions, lookups and filters.

    Args:
        schema: category → column → FieldSpec mapping
        category_column: column holding the category value
        filters: inclusion filters; an empty list keeps every record
        lookups: resolver for lookup-triggered columns (optional)
    """

    def __init__(
        self,
        schema: SchemaMapping,
        category_column: str = DEFAULT_CATEGORY_COLUMN,
        filters: Optional[List[FilterSpec]] = None,
        lookups: Optional[LookupResolver] = None,
    ):
        self.schema = schema
        self.category_column = category_column
        self.filters = list(filters or [])
        self.lookups = lookups

    def remap(self, records: List[RawRecord]) -> List[OutputRecord]:
        output = [self.remap_record(record) for record in records]
        kept = [record for record in output if record.included]
        if len(kept) != len(output):
            logger.info("Filters kept %d of %d records", len(kept), len(output))
        return kept

    def resolve_field(self, category: str, column: str) -> Tuple[str, FieldType]:
        """Target name and type of *column*; an empty name drops the field."""
        if column == self.category_column:
            return column, FieldType.STRING
        if column.startswith(SCHEMA_PREFIX):
            spec = self.schema.resolve(category, column)
            return spec.name, spec.kind
        convention = match_convention(column)
        if convention is not None:
            return convention
        return column, FieldType.STRING

    def remap_record(self, record: RawRecord) -> OutputRecord:
        category = record.get(self.category_column, "")
        out = OutputRecord(category=category, included=not self.filters)

        for column, raw in record.items():
            if self._passes_filters(column, raw):
                out.included = True

            target, field_type = self.resolve_field(category, column)
            if not target:
                continue
            if self.filters and target != column and self._passes_filters(target, raw):
                out.included = True

            if field_type == FieldType.TAG:
                out.tags[title_case_key(target)] = raw
                continue

            value = coerce(raw, field_type)
            if (
                self.lookups is not None
                and value.kind == ValueKind.STRING
                and self.lookups.handles(target)
            ):
                value = TypedValue(ValueKind.STRING, self.lookups.resolve(target, value.value))
            out.fields[target] = value

        return out

    def _passes_filters(self, name: str, raw: str) -> bool:
        return any(f.matches(name, raw) for f in self.filters)
