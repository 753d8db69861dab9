"""
Aggregation and serialization of remapped records.

group_records – OutputRecords → OutputDocument grouped by category value
serialize     – OutputDocument → JSON or YAML text
"""

from __future__ import annotations

import json
from typing import List, Optional

import yaml

from configbook.errors import InputValidationError
from configbook.ir import DEFAULT_CATEGORY_COLUMN, OutputDocument, OutputRecord
from configbook.logger import get_logger

logger = get_logger(__name__)

OUTPUT_FORMATS = ("json", "yaml")


def group_records(
    records: List[OutputRecord],
    categories: List[str],
    category_column: str = DEFAULT_CATEGORY_COLUMN,
    default_category: Optional[str] = None,
) -> OutputDocument:
    """
    Group *records* by category in the order of *categories*.

    A category whose records were all filtered out gets no group. Without
    any observed category every record lands in one group named after the
    default category (or the category column) and keeps its raw fields.
    """
    if not categories:
        name = default_category or category_column
        logger.debug("No category values observed, grouping under '%s'", name)
        return OutputDocument(
            groups={name: list(records)},
            category_column=category_column,
            synthetic=True,
        )

    document = OutputDocument(category_column=category_column)
    for category in categories:
        members = [record for record in records if record.category == category]
        if members:
            document.groups[category] = members
    return document


def serialize(document: OutputDocument, fmt: str = "json", indent: Optional[int] = 2) -> str:
    data = document.to_plain()
    fmt = (fmt or "json").lower()
    if fmt == "json":
        return json.dumps(data, indent=indent, ensure_ascii=False)
    if fmt == "yaml":
        return yaml.safe_dump(
            data,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            indent=indent or 2,
        )
    raise InputValidationError(
        f"unsupported output format '{fmt}' (expected one of {', '.join(OUTPUT_FORMATS)})"
    )
