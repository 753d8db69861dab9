"""
Value coercion and column-name conventions for the field remapper.
"""

import math
import re
from typing import Dict, List, Optional, Tuple

from configbook.ir import FieldType, TypedValue, ValueKind

# Longest alias first so "numeric_" wins over "num_" / "n_".
CONVENTION_PREFIXES: Tuple[Tuple[str, FieldType], ...] = (
    ("string_", FieldType.STRING),
    ("s_", FieldType.STRING),
    ("numeric_", FieldType.NUMBER),
    ("number_", FieldType.NUMBER),
    ("num_", FieldType.NUMBER),
    ("n_", FieldType.NUMBER),
    ("boolean_", FieldType.BOOLEAN),
    ("bool_", FieldType.BOOLEAN),
    ("b_", FieldType.BOOLEAN),
    ("list_", FieldType.LIST),
    ("l_", FieldType.LIST),
    ("hash_", FieldType.MAP),
    ("map_", FieldType.MAP),
    ("h_", FieldType.MAP),
    ("m_", FieldType.MAP),
    ("tag_", FieldType.TAG),
    ("t_", FieldType.TAG),
)

SCHEMA_PREFIX = "attr"

_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_WORD_START_RE = re.compile(r"(?<!\w)\w")

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})


def match_convention(column: str) -> Optional[Tuple[str, FieldType]]:
    """Return ``(target_name, type)`` when *column* carries a type prefix."""
    for prefix, field_type in CONVENTION_PREFIXES:
        if column.startswith(prefix) and len(column) > len(prefix):
            return column[len(prefix):], field_type
    return None


def title_case_key(name: str) -> str:
    """Upper-case the first letter of every word; ``_`` and digits join words."""
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), name)


# ---------------------------------------------------------------------------
# Scalar parsers
# ---------------------------------------------------------------------------

def parse_number(text: str) -> float:
    """Decimal float; anything unparsable (including empty) is 0."""
    if not _DECIMAL_RE.match(text):
        return 0.0
    value = float(text)
    if not math.isfinite(value):
        return 0.0
    return value


def parse_bool(text: str) -> bool:
    """Accepts 1/t/true forms; everything else, including empty, is False."""
    return text in _TRUE_WORDS


def split_list(text: str) -> List[str]:
    if text == "":
        return []
    return text.split(",")


def split_map(text: str) -> Dict[str, str]:
    """``"x=1,y=2"`` → ``{"x": "1", "y": "2"}``; split on the first ``=``."""
    result: Dict[str, str] = {}
    if text == "":
        return result
    for item in text.split(","):
        if item == "":
            continue
        key, _, value = item.partition("=")
        result[key] = value
    return result


def coerce(text: str, field_type: FieldType) -> TypedValue:
    """Coerce a raw cell into a typed value (``tag`` is handled by the caller)."""
    if field_type == FieldType.NUMBER:
        return TypedValue(ValueKind.NUMBER, parse_number(text))
    if field_type == FieldType.BOOLEAN:
        return TypedValue(ValueKind.BOOLEAN, parse_bool(text))
    if field_type == FieldType.LIST:
        return TypedValue(ValueKind.LIST, split_list(text))
    if field_type == FieldType.MAP:
        return TypedValue(ValueKind.MAP, split_map(text))
    return TypedValue(ValueKind.STRING, text)
