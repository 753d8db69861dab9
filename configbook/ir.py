"""
Intermediate Representation Module
==================================

Typed structures shared by the remapping pipeline: the request side
(sources, filters, lookups, schema mapping) is decoded once by pydantic at
the boundary; the output side (typed values, records, document) is built by
the remapper and consumed by the serializer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_CATEGORY_COLUMN = "configuration_item"


# ---------------------------------------------------------------------------
# Request side
# ---------------------------------------------------------------------------

class Orientation(str, Enum):
    """Whether sheet rows (horizontal) or sheet columns (vertical) are records."""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and v.strip() == "":
        return None
    return v


class SpreadsheetSource(BaseModel):
    """
    A sheet inside a workbook file, plus how to cut a table out of it.

    Attributes:
        path: workbook file (.xlsx / .xlsm / .xls)
        sheet: worksheet name
        password: optional password of an encrypted workbook
        col_start / col_end: inclusive column window as letters ("A", "AB")
        headers: header names overriding the sheet's own, positionally
        orientation: horizontal (rows are records) or vertical
    """
    path: str
    sheet: str
    password: Optional[str] = None
    col_start: Optional[str] = None
    col_end: Optional[str] = None
    headers: List[str] = Field(default_factory=list)
    orientation: Orientation = Orientation.HORIZONTAL

    @field_validator("password", "col_start", "col_end", mode="before")
    @classmethod
    def _optional_strings(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("orientation", mode="before")
    @classmethod
    def _orientation_lower(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return Orientation.HORIZONTAL
        if isinstance(v, str):
            return v.strip().lower()
        return v


class FilterSpec(BaseModel):
    """Keep records whose ``name`` column holds one of ``values``."""
    name: str
    values: List[str] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def _values_as_strings(cls, v: Any) -> Any:
        if isinstance(v, list):
            return ["" if item is None else str(item) for item in v]
        return v

    def matches(self, column: str, value: str) -> bool:
        return self.name == column and value in self.values


class LookupSpec(BaseModel):
    """
    Replace the value of ``column`` with values taken from a key/value source.

    Exactly one source type is expected: inline ``json``, inline ``yaml``,
    inline ``ini`` (with ``section``) or a worksheet (``worksheet`` and/or
    ``excel``; both default to the main spreadsheet). The check lives in
    :mod:`configbook.mapping.validator`.
    """
    column: str
    key_column: str
    value_column: str
    json_text: Optional[str] = Field(default=None, alias="json")
    yaml_text: Optional[str] = Field(default=None, alias="yaml")
    ini_text: Optional[str] = Field(default=None, alias="ini")
    section: Optional[str] = None
    worksheet: Optional[str] = None
    excel: Optional[str] = None
    password: Optional[str] = None

    @field_validator(
        "json_text", "yaml_text", "ini_text", "section",
        "worksheet", "excel", "password",
        mode="before",
    )
    @classmethod
    def _optional_strings(cls, v: Any) -> Any:
        return _blank_to_none(v)

    def source_kinds(self) -> List[str]:
        kinds = []
        if self.json_text is not None:
            kinds.append("json")
        if self.yaml_text is not None:
            kinds.append("yaml")
        if self.ini_text is not None:
            kinds.append("ini")
        if self.worksheet is not None or self.excel is not None:
            kinds.append("worksheet")
        return kinds

    class Config:
        populate_by_name = True


class RemapRequest(BaseModel):
    """
    Everything one remap call consumes.

    ``orientation`` describes the source as a whole; only spreadsheets may be
    vertical, which :mod:`configbook.mapping.validator` enforces.
    """
    csv_text: Optional[str] = Field(default=None, alias="csv")
    spreadsheet: Optional[SpreadsheetSource] = None
    schema_text: Optional[str] = Field(default=None, alias="schema")
    orientation: Optional[Orientation] = None
    category_column: str = DEFAULT_CATEGORY_COLUMN
    default_category: Optional[str] = None
    filters: List[FilterSpec] = Field(default_factory=list)
    lookups: List[LookupSpec] = Field(default_factory=list)

    @field_validator("csv_text", "schema_text", "default_category", mode="before")
    @classmethod
    def _optional_strings(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("category_column", mode="before")
    @classmethod
    def _default_category_column(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_CATEGORY_COLUMN
        return v

    @field_validator("orientation", mode="before")
    @classmethod
    def _orientation_lower(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @model_validator(mode="after")
    def _apply_orientation(self) -> "RemapRequest":
        # A request-level orientation overrides the spreadsheet's own.
        if self.orientation is not None and self.spreadsheet is not None:
            self.spreadsheet = self.spreadsheet.model_copy(
                update={"orientation": self.orientation}
            )
        return self

    class Config:
        populate_by_name = True


# ---------------------------------------------------------------------------
# Schema mapping
# ---------------------------------------------------------------------------

class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    LIST = "list"
    MAP = "map"
    TAG = "tag"
    PASSTHROUGH = "passthrough"


_TYPE_ALIASES: Dict[str, FieldType] = {
    "string": FieldType.STRING,
    "number": FieldType.NUMBER,
    "numeric": FieldType.NUMBER,
    "boolean": FieldType.BOOLEAN,
    "bool": FieldType.BOOLEAN,
    "list": FieldType.LIST,
    "map": FieldType.MAP,
    "hash": FieldType.MAP,
    "tag": FieldType.TAG,
}


def field_type_of(type_name: Optional[str]) -> FieldType:
    """Map a declared type name to a :class:`FieldType`; unknown names pass through."""
    if type_name is None:
        return FieldType.STRING
    return _TYPE_ALIASES.get(type_name, FieldType.PASSTHROUGH)


class FieldSpec(BaseModel):
    """
    Target of one source column: a name and a declared type.

    In a schema document a bare string is shorthand for ``{name: <string>}``
    and ``null`` means "drop this column" (empty name).
    """
    name: str = ""
    type: str = "string"

    @model_validator(mode="before")
    @classmethod
    def _from_shorthand(cls, data: Any) -> Any:
        if data is None:
            return {"name": ""}
        if isinstance(data, (str, int, float, bool)):
            return {"name": str(data)}
        if isinstance(data, dict):
            out = dict(data)
            name = out.get("name")
            out["name"] = "" if name is None else str(name)
            type_name = out.get("type")
            out["type"] = "string" if type_name is None else str(type_name)
            return out
        return data

    @property
    def kind(self) -> FieldType:
        return field_type_of(self.type)


class SchemaMapping(BaseModel):
    """Category key -> source column -> :class:`FieldSpec`."""
    categories: Dict[str, Dict[str, FieldSpec]] = Field(default_factory=dict)

    def resolve(self, category: str, column: str) -> FieldSpec:
        """Return the spec for *column* under *category*, or a verbatim string spec."""
        columns = self.categories.get(category)
        if columns is None or column not in columns:
            return FieldSpec(name=column, type="string")
        return columns[column]


# ---------------------------------------------------------------------------
# Output side
# ---------------------------------------------------------------------------

class ValueKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    LIST = "list"
    MAP = "map"


@dataclass(frozen=True)
class TypedValue:
    """A coerced field value tagged with its kind."""
    kind: ValueKind
    value: Any

    def to_plain(self) -> Any:
        """Render as plain Python data for the serializer."""
        if self.kind == ValueKind.NUMBER:
            number = float(self.value)
            if number.is_integer():
                return int(number)
            return number
        if self.kind == ValueKind.LIST:
            return list(self.value)
        if self.kind == ValueKind.MAP:
            return dict(self.value)
        return self.value


@dataclass
class OutputRecord:
    """One remapped row: typed fields in column order plus the tag set."""
    category: str
    fields: Dict[str, TypedValue] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)
    included: bool = True

    def to_plain(self, exclude: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        for name, value in self.fields.items():
            if exclude is not None and name == exclude:
                continue
            body[name] = value.to_plain()
        body["tags"] = dict(self.tags)
        return body


@dataclass
class OutputDocument:
    """Records grouped by category, in first-seen category order."""
    groups: Dict[str, List[OutputRecord]] = field(default_factory=dict)
    category_column: str = DEFAULT_CATEGORY_COLUMN
    synthetic: bool = False

    def to_plain(self) -> Dict[str, List[Dict[str, Any]]]:
        # A synthetic group keeps the raw category field in each record body.
        exclude = None if self.synthetic else self.category_column
        return {
            name: [record.to_plain(exclude=exclude) for record in records]
            for name, records in self.groups.items()
        }
