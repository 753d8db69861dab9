import pytest

from configbook.errors import ParseError
from configbook.ir import FieldSpec, FieldType
from configbook.mapping.schema import (
    default_mapping,
    load_structured_text,
    parse_schema_text,
    resolve_schema,
)
from configbook.normalize import parse_records


SCHEMA_YAML = """
config_schema:
  web:
    attr1: hostname
    attr2:
      name: port
      type: number
    attr3: ~
    attr4:
      name: owner
      type: tag
"""


def test_wrapped_yaml_schema_decodes_all_shorthands():
    mapping = parse_schema_text(SCHEMA_YAML)

    assert mapping.resolve("web", "attr1") == FieldSpec(name="hostname", type="string")
    assert mapping.resolve("web", "attr2").kind == FieldType.NUMBER
    assert mapping.resolve("web", "attr3").name == ""
    assert mapping.resolve("web", "attr4").kind == FieldType.TAG


def test_unwrapped_json_schema():
    mapping = parse_schema_text('{"db": {"attr1": {"name": "engine", "type": "bool"}}}')
    spec = mapping.resolve("db", "attr1")
    assert spec.name == "engine"
    assert spec.kind == FieldType.BOOLEAN


def test_legacy_root_key_is_accepted():
    mapping = parse_schema_text("configuration_workbook_mapping:\n  web:\n    attr1: host\n")
    assert mapping.resolve("web", "attr1").name == "host"


def test_non_string_category_keys_are_stringified():
    mapping = parse_schema_text("1:\n  attr1: slot\n")
    assert mapping.resolve("1", "attr1").name == "slot"


def test_absent_category_or_column_falls_back_to_column_name():
    mapping = parse_schema_text(SCHEMA_YAML)
    assert mapping.resolve("db", "attr1") == FieldSpec(name="attr1", type="string")
    assert mapping.resolve("web", "attr9") == FieldSpec(name="attr9", type="string")


def test_unknown_type_is_passthrough():
    mapping = parse_schema_text("web:\n  attr1:\n    name: x\n    type: ipaddr\n")
    assert mapping.resolve("web", "attr1").kind == FieldType.PASSTHROUGH


def test_empty_schema_text_is_an_empty_mapping():
    assert parse_schema_text("").categories == {}


@pytest.mark.parametrize(
    "text",
    [
        "key: [unclosed",
        "- a\n- b\n",
        "web:\n  - attr1\n",
    ],
)
def test_malformed_schemas_raise_parse_error(text):
    with pytest.raises(ParseError):
        parse_schema_text(text)


def test_load_structured_text_rejects_garbage():
    with pytest.raises(ParseError) as exc:
        load_structured_text("{bad: [}")
    assert "yaml or json" in str(exc.value)


def test_default_mapping_is_identity_per_category(items_csv):
    records = parse_records(items_csv)
    mapping = default_mapping(records, "configuration_item")

    assert list(mapping.categories) == ["web", "db"]
    assert list(mapping.categories["web"]) == ["name", "port"]
    assert mapping.categories["db"]["port"] == FieldSpec(name="port", type="string")


def test_default_mapping_without_categories_uses_default_name():
    records = parse_records("name\na\n")
    assert list(default_mapping(records, "configuration_item", "svc").categories) == ["svc"]
    assert list(default_mapping(records, "configuration_item").categories) == ["configuration_item"]


def test_resolve_schema_prefers_authored_text(items_csv):
    records = parse_records(items_csv)
    assert resolve_schema(SCHEMA_YAML, records, "configuration_item").resolve("web", "attr1").name == "hostname"
    assert list(resolve_schema(None, records, "configuration_item").categories) == ["web", "db"]
