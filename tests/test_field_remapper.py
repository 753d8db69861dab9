from configbook.ir import FilterSpec, LookupSpec, ValueKind
from configbook.mapping.lookup import LookupResolver
from configbook.mapping.mapper import FieldRemapper
from configbook.mapping.schema import default_mapping, parse_schema_text
from configbook.normalize import parse_records


def _plain(record):
    return record.to_plain(exclude="configuration_item")


def test_default_mapping_is_an_identity_projection(items_csv):
    records = parse_records(items_csv)
    out = FieldRemapper(default_mapping(records, "configuration_item")).remap(records)

    assert [_plain(r) for r in out] == [
        {"name": "a", "port": "80", "tags": {}},
        {"name": "b", "port": "5432", "tags": {}},
        {"name": "c", "port": "81", "tags": {}},
    ]
    assert [r.category for r in out] == ["web", "db", "web"]


def test_convention_prefixes_coerce_values():
    record = {
        "configuration_item": "web",
        "n_amount": "3.5",
        "b_flag": "",
        "l_labels": "a,b,c",
        "m_cfg": "x=1,y=2",
        "t_owner": "ops",
    }
    out = FieldRemapper(parse_schema_text("")).remap_record(record)

    assert _plain(out) == {
        "amount": 3.5,
        "flag": False,
        "labels": ["a", "b", "c"],
        "cfg": {"x": "1", "y": "2"},
        "tags": {"Owner": "ops"},
    }
    assert out.fields["amount"].kind == ValueKind.NUMBER
    assert out.fields["flag"].value is False
    assert out.fields["cfg"].value == {"x": "1", "y": "2"}
    assert out.tags == {"Owner": "ops"}


def test_attr_columns_follow_the_schema():
    schema = parse_schema_text(
        "web:\n"
        "  attr1: hostname\n"
        "  attr2: {name: port, type: number}\n"
        "  attr3: ~\n"
        "  attr4: {name: cost_center, type: tag}\n"
    )
    record = {
        "configuration_item": "web",
        "attr1": "h1",
        "attr2": "8080",
        "attr3": "secret",
        "attr4": "42",
    }
    out = FieldRemapper(schema).remap_record(record)

    assert list(out.fields) == ["configuration_item", "hostname", "port"]
    assert out.fields["port"].to_plain() == 8080
    assert out.tags == {"Cost_center": "42"}


def test_attr_columns_of_unknown_category_keep_their_name():
    schema = parse_schema_text("web:\n  attr1: hostname\n")
    out = FieldRemapper(schema).remap_record({"configuration_item": "db", "attr1": "x"})
    assert out.fields["attr1"].value == "x"


def test_filters_keep_matching_records_only():
    records = parse_records("configuration_item,env\nweb,prod\nweb,dev\n")
    remapper = FieldRemapper(
        default_mapping(records, "configuration_item"),
        filters=[FilterSpec(name="env", values=["prod"])],
    )
    out = remapper.remap(records)

    assert len(out) == 1
    assert out[0].fields["env"].value == "prod"


def test_filters_match_the_target_name_too():
    schema = parse_schema_text("web:\n  attr1: env\n")
    records = parse_records("configuration_item,attr1\nweb,prod\nweb,dev\n")
    out = FieldRemapper(schema, filters=[FilterSpec(name="env", values=["prod"])]).remap(records)

    assert [r.fields["env"].value for r in out] == ["prod"]


def test_filter_with_no_matching_column_drops_everything(items_csv):
    records = parse_records(items_csv)
    remapper = FieldRemapper(
        default_mapping(records, "configuration_item"),
        filters=[FilterSpec(name="region", values=["eu"])],
    )
    assert remapper.remap(records) == []


def test_lookup_replaces_each_token():
    lookups = LookupResolver([
        LookupSpec(column="owner_id", key_column="id", value_column="team", json='{"101": "Team-A"}'),
    ])
    remapper = FieldRemapper(parse_schema_text(""), lookups=lookups)

    one = remapper.remap_record({"configuration_item": "web", "owner_id": "101"})
    two = remapper.remap_record({"configuration_item": "web", "owner_id": "101,102"})

    assert one.fields["owner_id"].value == "Team-A"
    assert two.fields["owner_id"].value == "Team-A,"


def test_lookup_skips_non_string_values():
    lookups = LookupResolver([
        LookupSpec(column="owner_id", key_column="id", value_column="team", json='{"101": "Team-A"}'),
    ])
    out = FieldRemapper(parse_schema_text(""), lookups=lookups).remap_record({"n_owner_id": "101"})
    assert out.fields["owner_id"].to_plain() == 101


def test_prefixed_category_column_is_never_renamed():
    remapper = FieldRemapper(parse_schema_text(""), category_column="s_ci")
    out = remapper.remap_record({"s_ci": "web", "name": "a"})

    assert out.category == "web"
    assert out.fields["s_ci"].value == "web"
    assert out.to_plain(exclude="s_ci") == {"name": "a", "tags": {}}
