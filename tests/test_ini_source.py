import json

from configbook.ini import ini_to_document, ini_to_text, parse_ini

INI = """
; comment
[database]
Host = db.internal
port = 5432
url = postgres://u:p@h/db?x=1

[web]
port=80
"""


def test_sections_and_case_preserving_keys():
    document = parse_ini(INI)
    assert list(document) == ["database", "web"]
    assert document["database"]["Host"] == "db.internal"
    assert document["database"]["url"] == "postgres://u:p@h/db?x=1"
    assert document["web"] == {"port": "80"}


def test_entries_before_first_section_land_in_default():
    document = parse_ini("name = top\n[s]\nk = v\n")
    assert document == {"default": {"name": "top"}, "s": {"k": "v"}}


def test_percent_signs_are_not_interpolated():
    assert parse_ini("[s]\nratio = 50%\n")["s"]["ratio"] == "50%"


def test_single_section_and_missing_section():
    assert ini_to_document(INI, "web") == {"port": "80"}
    assert ini_to_document(INI, "nope") == {}


def test_ini_to_text_is_json():
    assert json.loads(ini_to_text(INI, "web")) == {"port": "80"}


def test_stray_lines_are_skipped():
    assert parse_ini("[s]\nk=v\njunk line\n=orphan\n") == {"s": {"k": "v"}}


def test_repeated_section_continues_it():
    assert parse_ini("[s]\na = 1\n[t]\nb = 2\n[s]\nc = 3\n") == {
        "s": {"a": "1", "c": "3"},
        "t": {"b": "2"},
    }
