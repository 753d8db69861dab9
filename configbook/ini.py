"""
INI sources: parse INI text into ``{section: {key: value}}``.

Used by INI lookups and by the standalone ``configbook ini`` command.
The scan is line based and lenient: ``[section]`` headers and ``key = value``
entries are collected, anything else (comments, notes, stray words) is
skipped. Keys keep their case; entries found before any section header land
in a ``default`` section; a repeated section header continues that section.
"""

from __future__ import annotations

import json
import re
from typing import Dict, Optional

DEFAULT_SECTION = "default"

_SECTION_RE = re.compile(r"^\[(.+)\]$")
_COMMENT_PREFIXES = ("#", ";")

IniDocument = Dict[str, Dict[str, str]]


def parse_ini(text: str) -> IniDocument:
    document: IniDocument = {}
    section: Optional[str] = None
    for line in (text or "").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(_COMMENT_PREFIXES):
            continue

        match = _SECTION_RE.match(stripped)
        if match:
            section = match.group(1).strip()
            document.setdefault(section, {})
            continue

        key, sep, value = stripped.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        if section is None:
            section = DEFAULT_SECTION
            document.setdefault(section, {})
        document[section][key] = value.strip()
    return document


def ini_to_document(text: str, section: Optional[str] = None) -> Dict:
    """The whole INI document, or only *section* (empty when absent)."""
    document = parse_ini(text)
    if section:
        return document.get(section, {})
    return document


def ini_to_text(text: str, section: Optional[str] = None, indent: Optional[int] = 2) -> str:
    return json.dumps(ini_to_document(text, section), indent=indent, ensure_ascii=False)
