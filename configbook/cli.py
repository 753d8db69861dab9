import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from configbook.aggregate import OUTPUT_FORMATS, serialize
from configbook.config import Settings, get_settings
from configbook.errors import InputValidationError, ParseError, RemapError
from configbook.ini import ini_to_text
from configbook.logger import set_level
from configbook.mapping.schema import load_structured_text
from configbook.pipeline import build_request, run_remap


def read_text(path: str) -> str:
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise InputValidationError(f"input not found: {path}")
    return file_path.read_text(encoding="utf-8")


def parse_filter(raw: str) -> Dict[str, Any]:
    """``env=prod,stage`` → ``{"name": "env", "values": ["prod", "stage"]}``."""
    name, sep, values = raw.partition("=")
    if not sep or not name:
        raise InputValidationError(f"filter must look like NAME=V1,V2: {raw!r}")
    return {"name": name, "values": values.split(",")}


def load_lookups(path: str) -> List[Dict[str, Any]]:
    """
    Read lookup definitions from a YAML/JSON file holding a list of objects.
    Inline ``json`` / ``yaml`` sources may be written as nested mappings.
    """
    data = load_structured_text(read_text(path))
    if data is None:
        return []
    if isinstance(data, dict) and "lookups" in data:
        data = data["lookups"]
    if not isinstance(data, list):
        raise ParseError(f"lookup file {path} must hold a list of lookups")

    lookups = []
    for entry in data:
        if not isinstance(entry, dict):
            raise ParseError(f"lookup file {path} has a non-mapping entry: {entry!r}")
        entry = dict(entry)
        for key in ("json", "yaml"):
            if key in entry and not isinstance(entry[key], str) and entry[key] is not None:
                entry[key] = json.dumps(entry[key])
        lookups.append(entry)
    return lookups


def parse_args(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> argparse.Namespace:
    settings = settings or get_settings()
    parser = argparse.ArgumentParser(
        prog="configbook",
        description="Remap tabular configuration data into a grouped, typed document.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    remap = sub.add_parser("remap", help="Remap a CSV file or a spreadsheet sheet.")
    source = remap.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", default=None, help="Path to a CSV file.")
    source.add_argument("--excel", default=None, help="Path to a .xlsx/.xlsm/.xls workbook.")
    remap.add_argument("--worksheet", default=None, help="Sheet name inside --excel.")
    remap.add_argument("--password", default=None, help="Password of an encrypted workbook.")
    remap.add_argument("--col-start", default=None, help="First column letter of the table.")
    remap.add_argument("--col-end", default=None, help="Last column letter of the table.")
    remap.add_argument(
        "--header",
        nargs="+",
        default=[],
        help="Header names overriding the sheet's own, in order.",
    )
    remap.add_argument(
        "--orientation",
        choices=["horizontal", "vertical"],
        default="horizontal",
        help="Rows are records (horizontal) or columns are records (vertical).",
    )
    remap.add_argument("--schema", default=None, help="Path to a YAML/JSON schema document.")
    remap.add_argument(
        "--category-column",
        default=settings.CATEGORY_COLUMN,
        help="Column holding the configuration item (default: %(default)s).",
    )
    remap.add_argument(
        "--default-category",
        default=None,
        help="Category used when the table has no category column.",
    )
    remap.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="NAME=V1,V2",
        help="Keep records whose NAME column holds one of the values (repeatable).",
    )
    remap.add_argument("--lookups", default=None, help="Path to a YAML/JSON list of lookups.")
    remap.add_argument(
        "--format",
        choices=list(OUTPUT_FORMATS),
        default=settings.OUTPUT_FORMAT,
        help="Output format (default: %(default)s, or env OUTPUT_FORMAT).",
    )
    remap.add_argument("--output", default=None, help="Write the document here instead of stdout.")

    ini = sub.add_parser("ini", help="Print an INI file (or one section) as JSON.")
    ini.add_argument("file", help="Path to the INI file.")
    ini.add_argument("--section", default=None, help="Only print this section.")

    return parser.parse_args(argv)


def build_remap_kwargs(args: argparse.Namespace) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {
        "category_column": args.category_column,
        "default_category": args.default_category,
        "filters": [parse_filter(raw) for raw in args.filter],
        "orientation": args.orientation,
    }
    if args.csv:
        kwargs["csv"] = read_text(args.csv)
    else:
        if not args.worksheet:
            raise InputValidationError("--worksheet is required with --excel")
        kwargs["spreadsheet"] = {
            "path": args.excel,
            "sheet": args.worksheet,
            "password": args.password,
            "col_start": args.col_start,
            "col_end": args.col_end,
            "headers": args.header,
        }
    if args.schema:
        kwargs["schema"] = read_text(args.schema)
    if args.lookups:
        kwargs["lookups"] = load_lookups(args.lookups)
    return kwargs


def write_output(text: str, output: Optional[str]) -> None:
    if not output:
        print(text)
        return
    out_path = Path(output).expanduser()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    print(f"[ok] wrote {out_path}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"[error] invalid settings: {e}", file=sys.stderr)
        return 1
    args = parse_args(argv, settings)
    set_level(logging.DEBUG if args.verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    try:
        if args.command == "ini":
            text = ini_to_text(read_text(args.file), args.section, settings.OUTPUT_INDENT)
            write_output(text, None)
            return 0

        request = build_request(**build_remap_kwargs(args))
        document = run_remap(request)
        write_output(serialize(document, args.format, settings.OUTPUT_INDENT), args.output)
    except RemapError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
