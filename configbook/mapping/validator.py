from typing import List

from configbook.errors import InputValidationError
from configbook.ir import Orientation, RemapRequest


def request_problems(request: RemapRequest) -> List[str]:
    """Return every reason *request* cannot be run (empty when valid)."""
    problems: List[str] = []

    has_csv = request.csv_text is not None
    has_sheet = request.spreadsheet is not None
    if has_csv and has_sheet:
        problems.append("only one of csv or spreadsheet may be given")
    elif not has_csv and not has_sheet:
        problems.append("one of csv or spreadsheet is required")

    orientation = request.orientation
    if orientation is None and has_sheet:
        orientation = request.spreadsheet.orientation
    if orientation == Orientation.VERTICAL:
        if has_csv:
            problems.append("vertical orientation is not supported for csv input")
        if request.default_category is None:
            problems.append("vertical orientation requires a default category")

    for lookup in request.lookups:
        kinds = lookup.source_kinds()
        if len(kinds) > 1:
            problems.append(
                f"lookup for column '{lookup.column}' has more than one source: "
                f"{', '.join(kinds)}"
            )
        if lookup.ini_text is not None and lookup.section is None:
            problems.append(f"ini lookup for column '{lookup.column}' requires a section")

    return problems


def validate_request(request: RemapRequest) -> RemapRequest:
    problems = request_problems(request)
    if problems:
        raise InputValidationError("; ".join(problems))
    return request
