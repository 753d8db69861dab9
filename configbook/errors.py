"""
Error types raised by the remapping engine.

Every error is terminal for the current call and carries a human readable
message naming the precondition that failed. All of them derive from
``ValueError`` so callers that only care about "bad input" can catch that.
"""


class RemapError(ValueError):
    """Base class for all configbook failures."""


class InputValidationError(RemapError):
    """The request itself is inconsistent (conflicting or missing inputs)."""


class ParseError(RemapError):
    """Text or file content could not be decoded (CSV, YAML/JSON, INI, workbook)."""


class ResolutionError(RemapError):
    """A referenced sheet is missing or does not hold a usable table."""
