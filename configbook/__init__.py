"""
configbook: remap tabular configuration data (CSV text or a spreadsheet
sheet) into a typed document grouped by configuration item.
"""

from configbook.errors import InputValidationError, ParseError, RemapError, ResolutionError
from configbook.pipeline import build_request, remap_to_text, run_remap

__version__ = "0.1.0"

__all__ = [
    "InputValidationError",
    "ParseError",
    "RemapError",
    "ResolutionError",
    "build_request",
    "remap_to_text",
    "run_remap",
]
