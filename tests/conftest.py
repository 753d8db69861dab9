"""
Pytest configuration and shared fixtures.
"""
import os
import sys
import pytest
from openpyxl import Workbook

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)


@pytest.fixture
def make_xlsx(tmp_path):
    """Build an .xlsx file from ``{sheet_title: [row, ...]}`` and return its path."""
    def _make(sheets, name="book.xlsx"):
        wb = Workbook()
        wb.remove(wb.active)
        for title, rows in sheets.items():
            ws = wb.create_sheet(title)
            for row in rows:
                ws.append(row)
        path = tmp_path / name
        wb.save(path)
        return str(path)

    return _make


@pytest.fixture
def items_csv():
    """Three records over two categories, in first-seen order web, db."""
    return (
        "configuration_item,name,port\n"
        "web,a,80\n"
        "db,b,5432\n"
        "web,c,81\n"
    )


@pytest.fixture
def vertical_rows():
    """Three field rows holding two records (columns B and C)."""
    return [
        ["name", "a", "b"],
        ["port", 80, 443],
        ["enabled", True, False],
    ]
