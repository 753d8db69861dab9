import io

import pytest
from openpyxl import Workbook

from configbook.errors import ParseError, ResolutionError
from configbook.extractors.excel import reader as reader_mod
from configbook.extractors.excel.reader import ExcelReader


def test_list_sheet_names_uses_xlrd_for_xls(monkeypatch, tmp_path):
    path = tmp_path / "sample.xls"
    path.write_bytes(b"")

    called = {"xlrd": False, "openpyxl": False, "released": False}

    class DummyXlsWb:
        def sheet_names(self):
            return ["SheetA", "SheetB"]

        def release_resources(self):
            called["released"] = True

    def fake_open_workbook(file_path=None, file_contents=None):
        called["xlrd"] = True
        return DummyXlsWb()

    def fake_load_workbook(*args, **kwargs):
        called["openpyxl"] = True
        raise AssertionError("openpyxl should not be called for .xls")

    monkeypatch.setattr(reader_mod.xlrd, "open_workbook", fake_open_workbook)
    monkeypatch.setattr(reader_mod, "load_workbook", fake_load_workbook)

    assert ExcelReader().list_sheet_names(str(path)) == ["SheetA", "SheetB"]
    assert called == {"xlrd": True, "openpyxl": False, "released": True}


def test_read_sheet_trims_trailing_blanks(make_xlsx):
    path = make_xlsx({"Data": [["a", "b", None], ["1", None, None], [None], [None, None]]})
    assert ExcelReader().read_sheet(path, "Data") == [["a", "b"], ["1"]]


def test_missing_file_is_a_parse_error(tmp_path):
    with pytest.raises(ParseError):
        ExcelReader().read_sheet(str(tmp_path / "nope.xlsx"), "Sheet1")


def test_corrupt_file_is_a_parse_error(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a zip file")
    with pytest.raises(ParseError):
        ExcelReader().read_sheet(str(path), "Sheet1")


def test_missing_sheet_is_a_resolution_error(make_xlsx):
    path = make_xlsx({"Data": [["a"]]})
    with pytest.raises(ResolutionError):
        ExcelReader().read_sheet(path, "Other")


def _xlsx_bytes(rows):
    wb = Workbook()
    ws = wb.active
    ws.title = "Secret"
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


class FakeOfficeFile:
    """Stands in for msoffcrypto.OfficeFile; 'pw' is the only good password."""

    payload = b""

    def __init__(self, fh):
        self.key = None

    def is_encrypted(self):
        return True

    def load_key(self, password=None):
        self.key = password

    def decrypt(self, out):
        if self.key != "pw":
            raise RuntimeError("The file could not be decrypted with this password")
        out.write(FakeOfficeFile.payload)


def test_password_protected_workbook_is_decrypted_in_memory(monkeypatch, tmp_path):
    path = tmp_path / "locked.xlsx"
    path.write_bytes(b"encrypted bytes")
    FakeOfficeFile.payload = _xlsx_bytes([["id", "team"], [1, "A"]])
    monkeypatch.setattr(reader_mod.msoffcrypto, "OfficeFile", FakeOfficeFile)

    rows = ExcelReader().read_sheet(str(path), "Secret", password="pw")
    assert rows == [["id", "team"], ["1", "A"]]


def test_wrong_password_is_a_parse_error(monkeypatch, tmp_path):
    path = tmp_path / "locked.xlsx"
    path.write_bytes(b"encrypted bytes")
    monkeypatch.setattr(reader_mod.msoffcrypto, "OfficeFile", FakeOfficeFile)

    with pytest.raises(ParseError) as exc:
        ExcelReader().read_sheet(str(path), "Secret", password="bad")
    assert "wrong password" in str(exc.value)


def test_handle_is_closed_when_reading_fails(monkeypatch, make_xlsx):
    path = make_xlsx({"Data": [["a"]]})
    closed = []

    original_close = reader_mod.WorkbookHandle.close

    def tracking_close(self):
        closed.append(self.file_path)
        original_close(self)

    monkeypatch.setattr(reader_mod.WorkbookHandle, "close", tracking_close)

    with pytest.raises(ResolutionError):
        ExcelReader().read_sheet(path, "Missing")
    assert closed == [path]


def test_unsupported_suffix_is_a_parse_error(tmp_path):
    path = tmp_path / "items.csv"
    path.write_text("a,b\n", encoding="utf-8")
    with pytest.raises(ParseError) as exc:
        ExcelReader().read_sheet(str(path), "Sheet1")
    assert "Unsupported spreadsheet type" in str(exc.value)
