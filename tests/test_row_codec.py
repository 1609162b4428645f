"""Unit tests for row/record conversion."""

from __future__ import annotations

from datetime import date, datetime

from fieldtrack_persist.schemas.workbook import Sheet
from fieldtrack_persist.utils.row_codec import (
    apply_patch,
    cell_to_text,
    header_index_map,
    normalize_key,
    record_to_row,
    row_to_record,
)


def test_normalize_key_tolerates_spacing_case_and_separators() -> None:
    assert normalize_key("Employee_Name") == "employee name"
    assert normalize_key(" employee name ") == "employee name"
    assert normalize_key("Employee  Name") == "employee name"
    assert normalize_key("Employee Name") == "employee name"
    assert normalize_key("Employee--Name") == "employee name"


def test_duplicate_headers_first_non_empty_wins() -> None:
    sheet = Sheet(name="x", rows=[["X", "X"], ["", "v"], ["v1", "v2"]])

    assert row_to_record(sheet, 1) == {"X": "v"}
    assert row_to_record(sheet, 2) == {"X": "v1"}


def test_cell_to_text_unwraps_scalars() -> None:
    assert cell_to_text(None) == ""
    assert cell_to_text(5.0) == "5"
    assert cell_to_text(2.5) == "2.5"
    assert cell_to_text(True) == "TRUE"
    assert cell_to_text(datetime(2024, 1, 10)) == "2024-01-10"
    assert cell_to_text(datetime(2024, 1, 10, 8, 30)) == "2024-01-10 08:30:00"
    assert cell_to_text(date(2024, 2, 1)) == "2024-02-01"


def test_row_to_record_skips_blank_headers_and_short_rows() -> None:
    sheet = Sheet(name="x", rows=[["id", None, "Name", "Extra"], ["EMP-00001", "ignored", " Asha "]])

    assert row_to_record(sheet, 1) == {"id": "EMP-00001", "Name": "Asha", "Extra": ""}


def test_record_to_row_projects_onto_header_order() -> None:
    sheet = Sheet(name="x", rows=[["id", "Employee Name", "Designation"]])

    row = record_to_row(sheet, {"employee_name": "Asha", "unknown": "dropped", "ID": None})

    assert row == ["", "Asha", ""]


def test_apply_patch_only_touches_named_columns() -> None:
    sheet = Sheet(name="x", rows=[["id", "Employee Name", "Designation"], ["EMP-00001", "Asha", "Lead"]])

    apply_patch(sheet, 1, {"designation": "Manager", "Missing": "x"})

    assert sheet.rows[1] == ["EMP-00001", "Asha", "Manager"]


def test_header_index_map_keeps_first_duplicate() -> None:
    sheet = Sheet(name="x", rows=[["Name", "name", "id"]])

    assert header_index_map(sheet) == {"name": 0, "id": 2}
