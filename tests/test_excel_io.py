"""Unit tests for workbook read/write helpers."""

# Module responsibilities:
# - Confirm blank trimming and cached-value loading on read.
# - Confirm atomic saves leave no temp file and surface unreadable files.

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import Workbook as XlsxWorkbook, load_workbook

from fieldtrack_persist.schemas.workbook import Workbook
from fieldtrack_persist.stores.base_store import StoreIOError, StoreValidationError
from fieldtrack_persist.utils.excel_io import copy_atomic, read_workbook, write_workbook


def test_read_trims_blank_rows_and_trailing_cells(tmp_path: Path, write_xlsx) -> None:
    path = write_xlsx(
        tmp_path / "in.xlsx",
        {
            "profiles": [
                ["id", "Employee Name", None],
                ["EMP-00001", "Asha", "  "],
                [None, None],
                ["EMP-00002", datetime(2024, 1, 2)],
            ]
        },
    )

    sheet = read_workbook(path).get("profiles")

    assert sheet.header == ["id", "Employee Name"]
    assert sheet.rows[1] == ["EMP-00001", "Asha"]
    assert sheet.rows[2] == ["EMP-00002", datetime(2024, 1, 2)]
    assert sheet.row_count == 2


def test_formula_cells_load_as_cached_values(tmp_path: Path) -> None:
    path = tmp_path / "formula.xlsx"
    wb = XlsxWorkbook()
    ws = wb.active
    ws.title = "Sites"
    ws.append(["Location", "Total"])
    ws.append(["Plant A", "=1+1"])
    wb.save(path)

    sheet = read_workbook(path).get("Sites")

    # openpyxl never computes formulas, so an unsaved-by-Excel file has no cached value.
    assert sheet.rows[1] == ["Plant A"]


def test_write_is_atomic(tmp_path: Path) -> None:
    target = tmp_path / "store" / "data.xlsx"
    workbook = Workbook(path=target)
    workbook.add_sheet("Sites", ["Location"])
    workbook.get("Sites").append_row(["Plant A"])

    write_workbook(workbook)

    assert not target.with_name("data.xlsx.tmp").exists()
    assert [c.value for c in load_workbook(target)["Sites"]["A"]] == ["Location", "Plant A"]


def test_unreadable_workbook_raises_store_io_error(tmp_path: Path) -> None:
    broken = tmp_path / "broken.xlsx"
    broken.write_text("not a zip", encoding="utf-8")

    with pytest.raises(StoreIOError):
        read_workbook(broken)


def test_copy_atomic_replaces_target(tmp_path: Path, write_xlsx) -> None:
    source = write_xlsx(tmp_path / "upload.xlsx", {"profiles": [["id"], ["EMP-00003"]]})
    target = write_xlsx(tmp_path / "store" / "data.xlsx", {"profiles": [["id"]]})

    copy_atomic(source, target)

    assert read_workbook(target).get("profiles").row_count == 1
    assert not target.with_name("data.xlsx.tmp").exists()


def test_text_starting_with_equals_survives_a_save(tmp_path: Path) -> None:
    target = tmp_path / "store" / "data.xlsx"
    workbook = Workbook(path=target)
    workbook.add_sheet("profiles", ["id", "Designation"])
    workbook.get("profiles").append_row(["EMP-00001", "=Lead"])

    write_workbook(workbook)

    assert read_workbook(target).get("profiles").rows[1] == ["EMP-00001", "=Lead"]


def test_control_characters_raise_validation_error(tmp_path: Path) -> None:
    target = tmp_path / "store" / "data.xlsx"
    workbook = Workbook(path=target)
    workbook.add_sheet("profiles", ["id", "Employee Name"])
    workbook.get("profiles").append_row(["EMP-00001", "Asha\x01"])

    with pytest.raises(StoreValidationError):
        write_workbook(workbook)
    assert not target.exists()
