"""Schema reconciliation coverage for canonical and append sheets."""

from __future__ import annotations

import copy

from fieldtrack_persist.schemas.sheets import ENGAGEMENTS_SCHEMA, PROFILES_SCHEMA, SITES_SCHEMA
from fieldtrack_persist.schemas.workbook import Sheet
from fieldtrack_persist.utils.reconcile import reconcile_sheet


def test_canonical_position_renames_and_moves_columns() -> None:
    sheet = Sheet(
        name="profiles",
        rows=[["Name", "Role", "ID"], ["Asha", "Lead", "EMP-00007"], ["Ravi", "Tech"]],
    )

    assert reconcile_sheet(sheet, PROFILES_SCHEMA) is True

    assert sheet.header == ["id", "Employee Name", "Designation"]
    assert sheet.rows[1] == ["EMP-00007", "Asha", "Lead"]
    assert sheet.rows[2][:3] == [None, "Ravi", "Tech"]


def test_canonical_position_inserts_missing_column() -> None:
    sheet = Sheet(name="profiles", rows=[["Employee Name"], ["Asha"]])

    reconcile_sheet(sheet, PROFILES_SCHEMA)

    assert sheet.header == ["id", "Employee Name", "Designation"]
    assert sheet.rows[1][:2] == [None, "Asha"]


def test_append_mode_renames_aliases_and_appends_missing() -> None:
    sheet = Sheet(
        name="Engagements",
        rows=[["Emp Name", "Site", "Start Date", "Notes"], ["Asha", "Plant A", "2024-01-01", "n"]],
    )

    reconcile_sheet(sheet, ENGAGEMENTS_SCHEMA)

    assert sheet.header == [
        "Employee Name",
        "Site Engaged",
        "Starting Date",
        "Notes",
        "End Date",
        "Duration (Days)",
        "status",
        "id",
        "Employee ID",
    ]
    assert sheet.rows[1] == ["Asha", "Plant A", "2024-01-01", "n"]


def test_canonical_rename_keeps_data_beyond_header() -> None:
    sheet = Sheet(name="Sites", rows=[["Site Name"], ["Plant A", "stray"]])

    reconcile_sheet(sheet, SITES_SCHEMA)

    assert sheet.header == ["Location"]
    assert sheet.rows[1] == ["Plant A", "stray"]


def test_reconcile_is_idempotent() -> None:
    sheets = [
        (Sheet(name="profiles", rows=[["Designations", "employee_name"], ["Lead", "Asha"]]), PROFILES_SCHEMA),
        (Sheet(name="Engagements", rows=[["Phase", "EmployeeID"], ["x", "EMP-00001"]]), ENGAGEMENTS_SCHEMA),
        (Sheet(name="Sites", rows=[[]]), SITES_SCHEMA),
    ]
    for sheet, schema in sheets:
        reconcile_sheet(sheet, schema)
        snapshot = copy.deepcopy(sheet.rows)

        assert reconcile_sheet(sheet, schema) is False
        assert sheet.rows == snapshot


def test_unknown_sheet_is_left_alone() -> None:
    sheet = Sheet(name="Scratch", rows=[["a", "b"]])

    assert reconcile_sheet(sheet) is False
    assert sheet.header == ["a", "b"]
