"""Identifier generation and foreign-key backfill."""

from __future__ import annotations

from fieldtrack_persist.schemas.workbook import Sheet
from fieldtrack_persist.utils.id_sequencer import (
    backfill_employee_ids,
    backfill_ids,
    build_name_index,
    max_sequence,
    next_id,
)


def test_next_id_uses_highest_matching_suffix() -> None:
    sheet = Sheet(
        name="profiles",
        rows=[["id"], ["EMP-00003"], ["emp-00010"], ["ENG-00099"], ["EMP-7x"], [""]],
    )

    assert max_sequence(sheet, "EMP") == 10
    assert next_id(sheet, "EMP") == "EMP-00011"


def test_backfill_assigns_top_to_bottom() -> None:
    sheet = Sheet(name="profiles", rows=[["id", "Name"], [None, "a"], ["EMP-00002", "b"], ["", "c"]])

    assert backfill_ids(sheet, "EMP") is True

    assert [row[0] for row in sheet.rows[1:]] == ["EMP-00003", "EMP-00002", "EMP-00004"]
    assert backfill_ids(sheet, "EMP") is False


def test_backfill_without_id_column_is_noop() -> None:
    sheet = Sheet(name="Scratch", rows=[["Name"], ["a"]])

    assert backfill_ids(sheet, "EMP") is False
    assert next_id(sheet, "EMP") == "EMP-00001"


def test_name_index_first_occurrence_wins() -> None:
    profiles = Sheet(
        name="profiles",
        rows=[["id", "Employee Name"], ["EMP-00001", "Asha  Rao"], ["EMP-00002", "asha rao"], ["", "Nobody"]],
    )

    assert build_name_index(profiles) == {"asha rao": "EMP-00001"}


def test_backfill_employee_ids_from_names() -> None:
    profiles = Sheet(name="profiles", rows=[["id", "Employee Name"], ["EMP-00001", "Asha Rao"]])
    engagements = Sheet(
        name="Engagements",
        rows=[
            ["Employee Name", "Employee ID"],
            [" ASHA   rao ", ""],
            ["Asha Rao", "EMP-00042"],
            ["Unknown", ""],
        ],
    )

    assert backfill_employee_ids(engagements, profiles) is True

    assert engagements.rows[1][1] == "EMP-00001"
    assert engagements.rows[2][1] == "EMP-00042"
    assert engagements.rows[3][1] == ""
