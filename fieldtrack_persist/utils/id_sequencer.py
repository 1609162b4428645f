"""
RESPONSIBILITIES
- Generate PREFIX-00001 style identifiers by rescanning the id column.
- Backfill empty ids and engagement employee ids from profile names.
PROCESS OVERVIEW
1. max_sequence() scans the id column for PREFIX-(digits) values.
2. next_id()/backfill_ids() hand out max+1 zero-padded to five digits.
3. backfill_employee_ids() resolves Employee ID from Employee Name via profiles.
Rescanning instead of counting is only safe under the write serializer.
"""

from __future__ import annotations

import re

from fieldtrack_persist.schemas.sheets import EMPLOYEE_ID_COLUMN, EMPLOYEE_NAME_COLUMN, ID_COLUMN
from fieldtrack_persist.schemas.workbook import Sheet
from fieldtrack_persist.utils.row_codec import header_index_map, normalize_key, text

ID_WIDTH = 5


def format_id(prefix: str, sequence: int) -> str:
    return f"{prefix}-{sequence:0{ID_WIDTH}d}"


def _id_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(prefix)}-(\d+)$", re.IGNORECASE)


def id_column(sheet: Sheet) -> int | None:
    return header_index_map(sheet).get(normalize_key(ID_COLUMN))


def max_sequence(sheet: Sheet, prefix: str) -> int:
    col = id_column(sheet)
    if col is None:
        return 0
    pattern = _id_pattern(prefix)
    highest = 0
    for row_index in sheet.data_indexes():
        match = pattern.match(text(sheet.cell(row_index, col)))
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def next_id(sheet: Sheet, prefix: str) -> str:
    return format_id(prefix, max_sequence(sheet, prefix) + 1)


def backfill_ids(sheet: Sheet, prefix: str) -> bool:
    """Assign sequential ids to rows with an empty id cell, top to bottom."""

    col = id_column(sheet)
    if col is None:
        return False
    current = max_sequence(sheet, prefix)
    changed = False
    for row_index in sheet.data_indexes():
        if text(sheet.cell(row_index, col)):
            continue
        current += 1
        sheet.set_cell(row_index, col, format_id(prefix, current))
        changed = True
    return changed


def build_name_index(profiles: Sheet) -> dict[str, str]:
    """Map normalized employee names to ids; the first occurrence wins."""

    columns = header_index_map(profiles)
    id_col = columns.get(normalize_key(ID_COLUMN))
    name_col = columns.get(normalize_key(EMPLOYEE_NAME_COLUMN))
    if id_col is None or name_col is None:
        return {}
    index: dict[str, str] = {}
    for row_index in profiles.data_indexes():
        employee_id = text(profiles.cell(row_index, id_col))
        name = normalize_key(profiles.cell(row_index, name_col))
        if employee_id and name and name not in index:
            index[name] = employee_id
    return index


def backfill_employee_ids(engagements: Sheet, profiles: Sheet) -> bool:
    name_index = build_name_index(profiles)
    if not name_index:
        return False
    columns = header_index_map(engagements)
    emp_id_col = columns.get(normalize_key(EMPLOYEE_ID_COLUMN))
    emp_name_col = columns.get(normalize_key(EMPLOYEE_NAME_COLUMN))
    if emp_id_col is None or emp_name_col is None:
        return False

    changed = False
    for row_index in engagements.data_indexes():
        if text(engagements.cell(row_index, emp_id_col)):
            continue
        name = normalize_key(engagements.cell(row_index, emp_name_col))
        employee_id = name_index.get(name) if name else None
        if not employee_id:
            continue
        engagements.set_cell(row_index, emp_id_col, employee_id)
        changed = True
    return changed
