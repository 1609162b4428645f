"""
RESPONSIBILITIES
- Convert sheet rows to/from records (column name -> text) for the tracker store.
- Normalize header spellings so lookups tolerate case, spacing, '_' and '-' drift.
PROCESS OVERVIEW
1. cell_to_text() unwraps dates, numbers and rich text into display text.
2. row_to_record() walks the header; duplicate names keep the first non-empty value.
3. record_to_row() projects a record onto the current header for appends.
4. apply_patch() overwrites only the cells whose normalized column is in the patch.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Mapping

from fieldtrack_persist.schemas.workbook import Sheet

_SEPARATORS = re.compile(r"[_\-]+")
_WHITESPACE = re.compile(r"\s+")


def cell_to_text(value: object) -> str:
    """Return the display text of a raw cell value."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time.min:
            return value.date().isoformat()
        return value.replace(microsecond=0).isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    # CellRichText and similar wrappers render their plain text via str().
    return str(value)


def text(value: object) -> str:
    return cell_to_text(value).strip()


def normalize_key(value: object) -> str:
    """Normalize a header or natural key for comparison."""

    token = text(value).replace("\u00a0", " ")
    token = _SEPARATORS.sub(" ", token)
    return _WHITESPACE.sub(" ", token).strip().lower()


def header_index_map(sheet: Sheet) -> dict[str, int]:
    """Map normalized header names to the first column carrying them."""

    mapping: dict[str, int] = {}
    for idx, cell in enumerate(sheet.header):
        key = normalize_key(cell)
        if key and key not in mapping:
            mapping[key] = idx
    return mapping


def row_to_record(sheet: Sheet, row_index: int) -> dict[str, str]:
    record: dict[str, str] = {}
    for idx, cell in enumerate(sheet.header):
        key = text(cell)
        if not key:
            continue
        value = text(sheet.cell(row_index, idx))
        if record.get(key):
            continue
        record[key] = value
    return record


def records(sheet: Sheet) -> list[dict[str, str]]:
    return [row_to_record(sheet, idx) for idx in sheet.data_indexes()]


def _incoming(data: Mapping[str, object]) -> dict[str, object]:
    return {normalize_key(key): value for key, value in data.items()}


def record_to_row(sheet: Sheet, record: Mapping[str, object]) -> list[object]:
    incoming = _incoming(record)
    values: list[object] = []
    for cell in sheet.header:
        value = incoming.get(normalize_key(cell))
        values.append("" if value is None else value)
    return values


def apply_patch(sheet: Sheet, row_index: int, patch: Mapping[str, object]) -> None:
    incoming = _incoming(patch)
    for key, col in header_index_map(sheet).items():
        if key not in incoming:
            continue
        value = incoming[key]
        sheet.set_cell(row_index, col, "" if value is None else value)
