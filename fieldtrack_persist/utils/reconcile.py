"""
RESPONSIBILITIES
- Bring a sheet's header in line with its canonical column table.
- Support fixed-position columns and name-addressed (append) columns.
PROCESS OVERVIEW
1. reconcile_sheet() looks up the sheet's SheetSchema and walks its columns.
2. Canonical-position columns are inserted, renamed and moved to their index.
3. Append columns are renamed in place or appended as the rightmost column.
4. Every helper reports whether it changed anything; a clean sheet reports False.
"""

from __future__ import annotations

from fieldtrack_persist.schemas.sheets import ColumnSpec, ReconcileMode, SheetSchema, schema_for
from fieldtrack_persist.schemas.workbook import Sheet
from fieldtrack_persist.utils.row_codec import normalize_key, text


def _alias_keys(column: ColumnSpec) -> set[str]:
    return {normalize_key(column.name), *(normalize_key(alias) for alias in column.aliases)}


def find_column(sheet: Sheet, column: ColumnSpec) -> int | None:
    accepted = _alias_keys(column)
    for idx, cell in enumerate(sheet.header):
        if normalize_key(cell) in accepted:
            return idx
    return None


def ensure_column_canonical(sheet: Sheet, column: ColumnSpec) -> bool:
    position = column.position or 0
    found = find_column(sheet, column)
    if found is None:
        sheet.insert_column(position, [column.name])
        return True

    changed = False
    if text(sheet.header[found]) != column.name:
        sheet.header[found] = column.name
        changed = True
    if found != position:
        sheet.move_column(found, position)
        changed = True
    return changed


def ensure_column_append(sheet: Sheet, column: ColumnSpec) -> bool:
    found = find_column(sheet, column)
    if found is None:
        sheet.set_cell(0, sheet.width(), column.name)
        return True
    if text(sheet.header[found]) != column.name:
        sheet.header[found] = column.name
        return True
    return False


def reconcile_sheet(sheet: Sheet, schema: SheetSchema | None = None) -> bool:
    """Normalize *sheet* against *schema* (looked up by name when omitted)."""

    schema = schema or schema_for(sheet.name)
    if schema is None:
        return False
    changed = False
    for column in schema.columns:
        if schema.mode is ReconcileMode.CANONICAL_POSITION:
            changed = ensure_column_canonical(sheet, column) or changed
        else:
            changed = ensure_column_append(sheet, column) or changed
    return changed

