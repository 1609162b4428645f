"""
RESPONSIBILITIES
- Read an .xlsx master into the index-addressed Workbook model via openpyxl.
- Write workbooks back atomically using a temporary file swap.
PROCESS OVERVIEW
1. read_workbook() loads cached cell values and trims blank rows/cells.
2. write_workbook() rebuilds an openpyxl workbook (text stays text) and saves it to <name>.tmp.
3. _atomic_save() os.replace()s the temp file over the target path.
4. copy_atomic() promotes another file over the master the same way.
"""

from __future__ import annotations

import io
import os
import shutil
import zipfile
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from openpyxl import Workbook as XlsxWorkbook, load_workbook
from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException

from fieldtrack_persist.schemas.workbook import Sheet, Workbook
from fieldtrack_persist.stores.base_store import StoreIOError, StoreValidationError


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _trim(row: Iterable[object]) -> list[object]:
    cells = list(row)
    while cells and _is_blank(cells[-1]):
        cells.pop()
    return cells


def _tmp_path(path: Path) -> Path:
    return path.with_name(path.name + ".tmp")


def _atomic_save(workbook: XlsxWorkbook, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = _tmp_path(path)
    try:
        workbook.save(tmp_path)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def read_workbook(path: Path) -> Workbook:
    """Parse every worksheet in *path* into a Workbook."""

    try:
        xlsx = load_workbook(path, data_only=True)
    except (OSError, zipfile.BadZipFile, InvalidFileException, KeyError) as exc:
        raise StoreIOError(f"Failed to read workbook {path}: {exc}") from exc
    try:
        workbook = Workbook(path=path)
        for worksheet in xlsx.worksheets:
            rows_iter = worksheet.iter_rows(values_only=True)
            header = _trim(next(rows_iter, ()))
            rows: list[list[object]] = [header]
            for raw in rows_iter:
                cells = _trim(raw)
                if cells:
                    rows.append(cells)
            workbook.sheets[worksheet.title] = Sheet(name=worksheet.title, rows=rows)
        return workbook
    finally:
        xlsx.close()


def _keep_as_text(worksheet) -> None:
    # openpyxl stores "=..." strings as formulas, which load back empty with data_only.
    for row in worksheet.iter_rows():
        for cell in row:
            if isinstance(cell.value, str) and cell.value.startswith("="):
                cell.data_type = "s"


def _build_xlsx(sheets: Mapping[str, Sequence[Sequence[object]]]) -> XlsxWorkbook:
    xlsx = XlsxWorkbook()
    xlsx.remove(xlsx.active)
    try:
        for name, rows in sheets.items():
            worksheet = xlsx.create_sheet(title=name)
            for row in rows:
                worksheet.append(list(row))
            _keep_as_text(worksheet)
    except IllegalCharacterError as exc:
        raise StoreValidationError(f"Value contains a character not allowed in a worksheet: {exc}") from exc
    return xlsx


def write_workbook(workbook: Workbook, path: Path | None = None) -> None:
    """Persist *workbook* to *path* (defaults to its own path) atomically."""

    target = path or workbook.path
    xlsx = _build_xlsx({sheet.name: sheet.rows for sheet in workbook})
    try:
        _atomic_save(xlsx, target)
    except OSError as exc:
        raise StoreIOError(f"Failed to write workbook {target}: {exc}") from exc


def workbook_bytes(sheets: Mapping[str, Sequence[Sequence[object]]]) -> bytes:
    """Serialize sheet rows into an in-memory .xlsx payload."""

    buffer = io.BytesIO()
    _build_xlsx(sheets).save(buffer)
    return buffer.getvalue()


def copy_atomic(source: Path, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = _tmp_path(target)
    try:
        shutil.copyfile(source, tmp_path)
        os.replace(tmp_path, target)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
