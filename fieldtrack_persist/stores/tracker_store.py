"""
RESPONSIBILITIES
- Expose the tracker's record operations over the master workbook.
- Run every operation as one serialized load/normalize/act/save job.
PROCESS OVERVIEW
1. Each job ensures the master exists (promoting uploads first) and reloads it.
2. The target sheet is reconciled; ids and engagement employee ids are backfilled.
3. The operation reads or mutates rows; derived fields decorate returned records.
4. The workbook is saved atomically only when something changed.
5. Failures raise before any save, leaving the master untouched.
"""

from __future__ import annotations

import importlib.util
import logging
import os
from datetime import date
from pathlib import Path
from typing import Callable, Mapping, TypeVar

import pandas as pd

from fieldtrack.core.settings import StoreSettings, load_settings
from fieldtrack_persist.exporters.bundle import build_employee_bundle, bundle_to_bytes
from fieldtrack_persist.schemas.records import IngestResult, MasterStatus, RowPage, RowQuery
from fieldtrack_persist.schemas.sheets import (
    ENGAGEMENTS_SHEET,
    ID_COLUMN,
    PROFILES_SHEET,
    SHEET_SCHEMAS,
    SheetSchema,
    schema_for,
)
from fieldtrack_persist.schemas.workbook import Sheet, Workbook
from fieldtrack_persist.stores.base_store import (
    BaseStore,
    PersistHealth,
    StoreDuplicateKeyError,
    StoreError,
    StoreInitializationError,
    StoreNotFoundError,
    StoreSchemaError,
    StoreValidationError,
)
from fieldtrack_persist.stores.workbook_store import WorkbookStore
from fieldtrack_persist.utils.derived import compute_fields, parse_any_date
from fieldtrack_persist.utils.id_sequencer import backfill_employee_ids, backfill_ids, id_column, next_id
from fieldtrack_persist.utils.log import get_logger
from fieldtrack_persist.utils.paths import ensure_structure, store_file_path, uploads_dir_path
from fieldtrack_persist.utils.reconcile import reconcile_sheet
from fieldtrack_persist.utils.row_codec import (
    apply_patch,
    header_index_map,
    normalize_key,
    record_to_row,
    row_to_record,
    text,
)
from fieldtrack_persist.utils.serializer import WriteSerializer, serializer_for

T = TypeVar("T")


class TrackerStore(BaseStore):
    """Spreadsheet-backed record store for profiles, engagements, sites and schedule."""

    def __init__(
        self,
        root: Path | str | None = None,
        *,
        settings: StoreSettings | None = None,
        logger: logging.Logger | None = None,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        resolved_root = Path(root).expanduser().resolve() if root else self.settings.resolved_root()
        super().__init__(logger=logger or get_logger("tracker_store", resolved_root))
        self._root = resolved_root
        self.path = store_file_path(self.settings.master_filename, self._root)
        self.uploads_dir = uploads_dir_path(self.settings.uploads_dirname, self._root)
        self.workbooks = WorkbookStore(self.path, self.uploads_dir, logger=self.logger.getChild("workbook"))
        self.serializer: WriteSerializer = serializer_for(self.path)
        self._clock = clock or date.today

    @property
    def master_path(self) -> Path:
        return self.path

    # BaseStore API -----------------------------------------------------------------

    def init_store(self) -> Path:
        try:
            return self._run(lambda: self.workbooks.ensure_exists().path)
        except OSError as exc:
            raise StoreInitializationError(str(exc)) from exc

    def query(self, params: Mapping[str, object] | RowQuery) -> pd.DataFrame:
        filters = self._normalize_query(params)
        page = self.list_rows(filters.sheet, page=1, page_size=None, all_rows=True)
        frame = pd.DataFrame(page.items)
        if frame.empty:
            return frame

        for column, expected in filters.equals.items():
            if column not in frame.columns:
                return frame.iloc[0:0]
            wanted = normalize_key(expected)
            frame = frame[frame[column].map(normalize_key) == wanted]

        if filters.date_column and (filters.start_date or filters.end_date):
            if filters.date_column not in frame.columns:
                return frame.iloc[0:0]
            start, end = filters.start_date, filters.end_date
            keep = [
                value is not None and (start is None or value >= start) and (end is None or value <= end)
                for value in (parse_any_date(cell) for cell in frame[filters.date_column])
            ]
            frame = frame[pd.Series(keep, index=frame.index, dtype=bool)]
        return frame.reset_index(drop=True)

    def healthcheck(self) -> PersistHealth:
        issues: list[str] = []
        dependencies = {
            name: importlib.util.find_spec(name) is not None for name in ("openpyxl", "pandas")
        }
        writable_paths: dict[str, bool] = {}
        missing: list[str] = []

        try:
            ensure_structure(self._root)
        except OSError as exc:
            issues.append(f"Failed to ensure root directories: {exc}")

        for directory in (self.path.parent, self.uploads_dir):
            writable_paths[str(directory)] = os.access(directory, os.W_OK | os.X_OK)
        try:
            present = set(self.sheet_names())
            missing = [name for name in SHEET_SCHEMAS if name not in present]
        except StoreError as exc:
            issues.append(str(exc))

        return PersistHealth(
            dependencies=dependencies,
            writable_paths=writable_paths,
            missing_sheets=missing,
            issues=issues,
        )

    # Master file -------------------------------------------------------------------

    def status(self) -> MasterStatus:
        return self._run(self.workbooks.ensure_exists)

    def ingest_uploads(self) -> IngestResult:
        return self._run(self.workbooks.ingest_uploads)

    def sheet_names(self) -> list[str]:
        def job() -> list[str]:
            self.workbooks.ensure_exists()
            return self.workbooks.sheet_names()

        return self._run(job)

    # Record operations -------------------------------------------------------------

    def list_rows(
        self,
        sheet: str,
        page: int | str | None = 1,
        page_size: int | str | None = None,
        *,
        all_rows: bool = False,
    ) -> RowPage:
        """Return one page of *sheet*, backfilling ids before reading."""

        page_no = max(1, _as_int(page, 1))
        size = min(
            self.settings.max_page_size,
            max(1, _as_int(page_size, self.settings.default_page_size)),
        )

        def job() -> RowPage:
            workbook = self._open()
            target = self._sheet(workbook, sheet)
            if self._prepare(workbook, target):
                self._save(workbook, f"normalized {sheet}")

            total = target.row_count
            if all_rows:
                indexes = list(target.data_indexes())
            else:
                first = 1 + (page_no - 1) * size
                indexes = list(range(first, min(total, first + size - 1) + 1))
            items = [self._decorate(target, row_to_record(target, idx)) for idx in indexes]
            return RowPage(total=total, page=page_no, page_size=size, items=items)

        return self._run(job)

    def create_row(
        self,
        sheet: str,
        data: Mapping[str, object] | None = None,
        *,
        id_prefix: str | None = None,
    ) -> dict[str, str]:
        payload = dict(data or {})

        def job() -> dict[str, str]:
            workbook = self._open()
            target = self._sheet(workbook, sheet)
            self._prepare(workbook, target)
            schema = schema_for(sheet)

            if schema is not None and schema.natural_key:
                key_column = schema.natural_key
                key_value = text(_get_normalized(payload, key_column))
                if not key_value:
                    raise StoreValidationError(f"{key_column} is required")
                if self._find_by_key(target, key_column, key_value) is not None:
                    raise StoreDuplicateKeyError(f"Duplicate {key_column}: {key_value}")
                _set_normalized(payload, key_column, key_value)
            else:
                prefix = (schema.id_prefix if schema else None) or id_prefix
                if prefix and id_column(target) is not None:
                    explicit = text(_get_normalized(payload, "id"))
                    if explicit:
                        if self._find_by_id(target, explicit) is not None:
                            raise StoreDuplicateKeyError(f"Duplicate id: {explicit}")
                        _set_normalized(payload, "id", explicit)
                    else:
                        _set_normalized(payload, "id", next_id(target, prefix))

            row_index = target.append_row(record_to_row(target, payload))
            self._backfill_links(workbook, target)
            self._save(workbook, f"created row in {sheet}")
            record = self._decorate(target, row_to_record(target, row_index))
            self.logger.info("Created row in %s: %s", sheet, _identity(schema, record))
            return record

        return self._run(job)

    def update_row(self, sheet: str, row_id: str, patch: Mapping[str, object] | None = None) -> dict[str, str]:
        changes = dict(patch or {})

        def job() -> dict[str, str]:
            workbook = self._open()
            target = self._sheet(workbook, sheet)
            self._prepare(workbook, target)
            schema = schema_for(sheet)
            row_index = self._locate(target, schema, row_id)

            if schema is not None and schema.natural_key:
                key_column = schema.natural_key
                if normalize_key(key_column) in {normalize_key(key) for key in changes}:
                    new_key = text(_get_normalized(changes, key_column))
                    if not new_key:
                        raise StoreValidationError(f"{key_column} is required")
                    clash = self._find_by_key(target, key_column, new_key)
                    if clash is not None and clash != row_index:
                        raise StoreDuplicateKeyError(f"Duplicate {key_column}: {new_key}")
                    _set_normalized(changes, key_column, new_key)
            elif normalize_key(ID_COLUMN) in {normalize_key(key) for key in changes}:
                new_id = text(_get_normalized(changes, ID_COLUMN))
                if not new_id:
                    raise StoreValidationError("id cannot be cleared")
                clash = self._find_by_id(target, new_id)
                if clash is not None and clash != row_index:
                    raise StoreDuplicateKeyError(f"Duplicate id: {new_id}")
                _set_normalized(changes, ID_COLUMN, new_id)

            apply_patch(target, row_index, changes)
            self._backfill_links(workbook, target)
            self._save(workbook, f"updated {row_id} in {sheet}")
            return self._decorate(target, row_to_record(target, row_index))

        return self._run(job)

    def delete_row(self, sheet: str, row_id: str) -> bool:
        def job() -> bool:
            workbook = self._open()
            target = self._sheet(workbook, sheet)
            self._prepare(workbook, target)
            row_index = self._locate(target, schema_for(sheet), row_id)
            target.delete_row(row_index)
            self._save(workbook, f"deleted {row_id} from {sheet}")
            self.logger.info("Deleted %s from %s", row_id, sheet)
            return True

        return self._run(job)

    def export_employee_bundle(self, employee_id: str) -> bytes:
        """Return an .xlsx payload joining one employee's related rows."""

        def job() -> bytes:
            workbook = self._open()
            bundle = build_employee_bundle(workbook, employee_id, today=self._clock())
            self.logger.info(
                "Exported bundle for %s (%d engagements, %d sites, %d schedule rows)",
                bundle.employee_id,
                len(bundle.engagements),
                len(bundle.sites),
                len(bundle.schedule),
            )
            return bundle_to_bytes(bundle)

        return self._run(job)

    # Helpers ----------------------------------------------------------------------

    def _run(self, job: Callable[[], T]) -> T:
        return self.serializer.run(job)

    def _open(self) -> Workbook:
        self.workbooks.ensure_exists()
        return self.workbooks.load()

    def _save(self, workbook: Workbook, reason: str) -> None:
        self.workbooks.atomic_save(workbook)
        self.logger.debug("Saved %s (%s)", self.path, reason)

    @staticmethod
    def _sheet(workbook: Workbook, name: str) -> Sheet:
        sheet = workbook.get(name)
        if sheet is not None:
            return sheet
        if name in SHEET_SCHEMAS:
            raise StoreSchemaError(f"Sheet not found: {name}")
        raise StoreNotFoundError(f"Sheet not found: {name}")

    def _prepare(self, workbook: Workbook, sheet: Sheet) -> bool:
        schema = schema_for(sheet.name)
        changed = reconcile_sheet(sheet, schema)
        if schema is not None and schema.id_prefix:
            changed = backfill_ids(sheet, schema.id_prefix) or changed
        return self._backfill_links(workbook, sheet) or changed

    @staticmethod
    def _backfill_links(workbook: Workbook, sheet: Sheet) -> bool:
        if sheet.name != ENGAGEMENTS_SHEET:
            return False
        profiles = workbook.get(PROFILES_SHEET)
        if profiles is None:
            return False
        reconcile_sheet(profiles)
        return backfill_employee_ids(sheet, profiles)

    def _decorate(self, sheet: Sheet, record: dict[str, str]) -> dict[str, str]:
        return compute_fields(record, schema_for(sheet.name), self._clock())

    @staticmethod
    def _find_by_key(sheet: Sheet, column: str, value: str) -> int | None:
        col = header_index_map(sheet).get(normalize_key(column))
        if col is None:
            return None
        target = normalize_key(value)
        for row_index in sheet.data_indexes():
            if normalize_key(sheet.cell(row_index, col)) == target:
                return row_index
        return None

    @staticmethod
    def _find_by_id(sheet: Sheet, row_id: str) -> int | None:
        col = id_column(sheet)
        if col is None:
            raise StoreSchemaError(f"Sheet {sheet.name} has no id column")
        wanted = text(row_id)
        for row_index in sheet.data_indexes():
            if text(sheet.cell(row_index, col)) == wanted:
                return row_index
        return None

    def _locate(self, sheet: Sheet, schema: SheetSchema | None, row_id: str) -> int:
        if schema is not None and schema.natural_key:
            row_index = self._find_by_key(sheet, schema.natural_key, row_id)
            if row_index is None:
                raise StoreNotFoundError(f"{schema.natural_key} not found: {row_id}")
            return row_index
        row_index = self._find_by_id(sheet, row_id)
        if row_index is None:
            raise StoreNotFoundError(f"Row not found for id: {row_id}")
        return row_index

    @staticmethod
    def _normalize_query(params: Mapping[str, object] | RowQuery) -> RowQuery:
        if isinstance(params, RowQuery):
            return params
        raw = dict(params)
        sheet = text(raw.get("sheet"))
        if not sheet:
            raise StoreValidationError("query requires a sheet")
        equals_raw = raw.get("equals") or {}
        if not isinstance(equals_raw, Mapping):
            raise StoreValidationError("equals must be a mapping")
        date_column = text(raw.get("date_column")) or None
        return RowQuery(
            sheet=sheet,
            equals={str(key): text(value) for key, value in equals_raw.items()},
            date_column=date_column,
            start_date=_as_date(raw.get("start_date")),
            end_date=_as_date(raw.get("end_date")),
        )


def _as_int(value: object, default: int) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed or default


def _as_date(value: object) -> date | None:
    if value is None or not text(value):
        return None
    parsed = parse_any_date(value)
    if parsed is None:
        raise StoreValidationError(f"Invalid date: {value}")
    return parsed


def _get_normalized(data: Mapping[str, object], column: str) -> object:
    wanted = normalize_key(column)
    for key, value in data.items():
        if normalize_key(key) == wanted:
            return value
    return None


def _set_normalized(data: dict[str, object], column: str, value: object) -> None:
    wanted = normalize_key(column)
    for key in [key for key in data if normalize_key(key) == wanted]:
        del data[key]
    data[column] = value


def _identity(schema: SheetSchema | None, record: Mapping[str, str]) -> str:
    if schema is not None and schema.natural_key:
        return record.get(schema.natural_key, "")
    return record.get("id", "")


# Convenience facade ---------------------------------------------------------------


def init_tracker_store(root: Path | None = None) -> Path:
    store = TrackerStore(root)
    return store.init_store()


def list_rows(sheet: str, page: int = 1, page_size: int | None = None, *, root: Path | None = None) -> RowPage:
    return TrackerStore(root).list_rows(sheet, page, page_size)


def create_row(
    sheet: str,
    data: Mapping[str, object],
    *,
    id_prefix: str | None = None,
    root: Path | None = None,
) -> dict[str, str]:
    return TrackerStore(root).create_row(sheet, data, id_prefix=id_prefix)


def update_row(sheet: str, row_id: str, patch: Mapping[str, object], *, root: Path | None = None) -> dict[str, str]:
    return TrackerStore(root).update_row(sheet, row_id, patch)


def delete_row(sheet: str, row_id: str, *, root: Path | None = None) -> bool:
    return TrackerStore(root).delete_row(sheet, row_id)


def export_employee_bundle(employee_id: str, *, root: Path | None = None) -> bytes:
    return TrackerStore(root).export_employee_bundle(employee_id)


def query_rows(params: RowQuery | Mapping[str, object], *, root: Path | None = None) -> pd.DataFrame:
    return TrackerStore(root).query(params)


def tracker_healthcheck(root: Path | None = None) -> PersistHealth:
    return TrackerStore(root).healthcheck()
