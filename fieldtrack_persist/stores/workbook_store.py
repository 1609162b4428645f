"""
RESPONSIBILITIES
- Own the master workbook file: creation, upload promotion, load and atomic save.
- Never cache a parsed workbook between jobs; each job reloads from disk.
PROCESS OVERVIEW
1. ingest_uploads() promotes the newest uploaded workbook when it is newer than the master.
2. ensure_exists() ingests, then writes a four-sheet skeleton when no master exists.
3. load() parses the whole master into a Workbook.
4. atomic_save() writes a temp file and renames it over the master.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fieldtrack_persist.schemas.records import IngestResult, MasterStatus
from fieldtrack_persist.schemas.sheets import SHEET_SCHEMAS
from fieldtrack_persist.schemas.workbook import Workbook
from fieldtrack_persist.stores.base_store import StoreIOError
from fieldtrack_persist.utils.excel_io import copy_atomic, read_workbook, write_workbook

UPLOAD_SUFFIXES: tuple[str, ...] = (".xlsx", ".xlsm")


class WorkbookStore:
    """File-level access to the master workbook."""

    def __init__(self, master_path: Path, uploads_dir: Path, *, logger: logging.Logger | None = None) -> None:
        self.master_path = master_path
        self.uploads_dir = uploads_dir
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    def newest_upload(self) -> Path | None:
        if not self.uploads_dir.is_dir():
            return None
        candidates = [
            path
            for path in self.uploads_dir.iterdir()
            if path.is_file()
            and path.suffix.lower() in UPLOAD_SUFFIXES
            and not path.name.startswith("~$")
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda path: path.stat().st_mtime)

    def ingest_uploads(self) -> IngestResult:
        """Copy the newest upload over the master when it is newer (or no master exists)."""

        try:
            newest = self.newest_upload()
            if newest is None:
                return IngestResult(synced=False)
            upload_mtime = newest.stat().st_mtime
            if self.master_path.exists() and upload_mtime <= self.master_path.stat().st_mtime:
                return IngestResult(synced=False)
            copy_atomic(newest, self.master_path)
        except OSError as exc:
            self.logger.warning("Upload ingestion failed: %s", exc)
            return IngestResult(synced=False, error=str(exc))
        self.logger.info("Promoted upload %s to master %s", newest, self.master_path)
        return IngestResult(synced=True, source=newest)

    def default_workbook(self) -> Workbook:
        workbook = Workbook(path=self.master_path)
        for name, schema in SHEET_SCHEMAS.items():
            workbook.add_sheet(name, schema.header)
        return workbook

    def ensure_exists(self) -> MasterStatus:
        ingest = self.ingest_uploads()
        created = False
        if not self.master_path.exists():
            self.logger.info("Creating master workbook at %s", self.master_path)
            self.atomic_save(self.default_workbook())
            created = True
        try:
            size = self.master_path.stat().st_size
        except OSError as exc:
            raise StoreIOError(f"Master workbook unavailable: {exc}") from exc
        return MasterStatus(path=self.master_path, bytes=size, created=created, ingest=ingest)

    def load(self) -> Workbook:
        self.logger.debug("Loading master workbook %s", self.master_path)
        return read_workbook(self.master_path)

    def atomic_save(self, workbook: Workbook) -> None:
        write_workbook(workbook, self.master_path)
        self.logger.debug("Saved master workbook %s", self.master_path)

    def sheet_names(self) -> list[str]:
        return self.load().sheet_names
