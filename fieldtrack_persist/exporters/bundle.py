"""
RESPONSIBILITIES
- Join one employee's profile, engagements, sites and schedule rows.
- Render the join as a read-only four-sheet .xlsx payload.
PROCESS OVERVIEW
1. Locate the profile row by id (case-insensitive) or raise StoreNotFoundError.
2. Collect engagements whose Employee ID matches, with derived fields applied.
3. Collect Sites rows whose Location is among the engaged sites.
4. Collect Schedule rows whose owner column equals the id or mentions the name.
5. bundle_to_bytes() writes each set under its own header row.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date

from fieldtrack_persist.schemas.sheets import (
    EMPLOYEE_ID_COLUMN,
    EMPLOYEE_NAME_COLUMN,
    ENGAGEMENTS_SCHEMA,
    ENGAGEMENTS_SHEET,
    ID_COLUMN,
    LOCATION_COLUMN,
    PROFILES_SHEET,
    SCHEDULE_SCHEMA,
    SCHEDULE_SHEET,
    SITE_COLUMN,
    SITES_SHEET,
)
from fieldtrack_persist.schemas.workbook import Sheet, Workbook
from fieldtrack_persist.stores.base_store import StoreNotFoundError, StoreSchemaError
from fieldtrack_persist.utils.derived import compute_fields
from fieldtrack_persist.utils.excel_io import workbook_bytes
from fieldtrack_persist.utils.reconcile import reconcile_sheet
from fieldtrack_persist.utils.row_codec import normalize_key, records, text

PROFILE_OUTPUT = "Employee_Profile"
ENGAGEMENTS_OUTPUT = "Engagements"
SITES_OUTPUT = "Sites"
SCHEDULE_OUTPUT = "Schedule"


@dataclass(slots=True)
class EmployeeBundle:
    employee_id: str
    profile: dict[str, str]
    engagements: list[dict[str, str]] = field(default_factory=list)
    sites: list[dict[str, str]] = field(default_factory=list)
    schedule: list[dict[str, str]] = field(default_factory=list)

    def sheets(self) -> dict[str, list[dict[str, str]]]:
        return {
            PROFILE_OUTPUT: [self.profile],
            ENGAGEMENTS_OUTPUT: self.engagements,
            SITES_OUTPUT: self.sites,
            SCHEDULE_OUTPUT: self.schedule,
        }


def _require(workbook: Workbook, name: str) -> Sheet:
    sheet = workbook.get(name)
    if sheet is None:
        raise StoreSchemaError(f"Sheet not found: {name}")
    reconcile_sheet(sheet)
    return sheet


def _owner_column(sheet: Sheet, pattern: str) -> str | None:
    matcher = re.compile(pattern, re.IGNORECASE)
    for cell in sheet.header:
        name = text(cell)
        if name and matcher.search(name):
            return name
    return None


def build_employee_bundle(workbook: Workbook, employee_id: str, *, today: date | None = None) -> EmployeeBundle:
    profiles = _require(workbook, PROFILES_SHEET)
    engagements = _require(workbook, ENGAGEMENTS_SHEET)
    sites = _require(workbook, SITES_SHEET)
    schedule = workbook.get(SCHEDULE_SHEET)

    wanted = text(employee_id).lower()
    profile = next(
        (record for record in records(profiles) if text(record.get(ID_COLUMN)).lower() == wanted),
        None,
    )
    if profile is None:
        raise StoreNotFoundError(f"Employee not found: {employee_id}")
    employee_name = text(profile.get(EMPLOYEE_NAME_COLUMN)).lower()

    bundle = EmployeeBundle(employee_id=text(employee_id), profile=profile)
    for record in records(engagements):
        if text(record.get(EMPLOYEE_ID_COLUMN)).lower() == wanted:
            bundle.engagements.append(compute_fields(record, ENGAGEMENTS_SCHEMA, today))

    site_keys = {normalize_key(record.get(SITE_COLUMN)) for record in bundle.engagements}
    site_keys.discard("")
    bundle.sites = [
        record for record in records(sites) if normalize_key(record.get(LOCATION_COLUMN)) in site_keys
    ]

    if schedule is not None:
        reconcile_sheet(schedule)
        owner = _owner_column(schedule, SCHEDULE_SCHEMA.owner_pattern or "")
        if owner:
            for record in records(schedule):
                value = text(record.get(owner)).lower()
                if value and (value == wanted or (employee_name and employee_name in value)):
                    bundle.schedule.append(compute_fields(record, SCHEDULE_SCHEMA, today))
    return bundle


def _rows(items: list[dict[str, str]]) -> list[list[object]]:
    if not items:
        return [[]]
    header = list(items[0])
    return [header, *([item.get(key, "") for key in header] for item in items)]


def bundle_to_bytes(bundle: EmployeeBundle) -> bytes:
    return workbook_bytes({name: _rows(items) for name, items in bundle.sheets().items()})
