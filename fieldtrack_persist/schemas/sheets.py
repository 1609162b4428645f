"""
RESPONSIBILITIES
- Static table of the four tracker sheets: canonical columns, aliases and modes.
- Per-sheet behaviour flags (id prefix, natural key, derived fields).
PROCESS OVERVIEW
1. The reconciler walks SheetSchema.columns to normalize headers.
2. The tracker store reads id_prefix / natural_key to pick identity rules.
3. The derived-field computer reads the date/group settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


PROFILES_SHEET = "profiles"
ENGAGEMENTS_SHEET = "Engagements"
SITES_SHEET = "Sites"
SCHEDULE_SHEET = "Schedule"

ID_COLUMN = "id"
EMPLOYEE_NAME_COLUMN = "Employee Name"
EMPLOYEE_ID_COLUMN = "Employee ID"
SITE_COLUMN = "Site Engaged"
LOCATION_COLUMN = "Location"
START_COLUMN = "Starting Date"
END_COLUMN = "End Date"
DURATION_COLUMN = "Duration (Days)"
STATUS_COLUMN = "status"


class ReconcileMode(str, Enum):
    CANONICAL_POSITION = "canonical-position"
    APPEND_IF_MISSING = "append-if-missing"


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    aliases: tuple[str, ...] = ()
    position: int | None = None


@dataclass(frozen=True)
class SheetSchema:
    name: str
    mode: ReconcileMode
    columns: tuple[ColumnSpec, ...]
    id_prefix: str | None = None
    natural_key: str | None = None
    derived: bool = False
    start_aliases: tuple[str, ...] = ()
    end_aliases: tuple[str, ...] = ()
    group_column: str | None = None
    owner_pattern: str | None = None

    @property
    def header(self) -> list[str]:
        return [column.name for column in self.columns]


PROFILES_SCHEMA = SheetSchema(
    name=PROFILES_SHEET,
    mode=ReconcileMode.CANONICAL_POSITION,
    columns=(
        ColumnSpec(ID_COLUMN, ("ID", "Id"), position=0),
        ColumnSpec(EMPLOYEE_NAME_COLUMN, ("EmployeeName", "Name", "Employee  Name"), position=1),
        ColumnSpec("Designation", ("Designations", "Position", "Role"), position=2),
    ),
    id_prefix="EMP",
)

ENGAGEMENTS_SCHEMA = SheetSchema(
    name=ENGAGEMENTS_SHEET,
    mode=ReconcileMode.APPEND_IF_MISSING,
    columns=(
        ColumnSpec(EMPLOYEE_NAME_COLUMN, ("Emp Name", "EmployeeName", "Name")),
        ColumnSpec(SITE_COLUMN, ("Site", "SiteEngaged", "Location")),
        ColumnSpec(START_COLUMN, ("Start Date", "StartDate")),
        ColumnSpec(END_COLUMN, ("Ending Date", "EndDate")),
        ColumnSpec(DURATION_COLUMN, ("Duration", "Days", "Duration Days")),
        ColumnSpec(STATUS_COLUMN, ("Status", "Phase")),
        ColumnSpec(ID_COLUMN, ("ID",)),
        ColumnSpec(EMPLOYEE_ID_COLUMN, ("Emp ID", "EmployeeID")),
    ),
    id_prefix="ENG",
    derived=True,
    start_aliases=(START_COLUMN,),
    end_aliases=(END_COLUMN,),
)

SITES_SCHEMA = SheetSchema(
    name=SITES_SHEET,
    mode=ReconcileMode.CANONICAL_POSITION,
    columns=(ColumnSpec(LOCATION_COLUMN, ("location", "Site", "Site Name"), position=0),),
    natural_key=LOCATION_COLUMN,
)

SCHEDULE_SCHEMA = SheetSchema(
    name=SCHEDULE_SHEET,
    mode=ReconcileMode.APPEND_IF_MISSING,
    columns=(ColumnSpec(ID_COLUMN, ("ID", "Id")),),
    id_prefix="SCH",
    derived=True,
    start_aliases=("Start Date", START_COLUMN, "Start"),
    end_aliases=(END_COLUMN, "Finish Date", "Finish", "Ending Date"),
    group_column="Group",
    owner_pattern=r"responsibility|owner|assigned",
)

SHEET_SCHEMAS: dict[str, SheetSchema] = {
    schema.name: schema
    for schema in (PROFILES_SCHEMA, ENGAGEMENTS_SCHEMA, SITES_SCHEMA, SCHEDULE_SCHEMA)
}


def schema_for(sheet_name: str) -> SheetSchema | None:
    return SHEET_SCHEMAS.get(sheet_name)

