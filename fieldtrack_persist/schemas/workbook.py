"""
RESPONSIBILITIES
- Hold one loaded workbook as index-addressed lists of rows.
- Offer the structural edits reconciliation needs (column insert/move, row append/delete).
PROCESS OVERVIEW
1. excel_io.read_workbook() builds a Workbook from an .xlsx file.
2. Reconciler, codec and sequencer edit Sheet.rows in place by index.
3. excel_io.write_workbook() serializes the Workbook back to disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Sequence


@dataclass(slots=True)
class Sheet:
    """Ordered rows of one worksheet; ``rows[0]`` is the header row."""

    name: str
    rows: list[list[object]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.rows:
            self.rows.append([])

    @property
    def header(self) -> list[object]:
        return self.rows[0]

    @property
    def row_count(self) -> int:
        """Number of data rows (header excluded)."""

        return len(self.rows) - 1

    def data_indexes(self) -> range:
        return range(1, len(self.rows))

    def width(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    def cell(self, row_index: int, col_index: int) -> object:
        row = self.rows[row_index]
        if col_index >= len(row):
            return None
        return row[col_index]

    def set_cell(self, row_index: int, col_index: int, value: object) -> None:
        row = self.rows[row_index]
        if col_index >= len(row):
            row.extend([None] * (col_index + 1 - len(row)))
        row[col_index] = value

    def insert_column(self, index: int, values: Sequence[object]) -> None:
        """Insert a column at *index*; ``values[0]`` is the header text."""

        for row_index, row in enumerate(self.rows):
            if len(row) < index:
                row.extend([None] * (index - len(row)))
            value = values[row_index] if row_index < len(values) else None
            row.insert(index, value)

    def pop_column(self, index: int) -> list[object]:
        popped: list[object] = []
        for row in self.rows:
            if index < len(row):
                popped.append(row.pop(index))
            else:
                popped.append(None)
        return popped

    def move_column(self, source: int, target: int) -> None:
        values = self.pop_column(source)
        self.insert_column(target, values)

    def append_row(self, values: Sequence[object]) -> int:
        self.rows.append(list(values))
        return len(self.rows) - 1

    def delete_row(self, row_index: int) -> None:
        if row_index < 1:
            raise IndexError("header row cannot be deleted")
        del self.rows[row_index]


@dataclass(slots=True)
class Workbook:
    """Ordered collection of sheets loaded from one master file."""

    path: Path
    sheets: dict[str, Sheet] = field(default_factory=dict)

    def __iter__(self) -> Iterator[Sheet]:
        return iter(self.sheets.values())

    def __contains__(self, name: object) -> bool:
        return name in self.sheets

    @property
    def sheet_names(self) -> list[str]:
        return list(self.sheets)

    def get(self, name: str) -> Sheet | None:
        return self.sheets.get(name)

    def add_sheet(self, name: str, header: Sequence[object] = ()) -> Sheet:
        sheet = Sheet(name=name, rows=[list(header)])
        self.sheets[name] = sheet
        return sheet
