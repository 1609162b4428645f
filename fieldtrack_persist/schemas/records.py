"""
RESPONSIBILITIES
- Typed containers returned by the tracker store's public operations.
- to_dict() helpers so transports can serialize results without knowing the types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import MutableMapping


@dataclass(slots=True)
class RowPage:
    total: int
    page: int
    page_size: int
    items: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> MutableMapping[str, object]:
        return {
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "items": [dict(item) for item in self.items],
        }


@dataclass(slots=True)
class IngestResult:
    synced: bool
    source: Path | None = None
    error: str | None = None

    def to_dict(self) -> MutableMapping[str, object]:
        return {
            "synced": self.synced,
            "from": str(self.source) if self.source else "",
            "error": self.error or "",
        }


@dataclass(slots=True)
class MasterStatus:
    path: Path
    bytes: int
    created: bool = False
    ingest: IngestResult = field(default_factory=lambda: IngestResult(synced=False))

    def to_dict(self) -> MutableMapping[str, object]:
        payload: MutableMapping[str, object] = {
            "exists": True,
            "path": str(self.path),
            "bytes": self.bytes,
            "created": self.created,
        }
        payload.update(self.ingest.to_dict())
        return payload


@dataclass(slots=True)
class RowQuery:
    """Caller-side filters applied to one sheet's records."""

    sheet: str
    equals: dict[str, str] = field(default_factory=dict)
    date_column: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    def to_dict(self) -> MutableMapping[str, object]:
        return {
            "sheet": self.sheet,
            "equals": dict(self.equals),
            "date_column": self.date_column,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }
