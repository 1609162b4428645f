"""
RESPONSIBILITIES
- Compute read-time status and inclusive duration for engagements and schedule rows.
- Parse the date encodings found in hand-edited sheets.
PROCESS OVERVIEW
1. parse_any_date() tries a spreadsheet serial, an ISO prefix, then a generic parse.
2. derive_status_duration() applies Completed/Active rules and the inclusive day count.
3. compute_engagement_fields()/compute_schedule_fields() return decorated copies.
Open items measure their duration against *today*, so the value grows daily.
Nothing here is written back to the workbook.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Mapping, Sequence

import pandas as pd

from fieldtrack_persist.schemas.sheets import (
    DURATION_COLUMN,
    END_COLUMN,
    START_COLUMN,
    STATUS_COLUMN,
    SheetSchema,
)
from fieldtrack_persist.utils.row_codec import normalize_key, text

SERIAL_EPOCH = date(1899, 12, 30)
SERIAL_MIN = 20000
SERIAL_MAX = 60000

STATUS_COMPLETED = "Completed"
STATUS_ACTIVE = "Active"

_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_NUMERIC = re.compile(r"^[+-]?\d+(\.\d+)?$")
# Words pandas resolves against the wall clock.
_RELATIVE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


def _from_serial(token: str) -> date | None:
    if not _NUMERIC.match(token):
        return None
    serial = float(token)
    if not SERIAL_MIN < serial < SERIAL_MAX:
        return None
    return SERIAL_EPOCH + timedelta(days=int(serial))


def parse_any_date(value: object) -> date | None:
    """Return the calendar date encoded by *value*, or None."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    token = text(value)
    if not token:
        return None

    if _NUMERIC.match(token):
        return _from_serial(token)

    iso = _ISO_PREFIX.match(token)
    if iso:
        try:
            return date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))
        except ValueError:
            return None

    if token.lower() in _RELATIVE_WORDS:
        return None

    try:
        parsed = pd.to_datetime(token, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date()


def to_iso(value: date | None) -> str:
    return value.isoformat() if value else ""


def days_inclusive(start: date, end: date) -> int:
    return (end - start).days + 1


def derive_status_duration(start: date | None, end: date | None, today: date) -> tuple[str, str]:
    if end:
        status = STATUS_COMPLETED
    elif start:
        status = STATUS_ACTIVE
    else:
        status = ""
    if start is None:
        return status, ""
    return status, str(days_inclusive(start, end or today))


def _lookup_key(record: Mapping[str, str], candidates: Sequence[str]) -> str | None:
    by_norm: dict[str, str] = {}
    for key in record:
        by_norm.setdefault(normalize_key(key), key)
    for candidate in candidates:
        key = by_norm.get(normalize_key(candidate))
        if key is not None:
            return key
    return None


def compute_engagement_fields(record: Mapping[str, str], today: date | None = None) -> dict[str, str]:
    today = today or date.today()
    raw_start = record.get(START_COLUMN, "")
    start = parse_any_date(raw_start)
    end = parse_any_date(record.get(END_COLUMN, ""))
    status, duration = derive_status_duration(start, end, today)

    decorated = dict(record)
    decorated[START_COLUMN] = to_iso(start) if start else text(raw_start)[:10]
    decorated[END_COLUMN] = to_iso(end)
    decorated[DURATION_COLUMN] = duration
    decorated[STATUS_COLUMN] = status
    return decorated


def compute_schedule_fields(
    record: Mapping[str, str],
    schema: SheetSchema,
    today: date | None = None,
) -> dict[str, str]:
    today = today or date.today()
    decorated = dict(record)
    start_key = _lookup_key(record, schema.start_aliases)
    end_key = _lookup_key(record, schema.end_aliases)
    start = parse_any_date(record[start_key]) if start_key else None
    end = parse_any_date(record[end_key]) if end_key else None
    status, duration = derive_status_duration(start, end, today)

    if schema.group_column:
        group_key = _lookup_key(record, (schema.group_column,))
        if not (group_key and text(record[group_key])):
            status = ""

    if start_key and start:
        decorated[start_key] = to_iso(start)
    if end_key and end:
        decorated[end_key] = to_iso(end)
    decorated[DURATION_COLUMN] = duration
    decorated[STATUS_COLUMN] = status
    return decorated


def compute_fields(record: Mapping[str, str], schema: SheetSchema | None, today: date | None = None) -> dict[str, str]:
    """Decorate *record* according to its sheet; sheets without derived fields pass through."""

    if schema is None or not schema.derived:
        return dict(record)
    if schema.group_column:
        return compute_schedule_fields(record, schema, today)
    return compute_engagement_fields(record, today)
