"""Typer based command line entry points for FieldTrack."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import typer

from fieldtrack.core.logger import get_logger
from fieldtrack_persist.schemas.records import RowQuery
from fieldtrack_persist.stores.base_store import (
    StoreDuplicateKeyError,
    StoreError,
    StoreNotFoundError,
    StoreSchemaError,
    StoreValidationError,
)
from fieldtrack_persist.stores.tracker_store import TrackerStore
from fieldtrack_persist.utils.derived import parse_any_date
from fieldtrack_persist.utils.serializer import shutdown_serializers

app = typer.Typer(help="Manage the FieldTrack master workbook.")

RootOption = typer.Option(None, "--root", help="Alternate persistence root (defaults to ~/FieldTrack).")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")
    get_logger().setLevel(level_value)


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _parse_fields(fields: List[str]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for item in fields:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected KEY=VALUE, got: {item}")
        parsed[key.strip()] = value
    return parsed


@contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except (StoreValidationError, StoreDuplicateKeyError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc
    except (StoreNotFoundError, StoreSchemaError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=3) from exc
    except StoreError as exc:
        get_logger().error("fieldtrack.cli store_error: %s", exc, exc_info=True)
        typer.secho(f"Store operation failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    finally:
        shutdown_serializers()


@app.command("init")
def init_command(root: Optional[Path] = RootOption) -> None:
    """Ensure the master workbook exists (promoting uploads first)."""

    with _store_errors():
        path = TrackerStore(root).init_store()
    typer.echo(f"master workbook ready: {path}")


@app.command("ingest")
def ingest_command(root: Optional[Path] = RootOption) -> None:
    """Promote the newest uploaded workbook when it is newer than the master."""

    with _store_errors():
        result = TrackerStore(root).ingest_uploads()
    _echo_json(result.to_dict())


@app.command("status")
def status_command(root: Optional[Path] = RootOption) -> None:
    """Show master workbook location and size."""

    with _store_errors():
        status = TrackerStore(root).status()
    _echo_json(status.to_dict())


@app.command("sheets")
def sheets_command(root: Optional[Path] = RootOption) -> None:
    """List sheet names in the master workbook."""

    with _store_errors():
        names = TrackerStore(root).sheet_names()
    for name in names:
        typer.echo(name)


@app.command("list")
def list_command(
    sheet: str = typer.Argument(..., help="Sheet name, e.g. profiles."),
    page: int = typer.Option(1, help="1-indexed page."),
    page_size: Optional[int] = typer.Option(None, help="Rows per page (1-500, defaults to the configured size)."),
    root: Optional[Path] = RootOption,
) -> None:
    """Print one page of a sheet as JSON."""

    with _store_errors():
        result = TrackerStore(root).list_rows(sheet, page, page_size)
    _echo_json(result.to_dict())


@app.command("create")
def create_command(
    sheet: str = typer.Argument(..., help="Sheet name."),
    field: List[str] = typer.Option([], "--field", "-f", help="Column value as KEY=VALUE (repeatable)."),
    id_prefix: Optional[str] = typer.Option(None, help="Id prefix for sheets without a configured one."),
    root: Optional[Path] = RootOption,
) -> None:
    """Append a row and print the stored record."""

    data = _parse_fields(field)
    with _store_errors():
        record = TrackerStore(root).create_row(sheet, data, id_prefix=id_prefix)
    _echo_json(record)


@app.command("update")
def update_command(
    sheet: str = typer.Argument(..., help="Sheet name."),
    row_id: str = typer.Argument(..., help="Row id (Location for Sites)."),
    field: List[str] = typer.Option([], "--field", "-f", help="Column value as KEY=VALUE (repeatable)."),
    root: Optional[Path] = RootOption,
) -> None:
    """Patch the given columns of one row."""

    patch = _parse_fields(field)
    if not patch:
        raise typer.BadParameter("At least one --field is required")
    with _store_errors():
        record = TrackerStore(root).update_row(sheet, row_id, patch)
    _echo_json(record)


@app.command("delete")
def delete_command(
    sheet: str = typer.Argument(..., help="Sheet name."),
    row_id: str = typer.Argument(..., help="Row id (Location for Sites)."),
    root: Optional[Path] = RootOption,
) -> None:
    """Delete one row."""

    with _store_errors():
        TrackerStore(root).delete_row(sheet, row_id)
    typer.echo(f"deleted {row_id} from {sheet}")


@app.command("export")
def export_command(
    employee_id: str = typer.Argument(..., help="Employee id, e.g. EMP-00001."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Target .xlsx path."),
    root: Optional[Path] = RootOption,
) -> None:
    """Write one employee's bundle workbook."""

    with _store_errors():
        payload = TrackerStore(root).export_employee_bundle(employee_id)
    target = output or Path(f"{employee_id}_bundle.xlsx")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(payload)
    typer.echo(f"bundle written: {target}")


@app.command("query")
def query_command(
    sheet: str = typer.Argument(..., help="Sheet name."),
    where: List[str] = typer.Option([], "--where", "-w", help="Equality filter as COLUMN=VALUE (repeatable)."),
    date_column: Optional[str] = typer.Option(None, help="Column used by --from/--to."),
    from_date: Optional[str] = typer.Option(None, "--from", help="Start date inclusive."),
    to_date: Optional[str] = typer.Option(None, "--to", help="End date inclusive."),
    limit: int = typer.Option(20, help="Preview row limit."),
    root: Optional[Path] = RootOption,
) -> None:
    """Run a filtered query and show a quick preview."""

    query = RowQuery(sheet=sheet, equals=_parse_fields(where), date_column=date_column)
    for raw, attr in ((from_date, "start_date"), (to_date, "end_date")):
        if raw:
            parsed = parse_any_date(raw)
            if parsed is None:
                raise typer.BadParameter(f"Invalid date: {raw}")
            setattr(query, attr, parsed)

    with _store_errors():
        frame = TrackerStore(root).query(query)
    typer.echo(f"Matched {len(frame)} rows")
    if not frame.empty:
        typer.echo(frame.head(limit).to_string(index=False))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
