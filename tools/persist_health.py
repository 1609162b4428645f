"""
RESPONSIBILITIES
- Run dependency and filesystem health checks for the tracker store.
- Provide both a callable API and a small CLI for quick diagnostics.
PROCESS OVERVIEW
1. persist_healthcheck() builds the tracker store and collects its health report.
2. CLI prints status along with missing sheets and issues.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import typer

from fieldtrack_persist.stores.base_store import PersistHealth
from fieldtrack_persist.stores.tracker_store import TrackerStore
from fieldtrack_persist.utils.log import get_logger
from fieldtrack_persist.utils.serializer import shutdown_serializers

app = typer.Typer(help="Run persistence layer health checks.")


def persist_healthcheck(root: Path | None = None) -> Dict[str, PersistHealth]:
    """Return per-store health diagnostic results."""

    logger = get_logger("tools.persist_health", root)
    results: Dict[str, PersistHealth] = {}
    try:
        results["tracker"] = TrackerStore(root).healthcheck()
    except Exception as exc:  # noqa: BLE001 - capture unexpected failures
        logger.error("Healthcheck failed for tracker: %s", exc)
        results["tracker"] = PersistHealth(
            dependencies={},
            writable_paths={},
            missing_sheets=[],
            issues=[str(exc)],
        )
    return results


@app.command("run")
def run_command(
    root: Path | None = typer.Option(None, help="Alternate persistence root."),
) -> None:
    """Execute health checks and pretty-print the outcome."""

    try:
        results = persist_healthcheck(root)
    finally:
        shutdown_serializers()
    failed = False
    for name, health in results.items():
        healthy = health.is_healthy()
        failed = failed or not healthy
        typer.echo(f"[{'OK' if healthy else 'FAIL'}] {name} store")
        if not health.dependencies:
            typer.echo("  dependencies: (not evaluated)")
        else:
            for dep, ok in health.dependencies.items():
                typer.echo(f"  dependency {dep}: {'OK' if ok else 'MISSING'}")
        for path, ok in health.writable_paths.items():
            typer.echo(f"  writable {path}: {'yes' if ok else 'no'}")
        if health.missing_sheets:
            typer.echo(f"  missing sheets: {', '.join(health.missing_sheets)}")
        if health.issues:
            typer.echo("  issues:")
            for issue in health.issues:
                typer.echo(f"    - {issue}")
    if failed:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
