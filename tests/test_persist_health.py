from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from fieldtrack.core.logger import get_logger
from tools.persist_health import app, persist_healthcheck


def test_healthcheck_creates_master_and_passes(store_root: Path, master_file: Path) -> None:
    results = persist_healthcheck(store_root)

    assert set(results) == {"tracker"}
    assert results["tracker"].is_healthy()
    assert master_file.exists()


def test_cli_reports_missing_sheets(tmp_path: Path, store_root: Path, master_file: Path, write_xlsx) -> None:
    get_logger(tmp_path / "logs")
    write_xlsx(master_file, {"profiles": [["id"]], "Sites": [["Location"]]})

    result = CliRunner().invoke(app, ["--root", str(store_root)])

    assert result.exit_code == 1
    assert "[FAIL] tracker store" in result.output
    assert "missing sheets: Engagements, Schedule" in result.output
