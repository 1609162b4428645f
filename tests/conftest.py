from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator, Mapping, Sequence

import pytest
from openpyxl import Workbook

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fieldtrack.core import logger as core_logger
from fieldtrack_persist.utils.serializer import shutdown_serializers


@pytest.fixture(autouse=True)
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point the default root at a temp dir and rebuild the logger per test."""

    monkeypatch.setenv("FIELDTRACK_ROOT", str(tmp_path / "default_root"))
    monkeypatch.delenv("FIELDTRACK_CONFIG", raising=False)
    core_logger.reset_logger()
    yield
    shutdown_serializers()
    core_logger.reset_logger()


def _write_xlsx(path: Path, sheets: Mapping[str, Sequence[Sequence[object]]]) -> Path:
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(list(row))
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


@pytest.fixture
def write_xlsx():
    """Write a workbook with one sheet per mapping entry."""

    return _write_xlsx


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    return tmp_path / "persist"


@pytest.fixture
def master_file(store_root: Path) -> Path:
    return store_root / "store" / "data.xlsx"
