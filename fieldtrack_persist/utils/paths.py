"""
RESPONSIBILITIES
- Lay out the tracker root: store/ for the master, uploads/ for replacements, logs/.
- Answer "where is the master workbook" and "where do uploads land" for the stores.
PROCESS OVERVIEW
1. resolve_root() picks an explicit root or the one from StoreSettings.
2. ensure_structure() creates any missing subdirectory under it.
3. store_file_path()/uploads_dir_path() build on that scaffold.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from fieldtrack.core.settings import load_settings

_DEFAULT_SUBDIRS: tuple[str, ...] = ("store", "uploads", "logs")


def resolve_root(root: str | os.PathLike[str] | None = None) -> Path:
    """Absolute tracker root; None means the settings root."""

    if root is None:
        return load_settings().resolved_root()
    return Path(root).expanduser().resolve()


def ensure_structure(root: str | os.PathLike[str] | None = None, *, subdirs: Iterable[str] | None = None) -> dict[str, Path]:
    """Create the root subdirectories and map each name to its path."""

    base = resolve_root(root)
    resolved: dict[str, Path] = {}
    requested = tuple(subdirs) if subdirs is not None else _DEFAULT_SUBDIRS
    base.mkdir(parents=True, exist_ok=True)
    for name in requested:
        target = base / name
        target.mkdir(parents=True, exist_ok=True)
        resolved[name] = target
    return resolved


def store_file_path(filename: str, root: str | os.PathLike[str] | None = None) -> Path:
    """Path of the master workbook file *filename* inside store/."""

    directories = ensure_structure(root)
    return directories["store"] / filename


def uploads_dir_path(dirname: str = "uploads", root: str | os.PathLike[str] | None = None) -> Path:
    """Directory scanned for newer copies of the master."""

    directories = ensure_structure(root, subdirs=(*_DEFAULT_SUBDIRS, dirname))
    return directories[dirname]
