"""
RESPONSIBILITIES
- Hand stores and tools a "fieldtrack.<name>" logger tied to their tracker root.
PROCESS OVERVIEW
1. ensure_structure(root) guarantees <root>/logs exists.
2. The first caller in a process decides where app.log lives; later roots share it.
3. The child logger inherits the core handlers and level.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fieldtrack.core.logger import get_logger as core_get_logger

from .paths import ensure_structure


def get_logger(name: str, root: Path | None = None) -> logging.Logger:
    """Child of the core fieldtrack logger named *name*."""

    directories = ensure_structure(root)
    base_logger = core_get_logger(directories["logs"])
    return base_logger.getChild(name)
