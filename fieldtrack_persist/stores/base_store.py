"""
RESPONSIBILITIES
- Define shared interfaces and exceptions for the XLSX-backed record store.
- Outline the workflow for init/query/healthcheck used by concrete stores.
PROCESS OVERVIEW
1. init_store -> resolve target path, ingest uploads, ensure the workbook skeleton exists.
2. list/create/update/delete -> run as serialized jobs against a freshly loaded workbook.
3. query -> filter the in-memory frame built from one sheet's records.
4. healthcheck -> verify dependencies, directory write access, and sheet presence.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping


class StoreError(RuntimeError):
    """Base exception type for persistence-layer failures."""


class StoreInitializationError(StoreError):
    """Raised when a store cannot be initialized due to missing prerequisites."""


class StoreValidationError(StoreError):
    """Raised when input data fails validation rules (e.g. missing natural key)."""


class StoreDuplicateKeyError(StoreError):
    """Raised when a natural key or identifier already exists in the sheet."""


class StoreNotFoundError(StoreError):
    """Raised when no row, sheet or employee matches the request."""


class StoreSchemaError(StoreError):
    """Raised when an expected sheet is absent from the workbook."""


class StoreIOError(StoreError):
    """Raised when the master workbook cannot be read or written."""


@dataclass(slots=True)
class PersistHealth:
    """Structured report produced by health checks."""

    dependencies: dict[str, bool]
    writable_paths: dict[str, bool]
    missing_sheets: list[str]
    issues: list[str] = field(default_factory=list)

    def is_healthy(self) -> bool:
        """Return True when no issues are observed."""

        return not self.issues and not self.missing_sheets and all(self.dependencies.values()) and all(
            self.writable_paths.values()
        )


class BaseStore(ABC):
    """Abstract class shared by concrete XLSX-backed stores."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def init_store(self) -> Path:
        """Ensure backing workbook exists, returning absolute path."""

    @abstractmethod
    def query(self, params: Mapping[str, object]) -> object:
        """Run a query and return results (usually a pandas.DataFrame)."""

    @abstractmethod
    def healthcheck(self) -> PersistHealth:
        """Run diagnostics for the store and return a structured report."""
