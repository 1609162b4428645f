"""
Persistence facade exposing the XLSX-backed tracker store.
"""

from .schemas.records import IngestResult, MasterStatus, RowPage, RowQuery
from .stores.base_store import (
    PersistHealth,
    StoreDuplicateKeyError,
    StoreError,
    StoreInitializationError,
    StoreIOError,
    StoreNotFoundError,
    StoreSchemaError,
    StoreValidationError,
)
from .stores.tracker_store import (
    TrackerStore,
    create_row,
    delete_row,
    export_employee_bundle,
    init_tracker_store,
    list_rows,
    query_rows,
    tracker_healthcheck,
    update_row,
)

__all__ = [
    "TrackerStore",
    "RowPage",
    "RowQuery",
    "MasterStatus",
    "IngestResult",
    "PersistHealth",
    "StoreError",
    "StoreInitializationError",
    "StoreValidationError",
    "StoreDuplicateKeyError",
    "StoreNotFoundError",
    "StoreSchemaError",
    "StoreIOError",
    "init_tracker_store",
    "list_rows",
    "create_row",
    "update_row",
    "delete_row",
    "export_employee_bundle",
    "query_rows",
    "tracker_healthcheck",
]
