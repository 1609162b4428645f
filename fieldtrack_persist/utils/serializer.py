"""
RESPONSIBILITIES
- Run store jobs one at a time, in submission order, per master workbook.
- Keep one job's failure confined to its own caller.
PROCESS OVERVIEW
1. serializer_for(path) returns the process-wide serializer for a master file.
2. submit(job) queues the callable on a single worker thread and returns a Future.
3. run(job) submits and waits; a job calling run() on its own serializer executes inline.
There is no priority, cancellation or timeout: a stuck job stalls the queue.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, TypeVar

T = TypeVar("T")

LOGGER = logging.getLogger("fieldtrack.persist.serializer")

_SERIALIZERS: dict[Path, "WriteSerializer"] = {}
_REGISTRY_GUARD = threading.Lock()


class WriteSerializer:
    """FIFO single-flight queue backed by a one-worker executor."""

    def __init__(self, name: str = "fieldtrack-writer") -> None:
        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._local = threading.local()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _execute(self, job: Callable[[], T]) -> T:
        self._local.active = True
        try:
            return job()
        except Exception:
            LOGGER.debug("Job on %s failed", self.name, exc_info=True)
            raise
        finally:
            self._local.active = False

    def submit(self, job: Callable[[], T]) -> Future[T]:
        """Queue *job*; the returned future resolves with its result or exception."""

        return self._executor.submit(self._execute, job)

    def run(self, job: Callable[[], T]) -> T:
        """Run *job* exclusively and return its result."""

        if getattr(self._local, "active", False):
            return job()
        return self.submit(job).result()

    def shutdown(self, wait: bool = True) -> None:
        self._closed = True
        self._executor.shutdown(wait=wait)


def serializer_for(path: Path) -> WriteSerializer:
    """Return the shared serializer guarding the workbook at *path*."""

    key = Path(path).resolve()
    with _REGISTRY_GUARD:
        serializer = _SERIALIZERS.get(key)
        if serializer is None or serializer.closed:
            serializer = WriteSerializer(name=f"fieldtrack-writer-{key.stem}")
            _SERIALIZERS[key] = serializer
        return serializer


def shutdown_serializers(wait: bool = True) -> None:
    with _REGISTRY_GUARD:
        serializers = list(_SERIALIZERS.values())
        _SERIALIZERS.clear()
    for serializer in serializers:
        serializer.shutdown(wait=wait)
