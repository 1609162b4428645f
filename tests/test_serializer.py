"""FIFO single-flight behaviour of the write serializer."""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from fieldtrack_persist.utils.serializer import WriteSerializer, serializer_for, shutdown_serializers


def test_jobs_run_in_submission_order_one_at_a_time() -> None:
    serializer = WriteSerializer()
    gate = threading.Event()
    order: list[int] = []
    active = 0
    overlap = False
    guard = threading.Lock()

    def make_job(n: int):
        def job() -> int:
            nonlocal active, overlap
            with guard:
                active += 1
                overlap = overlap or active > 1
            if n == 0:
                gate.wait(timeout=5)
            time.sleep(0.01)
            order.append(n)
            with guard:
                active -= 1
            return n

        return job

    try:
        futures = [serializer.submit(make_job(n)) for n in range(5)]
        gate.set()
        assert [future.result(timeout=5) for future in futures] == [0, 1, 2, 3, 4]
        assert order == [0, 1, 2, 3, 4]
        assert overlap is False
    finally:
        serializer.shutdown()


def test_failure_only_rejects_its_own_caller() -> None:
    serializer = WriteSerializer()

    def boom() -> None:
        raise ValueError("broken job")

    try:
        failing = serializer.submit(boom)
        following = serializer.submit(lambda: "next")

        with pytest.raises(ValueError, match="broken job"):
            failing.result(timeout=5)
        assert following.result(timeout=5) == "next"
        assert serializer.run(lambda: 42) == 42
    finally:
        serializer.shutdown()


def test_nested_run_executes_inline() -> None:
    serializer = WriteSerializer()
    try:
        assert serializer.run(lambda: serializer.run(lambda: "inner")) == "inner"
    finally:
        serializer.shutdown()


def test_serializer_shared_per_path(tmp_path: Path) -> None:
    first = serializer_for(tmp_path / "data.xlsx")
    second = serializer_for(tmp_path / "." / "data.xlsx")
    other = serializer_for(tmp_path / "other.xlsx")

    assert first is second
    assert first is not other

    shutdown_serializers()
    assert first.closed
    assert serializer_for(tmp_path / "data.xlsx") is not first
