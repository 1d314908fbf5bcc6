"""Bounded worker pool behaviour."""
from __future__ import annotations

import threading
import time

import pytest

from backend.mutator.pool import WorkerPool


@pytest.mark.parametrize("size", [0, -3, True, "4"])
def test_invalid_size_rejected(size):
    with pytest.raises(ValueError):
        WorkerPool(size, lambda item: None)


def test_all_items_processed_before_join_returns():
    done: list[int] = []
    lock = threading.Lock()

    def _handle(item: int) -> None:
        time.sleep(0.001)
        with lock:
            done.append(item)

    with WorkerPool(4, _handle) as pool:
        for item in range(50):
            pool.submit(item)

    assert sorted(done) == list(range(50))


def test_in_flight_never_exceeds_size():
    size = 3
    active = 0
    peak = 0
    lock = threading.Lock()

    def _handle(item: int) -> None:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.01)
        with lock:
            active -= 1

    with WorkerPool(size, _handle) as pool:
        for item in range(30):
            pool.submit(item)

    assert 1 <= peak <= size


def test_submit_blocks_when_workers_busy_and_queue_full():
    release = threading.Event()
    pool = WorkerPool(1, lambda item: release.wait(5)).start()
    pool.submit("busy")  # taken by the only worker
    time.sleep(0.05)
    pool.submit("queued")  # fills the queue (maxsize == 1)

    blocked = threading.Thread(target=pool.submit, args=("blocked",))
    blocked.start()
    blocked.join(0.2)
    assert blocked.is_alive()

    release.set()
    blocked.join(5)
    assert not blocked.is_alive()
    pool.close()
    pool.join()


def test_handler_exception_reported_and_worker_survives():
    errors: list[tuple[int, str]] = []
    handled: list[int] = []

    def _handle(item: int) -> None:
        if item == 2:
            raise RuntimeError("boom")
        handled.append(item)

    with WorkerPool(1, _handle, on_error=lambda item, exc: errors.append((item, str(exc)))) as pool:
        for item in range(5):
            pool.submit(item)

    assert errors == [(2, "boom")]
    assert handled == [0, 1, 3, 4]


def test_submit_after_close_raises():
    pool = WorkerPool(2, lambda item: None).start()
    pool.close()
    with pytest.raises(RuntimeError):
        pool.submit(1)
    pool.join()
