"""Fixed-size worker pool draining a bounded task queue."""
from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Generic, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_STOP = object()


class WorkerPool(Generic[T]):
    """Run ``handler`` for each submitted item on ``size`` worker threads.

    The queue holds at most ``size`` pending items, so ``submit`` blocks once
    every worker is busy and the queue is full. ``close`` stops intake;
    ``join`` waits for every queued item to finish and every worker to exit.
    """

    def __init__(
        self,
        size: int,
        handler: Callable[[T], object],
        *,
        on_error: Callable[[T, BaseException], None] | None = None,
        name: str = "acl-worker",
    ):
        if not isinstance(size, int) or isinstance(size, bool) or size < 1:
            raise ValueError(f"worker pool size must be an integer >= 1, got {size!r}")
        self.size = size
        self._handler = handler
        self._on_error = on_error
        self._name = name
        self._queue: queue.Queue = queue.Queue(maxsize=size)
        self._threads: list[threading.Thread] = []
        self._closed = False

    def start(self) -> WorkerPool[T]:
        if self._threads:
            raise RuntimeError("worker pool already started")
        for index in range(self.size):
            thread = threading.Thread(target=self._run, name=f"{self._name}-{index}")
            thread.start()
            self._threads.append(thread)
        LOGGER.debug("Started %d workers", self.size)
        return self

    def submit(self, item: T) -> None:
        """Queue ``item``, blocking while the queue is full."""
        if self._closed:
            raise RuntimeError("cannot submit to a closed worker pool")
        self._queue.put(item)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # One stop marker per worker, queued behind all pending items.
        for _ in self._threads:
            self._queue.put(_STOP)

    def join(self) -> None:
        for thread in self._threads:
            thread.join()
        LOGGER.debug("All %d workers exited", len(self._threads))

    def __enter__(self) -> WorkerPool[T]:
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        self.close()
        self.join()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._handle(item)
            finally:
                self._queue.task_done()

    def _handle(self, item: T) -> None:
        try:
            self._handler(item)
        except Exception as exc:
            LOGGER.exception("Worker handler raised for %r", item)
            if self._on_error is not None:
                self._on_error(item, exc)


__all__ = ["WorkerPool"]
