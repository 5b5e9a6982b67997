from __future__ import annotations

import logging
import threading
import time
from typing import Protocol

from .workload import WorkItem
from .workqueue import WorkQueue

LOGGER = logging.getLogger("container_stress.pool")


class SupportsInvoke(Protocol):
    def invoke(self, item: WorkItem) -> object: ...


class WorkerPool:
    """Fixed set of worker threads draining a shared queue until it closes."""

    def __init__(self, queue: WorkQueue[WorkItem], invoker: SupportsInvoke, size: int) -> None:
        if size < 1:
            raise ValueError("worker pool size must be >= 1")
        self._queue = queue
        self._invoker = invoker
        self._size = size
        self._threads: list[threading.Thread] = []

    @property
    def size(self) -> int:
        return self._size

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("worker pool already started")
        for idx in range(self._size):
            thread = threading.Thread(
                target=self._drain,
                name=f"stress-worker-{idx}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
        LOGGER.debug("Started %d worker(s)", self._size)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for every worker; return True once all of them have exited."""
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in self._threads:
            if deadline is None:
                thread.join()
            else:
                thread.join(max(deadline - time.monotonic(), 0.0))
        return not any(thread.is_alive() for thread in self._threads)

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                return
            try:
                self._invoker.invoke(item)
            except Exception:  # noqa: BLE001
                LOGGER.exception("invocation of %s raised", item.identifier)


__all__ = ["SupportsInvoke", "WorkerPool"]
