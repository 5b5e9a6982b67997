from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Sequence

from .errors import ConfigurationError
from .workload import WorkItem
from .workqueue import WorkQueue

LOGGER = logging.getLogger("container_stress.dispatcher")

# Upper bound on a single blocking put, so stop() is noticed while the queue is full.
POLL_INTERVAL_S = 0.1


@dataclass(frozen=True)
class StopCondition:
    """Either a wall-clock budget or a total number of invocations."""

    duration_s: float | None = None
    max_attempts: int | None = None

    def __post_init__(self) -> None:
        if (self.duration_s is None) == (self.max_attempts is None):
            raise ValueError("exactly one of duration_s or max_attempts must be set")
        if self.duration_s is not None and self.duration_s < 0:
            raise ValueError("duration_s must be >= 0")
        if self.max_attempts is not None and self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")

    @classmethod
    def duration(cls, seconds: float) -> "StopCondition":
        return cls(duration_s=seconds)

    @classmethod
    def attempts(cls, count: int) -> "StopCondition":
        return cls(max_attempts=count)

    def describe(self) -> str:
        if self.max_attempts is not None:
            return f"{self.max_attempts} container(s)"
        return f"{self.duration_s:g}s"


class Dispatcher:
    """Cycle through the catalog, pushing items until the stop condition holds.

    The stop condition is checked before every push. In duration mode a push
    that would land after the deadline is abandoned; in attempt mode the
    dispatcher stops once it has pushed ``max_attempts`` items, all of which
    the workers will invoke. The queue is closed exactly once on the way out.
    """

    def __init__(
        self,
        catalog: Sequence[WorkItem],
        queue: WorkQueue[WorkItem],
        stop_condition: StopCondition,
    ) -> None:
        if not catalog:
            raise ConfigurationError("cannot dispatch an empty catalog")
        self._catalog = tuple(catalog)
        self._queue = queue
        self._stop_condition = stop_condition
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._deadline: float | None = None
        self.pushed = 0

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("dispatcher already started")
        self._thread = threading.Thread(target=self.run, name="stress-dispatcher", daemon=True)
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def stop(self) -> None:
        self._stop_event.set()

    def run(self) -> None:
        if self._stop_condition.duration_s is not None:
            self._deadline = time.monotonic() + self._stop_condition.duration_s
        try:
            for item in itertools.cycle(self._catalog):
                if self._should_stop():
                    break
                if not self._push(item):
                    break
                self.pushed += 1
        finally:
            self._queue.close()
            LOGGER.info("Dispatcher stopped after pushing %d item(s)", self.pushed)

    def _should_stop(self) -> bool:
        if self._stop_event.is_set():
            return True
        max_attempts = self._stop_condition.max_attempts
        if max_attempts is not None:
            return self.pushed >= max_attempts
        return time.monotonic() >= self._deadline

    def _push(self, item: WorkItem) -> bool:
        while True:
            wait = POLL_INTERVAL_S
            if self._deadline is not None:
                remaining = self._deadline - time.monotonic()
                if remaining <= 0:
                    return False
                wait = min(wait, remaining)
            if self._queue.put(item, timeout=wait):
                return True
            if self._stop_event.is_set():
                return False


__all__ = ["POLL_INTERVAL_S", "Dispatcher", "StopCondition"]
