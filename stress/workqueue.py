from __future__ import annotations

import collections
import threading
import time
from typing import Generic, Optional, TypeVar

from .errors import QueueClosed

T = TypeVar("T")


class WorkQueue(Generic[T]):
    """Bounded FIFO with a one-shot close.

    ``put`` blocks while the queue is full. ``get`` blocks while it is empty
    and open; once closed it hands out whatever is still buffered and then
    returns ``None``.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("queue capacity must be >= 1")
        self._capacity = capacity
        self._items: collections.deque[T] = collections.deque()
        self._closed = False
        self._cond = threading.Condition()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def put(self, item: T, timeout: float | None = None) -> bool:
        """Append ``item``; return False if ``timeout`` expired while full."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while True:
                if self._closed:
                    raise QueueClosed("cannot put to a closed queue")
                if len(self._items) < self._capacity:
                    break
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._cond.wait(remaining)
            self._items.append(item)
            self._cond.notify_all()
            return True

    def get(self) -> Optional[T]:
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if not self._items:
                return None
            item = self._items.popleft()
            self._cond.notify_all()
            return item

    def close(self) -> None:
        with self._cond:
            if self._closed:
                raise QueueClosed("queue already closed")
            self._closed = True
            self._cond.notify_all()


__all__ = ["WorkQueue"]
