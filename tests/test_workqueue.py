from __future__ import annotations

import threading
import time

import pytest

from stress.errors import QueueClosed
from stress.workqueue import WorkQueue


def test_fifo_and_drain_after_close() -> None:
    queue: WorkQueue[int] = WorkQueue(3)
    for value in (1, 2, 3):
        assert queue.put(value)
    queue.close()

    assert [queue.get(), queue.get(), queue.get()] == [1, 2, 3]
    assert queue.get() is None
    assert queue.get() is None


def test_put_times_out_when_full() -> None:
    queue: WorkQueue[str] = WorkQueue(1)
    assert queue.put("a")

    started = time.monotonic()
    assert queue.put("b", timeout=0.05) is False
    assert time.monotonic() - started >= 0.04
    assert len(queue) == 1


def test_put_unblocks_when_consumer_takes() -> None:
    queue: WorkQueue[str] = WorkQueue(1)
    queue.put("a")

    def consume() -> None:
        time.sleep(0.05)
        queue.get()

    thread = threading.Thread(target=consume)
    thread.start()
    assert queue.put("b", timeout=2.0)
    thread.join()
    assert queue.get() == "b"


def test_close_wakes_blocked_getters() -> None:
    queue: WorkQueue[str] = WorkQueue(2)
    results: list[object] = []

    threads = [threading.Thread(target=lambda: results.append(queue.get())) for _ in range(3)]
    for thread in threads:
        thread.start()
    time.sleep(0.05)
    queue.close()
    for thread in threads:
        thread.join(timeout=2.0)

    assert results == [None, None, None]


def test_closed_queue_rejects_put_and_second_close() -> None:
    queue: WorkQueue[str] = WorkQueue(1)
    queue.close()
    assert queue.closed

    with pytest.raises(QueueClosed):
        queue.put("a")
    with pytest.raises(QueueClosed):
        queue.close()


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        WorkQueue(0)
