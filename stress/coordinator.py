from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence

from .dispatcher import Dispatcher, StopCondition
from .errors import ConfigurationError
from .invoker import Invoker, InvokerConfig
from .pool import SupportsInvoke, WorkerPool
from .stats import RunStatistics, StatisticsSnapshot
from .workload import WorkItem
from .workqueue import WorkQueue

LOGGER = logging.getLogger("container_stress.coordinator")

InvokerFactory = Callable[[RunStatistics], SupportsInvoke]


@dataclass(frozen=True)
class RunResult:
    statistics: StatisticsSnapshot
    elapsed_s: float
    dispatched: int = 0

    @property
    def total_attempted(self) -> int:
        return self.statistics.total_attempted

    @property
    def total_failed(self) -> int:
        return self.statistics.total_failed

    @property
    def per_second(self) -> float:
        if self.elapsed_s <= 0:
            return 0.0
        return self.total_attempted / self.elapsed_s

    @property
    def seconds_per_attempt(self) -> float:
        if self.total_attempted == 0:
            return 0.0
        return self.elapsed_s / self.total_attempted


class RunCoordinator:
    """Wire queue, workers and dispatcher for one run and wait for the drain."""

    def __init__(
        self,
        catalog: Sequence[WorkItem],
        worker_count: int,
        stop_condition: StopCondition,
        invoker_config: InvokerConfig | None = None,
        invoker_factory: InvokerFactory | None = None,
    ) -> None:
        if not catalog:
            raise ConfigurationError("workload catalog is empty")
        if worker_count < 1:
            raise ConfigurationError("worker count must be >= 1")

        self._catalog = tuple(catalog)
        self._worker_count = worker_count
        self._stop_condition = stop_condition
        self._invoker_config = invoker_config or InvokerConfig()
        self._invoker_factory = invoker_factory
        self._dispatcher: Dispatcher | None = None
        self._pool: WorkerPool | None = None

    def run(self) -> RunResult:
        statistics = RunStatistics()
        if self._invoker_factory is not None:
            invoker = self._invoker_factory(statistics)
        else:
            invoker = Invoker(self._invoker_config, statistics)

        queue: WorkQueue[WorkItem] = WorkQueue(self._worker_count)
        pool = WorkerPool(queue, invoker, self._worker_count)
        dispatcher = Dispatcher(self._catalog, queue, self._stop_condition)
        self._dispatcher = dispatcher
        self._pool = pool

        LOGGER.info(
            "Starting run: %d item(s), %d worker(s), stop after %s",
            len(self._catalog),
            self._worker_count,
            self._stop_condition.describe(),
        )
        started = time.monotonic()
        pool.start()
        dispatcher.start()

        pool.join()
        dispatcher.join()
        elapsed = time.monotonic() - started

        return RunResult(
            statistics=statistics.snapshot(),
            elapsed_s=elapsed,
            dispatched=dispatcher.pushed,
        )

    def stop(self) -> None:
        """Ask the dispatcher to stop producing; in-flight items still finish."""
        if self._dispatcher is not None:
            self._dispatcher.stop()

    def drain(self, timeout: float | None = None) -> bool:
        """Wait for in-flight invocations after ``stop()``; True once every worker exited."""
        if self._pool is None:
            return True
        return self._pool.join(timeout)


def run_load(
    catalog: Sequence[WorkItem],
    worker_count: int,
    stop_condition: StopCondition,
    invoker_config: InvokerConfig | None = None,
    *,
    invoker_factory: InvokerFactory | None = None,
) -> RunResult:
    coordinator = RunCoordinator(
        catalog,
        worker_count,
        stop_condition,
        invoker_config=invoker_config,
        invoker_factory=invoker_factory,
    )
    return coordinator.run()


__all__ = ["InvokerFactory", "RunCoordinator", "RunResult", "run_load"]
