"""
Container runtime stress harness.

Repeatedly launches containers through a runtime CLI (``docker run`` by
default) from a fixed pool of workers, stopping after a wall-clock budget or a
number of launches, and reports throughput and failure counts.
"""

from .coordinator import RunCoordinator, RunResult, run_load
from .dispatcher import StopCondition
from .errors import ConfigurationError, QueueClosed, StressError
from .invoker import Invoker, InvokerConfig, Outcome
from .stats import RunStatistics
from .workload import WorkItem, load_catalog

__all__ = [
    "ConfigurationError",
    "Invoker",
    "InvokerConfig",
    "Outcome",
    "QueueClosed",
    "RunCoordinator",
    "RunResult",
    "RunStatistics",
    "StopCondition",
    "StressError",
    "WorkItem",
    "load_catalog",
    "run_load",
]
