from __future__ import annotations


class StressError(Exception):
    """Base class for errors raised by the stress harness."""


class ConfigurationError(StressError):
    """Raised when the run cannot start: bad workload file or runtime binary."""


class QueueClosed(StressError):
    """Raised when pushing to, or closing, a queue that is already closed."""


__all__ = ["StressError", "ConfigurationError", "QueueClosed"]
