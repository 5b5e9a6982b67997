from __future__ import annotations

import collections
import threading
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ItemTally:
    attempts: int = 0
    failures: int = 0
    total_duration_s: float = 0.0

    @property
    def mean_duration_s(self) -> float:
        if self.attempts == 0:
            return 0.0
        return self.total_duration_s / self.attempts


@dataclass(frozen=True)
class StatisticsSnapshot:
    total_attempted: int
    total_failed: int
    per_item: dict[str, ItemTally] = field(default_factory=dict)

    @property
    def total_succeeded(self) -> int:
        return self.total_attempted - self.total_failed


class RunStatistics:
    """Attempt/failure counters shared by every worker of a single run."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._attempted = 0
        self._failed = 0
        self._attempts: collections.Counter[str] = collections.Counter()
        self._failures: collections.Counter[str] = collections.Counter()
        self._durations: collections.defaultdict[str, float] = collections.defaultdict(float)

    def record(self, identifier: str, success: bool, duration_s: float = 0.0) -> None:
        with self._lock:
            self._attempted += 1
            self._attempts[identifier] += 1
            self._durations[identifier] += duration_s
            if not success:
                self._failed += 1
                self._failures[identifier] += 1

    @property
    def total_attempted(self) -> int:
        with self._lock:
            return self._attempted

    @property
    def total_failed(self) -> int:
        with self._lock:
            return self._failed

    def snapshot(self) -> StatisticsSnapshot:
        with self._lock:
            per_item = {
                identifier: ItemTally(
                    attempts=attempts,
                    failures=self._failures[identifier],
                    total_duration_s=self._durations[identifier],
                )
                for identifier, attempts in self._attempts.items()
            }
            return StatisticsSnapshot(
                total_attempted=self._attempted,
                total_failed=self._failed,
                per_item=per_item,
            )


__all__ = ["ItemTally", "RunStatistics", "StatisticsSnapshot"]
