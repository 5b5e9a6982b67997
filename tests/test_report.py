from __future__ import annotations

import pytest

from stress.coordinator import RunResult
from stress.report import build_dataframe, format_breakdown, summary_line
from stress.stats import RunStatistics


def _result(elapsed_s: float = 2.0) -> RunResult:
    stats = RunStatistics()
    stats.record("busybox", True, 0.5)
    stats.record("alpine", True, 0.2)
    stats.record("alpine", False, 0.4)
    stats.record("alpine", True, 0.3)
    return RunResult(statistics=stats.snapshot(), elapsed_s=elapsed_s, dispatched=4)


def test_throughput_figures() -> None:
    result = _result()
    assert result.per_second == pytest.approx(2.0)
    assert result.seconds_per_attempt == pytest.approx(0.5)
    assert result.statistics.total_succeeded == 3


def test_summary_line() -> None:
    line = summary_line(_result())
    assert line.startswith("ran 4 containers in 2.000000 seconds")
    assert "2.000000 per sec." in line
    assert line.endswith("1 failed")


def test_dataframe_per_item() -> None:
    df = build_dataframe(_result())

    assert list(df["item"]) == ["alpine", "busybox"]
    alpine = df.iloc[0]
    assert alpine["attempts"] == 3
    assert alpine["failures"] == 1
    assert alpine["failure_rate"] == pytest.approx(1 / 3)
    assert alpine["mean_duration_s"] == pytest.approx(0.3)


def test_breakdown_of_empty_run() -> None:
    empty = RunResult(statistics=RunStatistics().snapshot(), elapsed_s=0.0)
    assert build_dataframe(empty).empty
    assert format_breakdown(empty) == "<no invocations>"
    assert "33.3%" in format_breakdown(_result())
