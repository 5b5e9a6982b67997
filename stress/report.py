from __future__ import annotations

import logging

import pandas as pd

from .coordinator import RunResult

LOGGER = logging.getLogger("container_stress.report")

COLUMNS = ["item", "attempts", "failures", "failure_rate", "mean_duration_s"]


def summary_line(result: RunResult) -> str:
    return (
        f"ran {result.total_attempted} containers in {result.elapsed_s:f} seconds "
        f"({result.per_second:f} per sec., {result.seconds_per_attempt:f} sec. per container), "
        f"{result.total_failed} failed"
    )


def build_dataframe(result: RunResult) -> pd.DataFrame:
    rows = []
    for identifier, tally in result.statistics.per_item.items():
        rows.append(
            {
                "item": identifier,
                "attempts": tally.attempts,
                "failures": tally.failures,
                "failure_rate": tally.failures / tally.attempts if tally.attempts else 0.0,
                "mean_duration_s": tally.mean_duration_s,
            }
        )
    if not rows:
        return pd.DataFrame(columns=COLUMNS)
    return pd.DataFrame(rows, columns=COLUMNS).sort_values("item", ignore_index=True)


def format_breakdown(result: RunResult) -> str:
    df = build_dataframe(result)
    if df.empty:
        return "<no invocations>"
    return df.to_string(
        index=False,
        formatters={
            "failure_rate": "{:.1%}".format,
            "mean_duration_s": "{:.3f}".format,
        },
    )


def log_report(result: RunResult) -> None:
    LOGGER.info(summary_line(result))
    LOGGER.info("Per-item breakdown:\n%s", format_breakdown(result))


__all__ = ["build_dataframe", "format_breakdown", "log_report", "summary_line"]
