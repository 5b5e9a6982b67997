from __future__ import annotations

import argparse
import logging
import os
import re
import sys

from .coordinator import RunCoordinator
from .dispatcher import StopCondition
from .errors import ConfigurationError
from .invoker import DEFAULT_BINARY, InvokerConfig, check_binary
from .report import log_report
from .sweep import new_run_id, run_label, sweep_leftovers
from .workload import DEFAULT_CONFIG_PATH, load_catalog

LOGGER = logging.getLogger("container_stress")

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}

# How long an interrupted run waits for in-flight launches before sweeping.
INTERRUPT_DRAIN_TIMEOUT_S = 30.0


def parse_duration(value: str) -> float:
    """Parse ``"90"``, ``"1.5s"``, ``"250ms"``, ``"10m"`` or ``"1h"`` into seconds."""
    match = _DURATION_RE.match(value)
    if not match:
        raise argparse.ArgumentTypeError(f"invalid duration {value!r}")
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit or "s"]


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a value >= 1, got {number}")
    return number


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Launch containers concurrently to stress a container runtime"
    )
    parser.add_argument(
        "--binary",
        default=os.environ.get("STRESS_BINARY", DEFAULT_BINARY),
        help="Path to the container runtime binary",
    )
    parser.add_argument(
        "--config",
        default=os.environ.get("STRESS_CONFIG", str(DEFAULT_CONFIG_PATH)),
        help="Path to the JSON workload file",
    )
    parser.add_argument(
        "--concurrent",
        type=positive_int,
        default=os.environ.get("STRESS_CONCURRENT", "1"),
        help="Number of concurrent workers",
    )
    parser.add_argument(
        "--duration",
        type=parse_duration,
        default=os.environ.get("STRESS_DURATION", "10m"),
        help="How long to keep launching containers (e.g. 90, 30s, 10m)",
    )
    parser.add_argument(
        "--containers",
        type=positive_int,
        default=os.environ.get("STRESS_CONTAINERS"),
        help="Stop after this many containers instead of after --duration",
    )
    parser.add_argument(
        "--kill",
        type=parse_duration,
        default=os.environ.get("STRESS_KILL", "10s"),
        help="Delay before terminating containers whose workload item sets 'kill'",
    )
    parser.add_argument(
        "--no-rm",
        dest="remove",
        action="store_false",
        help="Do not pass --rm to the runtime",
    )
    parser.add_argument(
        "--sweep",
        action="store_true",
        help="Label launched containers and remove any leftovers after the run",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=_env_flag("STRESS_DEBUG"),
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("STRESS_LOG_LEVEL", "INFO"),
        help="Logging level",
    )
    return parser.parse_args(argv)


def setup_logging(level: str, debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_stop_condition(args: argparse.Namespace) -> StopCondition:
    if args.containers is not None:
        return StopCondition.attempts(args.containers)
    return StopCondition.duration(args.duration)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, args.debug)

    try:
        catalog = load_catalog(args.config)
        binary = check_binary(args.binary)
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        return 1

    run_id = new_run_id() if args.sweep else None
    invoker_config = InvokerConfig(
        binary=binary,
        kill_delay_s=args.kill,
        remove=args.remove,
        label=run_label(run_id) if run_id else None,
    )
    coordinator = RunCoordinator(
        catalog,
        args.concurrent,
        build_stop_condition(args),
        invoker_config=invoker_config,
    )

    try:
        result = coordinator.run()
    except KeyboardInterrupt:
        coordinator.stop()
        LOGGER.warning("Interrupted; waiting up to %.0fs for in-flight containers", INTERRUPT_DRAIN_TIMEOUT_S)
        if not coordinator.drain(INTERRUPT_DRAIN_TIMEOUT_S):
            LOGGER.warning("Workers still busy; containers they start later may be left behind")
        LOGGER.warning("Run aborted before completion")
        return 130
    finally:
        if run_id:
            sweep_leftovers(run_id)

    log_report(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
