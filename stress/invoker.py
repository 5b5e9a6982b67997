from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import Iterable

from .errors import ConfigurationError
from .stats import RunStatistics
from .workload import WorkItem

LOGGER = logging.getLogger("container_stress.invoker")

DEFAULT_BINARY = "docker"
DEFAULT_KILL_DELAY_S = 10.0

# Flags the invoker always sets itself; a workload item may not override them.
RESERVED_FLAGS: frozenset[str] = frozenset({"--publish", "-P", "--publish-all", "--rm"})

_BOOLEAN_WORDS = frozenset({"true", "false"})


@dataclass(frozen=True)
class InvokerConfig:
    binary: str = DEFAULT_BINARY
    kill_delay_s: float = DEFAULT_KILL_DELAY_S
    remove: bool = True
    label: str | None = None


@dataclass(frozen=True)
class Outcome:
    item: WorkItem
    success: bool
    returncode: int | None
    duration_s: float
    output: str = ""
    killed: bool = False


def split_flag(token: str) -> tuple[str, str | None]:
    name, sep, value = token.partition("=")
    return name, (value if sep else None)


def filter_flags(flags: Iterable[str], reserved: frozenset[str] = RESERVED_FLAGS) -> list[str]:
    """Drop reserved flags by exact name, keeping every other token in order.

    Reserved flags are treated as booleans: a separate ``true``/``false`` token
    after one is dropped with it, but any other value is kept, so a two-token
    ``--publish 8080:80`` leaves ``8080:80`` behind as a stray positional.
    Write port mappings with ``-p`` instead.
    """
    kept: list[str] = []
    skip_boolean_value = False
    for token in flags:
        if skip_boolean_value:
            skip_boolean_value = False
            if token.lower() in _BOOLEAN_WORDS:
                continue
        name, value = split_flag(token)
        if token.startswith("-") and name in reserved:
            skip_boolean_value = value is None
            continue
        kept.append(token)
    return kept


def publish_flag(publish: bool) -> str:
    return "--publish=true" if publish else "--publish=false"


def build_command(item: WorkItem, config: InvokerConfig) -> list[str]:
    command = [config.binary, "run", publish_flag(item.publish_ports)]
    if config.remove:
        command.append("--rm")
    if config.label:
        command.extend(["--label", config.label])
    command.extend(filter_flags(item.extra_flags))
    command.append(item.identifier)
    command.extend(item.extra_args)
    return command


def check_binary(binary: str) -> str:
    resolved = shutil.which(binary)
    if resolved is None:
        raise ConfigurationError(f"container runtime binary {binary!r} not found")
    return resolved


class Invoker:
    """Run one work item as a child process and record its outcome."""

    def __init__(self, config: InvokerConfig, statistics: RunStatistics) -> None:
        self._config = config
        self._statistics = statistics

    @property
    def config(self) -> InvokerConfig:
        return self._config

    def invoke(self, item: WorkItem) -> Outcome:
        outcome = self._run(item)
        self._statistics.record(item.identifier, outcome.success, outcome.duration_s)
        if not outcome.success:
            LOGGER.warning(
                "%s failed (exit=%s%s): %s",
                item.identifier,
                outcome.returncode,
                ", terminated" if outcome.killed else "",
                outcome.output.rstrip() or "<no output>",
            )
        return outcome

    def _run(self, item: WorkItem) -> Outcome:
        command = build_command(item, self._config)
        LOGGER.debug("Running %s", " ".join(command))
        started = time.monotonic()

        try:
            proc = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            return Outcome(
                item=item,
                success=False,
                returncode=None,
                duration_s=time.monotonic() - started,
                output=f"failed to start {command[0]!r}: {exc}",
            )

        killed = threading.Event()
        timer = None
        if item.kill_after_timeout:
            timer = threading.Timer(self._config.kill_delay_s, self._terminate, args=(proc, item, killed))
            timer.daemon = True
            timer.start()

        try:
            raw_output, _ = proc.communicate()
        finally:
            if timer is not None:
                timer.cancel()

        output = (raw_output or b"").decode("utf-8", errors="replace")
        return Outcome(
            item=item,
            success=proc.returncode == 0,
            returncode=proc.returncode,
            duration_s=time.monotonic() - started,
            output=output,
            killed=killed.is_set(),
        )

    def _terminate(self, proc: subprocess.Popen, item: WorkItem, killed: threading.Event) -> None:
        # The child leads its own session, so helpers it forked share its group
        # and are signalled too; any of them may be holding the output pipe open.
        LOGGER.debug("Sending SIGTERM to %s (process group %d)", item.identifier, proc.pid)
        try:
            if hasattr(os, "killpg"):
                os.killpg(proc.pid, signal.SIGTERM)
            else:
                proc.send_signal(signal.SIGTERM)
        except OSError as exc:
            LOGGER.debug("Could not signal %s (pid %d): %s", item.identifier, proc.pid, exc)
            return
        killed.set()


__all__ = [
    "DEFAULT_BINARY",
    "DEFAULT_KILL_DELAY_S",
    "RESERVED_FLAGS",
    "InvokerConfig",
    "Invoker",
    "Outcome",
    "build_command",
    "check_binary",
    "filter_flags",
    "publish_flag",
]
