from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigurationError

LOGGER = logging.getLogger("container_stress.workload")

DEFAULT_CONFIG_PATH = Path("stress.json")


@dataclass(frozen=True)
class WorkItem:
    """One container launch: image name, trailing args and run flags."""

    identifier: str
    extra_args: tuple[str, ...] = field(default_factory=tuple)
    extra_flags: tuple[str, ...] = field(default_factory=tuple)
    publish_ports: bool = False
    kill_after_timeout: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any], index: int = 0) -> "WorkItem":
        if not isinstance(payload, dict):
            raise ConfigurationError(f"workload entry {index}: expected an object")

        name = payload.get("name")
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"workload entry {index}: 'name' must be a non-empty string")

        return cls(
            identifier=name,
            extra_args=_string_list(payload, "args", index),
            extra_flags=_string_list(payload, "flags", index),
            publish_ports=_boolean(payload, "publish", index),
            kill_after_timeout=_boolean(payload, "kill", index),
        )


def parse_catalog(entries: Any) -> tuple[WorkItem, ...]:
    if not isinstance(entries, list):
        raise ConfigurationError("workload file must contain a JSON array of items")
    catalog = tuple(WorkItem.from_payload(entry, idx) for idx, entry in enumerate(entries))
    if not catalog:
        raise ConfigurationError("workload file contains no items")
    return catalog


def load_catalog(path: Path | str = DEFAULT_CONFIG_PATH) -> tuple[WorkItem, ...]:
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            entries = json.load(f)
    except OSError as exc:
        raise ConfigurationError(f"cannot open workload file {str(path)!r}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"malformed workload file {str(path)!r}: {exc}") from exc

    catalog = parse_catalog(entries)
    LOGGER.info("Loaded %d workload item(s) from %s", len(catalog), path)
    return catalog


def _string_list(payload: dict[str, Any], key: str, index: int) -> tuple[str, ...]:
    value = payload.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"workload entry {index}: {key!r} must be an array of strings")
    return tuple(value)


def _boolean(payload: dict[str, Any], key: str, index: int) -> bool:
    value = payload.get(key, False)
    if not isinstance(value, bool):
        raise ConfigurationError(f"workload entry {index}: {key!r} must be a boolean")
    return value


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "WorkItem",
    "load_catalog",
    "parse_catalog",
]
