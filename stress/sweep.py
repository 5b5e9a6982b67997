from __future__ import annotations

import contextlib
import logging
import uuid

import docker
from docker.errors import DockerException

LOGGER = logging.getLogger("container_stress.sweep")

RUN_LABEL_KEY = "container-stress.run"


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


def run_label(run_id: str) -> str:
    return f"{RUN_LABEL_KEY}={run_id}"


def sweep_leftovers(run_id: str, client: docker.DockerClient | None = None) -> int:
    """Stop and remove containers a run left behind; return how many were removed.

    Containers are matched by the run label every invocation carries when the
    sweep is enabled. Failures are logged and never raised.
    """
    try:
        client = client or docker.from_env()
        containers = client.containers.list(all=True, filters={"label": run_label(run_id)})
    except DockerException as exc:
        LOGGER.warning("Skipping leftover sweep, Docker API unavailable: %s", exc)
        return 0

    removed = 0
    for container in containers:
        with contextlib.suppress(DockerException):
            container.stop(timeout=10)
        try:
            container.remove(force=True)
        except DockerException as exc:
            LOGGER.debug("Could not remove container %s: %s", container.short_id, exc)
            continue
        removed += 1

    if removed:
        LOGGER.info("Removed %d leftover container(s) from run %s", removed, run_id)
    return removed


__all__ = ["RUN_LABEL_KEY", "new_run_id", "run_label", "sweep_leftovers"]
