"""Background garbage collection of stopped containers.

A single daemon thread periodically walks the registry and removes containers
that have been stopped (or never started) for longer than the configured delay.

Two clocks are involved: the local registration time decides whether a
container is inspected at all, and the times reported by Docker decide
whether it is actually removed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from node_launcher.core.errors import RuntimeAPIError
from node_launcher.runners.docker_client import ContainerState, DockerRuntime
from node_launcher.runners.registry import ContainerRegistry, utcnow

logger = logging.getLogger(__name__)

STOPPED_STATES = frozenset({"dead", "exited"})


def is_collectable(state: ContainerState, boundary: datetime) -> bool:
    """Whether a container may be removed, given the age boundary."""
    if state.status in STOPPED_STATES:
        return state.finished_at is not None and state.finished_at < boundary
    if state.status == "created":
        return state.created_at is not None and state.created_at < boundary
    return False


class GarbageCollector:
    """Periodically removes old stopped containers tracked in a registry.

    Example:
        ```python
        gc = GarbageCollector(runtime, registry, delay=timedelta(minutes=10))
        gc.ensure_started()  # safe to call from any thread, any number of times
        ```
    """

    def __init__(
        self,
        runtime: DockerRuntime,
        registry: ContainerRegistry,
        delay: timedelta,
        interval: timedelta = timedelta(minutes=1),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._runtime = runtime
        self._registry = registry
        self._delay = delay
        self._interval_seconds = max(0.0, interval.total_seconds())
        self._clock = clock
        self._gate = threading.Lock()
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def ensure_started(self) -> bool:
        """Start the collector thread unless it was started before.

        Returns:
            True if this call started the thread
        """
        with self._gate:
            if self._thread is not None:
                return False
            self._thread = threading.Thread(
                target=self._loop, name="container-gc", daemon=True
            )
            self._thread.start()
        logger.debug(f"Started container garbage collector (delay={self._delay})")
        return True

    def stop(self, timeout: float | None = None) -> None:
        """Ask the loop to exit and wait for it.

        The thread is not restartable; ensure_started() is a no-op afterwards.
        """
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def _loop(self) -> None:
        while not self._stopped.is_set():
            try:
                self.collect()
            except Exception:
                logger.exception("Container garbage collection pass failed")
            self._stopped.wait(self._interval_seconds)

    def collect(self) -> int:
        """Run one collection pass.

        Returns:
            Number of registry entries retired during this pass
        """
        boundary = self._clock() - self._delay
        retired = 0
        for container_id in self._registry.snapshot_older_than(self._delay):
            try:
                if self._collect_one(container_id, boundary):
                    retired += 1
            except Exception:
                # One bad container must not starve the rest of the pass
                logger.exception(f"Unexpected error collecting container {container_id}")
        if retired:
            logger.debug(f"Garbage collection retired {retired} containers")
        return retired

    def _collect_one(self, container_id: str, boundary: datetime) -> bool:
        try:
            state = self._runtime.inspect(container_id)
        except RuntimeAPIError as e:
            if e.is_not_found:
                # Removed behind our back
                self._registry.unrecord(container_id)
                return True
            logger.warning(f"Failed to inspect container {container_id}: {e}")
            return False

        if not is_collectable(state, boundary):
            return False

        logger.info(f"Removing old container {container_id} ({state.status})")
        try:
            self._runtime.remove(container_id)
        except RuntimeAPIError as e:
            if not e.is_not_found:
                logger.warning(f"Failed to remove container {container_id}: {e}")
                return False
        self._registry.unrecord(container_id)
        return True
