"""Abstract execution backend.

The launcher starts database-node processes either as bare OS processes or
inside Docker containers. Both backends implement this interface so the
coordinating code never needs to know which one is in use.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from node_launcher.core.schemas import Volume


class Process(ABC):
    """Control surface of one started process."""

    @property
    @abstractmethod
    def process_id(self) -> int:
        """OS process ID, or 0 when no local PID is meaningful."""

    @property
    @abstractmethod
    def container_id(self) -> str:
        """ID of the container running the process, empty if not containerised."""

    @abstractmethod
    def wait(self) -> None:
        """Block until the process has terminated."""

    @abstractmethod
    def terminate(self) -> None:
        """Request a graceful shutdown."""

    @abstractmethod
    def kill(self) -> None:
        """Terminate immediately."""

    @abstractmethod
    def cleanup(self) -> None:
        """Release whatever the process left behind."""


class Runner(ABC):
    """Starts processes for the launcher."""

    @abstractmethod
    def start(
        self,
        command: str,
        args: Sequence[str],
        volumes: Sequence[Volume],
        ports: Sequence[int],
        name: str,
    ) -> Process:
        """Start `command` with `args` and return a handle to it."""

    @abstractmethod
    def get_container_dir(self, host_dir: str) -> str:
        """Path under which the process sees `host_dir`."""

    @abstractmethod
    def cleanup(self) -> None:
        """Release everything this runner created. Called at shutdown."""

    def close(self) -> None:
        """Release connections and background workers."""
