"""Node launcher - Docker execution backend."""

from __future__ import annotations

from node_launcher.core.errors import ErrorKind, RuntimeAPIError
from node_launcher.core.schemas import RunnerConfig, Volume
from node_launcher.runners.base import Process, Runner
from node_launcher.runners.container_runner import ContainerProcess, ContainerRunner

__version__ = "0.1.0"

__all__ = [
    "ContainerProcess",
    "ContainerRunner",
    "ErrorKind",
    "Process",
    "Runner",
    "RunnerConfig",
    "RuntimeAPIError",
    "Volume",
    "__version__",
]
